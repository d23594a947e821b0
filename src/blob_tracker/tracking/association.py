"""
Association utilities for blob tracking.

This module provides functions for computing center distances between
blobs and for greedily matching new detections to existing entities.
"""

import numpy as np
from scipy.spatial.distance import cdist
from typing import Tuple, List


def compute_distance_batch(points_a: np.ndarray, points_b: np.ndarray) -> np.ndarray:
    """
    Compute the distance matrix between two sets of centers.

    Args:
        points_a: First set of centers, shape (N, 2)
        points_b: Second set of centers, shape (M, 2)

    Returns:
        Distance matrix of shape (N, M)
    """
    if len(points_a) == 0 or len(points_b) == 0:
        return np.empty((len(points_a), len(points_b)), dtype=np.float64)

    return cdist(
        np.asarray(points_a, dtype=np.float64),
        np.asarray(points_b, dtype=np.float64),
        metric="euclidean",
    )


def greedy_assignment(
    distance_matrix: np.ndarray,
    threshold: float = 0.1
) -> Tuple[List[Tuple[int, int]], List[int], List[int]]:
    """
    Match rows to columns greedily, one row at a time.

    Rows are visited in order. Each row takes the nearest column that no
    earlier row has taken; among equally near columns the lowest index
    wins. The result depends on row order and is not a global optimum.

    Args:
        distance_matrix: Distance matrix of shape (N, M) where N is number
                         of existing entities and M is number of new
                         detections.
        threshold: Maximum distance to accept a match.

    Returns:
        matches: List of (entity_idx, detection_idx) tuples, in row order
        unmatched_entities: Row indices without matches, ascending
        unmatched_detections: Column indices without matches, ascending
    """
    num_rows, num_cols = distance_matrix.shape
    if num_rows == 0 or num_cols == 0:
        return [], list(range(num_rows)), list(range(num_cols))

    available = np.ones(num_cols, dtype=bool)
    matches = []
    unmatched_entities = []

    for row in range(num_rows):
        if not available.any():
            unmatched_entities.append(row)
            continue

        # Taken columns can never win; np.argmin keeps the first minimum
        candidates = np.where(available, distance_matrix[row], np.inf)
        col = int(np.argmin(candidates))

        if candidates[col] <= threshold:
            matches.append((row, col))
            available[col] = False
        else:
            unmatched_entities.append(row)

    unmatched_detections = [int(c) for c in np.flatnonzero(available)]
    return matches, unmatched_entities, unmatched_detections


def associate_detections_to_entities(
    detections: np.ndarray,
    entities: np.ndarray,
    closeness: float = 0.1
) -> Tuple[List[Tuple[int, int]], List[int], List[int]]:
    """
    Associate detections to existing entities based on center distance.

    This is the main function called by the tracker to determine
    which detections correspond to which existing entities.

    Args:
        detections: Detection centers, shape (M, 2)
        entities: Existing entity centers, shape (N, 2), in entity order
        closeness: Maximum center distance for a valid association

    Returns:
        matches: List of (entity_idx, detection_idx) tuples
        unmatched_entities: Entity indices without matches
        unmatched_detections: Detection indices without matches
    """
    if len(entities) == 0:
        return [], [], list(range(len(detections)))

    if len(detections) == 0:
        return [], list(range(len(entities))), []

    distance_matrix = compute_distance_batch(entities, detections)

    return greedy_assignment(distance_matrix, threshold=closeness)
