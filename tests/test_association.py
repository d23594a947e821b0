"""
Unit tests for association module.
"""

import numpy as np
import pytest

from blob_tracker.tracking import (
    compute_distance_batch,
    greedy_assignment,
    associate_detections_to_entities,
)


class TestDistance:
    """Tests for distance computation."""

    def test_batch_shape(self):
        points_a = np.array([[0.0, 0.0], [0.5, 0.5]])
        points_b = np.array([[0.0, 0.0], [1.0, 1.0], [0.5, 0.0]])

        matrix = compute_distance_batch(points_a, points_b)
        assert matrix.shape == (2, 3)
        assert matrix[0, 0] == pytest.approx(0.0)
        assert matrix[1, 2] == pytest.approx(0.5)

    def test_batch_empty(self):
        points_a = np.empty((0, 2))
        points_b = np.array([[0.5, 0.5]])

        matrix = compute_distance_batch(points_a, points_b)
        assert matrix.shape == (0, 1)


class TestGreedyAssignment:
    """Tests for greedy row-by-row matching."""

    def test_first_minimum_wins(self):
        matrix = np.array([[0.05, 0.05, 0.2]])

        matches, unmatched_rows, unmatched_cols = greedy_assignment(matrix, threshold=0.1)

        assert matches == [(0, 0)]
        assert unmatched_rows == []
        assert unmatched_cols == [1, 2]

    def test_earlier_row_takes_column(self):
        # Row 1 is closer to column 0, but row 0 is served first
        matrix = np.array([
            [0.05, 0.08],
            [0.01, 0.5],
        ])

        matches, unmatched_rows, unmatched_cols = greedy_assignment(matrix, threshold=0.1)

        assert matches == [(0, 0)]
        assert unmatched_rows == [1]
        assert unmatched_cols == [1]

    def test_falls_back_to_next_nearest(self):
        matrix = np.array([
            [0.01, 0.5],
            [0.02, 0.09],
        ])

        matches, _, unmatched_cols = greedy_assignment(matrix, threshold=0.1)

        assert matches == [(0, 0), (1, 1)]
        assert unmatched_cols == []

    def test_threshold_inclusive(self):
        matrix = np.array([[0.25]])

        matches, _, _ = greedy_assignment(matrix, threshold=0.25)
        assert matches == [(0, 0)]

    def test_more_rows_than_columns(self):
        matrix = np.array([[0.0], [0.0], [0.0]])

        matches, unmatched_rows, unmatched_cols = greedy_assignment(matrix, threshold=0.1)

        assert matches == [(0, 0)]
        assert unmatched_rows == [1, 2]
        assert unmatched_cols == []

    def test_empty_matrix(self):
        matches, unmatched_rows, unmatched_cols = greedy_assignment(
            np.empty((2, 0)), threshold=0.1
        )

        assert matches == []
        assert unmatched_rows == [0, 1]
        assert unmatched_cols == []


class TestAssociation:
    """Tests for detection-to-entity association."""

    def test_perfect_match(self):
        detections = np.array([[0.2, 0.2], [0.8, 0.8]])
        entities = np.array([[0.2, 0.2], [0.8, 0.8]])

        matches, unmatched_entities, unmatched_dets = associate_detections_to_entities(
            detections, entities, closeness=0.1
        )

        assert matches == [(0, 0), (1, 1)]
        assert len(unmatched_entities) == 0
        assert len(unmatched_dets) == 0

    def test_no_match(self):
        detections = np.array([[0.1, 0.1]])
        entities = np.array([[0.9, 0.9]])

        matches, unmatched_entities, unmatched_dets = associate_detections_to_entities(
            detections, entities, closeness=0.1
        )

        assert len(matches) == 0
        assert unmatched_entities == [0]
        assert unmatched_dets == [0]

    def test_empty_detections(self):
        detections = np.empty((0, 2))
        entities = np.array([[0.5, 0.5]])

        matches, unmatched_entities, unmatched_dets = associate_detections_to_entities(
            detections, entities, closeness=0.1
        )

        assert len(matches) == 0
        assert unmatched_entities == [0]
        assert len(unmatched_dets) == 0

    def test_no_entities(self):
        detections = np.array([[0.1, 0.1], [0.2, 0.2]])

        matches, unmatched_entities, unmatched_dets = associate_detections_to_entities(
            detections, np.empty((0, 2)), closeness=0.1
        )

        assert matches == []
        assert unmatched_entities == []
        assert unmatched_dets == [0, 1]
