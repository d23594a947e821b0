"""
Tracking module for Blob Tracker.

This module follows blobs across frames using greedy nearest-neighbor
association with exponential smoothing and a decaying liveness score.

Example:
    >>> from blob_tracker.tracking import BlobTracker
    >>> tracker = BlobTracker()
    >>> result = tracker.update(detections)
"""

from .association import (
    compute_distance_batch,
    greedy_assignment,
    associate_detections_to_entities,
)
from .blob_tracker import (
    BlobTracker,
    DetectorBlobTracker,
    TrackedEntity,
    TrackingResult,
    create_tracker,
)

__all__ = [
    # Association
    "compute_distance_batch",
    "greedy_assignment",
    "associate_detections_to_entities",
    # Blob tracker
    "BlobTracker",
    "DetectorBlobTracker",
    "TrackedEntity",
    "TrackingResult",
    "create_tracker",
]
