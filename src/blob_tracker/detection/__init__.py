"""
Detection module for Blob Tracker.

This module defines the detection value type consumed by the tracker and
the interface an external blob detector implements to feed it frames.

Example:
    >>> from blob_tracker.detection import Detection
    >>> det = Detection(x=0.5, y=0.5, w=0.1, h=0.1)
    >>> det.pixel_width(640)
    64.0
"""

from .base import BaseBlobDetector, Detection

__all__ = [
    "BaseBlobDetector",
    "Detection",
]
