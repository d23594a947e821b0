"""
Detection value type and the abstract blob detector interface.

Blob detection itself happens outside this package. Any detector that can
compute blobs for a pixel buffer and hand them back by index can drive a
DetectorBlobTracker by implementing BaseBlobDetector.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, List

import numpy as np


@dataclass(frozen=True)
class Detection:
    """
    A single blob observed in one frame.

    All fields are normalized to the frame size, so a blob covering the
    whole frame has w == h == 1.0.

    Attributes:
        x: Center x coordinate [0, 1]
        y: Center y coordinate [0, 1]
        w: Width [0, 1]
        h: Height [0, 1]
    """
    x: float
    y: float
    w: float
    h: float

    @classmethod
    def from_blob(cls, blob: Any) -> "Detection":
        """
        Copy the geometry of any blob-like object into a new Detection.

        Args:
            blob: Object exposing float attributes x, y, w and h

        Returns:
            Detection owned by the caller, independent of ``blob``
        """
        return cls(
            x=float(blob.x),
            y=float(blob.y),
            w=float(blob.w),
            h=float(blob.h),
        )

    @property
    def center(self) -> np.ndarray:
        """Center point as [x, y]."""
        return np.array([self.x, self.y])

    def pixel_width(self, frame_width: int) -> float:
        """Width in pixels for a frame of the given width."""
        return self.w * frame_width

    def pixel_height(self, frame_height: int) -> float:
        """Height in pixels for a frame of the given height."""
        return self.h * frame_height

    def blend(self, other: "Detection", weight: float) -> "Detection":
        """
        Exponentially smooth towards another detection.

        Args:
            other: Newly observed detection
            weight: Share of ``other`` in the result, in [0, 1]

        Returns:
            New Detection with ``other * weight + self * (1 - weight)``
            applied to each field
        """
        keep = 1.0 - weight
        return Detection(
            x=other.x * weight + self.x * keep,
            y=other.y * weight + self.y * keep,
            w=other.w * weight + self.w * keep,
            h=other.h * weight + self.h * keep,
        )


class BaseBlobDetector(ABC):
    """
    Abstract base class for blob detectors.

    Implementations compute blobs for a whole frame in one call and then
    expose them by index, so a tracker can pull a frame's detections
    without knowing the detection algorithm.
    """

    @abstractmethod
    def compute_blobs(self, pixels: Any) -> None:
        """
        Run blob detection on a frame.

        Args:
            pixels: Frame pixel buffer, typically a numpy array
        """
        pass

    @property
    @abstractmethod
    def blob_count(self) -> int:
        """Number of blobs found by the last compute_blobs call."""
        pass

    @abstractmethod
    def get_blob(self, index: int) -> Any:
        """
        Return one blob from the last compute_blobs call.

        The returned object must expose normalized x, y, w and h.
        """
        pass

    def detect(self, pixels: Any) -> List[Any]:
        """Compute blobs for ``pixels`` and return them in detector order."""
        self.compute_blobs(pixels)
        return [self.get_blob(i) for i in range(self.blob_count)]
