"""
Unit tests for detection module.
"""

import numpy as np
import pytest

from blob_tracker.detection import BaseBlobDetector, Detection


class RawBlob:
    """Mutable blob as an external detector would hand it out."""

    def __init__(self, x, y, w, h):
        self.x = x
        self.y = y
        self.w = w
        self.h = h


class ListDetector(BaseBlobDetector):
    """Detector returning a fixed list of blobs for every frame."""

    def __init__(self, blobs):
        self.blobs = blobs
        self.frames = []

    def compute_blobs(self, pixels):
        self.frames.append(pixels)

    @property
    def blob_count(self):
        return len(self.blobs)

    def get_blob(self, index):
        return self.blobs[index]


class TestDetection:
    """Tests for Detection dataclass."""

    def test_pixel_size(self):
        det = Detection(x=0.5, y=0.5, w=0.25, h=0.5)

        assert det.pixel_width(640) == pytest.approx(160)
        assert det.pixel_height(480) == pytest.approx(240)
        np.testing.assert_array_equal(det.center, [0.5, 0.5])

    def test_from_blob_copies(self):
        blob = RawBlob(0.1, 0.2, 0.3, 0.4)
        det = Detection.from_blob(blob)

        blob.x = 0.9
        assert det == Detection(x=0.1, y=0.2, w=0.3, h=0.4)

    def test_frozen(self):
        det = Detection(x=0.1, y=0.2, w=0.3, h=0.4)
        with pytest.raises(AttributeError):
            det.x = 0.5

    def test_blend(self):
        old = Detection(x=0.0, y=0.0, w=0.2, h=0.2)
        new = Detection(x=1.0, y=0.5, w=0.4, h=0.0)

        blended = old.blend(new, 0.25)

        assert blended.x == pytest.approx(0.25)
        assert blended.y == pytest.approx(0.125)
        assert blended.w == pytest.approx(0.25)
        assert blended.h == pytest.approx(0.15)

    def test_blend_extremes(self):
        old = Detection(x=0.3, y=0.3, w=0.1, h=0.1)
        new = Detection(x=0.7, y=0.1, w=0.2, h=0.3)

        assert old.blend(new, 1.0) == new
        assert old.blend(new, 0.0) == old


class TestBaseBlobDetector:
    """Tests for the detector interface."""

    def test_abstract(self):
        with pytest.raises(TypeError):
            BaseBlobDetector()

    def test_detect_collects_in_order(self):
        blobs = [RawBlob(0.1, 0.1, 0.1, 0.1), RawBlob(0.9, 0.9, 0.1, 0.1)]
        detector = ListDetector(blobs)
        pixels = np.zeros((4, 4), dtype=np.uint8)

        result = detector.detect(pixels)

        assert result == blobs
        assert len(detector.frames) == 1
        assert detector.frames[0] is pixels
