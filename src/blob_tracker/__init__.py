"""
Blob Tracker - Frame-to-frame blob association.

Associates the blobs found in successive frames so that a blob which moves
a little between frames is recognized as the same entity, and reports
which entities are active, newly created and newly dead after each frame.

Example:
    >>> from blob_tracker import BlobTracker, Detection
    >>> tracker = BlobTracker()
    >>> result = tracker.update([Detection(x=0.5, y=0.5, w=0.1, h=0.1)])
    >>> len(result.new)
    1

With a blob detector:
    >>> from blob_tracker import create_tracker
    >>> tracker = create_tracker(my_detector)
    >>> result = tracker.update(frame_pixels)
"""

__version__ = "0.1.0"

from .config import (
    TrackerConfig,
    SizeFilterConfig,
    get_default_config,
    setup_logging,
)
from .detection import BaseBlobDetector, Detection
from .exceptions import (
    BlobTrackerError,
    InvalidArgumentError,
    FailedPreconditionError,
    NotFoundError,
    InternalStateError,
)
from .tracking import (
    BlobTracker,
    DetectorBlobTracker,
    TrackedEntity,
    TrackingResult,
    create_tracker,
)

__all__ = [
    # Version info
    "__version__",
    # Configuration
    "TrackerConfig",
    "SizeFilterConfig",
    "get_default_config",
    "setup_logging",
    # Detection
    "BaseBlobDetector",
    "Detection",
    # Errors
    "BlobTrackerError",
    "InvalidArgumentError",
    "FailedPreconditionError",
    "NotFoundError",
    "InternalStateError",
    # Tracking
    "BlobTracker",
    "DetectorBlobTracker",
    "TrackedEntity",
    "TrackingResult",
    "create_tracker",
]
