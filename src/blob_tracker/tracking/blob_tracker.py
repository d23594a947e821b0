"""
Greedy nearest-neighbor blob tracker.

This module follows blobs from frame to frame. A blob that moves a little
between frames is treated as the same entity rather than as a new one.
Each entity carries a liveness score that grows while the entity keeps
being detected and decays while it is missing; an entity whose liveness
reaches zero dies.

Every update produces three views of the tracked entities:
    - active: entities alive after this update (survivors and new ones)
    - dead: entities that died on this update
    - new: entities created on this update

The views belong to the update that produced them. Per-entity accessors
only accept entities from the most recent update.

The tracker is not thread-safe; drive one instance from one thread.
"""

import logging
import numbers
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .association import associate_detections_to_entities
from ..config import (
    MAX_FRAME_HEIGHT,
    MAX_FRAME_WIDTH,
    SizeFilterConfig,
    TrackerConfig,
)
from ..detection import BaseBlobDetector, Detection
from ..exceptions import (
    FailedPreconditionError,
    InternalStateError,
    InvalidArgumentError,
    NotFoundError,
)

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class TrackedEntity:
    """
    A blob followed across frames.

    The same object represents the entity on every update until it dies.
    Its geometry and liveness change with each update; ``data`` is left
    alone by the tracker.

    Attributes:
        entity_id: Tracker-assigned identifier, unique per tracker
        detection: Current (smoothed) geometry
        liveness: Health score in [0, live_max]
        data: Arbitrary caller payload
    """
    entity_id: int
    detection: Detection
    liveness: float
    data: Any = None

    @property
    def x(self) -> float:
        return self.detection.x

    @property
    def y(self) -> float:
        return self.detection.y

    @property
    def w(self) -> float:
        return self.detection.w

    @property
    def h(self) -> float:
        return self.detection.h


@dataclass(frozen=True)
class TrackingResult:
    """
    Snapshot of the tracker after one update.

    Attributes:
        active: Entities alive after the update, survivors first
        dead: Entities that died on this update
        new: Entities created on this update
        generation: Number of updates performed when the snapshot was taken
    """
    active: Tuple[TrackedEntity, ...] = ()
    dead: Tuple[TrackedEntity, ...] = ()
    new: Tuple[TrackedEntity, ...] = ()
    generation: int = 0

    @property
    def active_ids(self) -> List[int]:
        """Identifiers of the active entities, in order."""
        return [entity.entity_id for entity in self.active]


# =============================================================================
# Validation
# =============================================================================

def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _validate_unit_interval(name: str, value: float) -> float:
    if not _is_number(value) or not 0.0 <= value <= 1.0:
        raise InvalidArgumentError(
            f"Invalid {name} value - {value}, expected [0.0, 1.0]", value
        )
    return float(value)


def _validate_liveness(add: float, subtract: float, maximum: float) -> Tuple[float, float, float]:
    for name, value in (("add", add), ("subtract", subtract), ("maximum", maximum)):
        if not _is_number(value) or not value >= 0.0:
            raise InvalidArgumentError(
                f"Invalid liveness {name} value - {value}", value
            )
    return float(add), float(subtract), float(maximum)


def _validate_dimensions(width: int, height: int) -> Tuple[int, int]:
    if not _is_number(width) or width <= 0 or width > MAX_FRAME_WIDTH:
        raise InvalidArgumentError(f"Invalid width value - {width}", width)
    if not _is_number(height) or height <= 0 or height > MAX_FRAME_HEIGHT:
        raise InvalidArgumentError(f"Invalid height value - {height}", height)
    return int(width), int(height)


def _validate_size_filter(
    size_filter: SizeFilterConfig,
    dimensions: Optional[Tuple[int, int]]
) -> SizeFilterConfig:
    if dimensions is None:
        raise FailedPreconditionError(
            "Size filters in pixels can not be set until width and height "
            "dimensions have been set"
        )
    width, height = dimensions
    f = size_filter

    for name in ("w_min", "w_max", "h_min", "h_max"):
        value = getattr(f, name)
        if not _is_number(value):
            raise InvalidArgumentError(f"Invalid size filter {name} - {value!r}", value)
    if f.max_count is not None and not _is_number(f.max_count):
        raise InvalidArgumentError(
            f"Invalid maximum blob count - {f.max_count!r}", f.max_count
        )

    if f.w_min < 0 or f.w_min > width or f.w_min > f.w_max:
        raise InvalidArgumentError(f"Invalid minimum width - {f.w_min}", f.w_min)
    if f.w_max < 0 or f.w_max > width:
        raise InvalidArgumentError(f"Invalid maximum width - {f.w_max}", f.w_max)
    if f.h_min < 0 or f.h_min > height or f.h_min > f.h_max:
        raise InvalidArgumentError(f"Invalid minimum height - {f.h_min}", f.h_min)
    if f.h_max < 0 or f.h_max > height:
        raise InvalidArgumentError(f"Invalid maximum height - {f.h_max}", f.h_max)
    if f.max_count is not None and f.max_count < 0:
        raise InvalidArgumentError(
            f"Invalid maximum blob count - {f.max_count}", f.max_count
        )

    return SizeFilterConfig(f.w_min, f.w_max, f.h_min, f.h_max, f.max_count)


# =============================================================================
# Trackers
# =============================================================================

class _BaseBlobTracker:
    """
    Shared state and update algorithm for both tracker variants.

    Subclasses decide where a frame's raw detections come from and expose
    a single ``update`` method for it.
    """

    def __init__(self, config: Optional[TrackerConfig] = None):
        self._closeness = 0.1
        self._smoothing = 0.1
        self._live_add = 5.0
        self._live_subtract = 5.0
        self._live_max = 100.0
        self._dimensions: Optional[Tuple[int, int]] = None
        self._size_filter: Optional[SizeFilterConfig] = None

        self._entities: Dict[int, TrackedEntity] = {}  # entity_id -> active entity
        self._records: Dict[int, TrackedEntity] = {}  # current cycle, active + dead
        self._result: Optional[TrackingResult] = TrackingResult()
        self._next_id = 0
        self._generation = 0

        if config is not None:
            self.apply_config(config)

        logger.info(
            f"Initialized {type(self).__name__} (closeness={self._closeness}, "
            f"smoothing={self._smoothing}, "
            f"liveness=+{self._live_add}/-{self._live_subtract}/max {self._live_max})"
        )

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    def apply_config(self, config: TrackerConfig) -> None:
        """
        Apply every setting of ``config`` at once.

        All values are validated before any of them is applied.
        """
        closeness = _validate_unit_interval("closeness", config.closeness)
        smoothing = _validate_unit_interval("smoothing", config.smoothing)
        liveness = _validate_liveness(
            config.live_add, config.live_subtract, config.live_max
        )

        dimensions = self._dimensions
        if config.width is not None or config.height is not None:
            dimensions = _validate_dimensions(config.width, config.height)

        size_filter = self._size_filter
        if config.size_filter is not None:
            size_filter = _validate_size_filter(config.size_filter, dimensions)

        self._closeness = closeness
        self._smoothing = smoothing
        self._live_add, self._live_subtract, self._live_max = liveness
        self._dimensions = dimensions
        self._size_filter = size_filter

    def set_dimensions(self, width: int, height: int) -> None:
        """
        Set the frame size in pixels.

        Needed before a size filter can be set, because the filter bounds
        are pixel sizes while detections are normalized.
        """
        self._dimensions = _validate_dimensions(width, height)

    def set_size_filter(
        self,
        w_min: int,
        w_max: int,
        h_min: int,
        h_max: int,
        max_count: Optional[int] = None
    ) -> None:
        """
        Drop raw detections outside the given pixel size ranges.

        Args:
            w_min: Minimum blob width in pixels
            w_max: Maximum blob width in pixels
            h_min: Minimum blob height in pixels
            h_max: Maximum blob height in pixels
            max_count: Number of raw detections examined per update, in
                       input order; the rest are ignored. None means no cap.

        Raises:
            FailedPreconditionError: If set_dimensions was never called
            InvalidArgumentError: If a bound is out of range
        """
        self._size_filter = _validate_size_filter(
            SizeFilterConfig(w_min, w_max, h_min, h_max, max_count),
            self._dimensions,
        )

    def clear_size_filter(self) -> None:
        """Disable size filtering."""
        self._size_filter = None

    def set_closeness(self, closeness: float) -> None:
        """Set the maximum normalized center distance for a match."""
        self._closeness = _validate_unit_interval("closeness", closeness)

    def set_smoothing(self, smoothing: float) -> None:
        """Set the weight of a new detection when blending geometry."""
        self._smoothing = _validate_unit_interval("smoothing", smoothing)

    def set_liveness(self, add: float, subtract: float, maximum: float) -> None:
        """
        Set the liveness parameters.

        Args:
            add: Added on each match, and the initial liveness of new entities
            subtract: Removed on each update without a match
            maximum: Upper bound for liveness
        """
        self._live_add, self._live_subtract, self._live_max = _validate_liveness(
            add, subtract, maximum
        )

    @property
    def closeness(self) -> float:
        return self._closeness

    @property
    def smoothing(self) -> float:
        return self._smoothing

    @property
    def live_add(self) -> float:
        return self._live_add

    @property
    def live_subtract(self) -> float:
        return self._live_subtract

    @property
    def live_max(self) -> float:
        return self._live_max

    @property
    def dimensions(self) -> Optional[Tuple[int, int]]:
        """Frame (width, height) in pixels, or None if unset."""
        return self._dimensions

    @property
    def size_filter(self) -> Optional[SizeFilterConfig]:
        return self._size_filter

    # -------------------------------------------------------------------------
    # Entity accessors
    # -------------------------------------------------------------------------

    def _lookup(self, entity: TrackedEntity, operation: str) -> TrackedEntity:
        if entity is None:
            raise InvalidArgumentError(f"Null entity reference passed to {operation}")
        if not isinstance(entity, TrackedEntity):
            raise NotFoundError(
                f"Unknown {type(entity).__name__} passed to {operation}, "
                f"expected a tracked entity"
            )

        record = self._records.get(entity.entity_id)
        if record is not entity:
            raise NotFoundError(
                f"Unknown entity {entity.entity_id} passed to {operation}",
                entity.entity_id,
            )
        return record

    def get_liveness(self, entity: TrackedEntity) -> float:
        """Liveness of an entity from the most recent update."""
        return self._lookup(entity, "get_liveness").liveness

    def get_data(self, entity: TrackedEntity) -> Any:
        """Caller payload of an entity from the most recent update."""
        return self._lookup(entity, "get_data").data

    def set_data(self, entity: TrackedEntity, value: Any) -> None:
        """Attach a caller payload to an entity from the most recent update."""
        self._lookup(entity, "set_data").data = value

    def _current_result(self, operation: str) -> TrackingResult:
        if self._result is None:
            raise InternalStateError(f"Tracker not initialized in {operation}")
        return self._result

    @property
    def result(self) -> TrackingResult:
        """Snapshot produced by the most recent update."""
        return self._current_result("result")

    def get_active(self) -> Tuple[TrackedEntity, ...]:
        return self._current_result("get_active").active

    def get_dead(self) -> Tuple[TrackedEntity, ...]:
        return self._current_result("get_dead").dead

    def get_new(self) -> Tuple[TrackedEntity, ...]:
        return self._current_result("get_new").new

    def __len__(self) -> int:
        return len(self._entities)

    def reset(self) -> None:
        """Forget all entities. Configuration is kept."""
        self._entities = {}
        self._records = {}
        self._result = TrackingResult()
        self._next_id = 0
        self._generation = 0
        logger.info("Tracker reset")

    # -------------------------------------------------------------------------
    # Update
    # -------------------------------------------------------------------------

    def _filter_and_copy(self, raw_detections: Iterable[Any]) -> List[Detection]:
        """
        Copy raw detections into tracker-owned Detections.

        With a size filter, at most ``max_count`` raw detections are
        examined, whether or not they pass the size check.
        """
        size_filter = self._size_filter
        detections = []

        for count, blob in enumerate(raw_detections):
            if size_filter is not None and size_filter.max_count is not None \
                    and count >= size_filter.max_count:
                break

            try:
                detection = Detection.from_blob(blob)
            except (AttributeError, TypeError, ValueError) as e:
                raise InvalidArgumentError(
                    f"Invalid detection at index {count}: {e}", blob
                ) from e

            if size_filter is not None:
                width, height = self._dimensions
                pixel_w = detection.pixel_width(width)
                pixel_h = detection.pixel_height(height)
                if pixel_w < size_filter.w_min or pixel_w > size_filter.w_max:
                    continue
                if pixel_h < size_filter.h_min or pixel_h > size_filter.h_max:
                    continue

            detections.append(detection)

        return detections

    def _create_entity(self, detection: Detection) -> TrackedEntity:
        """Create a new entity from an unmatched detection."""
        entity = TrackedEntity(
            entity_id=self._next_id,
            detection=detection,
            liveness=min(self._live_add, self._live_max),
        )
        self._next_id += 1

        logger.debug(f"Created entity {entity.entity_id} at ({detection.x:.3f}, {detection.y:.3f})")
        return entity

    def _update_impl(self, raw_detections: Iterable[Any]) -> TrackingResult:
        """
        Run one association step.

        The new state is computed before anything is committed, so an
        exception leaves the tracker as it was.
        """
        detections = self._filter_and_copy(raw_detections)
        existing = list(self._entities.values())

        if existing:
            entity_centers = np.array([e.detection.center for e in existing], dtype=np.float64)
        else:
            entity_centers = np.empty((0, 2), dtype=np.float64)

        if detections:
            detection_centers = np.array([d.center for d in detections], dtype=np.float64)
        else:
            detection_centers = np.empty((0, 2), dtype=np.float64)

        matches, _, unmatched_dets = associate_detections_to_entities(
            detections=detection_centers,
            entities=entity_centers,
            closeness=self._closeness
        )
        matched = dict(matches)

        # Commit
        active: List[TrackedEntity] = []
        dead: List[TrackedEntity] = []
        new: List[TrackedEntity] = []

        for entity_idx, entity in enumerate(existing):
            det_idx = matched.get(entity_idx)

            if det_idx is not None:
                entity.detection = entity.detection.blend(
                    detections[det_idx], self._smoothing
                )
                entity.liveness = min(entity.liveness + self._live_add, self._live_max)
                active.append(entity)
                continue

            # live_max may have been lowered since the last update
            entity.liveness = min(
                max(entity.liveness - self._live_subtract, 0.0), self._live_max
            )
            if entity.liveness <= 0.0:
                logger.debug(f"Entity {entity.entity_id} died")
                dead.append(entity)
                continue

            active.append(entity)

        for det_idx in unmatched_dets:
            entity = self._create_entity(detections[det_idx])
            active.append(entity)
            new.append(entity)

        self._generation += 1
        self._entities = {e.entity_id: e for e in active}
        self._records = dict(self._entities)
        self._records.update((e.entity_id, e) for e in dead)
        self._result = TrackingResult(
            active=tuple(active),
            dead=tuple(dead),
            new=tuple(new),
            generation=self._generation,
        )

        logger.debug(
            f"Update {self._generation}: {len(detections)} detections, "
            f"{len(active)} active, {len(new)} new, {len(dead)} dead"
        )
        return self._result


class BlobTracker(_BaseBlobTracker):
    """
    Blob tracker fed with detection lists by the caller.

    Args:
        config: Tracker configuration. Uses defaults if None.

    Example:
        >>> tracker = BlobTracker()
        >>> for detections in frames:
        ...     result = tracker.update(detections)
        ...     for entity in result.new:
        ...         tracker.set_data(entity, make_payload(entity))
        ...     for entity in result.dead:
        ...         release(tracker.get_data(entity))
    """

    def update(self, detections: Sequence[Any]) -> TrackingResult:
        """
        Update the tracker with one frame's raw detections.

        Args:
            detections: Objects exposing normalized x, y, w, h. They are
                        copied, never modified or kept. May be empty.

        Returns:
            TrackingResult for this frame
        """
        if detections is None:
            raise InvalidArgumentError("Null detection list passed to update")

        return self._update_impl(detections)


class DetectorBlobTracker(_BaseBlobTracker):
    """
    Blob tracker that pulls each frame's detections from a blob detector.

    Args:
        detector: Blob detector run on every frame
        config: Tracker configuration. Uses defaults if None.

    Example:
        >>> tracker = DetectorBlobTracker(my_detector)
        >>> result = tracker.update(frame_pixels)
    """

    def __init__(self, detector: BaseBlobDetector, config: Optional[TrackerConfig] = None):
        if detector is None:
            raise InvalidArgumentError(
                "Null blob detector reference passed to tracker constructor"
            )
        self._detector = detector
        super().__init__(config)

    @property
    def detector(self) -> BaseBlobDetector:
        return self._detector

    def update(self, pixels: Any) -> TrackingResult:
        """
        Run the detector on a frame and update the tracker with its blobs.

        Args:
            pixels: Frame pixel buffer passed to the detector

        Returns:
            TrackingResult for this frame
        """
        if pixels is None or np.size(pixels) == 0:
            raise InvalidArgumentError("Empty pixel array passed to update")

        return self._update_impl(self._detector.detect(pixels))


_NO_DETECTOR = object()


def create_tracker(detector: Any = _NO_DETECTOR, config: Optional[TrackerConfig] = None):
    """
    Create a tracker of the variant matching the arguments.

    Args:
        detector: Blob detector to bind. Omit it for a tracker fed with
                  detection lists; passing None is an error.
        config: Tracker configuration. Uses defaults if None.

    Returns:
        BlobTracker without a detector, DetectorBlobTracker with one
    """
    if detector is _NO_DETECTOR:
        return BlobTracker(config)
    return DetectorBlobTracker(detector, config)
