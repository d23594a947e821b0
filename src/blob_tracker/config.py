"""
Centralized configuration management for Blob Tracker.

This module provides typed configuration using dataclasses.
Configuration can be loaded from YAML files or constructed programmatically.
Values are validated when a tracker applies them, not here.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union
import yaml


# =============================================================================
# Limits and Defaults
# =============================================================================

MAX_FRAME_WIDTH = 10000
MAX_FRAME_HEIGHT = 10000

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


# =============================================================================
# Configuration Dataclasses
# =============================================================================

@dataclass
class SizeFilterConfig:
    """Pixel size limits for raw detections."""

    w_min: int = 0
    w_max: int = MAX_FRAME_WIDTH
    h_min: int = 0
    h_max: int = MAX_FRAME_HEIGHT
    max_count: Optional[int] = None  # None = no cap


@dataclass
class TrackerConfig:
    """Configuration for the blob tracker."""

    closeness: float = 0.1  # Max normalized center distance for a match
    smoothing: float = 0.1  # Weight of the new detection when blending

    # Liveness parameters
    live_add: float = 5.0
    live_subtract: float = 5.0
    live_max: float = 100.0

    # Frame size in pixels, required by the size filter
    width: Optional[int] = None
    height: Optional[int] = None
    size_filter: Optional[SizeFilterConfig] = None

    # Logging configuration
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "TrackerConfig":
        """Load configuration from a YAML file."""
        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}

        tracker = data.get('tracker', {})
        filter_data = tracker.get('size_filter')

        return cls(
            closeness=tracker.get('closeness', 0.1),
            smoothing=tracker.get('smoothing', 0.1),
            live_add=tracker.get('live_add', 5.0),
            live_subtract=tracker.get('live_subtract', 5.0),
            live_max=tracker.get('live_max', 100.0),
            width=tracker.get('width'),
            height=tracker.get('height'),
            size_filter=SizeFilterConfig(**filter_data) if filter_data else None,
            log_level=data.get('log_level', 'INFO'),
            log_file=Path(data['log_file']) if data.get('log_file') else None,
        )

    def to_yaml(self, path: Union[str, Path]) -> None:
        """Save configuration to a YAML file."""
        path = Path(path)
        size_filter = None
        if self.size_filter is not None:
            size_filter = {
                'w_min': self.size_filter.w_min,
                'w_max': self.size_filter.w_max,
                'h_min': self.size_filter.h_min,
                'h_max': self.size_filter.h_max,
                'max_count': self.size_filter.max_count,
            }

        data = {
            'tracker': {
                'closeness': self.closeness,
                'smoothing': self.smoothing,
                'live_add': self.live_add,
                'live_subtract': self.live_subtract,
                'live_max': self.live_max,
                'width': self.width,
                'height': self.height,
                'size_filter': size_filter,
            },
            'log_level': self.log_level,
            'log_file': str(self.log_file) if self.log_file else None,
        }

        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)


# =============================================================================
# Helpers
# =============================================================================

def get_default_config() -> TrackerConfig:
    """Create default configuration suitable for most use cases."""
    return TrackerConfig()


def setup_logging(level: str = "INFO", log_file: Optional[Path] = None) -> None:
    """
    Configure root logging for an application embedding the tracker.

    The library itself never installs handlers; call this from the
    application entry point if no logging setup exists yet.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=LOG_FORMAT,
        handlers=[
            logging.StreamHandler(),
            *([logging.FileHandler(log_file)] if log_file else [])
        ]
    )
