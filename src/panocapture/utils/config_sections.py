"""
Typed configuration sections for the panorama capture pipeline.

This module provides strongly-typed configuration sections to replace
scattered getattr(Config, ...) calls with proper type hints and defaults.

Benefits:
- Type safety: IDE autocomplete and type checking
- Discoverability: All config options visible in one place
- Default values: Centralized and documented
- Better testing: Components take a section, tests build one directly
"""

from dataclasses import dataclass


@dataclass
class OrientationFilterConfig:
    """Configuration for orientation smoothing."""

    # Ring buffer capacity (per axis)
    buffer_size: int = 15

    # Minimum time between published orientation updates
    update_interval_ms: float = 50.0

    # Tilt → elevation conversion
    tilt_horizon: float = 90.0
    min_elevation: float = -90.0
    max_elevation: float = 90.0


@dataclass
class TargetingConfig:
    """Configuration for capture position highlighting."""

    highlight_threshold: float = 25.0  # degrees


@dataclass
class ProjectionConfig:
    """Configuration for dot projection onto the viewport."""

    # Field of view (degrees)
    h_fov: float = 70.0
    v_fov: float = 100.0

    # Culling window (degrees)
    visible_azimuth: float = 55.0
    visible_elevation: float = 60.0

    # Dot scale
    highlighted_scale: float = 1.2
    min_scale: float = 0.7


@dataclass
class CaptureConfig:
    """Configuration for the capture flow."""

    freeze_ms: float = 200.0
    jpeg_quality: int = 90
    workers: int = 1
    sensor_timeout_s: float = 3.0


@dataclass
class CameraConfig:
    """Configuration for the camera stream."""

    index: int = 0
    ideal_width: int = 1920
    ideal_height: int = 1080


@dataclass
class ViewerConfig:
    """Configuration for the panorama viewer camera."""

    default_fov: float = 75.0
    min_fov: float = 30.0
    max_fov: float = 120.0
    max_pitch: float = 85.0
    drag_sensitivity: float = 0.3
    zoom_sensitivity: float = 0.05


def load_orientation_filter_config() -> OrientationFilterConfig:
    """
    Load orientation filter configuration from Config with fallback defaults.

    Returns:
        OrientationFilterConfig with values from Config or defaults
    """
    from panocapture.utils.config import Config

    return OrientationFilterConfig(
        buffer_size=getattr(Config, "ORIENTATION_BUFFER_SIZE", 15),
        update_interval_ms=getattr(Config, "ORIENTATION_UPDATE_INTERVAL_MS", 50.0),
        tilt_horizon=getattr(Config, "TILT_HORIZON_DEGREES", 90.0),
        min_elevation=getattr(Config, "ELEVATION_MIN_DEGREES", -90.0),
        max_elevation=getattr(Config, "ELEVATION_MAX_DEGREES", 90.0),
    )


def load_targeting_config() -> TargetingConfig:
    """Load targeting configuration from Config with fallback defaults."""
    from panocapture.utils.config import Config

    return TargetingConfig(
        highlight_threshold=getattr(Config, "HIGHLIGHT_THRESHOLD_DEGREES", 25.0),
    )


def load_projection_config() -> ProjectionConfig:
    """
    Load projection configuration from Config with fallback defaults.

    Returns:
        ProjectionConfig with values from Config or defaults
    """
    from panocapture.utils.config import Config

    return ProjectionConfig(
        h_fov=getattr(Config, "PROJECTION_H_FOV_DEGREES", 70.0),
        v_fov=getattr(Config, "PROJECTION_V_FOV_DEGREES", 100.0),
        visible_azimuth=getattr(Config, "PROJECTION_VISIBLE_AZIMUTH", 55.0),
        visible_elevation=getattr(Config, "PROJECTION_VISIBLE_ELEVATION", 60.0),
        highlighted_scale=getattr(Config, "DOT_SCALE_HIGHLIGHTED", 1.2),
        min_scale=getattr(Config, "DOT_SCALE_MIN", 0.7),
    )


def load_capture_config() -> CaptureConfig:
    """Load capture flow configuration from Config with fallback defaults."""
    from panocapture.utils.config import Config

    return CaptureConfig(
        freeze_ms=getattr(Config, "CAPTURE_FREEZE_MS", 200.0),
        jpeg_quality=getattr(Config, "CAPTURE_JPEG_QUALITY", 90),
        workers=getattr(Config, "CAPTURE_WORKERS", 1),
        sensor_timeout_s=getattr(Config, "SENSOR_TIMEOUT_S", 3.0),
    )


def load_camera_config() -> CameraConfig:
    """Load camera configuration from Config with fallback defaults."""
    from panocapture.utils.config import Config

    return CameraConfig(
        index=getattr(Config, "CAMERA_INDEX", 0),
        ideal_width=getattr(Config, "CAMERA_IDEAL_WIDTH", 1920),
        ideal_height=getattr(Config, "CAMERA_IDEAL_HEIGHT", 1080),
    )


def load_viewer_config() -> ViewerConfig:
    """Load viewer configuration from Config with fallback defaults."""
    from panocapture.utils.config import Config

    return ViewerConfig(
        default_fov=getattr(Config, "VIEWER_DEFAULT_FOV", 75.0),
        min_fov=getattr(Config, "VIEWER_MIN_FOV", 30.0),
        max_fov=getattr(Config, "VIEWER_MAX_FOV", 120.0),
        max_pitch=getattr(Config, "VIEWER_MAX_PITCH", 85.0),
        drag_sensitivity=getattr(Config, "VIEWER_DRAG_SENSITIVITY", 0.3),
        zoom_sensitivity=getattr(Config, "VIEWER_ZOOM_SENSITIVITY", 0.05),
    )
