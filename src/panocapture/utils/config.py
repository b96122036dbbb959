"""
Centralized configuration for the panorama capture pipeline.

This module provides all configuration constants for:
- Orientation smoothing (buffer size, publish throttling)
- Target acquisition (highlight threshold)
- Screen projection (field of view, visibility culling)
- Capture flow (shutter freeze, JPEG quality)
- Camera and sensor acquisition
- Panorama viewer controls
- Session telemetry

The Config class contains all constants as class attributes, making them
accessible throughout the application without instantiation.

Usage:
    from panocapture.utils.config import Config

    buffer_size = Config.ORIENTATION_BUFFER_SIZE
    if distance < Config.HIGHLIGHT_THRESHOLD_DEGREES:
        # Position is armed for capture
"""

import os
import logging

log = logging.getLogger(__name__)


class Config:
    """System configuration constants for panorama capture."""

    # ==========================================================================
    # ORIENTATION FILTER: Smoothing & Throttling
    # ==========================================================================

    ORIENTATION_BUFFER_SIZE = 15            # More samples = smoother but slower response
    ORIENTATION_UPDATE_INTERVAL_MS = 50     # ms between published updates (20 Hz)

    # Raw tilt (beta) of 90° means the phone is upright, pointing at the horizon
    TILT_HORIZON_DEGREES = 90.0
    DEFAULT_TILT_DEGREES = 90.0             # Used when the event carries no tilt
    ELEVATION_MIN_DEGREES = -90.0
    ELEVATION_MAX_DEGREES = 90.0

    # ==========================================================================
    # TARGET ACQUISITION
    # ==========================================================================

    HIGHLIGHT_THRESHOLD_DEGREES = 25.0      # Angular distance to arm a position

    # ==========================================================================
    # SCREEN PROJECTION: Field of view (portrait capture UI)
    # ==========================================================================

    PROJECTION_H_FOV_DEGREES = 70.0
    PROJECTION_V_FOV_DEGREES = 100.0
    PROJECTION_VISIBLE_AZIMUTH = 55.0       # |Δazimuth| culling window
    PROJECTION_VISIBLE_ELEVATION = 60.0     # |Δelevation| culling window

    DOT_SCALE_HIGHLIGHTED = 1.2
    DOT_SCALE_MIN = 0.7

    # ==========================================================================
    # CAPTURE LAYOUT: 16 positions covering the sphere
    # ==========================================================================

    MIDDLE_POSITION_COUNT = 8               # Eye level, every 45°
    POLE_POSITION_COUNT = 4                 # Up and down bands, every 90°
    POLE_ELEVATION_DEGREES = 40.0

    # ==========================================================================
    # CAPTURE FLOW
    # ==========================================================================

    CAPTURE_FREEZE_MS = 200                 # Visual freeze after the shutter fires
    CAPTURE_JPEG_QUALITY = 90
    CAPTURE_WORKERS = 1                     # Camera grabs + stitching run here

    # ==========================================================================
    # CAMERA & SENSORS
    # ==========================================================================

    CAMERA_INDEX = 0                        # Rear camera on most devices
    CAMERA_IDEAL_WIDTH = 1920
    CAMERA_IDEAL_HEIGHT = 1080
    SENSOR_TIMEOUT_S = 3.0                  # No orientation events → "move your device"

    # ==========================================================================
    # PANORAMA VIEWER
    # ==========================================================================

    VIEWER_DEFAULT_FOV = 75.0
    VIEWER_MIN_FOV = 30.0
    VIEWER_MAX_FOV = 120.0
    VIEWER_MAX_PITCH = 85.0
    VIEWER_DRAG_SENSITIVITY = 0.3           # Degrees per pixel dragged
    VIEWER_ZOOM_SENSITIVITY = 0.05          # FOV degrees per wheel delta unit

    # ==========================================================================
    # TELEMETRY
    # ==========================================================================

    TELEMETRY_ENABLED = True
    TELEMETRY_DIR = os.environ.get("PANOCAPTURE_LOG_DIR", "logs")

    # ==========================================================================
    # STITCHING
    # ==========================================================================

    STITCH_PLACEHOLDER_DELAY_S = 0.0        # Simulated processing time of the placeholder


log.debug("Config loaded (telemetry dir: %s)", Config.TELEMETRY_DIR)
