"""
Screen projection of capture positions.

Each target's angular offset from the current orientation is mapped to
viewport percentages (top-left origin, 50/50 = screen center):

    x = 50 + (Δazimuth / h_fov) * 100
    y = 50 - (Δelevation / v_fov) * 100

The vertical FOV is wider than the horizontal one because the capture UI is
portrait. The culling window (±55° / ±60°) is larger than the highlight
threshold, so dots appear before they can be captured.

Usage:
    point = project(position, orientation)
    if point.visible:
        draw_dot(point.x, point.y, point.scale)
"""

import math
from dataclasses import dataclass
from typing import Dict, Optional, Sequence

from panocapture.core.capture.positions import CapturePosition
from panocapture.core.capture.targeting import angular_offset
from panocapture.core.orientation.orientation_state import SmoothedOrientation
from panocapture.utils.config_sections import ProjectionConfig, load_projection_config


@dataclass(frozen=True)
class ScreenPoint:
    """Dot placement in viewport percent."""

    x: float
    y: float
    visible: bool
    scale: float = 1.0


def dot_scale(x: float, y: float, highlighted: bool, config: ProjectionConfig) -> float:
    """Dots shrink linearly with distance from the screen center, down to min_scale."""
    if highlighted:
        return config.highlighted_scale
    distance_from_center = math.hypot(x - 50.0, y - 50.0)
    return max(config.min_scale, 1.0 - distance_from_center / 100.0)


def project(
    position: CapturePosition,
    current: SmoothedOrientation,
    highlighted: bool = False,
    config: Optional[ProjectionConfig] = None,
) -> ScreenPoint:
    config = config or load_projection_config()
    delta_azimuth, delta_elevation = angular_offset(position, current)

    x = 50.0 + (delta_azimuth / config.h_fov) * 100.0
    y = 50.0 - (delta_elevation / config.v_fov) * 100.0
    visible = (
        abs(delta_azimuth) < config.visible_azimuth
        and abs(delta_elevation) < config.visible_elevation
    )

    return ScreenPoint(x=x, y=y, visible=visible, scale=dot_scale(x, y, highlighted, config))


def project_all(
    positions: Sequence[CapturePosition],
    current: SmoothedOrientation,
    highlighted_id: Optional[int] = None,
    config: Optional[ProjectionConfig] = None,
) -> Dict[int, ScreenPoint]:
    """Project every position for one render frame, keyed by position id."""
    config = config or load_projection_config()
    return {
        position.id: project(position, current, position.id == highlighted_id, config)
        for position in positions
    }
