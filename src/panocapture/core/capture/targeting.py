"""Target acquisition: which capture position the camera is pointing at."""

import math
from typing import Optional, Sequence, Tuple

from panocapture.core.capture.positions import CapturePosition
from panocapture.core.orientation.angles import normalize_signed_180
from panocapture.core.orientation.orientation_state import SmoothedOrientation
from panocapture.utils.config_sections import TargetingConfig, load_targeting_config


def angular_offset(position: CapturePosition, current: SmoothedOrientation) -> Tuple[float, float]:
    """(Δazimuth in (-180, 180], Δelevation) from the current orientation to a target."""
    delta_azimuth = normalize_signed_180(position.target_azimuth - current.azimuth)
    delta_elevation = position.target_elevation - current.elevation
    return delta_azimuth, delta_elevation


def angular_distance(position: CapturePosition, current: SmoothedOrientation) -> float:
    """Euclidean distance in angle space (not great-circle); fine inside the threshold."""
    delta_azimuth, delta_elevation = angular_offset(position, current)
    return math.sqrt(delta_azimuth ** 2 + delta_elevation ** 2)


def find_highlighted(
    current: Optional[SmoothedOrientation],
    positions: Sequence[CapturePosition],
    config: Optional[TargetingConfig] = None,
) -> Optional[CapturePosition]:
    """
    First position (in id order) closer than the highlight threshold.

    Lowest id wins when several positions are eligible. Returns None without
    an orientation (sensor silent) or when nothing is in range, which disables
    the capture action.
    """
    if current is None:
        return None

    threshold = (config or load_targeting_config()).highlight_threshold
    for position in positions:
        if angular_distance(position, current) < threshold:
            return position
    return None
