"""
Capture position registry.

Sixteen fixed targets cover the sphere with enough overlap for stitching:

- Middle: 8 positions at eye level (elevation 0°), every 45° of azimuth
- Top:    4 positions pointing up (elevation +40°), every 90°
- Bottom: 4 positions pointing down (elevation -40°), every 90°

Ids run 1-8 (middle), 9-12 (top), 13-16 (bottom), each band starting at
azimuth 0°. The full set is the unit of completion.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from panocapture.utils.config import Config


class CaptureZone(Enum):
    """Elevation band of a capture position."""

    MIDDLE = "middle"
    TOP = "top"
    BOTTOM = "bottom"


ZONE_HINTS = {
    CaptureZone.MIDDLE: "Eye level",
    CaptureZone.TOP: "Point UP",
    CaptureZone.BOTTOM: "Point DOWN",
}


@dataclass
class CapturePosition:
    """One target on the sphere and its capture state."""

    id: int
    zone: CaptureZone
    target_azimuth: float
    target_elevation: float
    captured: bool = False
    image_data: Optional[bytes] = None

    @property
    def label(self) -> str:
        return str(self.id)

    @property
    def hint(self) -> str:
        return ZONE_HINTS[self.zone]

    def to_metadata(self) -> Dict[str, Any]:
        """Static metadata handed to the stitcher alongside the image."""
        return {
            "position_id": self.id,
            "zone": self.zone.value,
            "azimuth": self.target_azimuth,
            "elevation": self.target_elevation,
        }


def _band(zone: CaptureZone, count: int, elevation: float, first_id: int) -> List[CapturePosition]:
    spacing = 360.0 / count
    return [
        CapturePosition(
            id=first_id + index,
            zone=zone,
            target_azimuth=index * spacing,
            target_elevation=elevation,
        )
        for index in range(count)
    ]


def initialize_positions() -> List[CapturePosition]:
    """Fresh, uncaptured set of the 16 capture positions in id order."""
    middle_count = Config.MIDDLE_POSITION_COUNT
    pole_count = Config.POLE_POSITION_COUNT
    pole_elevation = Config.POLE_ELEVATION_DEGREES

    positions = _band(CaptureZone.MIDDLE, middle_count, 0.0, first_id=1)
    positions += _band(CaptureZone.TOP, pole_count, pole_elevation, first_id=middle_count + 1)
    positions += _band(
        CaptureZone.BOTTOM, pole_count, -pole_elevation, first_id=middle_count + pole_count + 1
    )
    return positions


TOTAL_POSITIONS = Config.MIDDLE_POSITION_COUNT + 2 * Config.POLE_POSITION_COUNT
