"""
Stitching collaborator for finished capture sessions.

Stitching itself happens elsewhere (a server-side pipeline); the capture side
only hands over the 16 images with their position metadata and receives one
addressable composite image back.

Payload (one record per position):
    {"position_id": 1, "zone": "middle", "azimuth": 0.0, "elevation": 0.0,
     "image": b"<jpeg bytes>"}
"""

import base64
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Sequence

from panocapture.core.capture.positions import TOTAL_POSITIONS, CapturePosition
from panocapture.core.errors import StitchFailedError

log = logging.getLogger(__name__)

CaptureRecord = Dict[str, Any]


def build_capture_records(positions: Sequence[CapturePosition]) -> List[CaptureRecord]:
    """Position metadata + image bytes, in id order."""
    records = []
    for position in sorted(positions, key=lambda p: p.id):
        if not position.captured or not position.image_data:
            raise StitchFailedError(f"Position {position.id} has no image")
        record = position.to_metadata()
        record["image"] = position.image_data
        records.append(record)
    return records


def to_data_url(image: bytes, mime_type: str = "image/jpeg") -> str:
    encoded = base64.b64encode(image).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


class PanoramaStitcher(ABC):
    """Turns the captured set into one composite image reference."""

    @abstractmethod
    def stitch(self, records: List[CaptureRecord]) -> str:
        """
        Args:
            records: One record per capture position (see module docstring)

        Returns:
            URL of the composite image.

        Raises:
            StitchFailedError: the composite could not be produced
        """


class PlaceholderStitcher(PanoramaStitcher):
    """
    Stand-in until a real stitching service is wired up.

    Validates the capture set and returns the first image as a data URL.
    """

    def __init__(self, delay_s: float = 0.0, expected_count: int = TOTAL_POSITIONS) -> None:
        self.delay_s = delay_s
        self.expected_count = expected_count
        self.calls = 0

    def stitch(self, records: List[CaptureRecord]) -> str:
        self.calls += 1
        if len(records) != self.expected_count:
            raise StitchFailedError(
                f"Expected {self.expected_count} images, got {len(records)}"
            )

        if self.delay_s > 0:
            time.sleep(self.delay_s)

        first = next((r for r in records if r.get("image")), None)
        if first is None:
            raise StitchFailedError("No image data to stitch")

        log.info("Placeholder panorama built from position %d", first["position_id"])
        return to_data_url(first["image"])
