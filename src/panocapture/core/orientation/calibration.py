"""
Heading calibration for capture sessions.

Compass headings are reported relative to the direction the user faced when
the session started, so position 1 is always straight ahead. The reference is
latched from the first nonzero raw heading (a zero heading usually means the
platform has not produced a real reading yet) and only changes through an
explicit reset.

Usage:
    calibration = CalibrationState()
    calibration.calibrate(raw_heading)
    azimuth = calibration.relative_azimuth(raw_heading)
"""

import logging
from typing import Callable, List, Optional

from panocapture.core.orientation.angles import normalize_360

log = logging.getLogger(__name__)


class CalibrationState:
    """Initial heading reference with manual reset."""

    def __init__(self) -> None:
        self.initial_azimuth: Optional[float] = None
        self._reset_listeners: List[Callable[[], None]] = []

    @property
    def is_calibrated(self) -> bool:
        return self.initial_azimuth is not None

    def add_reset_listener(self, listener: Callable[[], None]) -> None:
        """Register a callback run after every reset (e.g. to drop stale samples)."""
        self._reset_listeners.append(listener)

    def calibrate(self, raw_heading: float) -> bool:
        """Latch the reference on the first nonzero heading. Returns whether calibrated."""
        if self.initial_azimuth is None and raw_heading != 0:
            self.initial_azimuth = float(raw_heading)
            log.info("Heading reference latched at %.1f°", self.initial_azimuth)
        return self.is_calibrated

    def relative_azimuth(self, raw_heading: float) -> float:
        reference = self.initial_azimuth if self.initial_azimuth is not None else 0.0
        return normalize_360(raw_heading - reference)

    def reset(self) -> None:
        """Forget the reference; listeners clear any buffered samples."""
        self.initial_azimuth = None
        for listener in self._reset_listeners:
            listener()
        log.info("Heading calibration reset")
