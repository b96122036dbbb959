"""
Mock camera and orientation source for running capture sessions without a phone.

This module provides drop-in replacements for the real devices:
1. MockOrientationSource: scripted (heading, tilt) events, including sweeps
   and dwell-on-target sequences
2. MockCamera: synthetic frames (gray noise + the current frame number), or
   a scripted failure on open/grab

Both are 100% API-compatible with the real sources.

Usage:
    source = MockOrientationSource(start_heading=100.0)
    camera = MockCamera(resolution=(640, 480))
    with PanoramaSession(source, camera) as session:
        source.point_at(azimuth=45.0, elevation=0.0)
"""

import logging
from typing import Callable, Iterable, Optional, Tuple

import cv2
import numpy as np

from panocapture.core.errors import CameraUnavailableError
from panocapture.core.hardware.camera import CameraSource
from panocapture.core.hardware.orientation_source import CallbackOrientationSource, OrientationEvent
from panocapture.utils.config import Config

log = logging.getLogger("MockDevices")


class SimulatedClock:
    """Manually advanced clock (seconds) for deterministic throttling."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


class MockOrientationSource(CallbackOrientationSource):
    """
    Scripted orientation source.

    Headings are produced relative to start_heading. The first point_at()
    is preceded by one level event at start_heading, which latches it as the
    calibration reference, so point_at(0, 0) always lands on position 1.
    """

    def __init__(
        self,
        start_heading: float = 100.0,
        grant_permission: bool = True,
        samples_per_target: Optional[int] = None,
        on_sample: Optional[Callable[[], None]] = None,
    ) -> None:
        super().__init__(requires_permission=True, permission_handler=lambda: grant_permission)
        self.start_heading = start_heading
        # One full buffer so the smoothed value settles on the target
        self.samples_per_target = samples_per_target or Config.ORIENTATION_BUFFER_SIZE + 1
        # Hook run before every sample, e.g. to advance a fake clock
        self.on_sample = on_sample
        self.reference_sent = False

    def emit(self, heading: float, tilt: float, compass: bool = False) -> bool:
        if self.on_sample is not None:
            self.on_sample()
        if compass:
            event = OrientationEvent(compass_heading=heading % 360.0, beta=tilt)
        else:
            event = OrientationEvent(alpha=heading % 360.0, beta=tilt)
        return self.dispatch(event)

    def raw_for(self, azimuth: float, elevation: float) -> Tuple[float, float]:
        """Raw (heading, tilt) that reads as (azimuth, elevation) after calibration."""
        return (self.start_heading + azimuth) % 360.0, elevation + Config.TILT_HORIZON_DEGREES

    def send_reference(self) -> None:
        """Face start_heading once so the session latches its heading reference."""
        self.reference_sent = True
        self.emit(self.start_heading, Config.TILT_HORIZON_DEGREES)

    def point_at(self, azimuth: float, elevation: float) -> None:
        """Hold the device on a target long enough for the filter to settle."""
        if not self.reference_sent:
            self.send_reference()
        heading, tilt = self.raw_for(azimuth, elevation)
        for _ in range(self.samples_per_target):
            self.emit(heading, tilt)

    def sweep(self, azimuths: Iterable[float], elevation: float = 0.0) -> None:
        for azimuth in azimuths:
            self.point_at(azimuth, elevation)


class MockCamera(CameraSource):
    """Synthetic camera for development and tests."""

    def __init__(
        self,
        resolution: Tuple[int, int] = (640, 480),
        fail_on_open: bool = False,
        fail_on_grab: bool = False,
    ) -> None:
        self.resolution = resolution
        self.fail_on_open = fail_on_open
        self.fail_on_grab = fail_on_grab

        self._open = False
        self.open_calls = 0
        self.close_calls = 0
        self.frame_count = 0

    @property
    def is_open(self) -> bool:
        return self._open

    def open(self) -> None:
        self.open_calls += 1
        if self.fail_on_open:
            raise CameraUnavailableError("Unable to access camera.")
        self._open = True
        log.info("[MockCamera] Synthetic stream started @ %dx%d", *self.resolution)

    def grab_frame(self) -> np.ndarray:
        if not self._open:
            raise CameraUnavailableError("Camera is not open")
        if self.fail_on_grab:
            raise CameraUnavailableError("Camera returned no frame")

        self.frame_count += 1
        width, height = self.resolution
        frame = np.random.randint(100, 150, (height, width, 3), dtype=np.uint8)
        cv2.putText(frame, f"Frame: {self.frame_count}", (10, 30), cv2.FONT_HERSHEY_SIMPLEX,
                    0.7, (255, 255, 255), 2)
        return frame

    def close(self) -> None:
        self.close_calls += 1
        self._open = False
