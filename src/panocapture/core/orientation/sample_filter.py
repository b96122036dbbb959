"""
Orientation smoothing for the capture overlay.

This module turns raw (heading, tilt) sensor events into a smoothed device
orientation. Raw compass readings jitter by several degrees, and sensor events
arrive faster (often > 60 Hz) than the overlay needs to redraw, so the filter
averages a short history and only publishes at a fixed rate.

Features:
- Fixed-size FIFO ring buffers (15 samples per axis)
- Circular (vector) mean for azimuth, safe across the 0°/360° seam
- Arithmetic mean for elevation
- Publish throttling (one update per 50 ms, ~20 Hz)
- Heading calibration relative to the starting direction

Usage:
    orientation_filter = OrientationSampleFilter()
    smoothed = orientation_filter.ingest(raw_heading=212.0, raw_tilt=95.0)
    if smoothed is not None:
        # New orientation published, redraw overlay
"""

import logging
import time
from collections import deque
from typing import Callable, Deque, List, Optional

from panocapture.core.orientation.angles import arithmetic_mean, circular_mean, clamp
from panocapture.core.orientation.calibration import CalibrationState
from panocapture.core.orientation.orientation_state import OrientationSample, SmoothedOrientation
from panocapture.utils.config_sections import OrientationFilterConfig, load_orientation_filter_config

log = logging.getLogger(__name__)

OrientationListener = Callable[[SmoothedOrientation], None]


class OrientationSampleFilter:
    """Smooth and throttle device orientation samples."""

    def __init__(
        self,
        config: Optional[OrientationFilterConfig] = None,
        calibration: Optional[CalibrationState] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config or load_orientation_filter_config()
        self.calibration = calibration or CalibrationState()
        self.clock = clock

        self.azimuth_buffer: Deque[float] = deque(maxlen=self.config.buffer_size)
        self.elevation_buffer: Deque[float] = deque(maxlen=self.config.buffer_size)

        # Last published value; readers never touch the buffers
        self.smoothed: Optional[SmoothedOrientation] = None
        self.last_publish: Optional[float] = None
        self.publish_count = 0
        self.samples_received = 0  # Calibrated samples only

        self._update_interval_s = self.config.update_interval_ms / 1000.0
        self._listeners: List[OrientationListener] = []

        # Stale samples from before a recalibration would bias the new mean
        self.calibration.add_reset_listener(self.clear)

    def add_listener(self, listener: OrientationListener) -> None:
        self._listeners.append(listener)

    def tilt_to_elevation(self, raw_tilt: float) -> float:
        """Device tilt (90° = upright) to elevation above the horizon."""
        elevation = raw_tilt - self.config.tilt_horizon
        return clamp(elevation, self.config.min_elevation, self.config.max_elevation)

    def to_sample(self, raw_heading: float, raw_tilt: float) -> OrientationSample:
        self.calibration.calibrate(raw_heading)
        return OrientationSample(
            azimuth_degrees=self.calibration.relative_azimuth(raw_heading),
            elevation_degrees=self.tilt_to_elevation(raw_tilt),
        )

    def ingest(self, raw_heading: float, raw_tilt: float) -> Optional[SmoothedOrientation]:
        """
        Buffer one sensor event and publish if the throttle interval elapsed.

        Args:
            raw_heading: Compass heading in degrees (0-360)
            raw_tilt: Device front-back tilt in degrees (90 = upright)

        Returns:
            The newly published orientation, or None if throttled or the
            heading reference has not latched yet.
        """
        if not self.calibration.calibrate(raw_heading):
            # No real heading yet (missing or zero reading): nothing to smooth
            return None

        sample = self.to_sample(raw_heading, raw_tilt)
        self.azimuth_buffer.append(sample.azimuth_degrees)
        self.elevation_buffer.append(sample.elevation_degrees)
        self.samples_received += 1

        now = self.clock()
        if self.last_publish is not None and now - self.last_publish < self._update_interval_s:
            return None

        return self._publish(now)

    def _publish(self, now: float) -> SmoothedOrientation:
        smoothed = SmoothedOrientation(
            azimuth=circular_mean(self.azimuth_buffer),
            elevation=arithmetic_mean(self.elevation_buffer),
            timestamp=now,
        )
        self.smoothed = smoothed
        self.last_publish = now
        self.publish_count += 1

        log.debug("Orientation published: az=%.1f° el=%.1f°", smoothed.azimuth, smoothed.elevation)

        for listener in self._listeners:
            listener(smoothed)
        return smoothed

    def clear(self) -> None:
        """Drop buffered samples and the published orientation."""
        self.azimuth_buffer.clear()
        self.elevation_buffer.clear()
        self.smoothed = None
        self.last_publish = None

    def recalibrate(self) -> None:
        """Manual recalibration: the next nonzero heading becomes the new zero."""
        self.calibration.reset()

    @property
    def sample_count(self) -> int:
        return len(self.azimuth_buffer)
