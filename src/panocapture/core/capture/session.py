"""
Panorama capture session.

A PanoramaSession owns all state of one capture run: the orientation filter
and calibration, the 16 capture positions, the capture/retake state machine,
and the camera + sensor resources. It is created when the capture screen
opens and discarded when it closes; nothing is kept at module level.

Flow:
    orientation event → filter (throttled publish) → highlight → state machine
    render → dots() projects all 16 positions against the published orientation
    shutter → capture() → camera grab + JPEG encode on a worker thread
    all captured → finalize() → stitcher on a worker thread → on_complete(url)
    composite ready → open_viewer() → drag/zoom camera for browsing it

Sensor callbacks may come from another thread; every state change happens
under the session lock and readers only see the published orientation.

Usage:
    with PanoramaSession(orientation_source, camera, stitcher, on_complete=show) as session:
        ...
        future = session.capture()
        if future is None:           # already captured, ask the user
            future = session.confirm_retake()
        future.result()
        ...
        url = session.finalize().result()
"""

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, List, Optional

from panocapture.core.capture.positions import CapturePosition, CaptureZone
from panocapture.core.capture.projection import project_all
from panocapture.core.capture.state_machine import CaptureState, CaptureStateMachine
from panocapture.core.capture.targeting import find_highlighted
from panocapture.core.errors import (
    CameraUnavailableError,
    InvalidTransitionError,
    PanoramaCaptureError,
    SensorUnavailableError,
    StitchFailedError,
)
from panocapture.core.hardware.camera import CameraSource, encode_jpeg
from panocapture.core.hardware.device_manager import DeviceManager
from panocapture.core.hardware.orientation_source import OrientationSource
from panocapture.core.orientation.orientation_state import SmoothedOrientation
from panocapture.core.orientation.sample_filter import OrientationSampleFilter
from panocapture.core.stitching.stitcher import PanoramaStitcher, PlaceholderStitcher, build_capture_records
from panocapture.core.telemetry.capture_logger import CaptureTelemetryLogger
from panocapture.core.viewer.view_controller import ViewController
from panocapture.utils.config_sections import (
    CaptureConfig,
    OrientationFilterConfig,
    ProjectionConfig,
    TargetingConfig,
    load_capture_config,
    load_projection_config,
    load_targeting_config,
)

log = logging.getLogger("PanoramaSession")


@dataclass(frozen=True)
class DotView:
    """Render data for one capture position."""

    position_id: int
    label: str
    zone: CaptureZone
    x: float
    y: float
    scale: float
    visible: bool
    captured: bool
    highlighted: bool


class PanoramaSession:
    """One capture run, from permission request to composite image."""

    def __init__(
        self,
        orientation_source: OrientationSource,
        camera: CameraSource,
        stitcher: Optional[PanoramaStitcher] = None,
        *,
        telemetry: Optional[CaptureTelemetryLogger] = None,
        on_complete: Optional[Callable[[str], None]] = None,
        on_error: Optional[Callable[[PanoramaCaptureError], None]] = None,
        filter_config: Optional[OrientationFilterConfig] = None,
        targeting_config: Optional[TargetingConfig] = None,
        projection_config: Optional[ProjectionConfig] = None,
        capture_config: Optional[CaptureConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.camera = camera
        self.stitcher = stitcher or PlaceholderStitcher()
        self.telemetry = telemetry
        self.on_complete = on_complete
        self.on_error = on_error
        self.clock = clock

        self.targeting_config = targeting_config or load_targeting_config()
        self.projection_config = projection_config or load_projection_config()
        self.capture_config = capture_config or load_capture_config()

        self.devices = DeviceManager(orientation_source, camera)
        self.filter = OrientationSampleFilter(filter_config, clock=clock)
        self.machine = CaptureStateMachine()

        self._lock = threading.RLock()
        self._executor = ThreadPoolExecutor(
            max_workers=max(1, self.capture_config.workers),
            thread_name_prefix="panocapture",
        )

        self.highlighted: Optional[CapturePosition] = None
        self.errors: List[PanoramaCaptureError] = []
        self.result_url: Optional[str] = None

        self.started = False
        self.closed = False
        self.started_at: Optional[float] = None
        self._finalizing = False
        self._sensor_reported = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def __enter__(self) -> "PanoramaSession":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def start(self) -> None:
        """
        Acquire permission, camera and orientation subscription.

        Raises:
            PermissionDeniedError: motion sensor access refused
            CameraUnavailableError: camera stream could not start
        """
        if self.closed:
            raise InvalidTransitionError("Session already closed")
        if self.started:
            return

        log.info("Starting panorama capture session...")
        try:
            self.devices.acquire(self._on_orientation)
        except PanoramaCaptureError as e:
            self._report_error(e)
            raise

        self.started = True
        self.started_at = self.clock()
        if self.telemetry:
            self.telemetry.log_event("capture_started")
        log.info("Session ready: point the camera at a dot")

    def close(self) -> None:
        """Release camera and sensor on every exit path. Safe to call repeatedly."""
        if self.closed:
            return
        self.closed = True

        self.devices.cleanup()
        # In-flight grabs see a closed camera and are aborted quietly
        self._executor.shutdown(wait=False, cancel_futures=True)

        with self._lock:
            self.filter.clear()
            self.highlighted = None

        if self.telemetry:
            self.telemetry.finalize_session(
                captured=self.machine.captured_count,
                completed=self.result_url is not None,
            )
        log.info("Session closed (%d/%d captured)", self.machine.captured_count, len(self.machine.positions))

    # ------------------------------------------------------------------
    # Orientation
    # ------------------------------------------------------------------

    def _on_orientation(self, heading: float, tilt: float) -> None:
        with self._lock:
            if self.closed:
                return
            if self.filter.ingest(heading, tilt) is not None:
                self._refresh_highlight()

    def _refresh_highlight(self) -> None:
        self.highlighted = find_highlighted(
            self.filter.smoothed, self.machine.positions, self.targeting_config
        )
        self.machine.on_highlight(self.highlighted)

    @property
    def orientation(self) -> Optional[SmoothedOrientation]:
        return self.filter.smoothed

    def recalibrate(self) -> None:
        """Make the next heading the new zero (e.g. after the compass drifted)."""
        with self._lock:
            self.filter.recalibrate()
            self._refresh_highlight()
        if self.telemetry:
            self.telemetry.log_event("recalibrated")

    def check_sensor(self) -> bool:
        """
        Report SensorUnavailableError once if no usable (calibrated) sample arrived in time.

        Not fatal: nothing can be highlighted, but the user can still close.
        Returns True while the sensor is (or may still be) alive.
        """
        if not self.started or self.filter.samples_received > 0:
            return True

        waited = self.clock() - self.started_at
        if waited < self.capture_config.sensor_timeout_s:
            return True

        if not self._sensor_reported:
            self._sensor_reported = True
            self._report_error(SensorUnavailableError("No orientation data. Move your device to find a dot."))
        return False

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def dots(self) -> List[DotView]:
        """Project all positions for the current render frame (empty until oriented)."""
        with self._lock:
            current = self.filter.smoothed
            if current is None:
                return []
            highlighted_id = self.highlighted.id if self.highlighted else None
            points = project_all(self.machine.positions, current, highlighted_id, self.projection_config)

            return [
                DotView(
                    position_id=position.id,
                    label=position.label,
                    zone=position.zone,
                    x=points[position.id].x,
                    y=points[position.id].y,
                    scale=points[position.id].scale,
                    visible=points[position.id].visible,
                    captured=position.captured,
                    highlighted=position.id == highlighted_id,
                )
                for position in self.machine.positions
            ]

    def guidance(self) -> str:
        """Status line shown above the shutter button."""
        position = self.highlighted
        if position is None:
            return "Move phone to find a dot"
        if position.captured:
            return f"✓ Position {position.label} - Tap to retake"
        return f"Position {position.label} • {position.hint}"

    @property
    def state(self) -> CaptureState:
        return self.machine.state

    @property
    def positions(self) -> List[CapturePosition]:
        return self.machine.positions

    @property
    def captured_count(self) -> int:
        return self.machine.captured_count

    @property
    def pending_retake_id(self) -> Optional[int]:
        return self.machine.pending_retake_id

    # ------------------------------------------------------------------
    # Capture
    # ------------------------------------------------------------------

    def capture(self) -> "Optional[Future[int]]":
        """
        Shutter pressed.

        Returns:
            Future resolving to the captured position id, or None when the
            armed position already has a photo and a retake must be confirmed.

        Raises:
            InvalidTransitionError: nothing armed, a capture is in progress,
                or the captured set is being finalized
        """
        self._require_started()
        with self._lock:
            self._require_not_finalizing()
            if self.machine.request_capture() == "confirm_retake":
                return None
            position_id = self.machine.capturing_id
        return self._submit_capture(position_id, retake=False)

    def confirm_retake(self) -> "Future[int]":
        self._require_started()
        with self._lock:
            self._require_not_finalizing()
            position_id = self.machine.confirm_retake()
        return self._submit_capture(position_id, retake=True)

    def cancel_retake(self) -> int:
        with self._lock:
            position_id = self.machine.cancel_retake()
            zone = self.machine.get(position_id).zone
        if self.telemetry:
            self.telemetry.log_capture(position_id, zone.value, "retake_cancelled")
        return position_id

    def _submit_capture(self, position_id: int, retake: bool) -> "Future[int]":
        pressed_at = time.perf_counter()
        return self._executor.submit(self._run_capture, position_id, retake, pressed_at)

    def _run_capture(self, position_id: int, retake: bool, pressed_at: float) -> int:
        try:
            frame = self.camera.grab_frame()
            image = encode_jpeg(frame, self.capture_config.jpeg_quality)
        except Exception as e:
            error = e if isinstance(e, PanoramaCaptureError) else CameraUnavailableError(str(e))
            with self._lock:
                self.machine.abort_capture()
                self._refresh_highlight()
                zone = self.machine.get(position_id).zone
            if self.telemetry:
                self.telemetry.log_capture(position_id, zone.value, "aborted")
            if not self.closed:
                self._report_error(error)
            if error is e:
                raise
            raise error from e

        with self._lock:
            position = self.machine.store_image(image)
        latency_ms = (time.perf_counter() - pressed_at) * 1000.0
        if self.telemetry:
            action = "retaken" if retake else "captured"
            self.telemetry.log_capture(position_id, position.zone.value, action, len(image), latency_ms)

        # Shutter feedback; orientation updates keep flowing meanwhile
        if self.capture_config.freeze_ms > 0:
            time.sleep(self.capture_config.freeze_ms / 1000.0)

        with self._lock:
            self.machine.finish_capture()
            self._refresh_highlight()
        return position_id

    # ------------------------------------------------------------------
    # Finalize
    # ------------------------------------------------------------------

    def finalize(self) -> "Future[str]":
        """
        Hand the 16 images to the stitcher.

        Returns:
            Future resolving to the composite image URL. On StitchFailedError
            the images stay in the session and finalize() may be called again.
        """
        self._require_started()
        with self._lock:
            if not self.machine.can_finalize:
                raise InvalidTransitionError(
                    f"Finalize needs all positions captured ({self.machine.captured_count}/{len(self.machine.positions)})"
                )
            if self._finalizing:
                raise InvalidTransitionError("Finalize already in progress")
            records = build_capture_records(self.machine.positions)
            self._finalizing = True

        log.info("Finalizing panorama from %d images...", len(records))
        return self._executor.submit(self._run_finalize, records)

    @property
    def is_finalizing(self) -> bool:
        return self._finalizing

    def open_viewer(self, after_image_url: Optional[str] = None) -> ViewController:
        """Viewer for the composite image; available once finalize succeeded (also after close)."""
        if self.result_url is None:
            raise InvalidTransitionError("No panorama to view yet")
        return ViewController(self.result_url, after_image_url)

    def _run_finalize(self, records) -> str:
        try:
            url = self.stitcher.stitch(records)
        except Exception as e:
            error = e if isinstance(e, StitchFailedError) else StitchFailedError(f"Failed to process: {e}")
            if self.telemetry:
                self.telemetry.log_stitch(False, message=str(error))
            self._report_error(error)
            if error is e:
                raise
            raise error from e
        finally:
            self._finalizing = False

        self.result_url = url
        if self.telemetry:
            self.telemetry.log_stitch(True)
        log.info("Panorama ready")
        if self.on_complete is not None:
            self.on_complete(url)
        return url

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _require_started(self) -> None:
        if not self.started or self.closed:
            raise InvalidTransitionError("Session is not running")

    def _require_not_finalizing(self) -> None:
        # The stitcher already holds the records; a retake would be left out
        if self._finalizing:
            raise InvalidTransitionError("Finalize in progress")

    def _report_error(self, error: PanoramaCaptureError) -> None:
        self.errors.append(error)
        log.error("%s: %s", type(error).__name__, error)
        if self.telemetry:
            self.telemetry.log_error(type(error).__name__, str(error))
        if self.on_error is not None:
            self.on_error(error)
