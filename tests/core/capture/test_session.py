"""Tests for PanoramaSession against mock devices."""

from __future__ import annotations

import threading
from typing import List

import pytest

from panocapture.core.capture.session import PanoramaSession
from panocapture.core.capture.state_machine import CaptureState
from panocapture.core.errors import (
    CameraUnavailableError,
    InvalidTransitionError,
    PermissionDeniedError,
    SensorUnavailableError,
    StitchFailedError,
)
from panocapture.core.hardware.mock_devices import MockCamera, MockOrientationSource, SimulatedClock
from panocapture.core.hardware.orientation_source import OrientationEvent
from panocapture.core.stitching.stitcher import PanoramaStitcher
from panocapture.utils.config_sections import CaptureConfig


class FlakyStitcher(PanoramaStitcher):
    """Fails the first `failures` calls, then returns a fixed URL."""

    def __init__(self, failures: int = 1, error: Exception = None) -> None:
        self.failures = failures
        self.error = error or StitchFailedError("Failed to process.")
        self.received: List[list] = []

    def stitch(self, records):
        self.received.append(records)
        if len(self.received) <= self.failures:
            raise self.error
        return "https://panoramas.example/composite.jpg"


class Harness:
    def __init__(self, grant_permission: bool = True, camera: MockCamera = None, stitcher=None) -> None:
        self.clock = SimulatedClock()
        self.source = MockOrientationSource(
            grant_permission=grant_permission,
            on_sample=lambda: self.clock.advance(0.06),
        )
        self.camera = camera or MockCamera(resolution=(64, 48))
        self.completed: List[str] = []
        self.reported: List[Exception] = []
        self.session = PanoramaSession(
            self.source,
            self.camera,
            stitcher,
            on_complete=self.completed.append,
            on_error=self.reported.append,
            capture_config=CaptureConfig(freeze_ms=0.0),
            clock=self.clock,
        )

    def capture_all(self) -> None:
        for position in list(self.session.positions):
            self.source.point_at(position.target_azimuth, position.target_elevation)
            assert self.session.highlighted.id == position.id
            assert self.session.capture().result(timeout=5) == position.id


@pytest.fixture()
def harness():
    h = Harness()
    yield h
    h.session.close()


def test_permission_denied_acquires_nothing():
    h = Harness(grant_permission=False)
    with pytest.raises(PermissionDeniedError, match="Motion sensor access required."):
        h.session.start()

    assert h.camera.open_calls == 0
    assert not h.source.is_subscribed
    assert not h.session.started
    assert isinstance(h.reported[0], PermissionDeniedError)


def test_camera_failure_releases_everything():
    h = Harness(camera=MockCamera(fail_on_open=True))
    with pytest.raises(CameraUnavailableError):
        h.session.start()

    assert not h.source.is_subscribed
    assert not h.camera.is_open
    assert h.session.errors and isinstance(h.session.errors[0], CameraUnavailableError)


def test_context_manager_releases_on_error():
    h = Harness()
    with pytest.raises(RuntimeError):
        with h.session:
            assert h.source.is_subscribed
            assert h.camera.is_open
            raise RuntimeError("boom")

    assert not h.source.is_subscribed
    assert not h.camera.is_open
    assert h.camera.close_calls == 1
    assert h.session.orientation is None

    # Idempotent close, and no restart
    h.session.close()
    assert h.camera.close_calls == 1
    with pytest.raises(InvalidTransitionError):
        h.session.start()


def test_nothing_highlighted_until_oriented(harness):
    harness.session.start()
    assert harness.session.orientation is None
    assert harness.session.dots() == []
    assert harness.session.guidance() == "Move phone to find a dot"
    with pytest.raises(InvalidTransitionError):
        harness.session.capture()


def test_capture_requires_running_session(harness):
    with pytest.raises(InvalidTransitionError):
        harness.session.capture()


def test_sweep_highlights_middle_positions_in_order(harness):
    harness.session.start()
    seen = []
    for azimuth in range(0, 360, 10):
        harness.source.point_at(azimuth, 0.0)
        highlighted = harness.session.highlighted
        seen.append(highlighted.id if highlighted else None)

    runs = [value for index, value in enumerate(seen) if index == 0 or value != seen[index - 1]]
    # 360° wraps onto position 1 again
    if len(runs) > 1 and runs[-1] == runs[0]:
        runs.pop()
    assert runs == [1, 2, 3, 4, 5, 6, 7, 8]


def test_dots_follow_orientation(harness):
    harness.session.start()
    harness.source.point_at(0.0, 0.0)

    dots = {dot.position_id: dot for dot in harness.session.dots()}
    assert len(dots) == 16
    assert dots[1].highlighted and dots[1].visible
    assert dots[1].x == pytest.approx(50.0) and dots[1].y == pytest.approx(50.0)
    assert dots[1].scale == pytest.approx(1.2)
    assert not dots[5].visible
    assert sum(dot.highlighted for dot in dots.values()) == 1
    assert harness.session.guidance() == "Position 1 • Eye level"


def test_capture_then_retake_flow(harness):
    harness.session.start()
    harness.source.point_at(45.0, 0.0)
    assert harness.session.state is CaptureState.ARMED

    assert harness.session.capture().result(timeout=5) == 2
    position = harness.session.machine.get(2)
    assert position.captured
    assert position.image_data.startswith(b"\xff\xd8")
    original = position.image_data

    # Still pointing at it: re-armed, retake needs confirmation
    assert harness.session.state is CaptureState.ARMED
    assert harness.session.guidance() == "✓ Position 2 - Tap to retake"
    assert harness.session.capture() is None
    assert harness.session.pending_retake_id == 2

    assert harness.session.cancel_retake() == 2
    assert position.image_data == original

    assert harness.session.capture() is None
    assert harness.session.confirm_retake().result(timeout=5) == 2
    assert harness.camera.frame_count == 2
    assert harness.session.captured_count == 1


def test_finalize_before_all_captured_raises(harness):
    harness.session.start()
    harness.source.point_at(0.0, 0.0)
    harness.session.capture().result(timeout=5)

    with pytest.raises(InvalidTransitionError):
        harness.session.finalize()


def test_full_run_produces_composite():
    h = Harness()
    with h.session:
        h.capture_all()
        assert h.session.state is CaptureState.ALL_CAPTURED
        url = h.session.finalize().result(timeout=5)

    assert url.startswith("data:image/jpeg;base64,")
    assert h.session.result_url == url
    assert h.completed == [url]
    assert h.session.errors == []


def test_stitch_failure_keeps_images_and_allows_retry():
    stitcher = FlakyStitcher(failures=1)
    h = Harness(stitcher=stitcher)
    with h.session:
        h.capture_all()

        with pytest.raises(StitchFailedError):
            h.session.finalize().result(timeout=5)
        assert not h.session.is_finalizing
        assert h.session.captured_count == 16
        assert isinstance(h.reported[-1], StitchFailedError)

        url = h.session.finalize().result(timeout=5)

    assert url == "https://panoramas.example/composite.jpg"
    assert h.completed == [url]
    records = stitcher.received[-1]
    assert [r["position_id"] for r in records] == list(range(1, 17))
    assert all(r["image"] for r in records)


def test_unexpected_stitch_error_is_wrapped():
    h = Harness(stitcher=FlakyStitcher(failures=1, error=RuntimeError("server down")))
    with h.session:
        h.capture_all()
        with pytest.raises(StitchFailedError, match="server down"):
            h.session.finalize().result(timeout=5)
    assert h.completed == []


def test_grab_failure_aborts_capture(harness):
    harness.session.start()
    harness.source.point_at(90.0, 0.0)
    harness.camera.fail_on_grab = True

    with pytest.raises(CameraUnavailableError):
        harness.session.capture().result(timeout=5)

    assert not harness.session.machine.get(3).captured
    assert harness.session.state is CaptureState.ARMED
    assert isinstance(harness.reported[-1], CameraUnavailableError)

    harness.camera.fail_on_grab = False
    assert harness.session.capture().result(timeout=5) == 3


def test_sensor_timeout_reported_once(harness):
    harness.session.start()
    assert harness.session.check_sensor()

    harness.clock.advance(3.0)
    assert not harness.session.check_sensor()
    assert not harness.session.check_sensor()

    sensor_errors = [e for e in harness.reported if isinstance(e, SensorUnavailableError)]
    assert len(sensor_errors) == 1


def test_recalibrate_drops_orientation(harness):
    harness.session.start()
    harness.source.point_at(90.0, 0.0)
    assert harness.session.highlighted.id == 3

    harness.session.recalibrate()
    assert harness.session.orientation is None
    assert harness.session.highlighted is None
    assert harness.session.state is CaptureState.IDLE

    # The current heading is the new zero
    harness.source.point_at(90.0, 0.0)
    assert harness.session.highlighted.id == 1


def test_events_without_heading_never_arm(harness):
    harness.session.start()
    for _ in range(20):
        harness.clock.advance(0.06)
        harness.source.dispatch(OrientationEvent())

    assert harness.session.orientation is None
    assert harness.session.highlighted is None
    assert harness.session.state is CaptureState.IDLE
    with pytest.raises(InvalidTransitionError):
        harness.session.capture()

    harness.clock.advance(3.0)
    assert not harness.session.check_sensor()
    assert any(isinstance(e, SensorUnavailableError) for e in harness.reported)


class GatedStitcher(PanoramaStitcher):
    """Blocks inside stitch() until released."""

    def __init__(self) -> None:
        self.release = threading.Event()

    def stitch(self, records):
        self.release.wait(timeout=5)
        return "https://panoramas.example/gated.jpg"


def test_no_retake_while_finalizing():
    stitcher = GatedStitcher()
    h = Harness(stitcher=stitcher)
    with h.session:
        h.capture_all()
        future = h.session.finalize()
        assert h.session.is_finalizing

        # Still pointing at position 16, which is armed for a retake
        with pytest.raises(InvalidTransitionError, match="Finalize in progress"):
            h.session.capture()
        assert h.session.pending_retake_id is None

        stitcher.release.set()
        assert future.result(timeout=5) == "https://panoramas.example/gated.jpg"

        assert h.session.capture() is None
        assert h.session.pending_retake_id == 16


def test_viewer_opens_on_composite():
    h = Harness()
    with h.session:
        with pytest.raises(InvalidTransitionError):
            h.session.open_viewer()
        h.capture_all()
        url = h.session.finalize().result(timeout=5)

    viewer = h.session.open_viewer(after_image_url="https://panoramas.example/after.jpg")
    assert viewer.current_image_url == url
    assert viewer.view.fov == 75.0
    assert viewer.toggle_after() is True
    assert viewer.current_image_url == "https://panoramas.example/after.jpg"
