"""
Camera and motion-sensor acquisition for capture sessions.

This module handles the platform side of a capture session:
- Motion-sensor permission gate
- Camera stream startup
- Orientation subscription
- Graceful release of everything that was acquired

Acquisition is all-or-nothing: if any step fails, whatever was already acquired
is released before the error propagates.

Usage:
    device_mgr = DeviceManager(orientation_source, camera)
    device_mgr.acquire(on_orientation)
    ...
    device_mgr.cleanup()
"""

import logging

from panocapture.core.errors import CameraUnavailableError, PermissionDeniedError
from panocapture.core.hardware.camera import CameraSource
from panocapture.core.hardware.orientation_source import OrientationCallback, OrientationSource

log = logging.getLogger(__name__)


class DeviceManager:
    """Owns the camera stream and the orientation subscription of one session."""

    def __init__(self, orientation_source: OrientationSource, camera: CameraSource) -> None:
        self.orientation_source = orientation_source
        self.camera = camera

        self.permission_granted = False
        self.camera_started = False
        self.subscribed = False

    def request_permission(self) -> None:
        """Ask for motion-sensor access before subscribing. Raises PermissionDeniedError."""
        log.info("Requesting motion sensor permission...")
        if not self.orientation_source.request_permission():
            raise PermissionDeniedError("Motion sensor access required.")
        self.permission_granted = True
        log.info("✓ Motion sensor permission granted")

    def start_camera(self) -> None:
        """Start the camera stream. Raises CameraUnavailableError."""
        try:
            self.camera.open()
        except CameraUnavailableError:
            raise
        except Exception as e:
            raise CameraUnavailableError(f"Unable to access camera: {e}") from e
        self.camera_started = True
        log.info("✓ Camera stream started")

    def subscribe(self, callback: OrientationCallback) -> None:
        """Start orientation delivery."""
        self.orientation_source.subscribe(callback)
        self.subscribed = True
        log.info("✓ Orientation subscription active")

    def acquire(self, callback: OrientationCallback) -> None:
        """Permission → camera → subscription; releases partial acquisitions on failure."""
        try:
            self.request_permission()
            self.start_camera()
            self.subscribe(callback)
        except Exception:
            self.cleanup()
            raise

    def cleanup(self) -> None:
        """Clean shutdown of the subscription and the camera stream."""
        try:
            if self.subscribed:
                self.orientation_source.unsubscribe()
                log.info("✓ Unsubscribed from orientation events")
        except Exception as e:
            log.warning("Error during unsubscribe: %s", e)
        finally:
            self.subscribed = False

        try:
            if self.camera_started or self.camera.is_open:
                self.camera.close()
                log.info("✓ Camera stopped")
        except Exception as e:
            log.warning("Error stopping camera: %s", e)
        finally:
            self.camera_started = False
