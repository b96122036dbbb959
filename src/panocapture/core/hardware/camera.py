"""
Camera frame sources for panorama capture.

This module handles the camera side of a capture session:
- CameraSource interface (open / grab_frame / close)
- OpenCVCamera: rear camera through cv2.VideoCapture at 1920x1080
- JPEG encoding of captured frames

Usage:
    camera = OpenCVCamera()
    camera.open()
    frame = camera.grab_frame()
    jpeg = encode_jpeg(frame, quality=90)
    camera.close()
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import cv2
import numpy as np

from panocapture.core.errors import CameraUnavailableError, ImageEncodingError
from panocapture.utils.config_sections import CameraConfig, load_camera_config

log = logging.getLogger(__name__)


def encode_jpeg(image: np.ndarray, quality: int = 90) -> bytes:
    """Encode a BGR frame as JPEG bytes."""
    if image is None or image.size == 0:
        raise ImageEncodingError("Cannot encode an empty frame")
    ok, buf = cv2.imencode(".jpg", image, [cv2.IMWRITE_JPEG_QUALITY, int(quality)])
    if not ok or buf is None:
        raise ImageEncodingError("JPEG encode failed")
    return buf.tobytes()


class CameraSource(ABC):
    """Live camera frame source."""

    @abstractmethod
    def open(self) -> None:
        """Start the stream. Raises CameraUnavailableError on failure."""

    @abstractmethod
    def grab_frame(self) -> np.ndarray:
        """Snapshot of the current frame (BGR)."""

    @abstractmethod
    def close(self) -> None:
        """Release the stream. Safe to call more than once."""

    @property
    @abstractmethod
    def is_open(self) -> bool:
        ...


class OpenCVCamera(CameraSource):
    """Camera stream backed by cv2.VideoCapture."""

    def __init__(self, config: Optional[CameraConfig] = None) -> None:
        self.config = config or load_camera_config()
        self.capture: Optional[cv2.VideoCapture] = None
        self.frames_grabbed = 0

    @property
    def is_open(self) -> bool:
        return self.capture is not None and self.capture.isOpened()

    def open(self) -> None:
        log.info("Opening camera %d...", self.config.index)
        capture = cv2.VideoCapture(self.config.index)
        if not capture.isOpened():
            capture.release()
            raise CameraUnavailableError(f"Unable to access camera {self.config.index}")

        # Ideal resolution; the driver may pick the closest supported mode
        capture.set(cv2.CAP_PROP_FRAME_WIDTH, self.config.ideal_width)
        capture.set(cv2.CAP_PROP_FRAME_HEIGHT, self.config.ideal_height)
        self.capture = capture

        width = int(capture.get(cv2.CAP_PROP_FRAME_WIDTH))
        height = int(capture.get(cv2.CAP_PROP_FRAME_HEIGHT))
        log.info("Camera stream active (%dx%d)", width, height)

    def grab_frame(self) -> np.ndarray:
        if not self.is_open:
            raise CameraUnavailableError("Camera is not open")

        ok, frame = self.capture.read()
        if not ok or frame is None:
            raise CameraUnavailableError("Camera returned no frame")

        self.frames_grabbed += 1
        return frame

    def close(self) -> None:
        if self.capture is not None:
            self.capture.release()
            self.capture = None
            log.info("Camera released")
