"""Error taxonomy for panorama capture sessions."""


class PanoramaCaptureError(Exception):
    """Base exception for capture session errors"""
    pass

class PermissionDeniedError(PanoramaCaptureError):
    """Motion-sensor or camera permission refused; the session cannot start"""
    pass

class SensorUnavailableError(PanoramaCaptureError):
    """Orientation events never arrived; reported, never raised by the session"""
    pass

class CameraUnavailableError(PanoramaCaptureError):
    """Camera stream failed to start or deliver a frame"""
    pass

class StitchFailedError(PanoramaCaptureError):
    """Stitching collaborator failed; finalize may be retried"""
    pass

class InvalidTransitionError(PanoramaCaptureError):
    """Capture action not allowed in the current state"""
    pass

class ImageEncodingError(PanoramaCaptureError):
    """Captured frame could not be encoded"""
    pass
