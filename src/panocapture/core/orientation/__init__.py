"""
Orientation Module

Components:
- OrientationSampleFilter: buffered, throttled smoothing of sensor events
- CalibrationState: heading reference relative to the starting direction
"""

from .calibration import CalibrationState
from .orientation_state import OrientationSample, SmoothedOrientation
from .sample_filter import OrientationSampleFilter
