"""
Capture Module

Components:
- positions: the 16 capture targets
- targeting / projection: highlight selection and dot placement
- state_machine: capture, retake and completion gating
- session: PanoramaSession, owner of one capture run
"""

from .positions import CapturePosition, CaptureZone, initialize_positions
from .state_machine import CaptureState, CaptureStateMachine
