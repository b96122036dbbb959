"""
Capture/retake state machine.

States:
- IDLE: no position in range, capture disabled
- ARMED: a position is highlighted, capture enabled
- CAPTURING: shutter fired, frame being stored (plus the short visual freeze)
- RETAKE_CONFIRMATION: the armed position already has a photo, waiting for the
  user to confirm the overwrite or cancel
- ALL_CAPTURED: all 16 positions captured, finalize enabled

Transitions:
    IDLE --highlight--> ARMED --request(uncaptured)--> CAPTURING --finish--> IDLE
    ARMED --request(captured)--> RETAKE_CONFIRMATION --confirm--> CAPTURING
    RETAKE_CONFIRMATION --cancel--> ARMED
    CAPTURING --finish(last photo)--> ALL_CAPTURED

ALL_CAPTURED can only be left for a retake, which comes back to it. Anything
else raises InvalidTransitionError.

Usage:
    machine = CaptureStateMachine()
    machine.on_highlight(position)
    if machine.request_capture() == "capturing":
        machine.complete_capture(jpeg_bytes)
"""

import logging
from enum import Enum
from typing import Dict, List, Literal, Optional

from panocapture.core.capture.positions import CapturePosition, initialize_positions
from panocapture.core.errors import InvalidTransitionError

log = logging.getLogger(__name__)

CaptureRequest = Literal["capturing", "confirm_retake"]


class CaptureState(Enum):
    """Explicit capture flow state."""

    IDLE = "idle"
    ARMED = "armed"
    CAPTURING = "capturing"
    RETAKE_CONFIRMATION = "retake_confirmation"
    ALL_CAPTURED = "all_captured"


class CaptureStateMachine:
    """Per-position capture, confirmation-gated retakes and completion gating."""

    def __init__(self, positions: Optional[List[CapturePosition]] = None) -> None:
        self.positions = positions if positions is not None else initialize_positions()
        self._by_id: Dict[int, CapturePosition] = {p.id: p for p in self.positions}

        self.state = CaptureState.IDLE
        self.armed_id: Optional[int] = None
        self.pending_retake_id: Optional[int] = None
        self.capturing_id: Optional[int] = None

        # Statistics
        self.captures_completed = 0
        self.retakes_confirmed = 0
        self.retakes_aborted = 0
        self.captures_aborted = 0

        if self.is_complete:
            self.state = CaptureState.ALL_CAPTURED

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, position_id: int) -> CapturePosition:
        try:
            return self._by_id[position_id]
        except KeyError:
            raise InvalidTransitionError(f"Unknown capture position {position_id}") from None

    @property
    def captured_count(self) -> int:
        return sum(1 for p in self.positions if p.captured)

    @property
    def is_complete(self) -> bool:
        return all(p.captured for p in self.positions)

    @property
    def can_capture(self) -> bool:
        return self.armed_id is not None and self.state in (CaptureState.ARMED, CaptureState.ALL_CAPTURED)

    @property
    def can_finalize(self) -> bool:
        return self.state is CaptureState.ALL_CAPTURED

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def on_highlight(self, position: Optional[CapturePosition]) -> CaptureState:
        """Track the highlighted position; only IDLE/ARMED change state."""
        self.armed_id = position.id if position is not None else None

        if self.state in (CaptureState.IDLE, CaptureState.ARMED):
            self.state = CaptureState.ARMED if self.armed_id is not None else CaptureState.IDLE
        return self.state

    def request_capture(self) -> CaptureRequest:
        """
        Shutter pressed.

        Returns:
            "capturing" when the armed position is new, "confirm_retake" when it
            already has a photo (nothing is overwritten until confirmed).
        """
        if not self.can_capture:
            raise InvalidTransitionError(f"Cannot capture in state {self.state.value}")

        position = self.get(self.armed_id)
        if position.captured:
            self.pending_retake_id = position.id
            self.state = CaptureState.RETAKE_CONFIRMATION
            log.info("Position %d already captured, waiting for retake confirmation", position.id)
            return "confirm_retake"

        self._begin_capture(position.id)
        return "capturing"

    def confirm_retake(self) -> int:
        """User accepted the overwrite. Returns the position id now being captured."""
        if self.state is not CaptureState.RETAKE_CONFIRMATION:
            raise InvalidTransitionError(f"No retake pending in state {self.state.value}")

        position_id = self.pending_retake_id
        self.pending_retake_id = None
        self.retakes_confirmed += 1
        self._begin_capture(position_id)
        return position_id

    def cancel_retake(self) -> int:
        """User declined the overwrite (normal outcome). Returns the untouched position id."""
        if self.state is not CaptureState.RETAKE_CONFIRMATION:
            raise InvalidTransitionError(f"No retake pending in state {self.state.value}")

        position_id = self.pending_retake_id
        self.pending_retake_id = None
        self.retakes_aborted += 1
        self.state = self._resting_state()
        log.info("Retake of position %d cancelled", position_id)
        return position_id

    def store_image(self, image_data: bytes) -> CapturePosition:
        """Attach the captured frame; the state stays CAPTURING until finish_capture()."""
        if self.state is not CaptureState.CAPTURING:
            raise InvalidTransitionError(f"No capture in progress (state {self.state.value})")

        position = self.get(self.capturing_id)
        position.image_data = image_data
        position.captured = True
        return position

    def finish_capture(self) -> CaptureState:
        """End of the shutter freeze: back to IDLE, or ALL_CAPTURED on the last photo."""
        if self.state is not CaptureState.CAPTURING:
            raise InvalidTransitionError(f"No capture in progress (state {self.state.value})")

        position = self.get(self.capturing_id)
        if not position.captured:
            raise InvalidTransitionError(f"Position {position.id} has no image to finish")

        self.capturing_id = None
        self.armed_id = None
        self.captures_completed += 1
        self.state = CaptureState.ALL_CAPTURED if self.is_complete else CaptureState.IDLE

        log.info("Position %d captured (%d/%d)", position.id, self.captured_count, len(self.positions))
        if self.state is CaptureState.ALL_CAPTURED:
            log.info("All positions captured, finalize enabled")
        return self.state

    def complete_capture(self, image_data: bytes) -> CaptureState:
        self.store_image(image_data)
        return self.finish_capture()

    def abort_capture(self) -> CaptureState:
        """Camera failed mid-capture; the position keeps its previous photo (if any)."""
        if self.state is not CaptureState.CAPTURING:
            raise InvalidTransitionError(f"No capture in progress (state {self.state.value})")

        log.warning("Capture of position %d aborted", self.capturing_id)
        self.capturing_id = None
        self.armed_id = None
        self.captures_aborted += 1
        self.state = CaptureState.ALL_CAPTURED if self.is_complete else CaptureState.IDLE
        return self.state

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _begin_capture(self, position_id: int) -> None:
        self.capturing_id = position_id
        self.state = CaptureState.CAPTURING
        log.debug("Capturing position %d", position_id)

    def _resting_state(self) -> CaptureState:
        if self.is_complete:
            return CaptureState.ALL_CAPTURED
        if self.armed_id is not None:
            return CaptureState.ARMED
        return CaptureState.IDLE
