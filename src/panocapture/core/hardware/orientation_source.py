"""
Device orientation sources.

Platforms expose orientation events with different shapes: iOS Safari adds a
dedicated compass heading next to the generic alpha/beta/gamma angles, other
platforms only provide alpha. Sources normalize every event to a single
(heading, tilt) pair before it reaches the orientation filter.

Sources:
- OrientationSource: interface (permission gate + subscription)
- CallbackOrientationSource: adapter for hosts that push platform events

Usage:
    source = CallbackOrientationSource(requires_permission=True)
    if source.request_permission():
        source.subscribe(lambda heading, tilt: print(heading, tilt))
    source.dispatch(OrientationEvent(alpha=120.0, beta=90.0))
"""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from panocapture.utils.config import Config

log = logging.getLogger(__name__)

OrientationCallback = Callable[[float, float], None]


@dataclass(frozen=True)
class OrientationEvent:
    """Raw platform orientation event (any field may be missing)."""

    alpha: Optional[float] = None            # Generic rotation around z (degrees)
    beta: Optional[float] = None             # Front-back tilt (degrees, 90 = upright)
    gamma: Optional[float] = None            # Left-right tilt (degrees)
    compass_heading: Optional[float] = None  # Dedicated compass field (iOS)


def event_to_heading_tilt(event: OrientationEvent) -> Tuple[float, float]:
    """Prefer the dedicated compass heading; missing heading reads 0, missing tilt upright."""
    if event.compass_heading is not None:
        heading = event.compass_heading
    elif event.alpha is not None:
        heading = event.alpha
    else:
        heading = 0.0

    tilt = event.beta if event.beta is not None else Config.DEFAULT_TILT_DEGREES
    return float(heading), float(tilt)


class OrientationSource(ABC):
    """Normalized (heading, tilt) stream with a permission gate."""

    @abstractmethod
    def request_permission(self) -> bool:
        """Ask for motion-sensor access. Returns True when granted."""

    @abstractmethod
    def subscribe(self, callback: OrientationCallback) -> None:
        """Start delivering (heading, tilt) pairs to callback."""

    @abstractmethod
    def unsubscribe(self) -> None:
        """Stop delivering events. Safe to call when not subscribed."""


class CallbackOrientationSource(OrientationSource):
    """
    Orientation source fed by the host UI.

    The host forwards its platform events through dispatch(); events arriving
    before subscription (or after unsubscribe) are dropped.
    """

    def __init__(
        self,
        requires_permission: bool = False,
        permission_handler: Optional[Callable[[], bool]] = None,
    ) -> None:
        self.requires_permission = requires_permission
        self.permission_handler = permission_handler
        self.permission_granted = not requires_permission

        self._lock = threading.Lock()
        self._callback: Optional[OrientationCallback] = None
        self.events_dispatched = 0

    def request_permission(self) -> bool:
        if not self.requires_permission:
            self.permission_granted = True
            return True

        if self.permission_handler is None:
            log.warning("Orientation permission required but no handler configured")
            self.permission_granted = False
            return False

        self.permission_granted = bool(self.permission_handler())
        if not self.permission_granted:
            log.warning("Motion sensor permission denied")
        return self.permission_granted

    def subscribe(self, callback: OrientationCallback) -> None:
        with self._lock:
            self._callback = callback
        log.info("Orientation listener subscribed")

    def unsubscribe(self) -> None:
        with self._lock:
            was_subscribed = self._callback is not None
            self._callback = None
        if was_subscribed:
            log.info("Orientation listener removed")

    @property
    def is_subscribed(self) -> bool:
        return self._callback is not None

    def dispatch(self, event: OrientationEvent) -> bool:
        """Forward one platform event. Returns False if nobody is listening."""
        with self._lock:
            callback = self._callback
        if callback is None:
            return False

        heading, tilt = event_to_heading_tilt(event)
        self.events_dispatched += 1
        callback(heading, tilt)
        return True
