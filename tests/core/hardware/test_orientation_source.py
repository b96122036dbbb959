"""Tests for orientation event normalization and the callback source."""

from __future__ import annotations

from panocapture.core.hardware.orientation_source import (
    CallbackOrientationSource,
    OrientationEvent,
    event_to_heading_tilt,
)


def test_compass_heading_preferred_over_alpha():
    event = OrientationEvent(alpha=10.0, beta=95.0, compass_heading=200.0)
    assert event_to_heading_tilt(event) == (200.0, 95.0)


def test_alpha_fallback_and_defaults():
    assert event_to_heading_tilt(OrientationEvent(alpha=33.0, beta=80.0)) == (33.0, 80.0)
    # Missing heading reads 0, missing tilt reads upright
    assert event_to_heading_tilt(OrientationEvent()) == (0.0, 90.0)


def test_dispatch_requires_subscription():
    source = CallbackOrientationSource()
    received = []

    assert source.dispatch(OrientationEvent(alpha=1.0)) is False

    source.subscribe(lambda heading, tilt: received.append((heading, tilt)))
    assert source.is_subscribed
    assert source.dispatch(OrientationEvent(alpha=12.0, beta=91.0)) is True

    source.unsubscribe()
    source.unsubscribe()
    assert source.dispatch(OrientationEvent(alpha=13.0)) is False

    assert received == [(12.0, 91.0)]
    assert source.events_dispatched == 1


def test_permission_gate():
    assert CallbackOrientationSource().request_permission() is True
    assert CallbackOrientationSource(requires_permission=True).request_permission() is False

    denied = CallbackOrientationSource(requires_permission=True, permission_handler=lambda: False)
    assert denied.request_permission() is False
    assert denied.permission_granted is False

    granted = CallbackOrientationSource(requires_permission=True, permission_handler=lambda: True)
    assert granted.request_permission() is True
