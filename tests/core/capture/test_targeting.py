"""Tests for highlight selection."""

from __future__ import annotations

import pytest

from panocapture.core.capture.positions import CapturePosition, CaptureZone, initialize_positions
from panocapture.core.capture.targeting import angular_distance, angular_offset, find_highlighted
from panocapture.core.orientation.orientation_state import SmoothedOrientation

EPS = 1e-6


def _target(azimuth: float = 0.0, elevation: float = 0.0) -> CapturePosition:
    return CapturePosition(id=1, zone=CaptureZone.MIDDLE, target_azimuth=azimuth, target_elevation=elevation)


def test_no_orientation_means_no_highlight():
    assert find_highlighted(None, initialize_positions()) is None


def test_threshold_is_strict_in_azimuth():
    target = [_target()]
    assert find_highlighted(SmoothedOrientation(azimuth=25.0 - EPS), target) is target[0]
    assert find_highlighted(SmoothedOrientation(azimuth=25.0), target) is None
    assert find_highlighted(SmoothedOrientation(azimuth=25.0 + EPS), target) is None


def test_threshold_is_strict_in_elevation():
    target = [_target()]
    assert find_highlighted(SmoothedOrientation(elevation=-(25.0 - EPS)), target) is target[0]
    assert find_highlighted(SmoothedOrientation(elevation=-(25.0 + EPS)), target) is None


def test_azimuth_offset_wraps():
    offset = angular_offset(_target(azimuth=0.0), SmoothedOrientation(azimuth=350.0))
    assert offset == pytest.approx((10.0, 0.0))
    assert angular_distance(_target(azimuth=350.0), SmoothedOrientation(azimuth=5.0)) == pytest.approx(15.0)


def test_tie_goes_to_lowest_id():
    positions = initialize_positions()
    highlighted = find_highlighted(SmoothedOrientation(azimuth=22.5), positions)
    assert highlighted.id == 1


def test_lowest_id_wins_over_closer_position():
    positions = initialize_positions()
    # Position 1 at 22°, position 9 (top, az 0) at 18°: both eligible
    highlighted = find_highlighted(SmoothedOrientation(azimuth=0.0, elevation=22.0), positions)
    assert highlighted.id == 1


def test_highlight_follows_orientation():
    positions = initialize_positions()
    assert find_highlighted(SmoothedOrientation(azimuth=88.0), positions).id == 3
    assert find_highlighted(SmoothedOrientation(azimuth=268.0, elevation=38.0), positions).id == 12
    assert find_highlighted(SmoothedOrientation(azimuth=180.0, elevation=-45.0), positions).id == 15
    assert find_highlighted(SmoothedOrientation(azimuth=67.5, elevation=20.0), positions) is None
