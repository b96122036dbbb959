"""Tests for heading calibration latching and reset."""

from __future__ import annotations

import pytest

from panocapture.core.orientation.calibration import CalibrationState


def test_zero_heading_does_not_latch():
    calibration = CalibrationState()
    assert calibration.calibrate(0.0) is False
    assert calibration.initial_azimuth is None
    assert calibration.relative_azimuth(30.0) == pytest.approx(30.0)


def test_first_nonzero_heading_becomes_zero():
    calibration = CalibrationState()
    assert calibration.calibrate(123.0) is True
    assert calibration.relative_azimuth(123.0) == 0.0
    assert calibration.relative_azimuth(100.0) == pytest.approx(337.0)

    # Later headings never move the reference
    calibration.calibrate(200.0)
    assert calibration.initial_azimuth == 123.0


def test_reset_relatches_and_notifies():
    calibration = CalibrationState()
    calls = []
    calibration.add_reset_listener(lambda: calls.append("reset"))

    calibration.calibrate(40.0)
    calibration.reset()
    assert calls == ["reset"]
    assert not calibration.is_calibrated

    calibration.calibrate(250.0)
    assert calibration.relative_azimuth(250.0) == 0.0
