"""Tests for typed config sections loaded from Config."""

from __future__ import annotations

import pytest

from panocapture.utils import config as config_module
from panocapture.utils.config_sections import (
    load_capture_config,
    load_orientation_filter_config,
    load_projection_config,
    load_targeting_config,
)


def test_defaults_match_capture_constants():
    orientation = load_orientation_filter_config()
    assert orientation.buffer_size == 15
    assert orientation.update_interval_ms == 50

    assert load_targeting_config().highlight_threshold == 25.0

    projection = load_projection_config()
    assert (projection.h_fov, projection.v_fov) == (70, 100)
    assert (projection.visible_azimuth, projection.visible_elevation) == (55, 60)

    capture = load_capture_config()
    assert capture.freeze_ms == 200
    assert capture.jpeg_quality == 90


def test_sections_follow_config_overrides(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(config_module.Config, "ORIENTATION_BUFFER_SIZE", 5, raising=False)
    monkeypatch.setattr(config_module.Config, "HIGHLIGHT_THRESHOLD_DEGREES", 10.0, raising=False)

    assert load_orientation_filter_config().buffer_size == 5
    assert load_targeting_config().highlight_threshold == 10.0


def test_missing_constant_falls_back(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delattr(config_module.Config, "CAPTURE_FREEZE_MS")
    assert load_capture_config().freeze_ms == 200.0
