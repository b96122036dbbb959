"""Tests for CaptureTelemetryLogger JSONL output and summary."""

from __future__ import annotations

import json

from panocapture.core.telemetry.capture_logger import CaptureTelemetryLogger


def _read_jsonl(path):
    return [json.loads(line) for line in path.read_text().splitlines()]


def test_capture_lines_and_summary(tmp_path):
    telemetry = CaptureTelemetryLogger(tmp_path)
    session_dir = telemetry.get_session_dir()
    assert session_dir.parent == tmp_path

    telemetry.log_capture(1, "middle", "captured", image_bytes=1000, latency_ms=20.0)
    telemetry.log_capture(9, "top", "captured", image_bytes=800, latency_ms=40.0)
    telemetry.log_capture(1, "middle", "retake_cancelled")
    telemetry.log_capture(1, "middle", "retaken", image_bytes=1200, latency_ms=30.0)
    telemetry.log_error("StitchFailedError", "Failed to process.")
    telemetry.log_stitch(False)
    telemetry.log_stitch(True)

    summary = telemetry.finalize_session(completed=True)

    captures = _read_jsonl(session_dir / "captures.jsonl")
    assert [c["action"] for c in captures] == ["captured", "captured", "retake_cancelled", "retaken"]
    assert captures[0]["image_bytes"] == 1000

    assert summary["positions_captured"] == 2
    assert summary["captures_by_action"]["captured"] == 2
    assert summary["captures_by_zone"] == {"middle": 2, "top": 1}
    assert summary["avg_capture_latency_ms"] == 30.0
    assert summary["errors"] == 1
    assert summary["stitch_attempts"] == 2
    assert summary["completed"] is True

    on_disk = json.loads((session_dir / "summary.json").read_text())
    assert on_disk["positions_captured"] == 2


def test_system_events(tmp_path):
    telemetry = CaptureTelemetryLogger(tmp_path)
    telemetry.log_event("recalibrated")
    telemetry.finalize_session()

    events = [e["event_type"] for e in _read_jsonl(telemetry.get_session_dir() / "system.jsonl")]
    assert events == ["session_start", "recalibrated", "session_end"]
