"""
Telemetry for panorama capture sessions.

This module provides thread-safe telemetry logging for capture sessions. Every
capture attempt and session-level event is appended to JSONL files, and a
summary is written when the session ends.

Features:
- Thread-safe metric collection with locks
- JSONL format for efficient streaming analytics
- Session-based organization with unique timestamps
- Summary statistics (captures, retakes, aborts, stitch attempts)

Files (in logs/session_YYYY-MM-DD_HH-MM-SS/):
- captures.jsonl: one line per capture outcome
- system.jsonl: session start/end, errors, finalize attempts
- summary.json: written by finalize_session()

Usage:
    from panocapture.core.telemetry.capture_logger import CaptureTelemetryLogger

    telemetry = CaptureTelemetryLogger()
    telemetry.log_capture(position_id=3, zone="middle", action="captured", image_bytes=48211)
    summary = telemetry.finalize_session()
"""

import json
import logging
import threading
import time
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from panocapture.utils.config import Config

log = logging.getLogger(__name__)


@dataclass
class CaptureMetric:
    """Capture attempt metric."""
    timestamp: float
    position_id: int
    zone: str  # "middle", "top", "bottom"
    action: str  # "captured", "retaken", "retake_cancelled", "aborted"
    image_bytes: Optional[int] = None
    latency_ms: Optional[float] = None  # Shutter press → image stored


class CaptureTelemetryLogger:
    """
    Centralized thread-safe capture logger.
    - Captures: per-position outcomes
    - System: lifecycle, errors, finalize
    """

    def __init__(self, output_dir: Optional[Path] = None):
        """
        Initialize new telemetry session.

        Args:
            output_dir: Base directory for logs (default: Config.TELEMETRY_DIR)
        """
        # Locks for thread-safety
        self._write_lock = threading.Lock()
        self._buffer_lock = threading.Lock()

        base_dir = Path(output_dir if output_dir is not None else Config.TELEMETRY_DIR)
        base_dir.mkdir(parents=True, exist_ok=True)

        # Create unique session with readable timestamp
        self.session_timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        self.session_start = time.time()
        self.session_dir = base_dir / f"session_{self.session_timestamp}"
        self.session_dir.mkdir(parents=True, exist_ok=True)

        self.captures_log = self.session_dir / "captures.jsonl"
        self.system_log = self.session_dir / "system.jsonl"

        # In-memory buffers (protected by _buffer_lock)
        self.capture_buffer: List[CaptureMetric] = []
        self.error_count = 0
        self.stitch_attempts = 0

        self._log_system_event("session_start", {
            "session": self.session_timestamp,
            "timestamp": self.session_start
        })

        log.info("[TELEMETRY] New session: %s (%s)", self.session_timestamp, self.session_dir)

    def get_session_dir(self) -> Path:
        """Return the session directory path."""
        return self.session_dir

    # ------------------------------------------------------------------
    # Capture Metrics
    # ------------------------------------------------------------------

    def log_capture(
        self,
        position_id: int,
        zone: str,
        action: str,
        image_bytes: Optional[int] = None,
        latency_ms: Optional[float] = None,
    ) -> None:
        """
        Record a capture outcome.

        Args:
            position_id: Capture position id (1-16)
            zone: Position zone
            action: "captured", "retaken", "retake_cancelled" or "aborted"
            image_bytes: Encoded image size
            latency_ms: Shutter press → image stored

        Thread-safe: Can be called from any thread.
        """
        metric = CaptureMetric(
            timestamp=time.time(),
            position_id=position_id,
            zone=zone,
            action=action,
            image_bytes=image_bytes,
            latency_ms=latency_ms,
        )

        with self._buffer_lock:
            self.capture_buffer.append(metric)

        self._write_jsonl(self.captures_log, asdict(metric))

    # ------------------------------------------------------------------
    # System Events
    # ------------------------------------------------------------------

    def _log_system_event(self, event_type: str, data: Dict[str, Any]) -> None:
        """Record system events."""
        payload = {
            "timestamp": time.time(),
            "session": self.session_timestamp,
            "event_type": event_type,
            **data
        }
        self._write_jsonl(self.system_log, payload)

    def log_event(self, event_type: str, **data: Any) -> None:
        self._log_system_event(event_type, data)

    def log_error(self, error_type: str, message: str, **kwargs: Any) -> None:
        """Record a session error."""
        with self._buffer_lock:
            self.error_count += 1
        self._log_system_event("error", {
            "error_type": error_type,
            "message": message,
            **kwargs
        })

    def log_stitch(self, success: bool, **kwargs: Any) -> None:
        with self._buffer_lock:
            self.stitch_attempts += 1
        self._log_system_event("stitch", {"success": success, **kwargs})

    # ------------------------------------------------------------------
    # Session Summary
    # ------------------------------------------------------------------

    def finalize_session(self, **extra: Any) -> Dict[str, Any]:
        """
        Finalize session and generate summary.

        Returns:
            Dict with session statistics

        Thread-safe: Can be called from any thread.
        """
        session_duration = time.time() - self.session_start

        with self._buffer_lock:
            captures = list(self.capture_buffer)
            error_count = self.error_count
            stitch_attempts = self.stitch_attempts

        by_action: Dict[str, int] = {}
        by_zone: Dict[str, int] = {}
        latencies = []
        for metric in captures:
            by_action[metric.action] = by_action.get(metric.action, 0) + 1
            if metric.action in ("captured", "retaken"):
                by_zone[metric.zone] = by_zone.get(metric.zone, 0) + 1
            if metric.latency_ms is not None:
                latencies.append(metric.latency_ms)

        summary = {
            "session": self.session_timestamp,
            "duration_seconds": session_duration,
            "positions_captured": len({m.position_id for m in captures if m.action in ("captured", "retaken")}),
            "captures_by_action": by_action,
            "captures_by_zone": by_zone,
            "avg_capture_latency_ms": sum(latencies) / len(latencies) if latencies else None,
            "errors": error_count,
            "stitch_attempts": stitch_attempts,
            **extra,
        }

        self._log_system_event("session_end", summary)

        summary_path = self.session_dir / "summary.json"
        with open(summary_path, 'w') as f:
            json.dump(summary, f, indent=2)

        log.info("[TELEMETRY] Session finalized: %s", self.session_timestamp)
        return summary

    def _write_jsonl(self, path: Path, data: Dict[str, Any]) -> None:
        """
        Write JSON line thread-safely.

        Thread-safe: Uses lock for atomic writes.
        """
        try:
            line = json.dumps(data, ensure_ascii=True)
        except TypeError:
            line = json.dumps({"error": "serialization_failed", "repr": repr(data)})

        with self._write_lock:
            with open(path, 'a', encoding='utf-8') as f:
                f.write(line + '\n')
