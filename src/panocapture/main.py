#!/usr/bin/env python3
"""
Panorama capture entry point.

Modes:
    simulate    Full capture session against mock devices: points the mock
                sensor at each of the 16 positions, captures them, finalizes
                with the placeholder stitcher and prints a summary
                plus the initial viewer camera for the composite.

Usage:
    python -m panocapture.main simulate
    python -m panocapture.main simulate --no-telemetry --verbose
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from panocapture.core.capture.session import PanoramaSession
from panocapture.core.hardware.mock_devices import MockCamera, MockOrientationSource, SimulatedClock
from panocapture.core.stitching.stitcher import PlaceholderStitcher
from panocapture.core.telemetry.capture_logger import CaptureTelemetryLogger
from panocapture.utils.config import Config
from panocapture.utils.config_sections import load_capture_config

log = logging.getLogger("panocapture")

# Simulated time between sensor events; above the publish interval so every event publishes
SIMULATED_EVENT_INTERVAL_S = 0.06


def run_simulation(
    freeze_ms: float = 0.0,
    telemetry_dir: Optional[Path] = None,
    telemetry_enabled: bool = True,
) -> PanoramaSession:
    """
    Run one complete capture session on mock devices.

    Returns:
        The closed session (result_url holds the composite image URL).
    """
    clock = SimulatedClock()
    source = MockOrientationSource(on_sample=lambda: clock.advance(SIMULATED_EVENT_INTERVAL_S))
    camera = MockCamera()
    telemetry = CaptureTelemetryLogger(telemetry_dir) if telemetry_enabled else None

    capture_config = load_capture_config()
    capture_config.freeze_ms = freeze_ms

    session = PanoramaSession(
        source,
        camera,
        PlaceholderStitcher(delay_s=Config.STITCH_PLACEHOLDER_DELAY_S),
        telemetry=telemetry,
        capture_config=capture_config,
        clock=clock,
    )

    with session:
        for position in list(session.positions):
            source.point_at(position.target_azimuth, position.target_elevation)
            log.info("%s (%d/16)", session.guidance(), session.captured_count)

            future = session.capture()
            if future is None:
                future = session.confirm_retake()
            future.result()

        url = session.finalize().result()
        log.info("Panorama URL: %s... (%d chars)", url[:40], len(url))

    return session


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Panorama capture pipeline")
    parser.add_argument("mode", choices=["simulate"], help="Run mode")
    parser.add_argument("--log-dir", type=Path, default=None, help="Telemetry base directory")
    parser.add_argument("--no-telemetry", action="store_true", help="Disable session telemetry")
    parser.add_argument("--freeze-ms", type=float, default=0.0, help="Shutter freeze per capture")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s.%(msecs)03d [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    session = run_simulation(
        freeze_ms=args.freeze_ms,
        telemetry_dir=args.log_dir,
        telemetry_enabled=not args.no_telemetry and Config.TELEMETRY_ENABLED,
    )

    if session.result_url is None:
        print("❌ Panorama was not produced")
        return 1

    print(f"✅ {session.captured_count}/16 positions captured, panorama ready")

    viewer = session.open_viewer()
    view = viewer.view
    print(f"   Viewer: pitch={view.pitch:.0f}° yaw={view.yaw:.0f}° fov={view.fov:.0f}°")
    return 0


if __name__ == "__main__":
    sys.exit(main())
