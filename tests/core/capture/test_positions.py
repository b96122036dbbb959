"""Tests for the capture position layout."""

from __future__ import annotations

from panocapture.core.capture.positions import TOTAL_POSITIONS, CaptureZone, initialize_positions


def test_sixteen_positions_in_id_order():
    positions = initialize_positions()
    assert TOTAL_POSITIONS == 16
    assert [p.id for p in positions] == list(range(1, 17))
    assert not any(p.captured or p.image_data for p in positions)


def test_zone_layout():
    positions = {p.id: p for p in initialize_positions()}

    middle = [positions[i] for i in range(1, 9)]
    assert {p.zone for p in middle} == {CaptureZone.MIDDLE}
    assert [p.target_azimuth for p in middle] == [0, 45, 90, 135, 180, 225, 270, 315]
    assert all(p.target_elevation == 0 for p in middle)

    top = [positions[i] for i in range(9, 13)]
    assert {p.zone for p in top} == {CaptureZone.TOP}
    assert [p.target_azimuth for p in top] == [0, 90, 180, 270]
    assert all(p.target_elevation == 40 for p in top)

    bottom = [positions[i] for i in range(13, 17)]
    assert {p.zone for p in bottom} == {CaptureZone.BOTTOM}
    assert [p.target_azimuth for p in bottom] == [0, 90, 180, 270]
    assert all(p.target_elevation == -40 for p in bottom)


def test_fresh_sets_are_independent():
    first = initialize_positions()
    first[0].captured = True
    assert initialize_positions()[0].captured is False


def test_labels_hints_and_metadata():
    positions = initialize_positions()
    assert positions[0].label == "1"
    assert positions[0].hint == "Eye level"
    assert positions[8].hint == "Point UP"
    assert positions[12].hint == "Point DOWN"
    assert positions[9].to_metadata() == {
        "position_id": 10,
        "zone": "top",
        "azimuth": 90.0,
        "elevation": 40.0,
    }
