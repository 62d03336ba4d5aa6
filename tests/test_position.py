"""Tests for time-based position interpolation."""

from __future__ import annotations

import pytest

from roamer.geo import destination_point
from roamer.models import Coordinate, JourneySession, TransportMode
from roamer.position import position_at

START = 5_000.0


def _session(route, total_distance: float = 2000.0, duration: float = 1000.0) -> JourneySession:
    return JourneySession(
        id="pos",
        start_location=route[0],
        destination_location=route[-1],
        route=tuple(route),
        total_distance=total_distance,
        duration=duration,
        transport_mode=TransportMode.WALKING,
        start_time=START,
    )


def _l_route() -> list[Coordinate]:
    a = Coordinate(0.0, 0.0)
    b = destination_point(a, 1000, 90)
    c = destination_point(b, 1000, 0)
    return [a, b, c]


def test_position_at_start_time() -> None:
    route = _l_route()
    position = position_at(_session(route), START)

    assert position.progress == 0
    assert position.coordinate == route[0]
    assert position.distance_traveled == 0
    assert position.remaining_time == 1000


def test_position_before_start_is_clamped() -> None:
    route = _l_route()
    position = position_at(_session(route), START - 50)

    assert position.progress == 0
    assert position.coordinate == route[0]
    assert position.remaining_time == 1050


def test_position_at_end_time() -> None:
    route = _l_route()
    position = position_at(_session(route), START + 1000)

    assert position.progress == 1
    assert position.coordinate == route[-1]
    assert position.remaining_time == 0


def test_position_after_end_is_clamped() -> None:
    route = _l_route()
    position = position_at(_session(route), START + 5000)

    assert position.progress == 1
    assert position.coordinate == route[-1]
    assert position.remaining_time == 0


def test_quarter_way_is_halfway_along_first_leg() -> None:
    route = _l_route()
    position = position_at(_session(route), START + 250)
    expected = route[0].interpolate_to(route[1], 0.5)

    assert position.coordinate.lat == pytest.approx(expected.lat, abs=1e-9)
    assert position.coordinate.lon == pytest.approx(expected.lon, rel=1e-6)


def test_three_quarters_is_on_second_leg() -> None:
    route = _l_route()
    position = position_at(_session(route), START + 750)

    assert position.coordinate.lon == pytest.approx(route[1].lon, rel=1e-6)
    assert route[1].distance_to(position.coordinate) == pytest.approx(500, rel=1e-3)


def test_distance_traveled_uses_nominal_total() -> None:
    # Route is ~2000 m long but the session claims 3000 m
    route = _l_route()
    position = position_at(_session(route, total_distance=3000.0), START + 500)

    assert position.distance_traveled == pytest.approx(1500.0)
    assert route[0].distance_to(position.coordinate) == pytest.approx(1000, rel=1e-3)


def test_progress_is_monotonic() -> None:
    route = _l_route()
    session = _session(route)
    times = [START + t for t in range(0, 1001, 37)]
    progress = [position_at(session, t).progress for t in times]

    assert progress == sorted(progress)


def test_single_point_route() -> None:
    only = Coordinate(1.0, 1.0)
    session = _session([only])

    assert position_at(session, START + 300).coordinate == only


def test_zero_length_segment_returns_segment_start() -> None:
    a = Coordinate(0.0, 0.0)
    session = _session([a, a, a])

    assert position_at(session, START + 500).coordinate == a
