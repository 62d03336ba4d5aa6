"""Tests for transport modes, sessions and journey states."""

from __future__ import annotations

from dataclasses import replace

import pytest

from roamer.models import (
    Active,
    Completed,
    Coordinate,
    Failed,
    Idle,
    JourneySession,
    Paused,
    Preparing,
    SubwayStation,
    TransportMode,
    session_of,
)


def _session(**overrides) -> JourneySession:
    fields = dict(
        id="s1",
        start_location=Coordinate(0.0, 0.0),
        destination_location=Coordinate(0.0, 0.01),
        route=(Coordinate(0.0, 0.0), Coordinate(0.0, 0.01)),
        total_distance=1000.0,
        duration=600.0,
        transport_mode=TransportMode.WALKING,
        start_time=100.0,
    )
    fields.update(overrides)
    return JourneySession(**fields)


def test_walking_twenty_five_minutes() -> None:
    mode = TransportMode.WALKING

    assert mode.speed_mps == pytest.approx(1.38889, rel=1e-5)
    assert mode.target_distance(1500) == pytest.approx(2083.333, rel=1e-6)


@pytest.mark.parametrize("mode", list(TransportMode))
@pytest.mark.parametrize("duration", [1.0, 60.0, 1500.0, 5400.0])
def test_target_distance_is_speed_times_duration(mode: TransportMode, duration: float) -> None:
    assert mode.target_distance(duration) == mode.speed_mps * duration


def test_route_categories() -> None:
    assert TransportMode.WALKING.route_category == "walking"
    assert TransportMode.CYCLING.route_category == "walking"
    assert TransportMode.DRIVING.route_category == "driving"
    assert TransportMode.SUBWAY.route_category == "transit"


def test_coordinate_equality_is_by_value() -> None:
    assert Coordinate(1.5, 2.5) == Coordinate(1.5, 2.5)
    assert Coordinate.from_dict(Coordinate(1.5, 2.5).to_dict()) == Coordinate(1.5, 2.5)


def test_session_rejects_non_positive_duration() -> None:
    with pytest.raises(ValueError):
        _session(duration=0)


def test_session_rejects_empty_route() -> None:
    with pytest.raises(ValueError):
        _session(route=())


def test_subway_session_requires_stations() -> None:
    with pytest.raises(ValueError):
        _session(transport_mode=TransportMode.SUBWAY)

    station = SubwayStation("Bank", Coordinate(0.0, 0.0))
    session = _session(transport_mode=TransportMode.SUBWAY, subway_stations=(station,))
    assert session.subway_stations == (station,)


def test_replace_keeps_everything_but_start_time() -> None:
    session = _session()
    resumed = replace(session, start_time=250.0)

    assert resumed.start_time == 250.0
    assert resumed.id == session.id
    assert resumed.route == session.route
    assert resumed.end_time == 850.0


def test_cumulative_distances() -> None:
    session = _session(route=(Coordinate(0.0, 0.0), Coordinate(0.0, 0.01), Coordinate(0.0, 0.03)))
    cumulative = session.cumulative_distances

    assert cumulative[0] == 0
    assert cumulative[2] == pytest.approx(3 * cumulative[1])


def test_session_of_each_state() -> None:
    session = _session()

    assert session_of(Active(session)) is session
    assert session_of(Paused(session, paused_at=10.0)) is session
    assert session_of(Completed(session)) is session
    assert session_of(Idle()) is None
    assert session_of(Preparing()) is None
    assert session_of(Failed("nope")) is None
