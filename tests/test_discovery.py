"""Tests for POI discovery gating and merging."""

from __future__ import annotations

import pytest

from conftest import ORIGIN, FakePlaces
from roamer.errors import SearchFailed
from roamer.geo import destination_point
from roamer.logger import Logger
from roamer.models import Coordinate, JourneySession, PlaceResult, TransportMode, VirtualPosition
from roamer.discovery import POIDiscoveryScheduler

NOW = 10_000.0


def _session() -> JourneySession:
    end = destination_point(ORIGIN, 3000, 0)
    return JourneySession(
        id="disc",
        start_location=ORIGIN,
        destination_location=end,
        route=(ORIGIN, end),
        total_distance=3000.0,
        duration=2160.0,
        transport_mode=TransportMode.WALKING,
        start_time=NOW - 1000,
    )


def _position(meters_north: float) -> VirtualPosition:
    return VirtualPosition(
        coordinate=destination_point(ORIGIN, meters_north, 0),
        progress=meters_north / 3000,
        distance_traveled=meters_north,
        remaining_time=0.0,
    )


def _hit(name: str, near: Coordinate, meters: float = 30) -> PlaceResult:
    return PlaceResult(name, destination_point(near, meters, 90), "attraction")


@pytest.fixture
def scheduler(places: FakePlaces) -> POIDiscoveryScheduler:
    return POIDiscoveryScheduler(places, logger=Logger(echo=False), scan_delay=0)


def test_no_check_near_start(scheduler: POIDiscoveryScheduler, places: FakePlaces) -> None:
    found = scheduler.maybe_discover(_session(), _position(150), NOW)

    assert found == []
    assert places.calls == []


def test_first_check_after_leaving_start_area(scheduler: POIDiscoveryScheduler,
                                              places: FakePlaces) -> None:
    position = _position(400)
    places.responses["landmark"] = [_hit("Clock Tower", position.coordinate)]

    found = scheduler.maybe_discover(_session(), position, NOW)

    assert [poi.name for poi in found] == ["Clock Tower"]
    assert found[0].category == "landmark"
    assert found[0].discovered_at == NOW
    assert places.calls == [("landmark", position.coordinate, 100)]


def test_interval_between_checks(scheduler: POIDiscoveryScheduler, places: FakePlaces) -> None:
    session = _session()

    scheduler.maybe_discover(session, _position(400), NOW)
    scheduler.maybe_discover(session, _position(800), NOW + 299)
    assert len(places.calls) == 1

    scheduler.maybe_discover(session, _position(800), NOW + 300)
    assert len(places.calls) == 2


def test_must_move_between_checks(scheduler: POIDiscoveryScheduler, places: FakePlaces) -> None:
    session = _session()

    scheduler.maybe_discover(session, _position(400), NOW)
    scheduler.maybe_discover(session, _position(430), NOW + 600)
    assert len(places.calls) == 1

    scheduler.maybe_discover(session, _position(460), NOW + 600)
    assert len(places.calls) == 2


def test_cooldown_and_in_flight_block_checks(scheduler: POIDiscoveryScheduler) -> None:
    session = _session()
    position = _position(400)
    scheduler.check_interval = 0

    scheduler.mark_checked(_position(250).coordinate, NOW)
    assert not scheduler.should_check(session, position, NOW + 1)

    scheduler.finish_check(NOW + 1)
    assert not scheduler.should_check(session, position, NOW + 2)
    assert scheduler.should_check(session, position, NOW + 3)


def test_start_area_names_are_excluded(scheduler: POIDiscoveryScheduler,
                                       places: FakePlaces) -> None:
    position = _position(400)
    places.responses["landmark"] = [
        _hit("Big Ben", position.coordinate),
        _hit("Clock Tower", position.coordinate),
    ]
    scheduler.record_start_area({"Big Ben"})

    found = scheduler.maybe_discover(_session(), position, NOW)

    assert [poi.name for poi in found] == ["Clock Tower"]


def test_results_outside_radius_are_dropped(scheduler: POIDiscoveryScheduler,
                                            places: FakePlaces) -> None:
    position = _position(400)
    places.responses["landmark"] = [
        _hit("Far Fountain", position.coordinate, meters=150),
        _hit("Near Statue", position.coordinate, meters=80),
    ]

    found = scheduler.maybe_discover(_session(), position, NOW)

    assert [poi.name for poi in found] == ["Near Statue"]


def test_only_first_two_results_considered(scheduler: POIDiscoveryScheduler,
                                           places: FakePlaces) -> None:
    position = _position(400)
    places.responses["landmark"] = [_hit(name, position.coordinate) for name in "ABCD"]

    found = scheduler.maybe_discover(_session(), position, NOW)

    assert [poi.name for poi in found] == ["A", "B"]


def test_names_are_unique(scheduler: POIDiscoveryScheduler) -> None:
    here = _position(400).coordinate
    first = scheduler.merge(here, [_hit("Obelisk", here)], NOW)
    again = scheduler.merge(here, [_hit("Obelisk", here, meters=10)], NOW + 400)

    assert len(first) == 1
    assert again == []
    assert [poi.name for poi in scheduler.discovered] == ["Obelisk"]


@pytest.mark.parametrize("throttled", [True, False])
def test_failed_search_yields_nothing(scheduler: POIDiscoveryScheduler, places: FakePlaces,
                                      throttled: bool) -> None:
    places.errors["landmark"] = SearchFailed("busy", throttled=throttled)

    found = scheduler.maybe_discover(_session(), _position(400), NOW)

    assert found == []
    assert not scheduler.in_flight
    assert scheduler.last_check_time == NOW


def test_scan_start_area_collects_names(scheduler: POIDiscoveryScheduler,
                                        places: FakePlaces) -> None:
    places.responses["restaurant"] = [PlaceResult("Dishoom", ORIGIN), PlaceResult("", ORIGIN)]
    places.responses["park"] = [PlaceResult("St James's Park", ORIGIN)]
    places.errors["museum"] = SearchFailed("offline")

    names = scheduler.scan_start_area(ORIGIN)

    assert names == {"Dishoom", "St James's Park"}
    assert places.queries() == ["restaurant", "landmark", "park", "cafe", "museum"]
    assert {radius for _, _, radius in places.calls} == {200}


def test_reset_clears_everything(scheduler: POIDiscoveryScheduler) -> None:
    here = _position(400).coordinate
    scheduler.merge(here, [_hit("Obelisk", here)], NOW)
    scheduler.record_start_area({"Big Ben"})
    scheduler.mark_checked(here, NOW)

    scheduler.reset()

    assert scheduler.discovered == []
    assert scheduler.excluded_names == set()
    assert scheduler.last_check_time is None
    assert not scheduler.in_flight
