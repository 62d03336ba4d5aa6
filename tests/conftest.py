"""Shared fakes for the routing, place search and clock collaborators."""

from __future__ import annotations

import random
from typing import Callable, Sequence

import pytest

from roamer.errors import NoRouteFound
from roamer.geo import destination_point
from roamer.logger import Logger
from roamer.models import Coordinate, PlaceResult, Route, SubwayStation

ORIGIN = Coordinate(lat=51.5007, lon=-0.1246)


class FakePlaces:
    """Place search returning canned results per query"""

    def __init__(self) -> None:
        self.responses: dict[str, Sequence[PlaceResult] | Callable] = {}
        self.errors: dict[str, Exception] = {}
        self.calls: list[tuple[str, Coordinate, float]] = []

    def search(self, query: str, center: Coordinate, radius: float) -> list[PlaceResult]:
        self.calls.append((query, center, radius))
        if query in self.errors:
            raise self.errors[query]
        response = self.responses.get(query, [])
        if callable(response):
            return list(response(center, radius))
        return list(response)

    def queries(self) -> list[str]:
        return [query for query, _, _ in self.calls]


class FakeRouter:
    """Router returning a fixed polyline, or failing"""

    def __init__(self, polyline: Sequence[Coordinate] | None = None,
                 distance: float | None = None, fail: bool = False) -> None:
        self.polyline = polyline
        self.distance = distance
        self.fail = fail
        self.calls: list[tuple[Coordinate, Coordinate, str]] = []

    def route(self, start: Coordinate, end: Coordinate, category: str) -> Route:
        self.calls.append((start, end, category))
        if self.fail:
            raise NoRouteFound("router offline")
        polyline = tuple(self.polyline) if self.polyline else (start, end)
        distance = self.distance if self.distance is not None else start.distance_to(end)
        return Route(coordinates=polyline, distance=distance, destination=end)


class FixedRandom(random.Random):
    """random() always returns the same value (fixed bearing)"""

    def __init__(self, value: float) -> None:
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


class FakeClock:
    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def line_of_stations(count: int, spacing: float = 1000.0,
                     origin: Coordinate = Coordinate(0.0, 0.0)) -> list[SubwayStation]:
    """Stations due east of origin, `spacing` meters apart"""
    return [
        SubwayStation(name=f"Station {i}", coordinate=destination_point(origin, i * spacing, 90))
        for i in range(count)
    ]


@pytest.fixture
def logger() -> Logger:
    return Logger(echo=False)


@pytest.fixture
def places() -> FakePlaces:
    return FakePlaces()


@pytest.fixture
def router() -> FakeRouter:
    return FakeRouter()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
