"""Subway line reconstruction and back-and-forth path synthesis."""

import math
import random
import time
from typing import Optional, Sequence

from .config import CONFIG
from .errors import NoNearbySubwayLine, SearchFailed
from .logger import Logger
from .models import Coordinate, SubwayRoute, SubwayStation


def is_transit_place(name: str, category: Optional[str]) -> bool:
    """Lenient check that a search hit is a transit station"""
    if category == "public_transport":
        return True
    lower_name = name.lower()
    return any(word in lower_name for word in CONFIG["subway_name_keywords"])


def order_line(stations: Sequence[SubwayStation], anchor: SubwayStation) -> list[SubwayStation]:
    """Chain stations into a line by repeatedly taking the nearest unused one.

    Greedy nearest-neighbour: approximate, may zig-zag across a city rather
    than follow the real line.
    """
    if len(stations) <= 1:
        return list(stations)

    ordered = [anchor]
    remaining = [s for s in stations if s.name != anchor.name]

    while remaining:
        last = ordered[-1]
        nearest = min(remaining, key=lambda s: last.coordinate.distance_to(s.coordinate))
        ordered.append(nearest)
        remaining = [s for s in remaining if s.name != nearest.name]

    return ordered


def synthesize_path(stations: Sequence[SubwayStation], start_index: int,
                    target_distance: float,
                    max_coordinates: Optional[int] = None) -> list[Coordinate]:
    """Ride up and down the line from start_index until target_distance is covered.

    Each station hop emits max(20, floor(d / 50)) interpolated points.
    """
    if len(stations) < 2:
        raise NoNearbySubwayLine(f"Need at least 2 stations, got {len(stations)}")

    max_coordinates = max_coordinates or CONFIG["subway_max_coordinates"]
    spacing = CONFIG["subway_point_spacing"]
    min_points = CONFIG["subway_min_points_per_segment"]

    coordinates = [stations[start_index].coordinate]
    current = start_index
    direction = 1
    traveled = 0.0

    while traveled < target_distance:
        nxt = current + direction
        if nxt < 0 or nxt >= len(stations):
            direction *= -1
            continue

        a = stations[current].coordinate
        b = stations[nxt].coordinate
        segment = a.distance_to(b)
        steps = max(min_points, math.floor(segment / spacing))
        for i in range(1, steps + 1):
            if len(coordinates) >= max_coordinates:
                return coordinates
            coordinates.append(a.interpolate_to(b, i / steps))

        traveled += segment
        current = nxt

    return coordinates


class SubwayRouteBuilder:
    """Build a simulated subway ride near an origin.

    `places` needs `search(query, center, radius) -> list[PlaceResult]`.
    """

    def __init__(self, places, rng: Optional[random.Random] = None,
                 logger: Optional[Logger] = None, search_delay: Optional[float] = None):
        self.places = places
        self.rng = rng or random.Random()
        self.logger = logger or Logger()
        self.search_delay = CONFIG["subway_search_delay"] if search_delay is None else search_delay

    def search_stations(self, center: Coordinate, radius: float) -> list[SubwayStation]:
        """Run every transit search term around center and merge the hits"""
        duplicate_distance = CONFIG["subway_duplicate_distance"]
        stations: list[SubwayStation] = []

        for term in CONFIG["subway_search_terms"]:
            try:
                results = self.places.search(term, center, radius)
            except SearchFailed as e:
                self.logger.log("Station search failed", {"term": term, "error": str(e)})
                continue

            for place in results:
                if not place.name or not is_transit_place(place.name, place.category):
                    continue
                duplicate = any(
                    s.name == place.name or
                    s.coordinate.distance_to(place.coordinate) < duplicate_distance
                    for s in stations
                )
                if not duplicate:
                    stations.append(SubwayStation(name=place.name, coordinate=place.coordinate))

            if self.search_delay:
                time.sleep(self.search_delay)

        nearby = [s for s in stations if center.distance_to(s.coordinate) <= radius]
        self.logger.log("Station search", {
            "radius": radius,
            "found": len(stations),
            "within_radius": len(nearby),
        })
        return nearby

    def build(self, origin: Coordinate, target_distance: float,
              preset_stations: Optional[Sequence[SubwayStation]] = None,
              random_anchor: bool = False) -> SubwayRoute:
        """Ride a line near origin.

        Preset stations are used as the line. Otherwise stations are searched:
        around the traveller, starting at the nearest one, or with
        random_anchor around a city centre, starting anywhere on a randomly
        chosen station's line.
        """
        if preset_stations:
            stations = list(preset_stations)
            if len(stations) < 2:
                raise NoNearbySubwayLine(f"Need at least 2 stations, got {len(stations)}")
            anchor = self.rng.choice(stations)
            ordered = order_line(stations, anchor)
            start_index = self.rng.randrange(len(ordered))
            self.logger.log("Using preset stations", {
                "stations": len(ordered),
                "anchor": anchor.name,
                "start": ordered[start_index].name,
            })
        elif random_anchor:
            ordered, start_index = self._city_line(origin)
        else:
            ordered, start_index = self._live_line(origin)

        coordinates = synthesize_path(ordered, start_index, target_distance)
        self.logger.log("Subway route generated", {
            "stations": len(ordered),
            "coordinates": len(coordinates),
            "target": target_distance,
        })
        return SubwayRoute(
            stations=tuple(ordered),
            start_index=start_index,
            coordinates=tuple(coordinates),
            total_distance=target_distance,
        )

    def _live_line(self, origin: Coordinate) -> tuple[list[SubwayStation], int]:
        candidates = self.search_stations(origin, CONFIG["subway_search_radius"])
        if not candidates:
            raise NoNearbySubwayLine()

        nearest = min(candidates, key=lambda s: origin.distance_to(s.coordinate))
        self.logger.log("Nearest station", {
            "name": nearest.name,
            "distance": round(origin.distance_to(nearest.coordinate)),
        })

        line = self.search_stations(nearest.coordinate, CONFIG["subway_line_radius"])
        if len(line) < 2:
            raise NoNearbySubwayLine(f"Not enough stations on the line (found {len(line)})")

        ordered = order_line(line, nearest)
        start_index = next(
            i for i, s in enumerate(ordered)
            if s.coordinate.distance_to(nearest.coordinate) < 100
        )
        return ordered, start_index

    def _city_line(self, city: Coordinate) -> tuple[list[SubwayStation], int]:
        candidates = self.search_stations(city, CONFIG["subway_city_radius"])
        if not candidates:
            raise NoNearbySubwayLine()

        anchor = self.rng.choice(candidates)
        self.logger.log("Random city station", {"name": anchor.name})

        line = self.search_stations(anchor.coordinate, CONFIG["subway_line_radius"])
        if len(line) < 2:
            raise NoNearbySubwayLine(f"Not enough stations on the line (found {len(line)})")

        ordered = order_line(line, anchor)
        return ordered, self.rng.randrange(len(ordered))
