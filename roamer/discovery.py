"""Throttled point-of-interest discovery around the virtual position."""

import time
from typing import Optional

from .config import CONFIG
from .errors import SearchFailed
from .logger import Logger
from .models import Coordinate, DiscoveredPOI, JourneySession, PlaceResult, VirtualPosition


class POIDiscoveryScheduler:
    """Decides when to look for POIs and merges what is found.

    The blocking parts (find_candidates, scan_start_area) only talk to the
    place search provider; everything that touches the discovery set runs on
    the owner (should_check, mark_checked, finish_check, merge,
    record_start_area).
    """

    def __init__(self, places, logger: Optional[Logger] = None,
                 check_interval: Optional[float] = None,
                 scan_delay: Optional[float] = None):
        self.places = places
        self.logger = logger or Logger()
        self.check_interval = CONFIG["poi_check_interval"] if check_interval is None else check_interval
        self.scan_delay = CONFIG["start_area_delay"] if scan_delay is None else scan_delay
        self.radius = CONFIG["discovery_radius"]
        self.query = CONFIG["discovery_query"]

        self.discovered: list[DiscoveredPOI] = []
        self.excluded_names: set[str] = set()
        self.last_check_time: Optional[float] = None
        self.last_check_coordinate: Optional[Coordinate] = None
        self.ready_at = 0.0  # category cooldown
        self.in_flight = False

    def reset(self):
        self.discovered = []
        self.excluded_names = set()
        self.last_check_time = None
        self.last_check_coordinate = None
        self.ready_at = 0.0
        self.in_flight = False

    def should_check(self, session: JourneySession, position: VirtualPosition, now: float) -> bool:
        if self.in_flight or now < self.ready_at:
            return False
        if self.last_check_time is not None and now - self.last_check_time < self.check_interval:
            return False
        if (self.last_check_coordinate is not None and
                self.last_check_coordinate.distance_to(position.coordinate) < CONFIG["poi_min_move"]):
            return False
        return session.start_location.distance_to(position.coordinate) >= CONFIG["minimum_travel_distance"]

    def mark_checked(self, coordinate: Coordinate, now: float):
        self.last_check_time = now
        self.last_check_coordinate = coordinate
        self.in_flight = True

    def finish_check(self, now: float):
        self.in_flight = False
        self.ready_at = now + CONFIG["discovery_cooldown"]

    def find_candidates(self, coordinate: Coordinate) -> list[PlaceResult]:
        """Query the provider; any failure means no results this cycle"""
        try:
            return self.places.search(self.query, coordinate, self.radius)
        except SearchFailed as e:
            if e.throttled:
                self.logger.log("Place search throttled, skipping POI check")
            else:
                self.logger.log("POI search failed", {"error": str(e)})
            return []

    def merge(self, coordinate: Coordinate, candidates: list[PlaceResult],
              now: float) -> list[DiscoveredPOI]:
        """Add new discoveries, returning only the additions"""
        added = []
        known = {poi.name for poi in self.discovered}

        for place in candidates[:CONFIG["discovery_max_results"]]:
            if not place.name:
                continue
            if place.name in self.excluded_names:
                self.logger.log("Skipping start area POI", {"name": place.name})
                continue
            distance = coordinate.distance_to(place.coordinate)
            if distance > self.radius:
                self.logger.log("POI too far", {"name": place.name, "distance": round(distance)})
                continue
            if place.name in known:
                continue

            poi = DiscoveredPOI(name=place.name, category=self.query,
                                coordinate=place.coordinate, discovered_at=now)
            self.discovered.append(poi)
            known.add(poi.name)
            added.append(poi)
            self.logger.log("Discovered POI", {"name": poi.name, "distance": round(distance)})

        return added

    def maybe_discover(self, session: JourneySession, position: VirtualPosition,
                       now: float) -> list[DiscoveredPOI]:
        """Gate, search and merge in one blocking call"""
        if not self.should_check(session, position, now):
            return []
        self.mark_checked(position.coordinate, now)
        candidates = self.find_candidates(position.coordinate)
        self.finish_check(now)
        return self.merge(position.coordinate, candidates, now)

    def scan_start_area(self, coordinate: Coordinate) -> set[str]:
        """Names of places around the start; failures are silently skipped"""
        names: set[str] = set()
        for query in CONFIG["start_area_queries"]:
            try:
                results = self.places.search(query, coordinate, CONFIG["minimum_travel_distance"])
            except SearchFailed:
                results = []
            names.update(place.name for place in results if place.name)
            if self.scan_delay:
                time.sleep(self.scan_delay)
        return names

    def record_start_area(self, names: set[str]):
        self.excluded_names |= names
        self.logger.log("Start area recorded", {"excluded": len(self.excluded_names)})
