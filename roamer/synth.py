"""Random route synthesis for road transport modes."""

import random
from typing import Optional

from .config import CONFIG
from .errors import NoRouteFound, SearchFailed
from .geo import destination_point
from .logger import Logger
from .models import Coordinate, Route, TransportMode


class RouteSynthesizer:
    """Pick a random destination at the mode's travel distance and route to it.

    `router` needs `route(start, end, category) -> Route` raising NoRouteFound.
    `places`, if given, is used to reject destinations with no road nearby.
    """

    def __init__(self, router, places=None, rng: Optional[random.Random] = None,
                 logger: Optional[Logger] = None, max_attempts: Optional[int] = None):
        self.router = router
        self.places = places
        self.rng = rng or random.Random()
        self.logger = logger or Logger()
        self.max_attempts = max_attempts if max_attempts is not None else CONFIG["destination_attempts"]

    def random_bearing(self) -> float:
        return self.rng.random() * 360.0

    def is_valid_destination(self, coordinate: Coordinate) -> bool:
        """A destination is valid if any road is found nearby; failed searches count as valid"""
        if self.places is None:
            return True
        try:
            roads = self.places.search("road", coordinate, CONFIG["destination_validation_radius"])
        except SearchFailed:
            return True
        return bool(roads)

    def pick_destination(self, start: Coordinate, distance: float) -> Coordinate:
        if self.places is not None:
            for _ in range(self.max_attempts):
                candidate = destination_point(start, distance, self.random_bearing())
                if self.is_valid_destination(candidate):
                    return candidate
        return destination_point(start, distance, self.random_bearing())

    def synthesize(self, start: Coordinate, mode: TransportMode, duration: float) -> Route:
        distance = mode.target_distance(duration)
        destination = self.pick_destination(start, distance)

        try:
            route = self.router.route(start, destination, mode.route_category)
        except NoRouteFound as e:
            fallback = Route(coordinates=(start, destination),
                             distance=start.distance_to(destination),
                             destination=destination)
            self.logger.log("Routing failed, using straight line", {
                "error": str(e),
                "distance": fallback.distance,
            })
            return fallback

        self.logger.log("Route synthesized", {
            "mode": mode.value,
            "requested": distance,
            "actual": route.distance,
            "points": len(route.coordinates),
        })
        return Route(coordinates=route.coordinates, distance=route.distance,
                     destination=destination)
