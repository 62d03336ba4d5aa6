"""Roamer - Timed virtual journeys with point-of-interest discovery."""

from .config import CONFIG
from .models import (
    Coordinate,
    TransportMode,
    Route,
    SubwayStation,
    SubwayRoute,
    PlaceResult,
    JourneySession,
    JourneyState,
    Idle,
    Preparing,
    Active,
    Paused,
    Completed,
    Failed,
    VirtualPosition,
    DiscoveredPOI,
    session_of,
)
from .errors import (
    JourneyError,
    NoRouteFound,
    NoNearbySubwayLine,
    SearchFailed,
    LocationPermissionDenied,
    LocationUnavailable,
    UnknownJourneyError,
)
from .logger import Logger
from .geo import (
    haversine_distance,
    bearing_between,
    bearing_to_compass,
    destination_point,
    interpolate_linear,
)
from .gps import GPS, FixedLocation
from .routing import OSRMRouter
from .osm import OverpassPlaceSearch
from .synth import RouteSynthesizer
from .subway import SubwayRouteBuilder, order_line, synthesize_path
from .position import position_at
from .discovery import POIDiscoveryScheduler
from .lifecycle import AppLifecycle
from .journey import JourneyManager
from .preview import build_journey_map, render_journey_map
from .__main__ import main

__all__ = [
    "CONFIG",
    "Coordinate",
    "TransportMode",
    "Route",
    "SubwayStation",
    "SubwayRoute",
    "PlaceResult",
    "JourneySession",
    "JourneyState",
    "Idle",
    "Preparing",
    "Active",
    "Paused",
    "Completed",
    "Failed",
    "VirtualPosition",
    "DiscoveredPOI",
    "session_of",
    "JourneyError",
    "NoRouteFound",
    "NoNearbySubwayLine",
    "SearchFailed",
    "LocationPermissionDenied",
    "LocationUnavailable",
    "UnknownJourneyError",
    "Logger",
    "haversine_distance",
    "bearing_between",
    "bearing_to_compass",
    "destination_point",
    "interpolate_linear",
    "GPS",
    "FixedLocation",
    "OSRMRouter",
    "OverpassPlaceSearch",
    "RouteSynthesizer",
    "SubwayRouteBuilder",
    "order_line",
    "synthesize_path",
    "position_at",
    "POIDiscoveryScheduler",
    "AppLifecycle",
    "JourneyManager",
    "build_journey_map",
    "render_journey_map",
    "main",
]
