"""Data classes for Roamer."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field, asdict
from enum import Enum
from functools import cached_property
from typing import Optional, Union

from .config import CONFIG
from .geo import haversine_distance, interpolate_linear


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lon: float

    def distance_to(self, other: "Coordinate") -> float:
        """Great-circle distance in meters"""
        return haversine_distance(self.lat, self.lon, other.lat, other.lon)

    def interpolate_to(self, other: "Coordinate", fraction: float) -> "Coordinate":
        return interpolate_linear(self, other, fraction)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "Coordinate":
        return cls(lat=d["lat"], lon=d["lon"])


class TransportMode(Enum):
    WALKING = "walking"
    CYCLING = "cycling"
    DRIVING = "driving"
    SUBWAY = "subway"

    @property
    def speed_kmh(self) -> float:
        return CONFIG["speeds_kmh"][self.value]

    @property
    def speed_mps(self) -> float:
        return self.speed_kmh * 1000.0 / 3600.0

    @property
    def route_category(self) -> str:
        """Routing provider category; cycling has none of its own and reuses walking"""
        if self is TransportMode.DRIVING:
            return "driving"
        if self is TransportMode.SUBWAY:
            return "transit"
        return "walking"

    def target_distance(self, duration: float) -> float:
        return self.speed_mps * duration


@dataclass(frozen=True)
class Route:
    """A polyline plus its length in meters"""
    coordinates: tuple[Coordinate, ...]
    distance: float
    destination: Coordinate

    def __post_init__(self):
        if not self.coordinates:
            raise ValueError("route must contain at least one coordinate")


@dataclass(frozen=True)
class SubwayStation:
    name: str  # unique within a line
    coordinate: Coordinate

    @classmethod
    def from_dict(cls, d: dict) -> "SubwayStation":
        return cls(name=d["name"], coordinate=Coordinate(lat=d["lat"], lon=d["lon"]))


@dataclass(frozen=True)
class SubwayRoute:
    stations: tuple[SubwayStation, ...]
    start_index: int
    coordinates: tuple[Coordinate, ...]
    total_distance: float  # the requested distance, not the path length


@dataclass(frozen=True)
class PlaceResult:
    """A single place-search hit"""
    name: str
    coordinate: Coordinate
    category: Optional[str] = None


@dataclass(frozen=True)
class JourneySession:
    """Immutable record of one journey attempt"""
    id: str
    start_location: Coordinate
    destination_location: Coordinate
    route: tuple[Coordinate, ...]
    total_distance: float  # meters
    duration: float  # seconds
    transport_mode: TransportMode
    start_time: float  # epoch seconds
    subway_stations: Optional[tuple[SubwayStation, ...]] = None

    def __post_init__(self):
        if self.duration <= 0:
            raise ValueError("duration must be positive")
        if not self.route:
            raise ValueError("route must contain at least one coordinate")
        if self.transport_mode is TransportMode.SUBWAY and not self.subway_stations:
            raise ValueError("subway sessions need their station list")

    @staticmethod
    def new_id() -> str:
        return str(uuid.uuid4())

    @property
    def end_time(self) -> float:
        return self.start_time + self.duration

    @cached_property
    def cumulative_distances(self) -> list[float]:
        """Running distance along the route, one entry per point"""
        cumulative = [0.0]
        for prev, point in zip(self.route, self.route[1:]):
            cumulative.append(cumulative[-1] + prev.distance_to(point))
        return cumulative


@dataclass(frozen=True)
class VirtualPosition:
    coordinate: Coordinate
    progress: float  # 0.0 to 1.0
    distance_traveled: float  # meters
    remaining_time: float  # seconds


@dataclass(frozen=True)
class DiscoveredPOI:
    name: str  # dedup key
    category: str
    coordinate: Coordinate
    discovered_at: float = field(default_factory=time.time)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))


# Journey states. Exactly one is current; only Active drives the ticker.

@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Preparing:
    pass


@dataclass(frozen=True)
class Active:
    session: JourneySession


@dataclass(frozen=True)
class Paused:
    session: JourneySession
    paused_at: float  # wall-clock time of the pause


@dataclass(frozen=True)
class Completed:
    session: JourneySession


@dataclass(frozen=True)
class Failed:
    reason: str


JourneyState = Union[Idle, Preparing, Active, Paused, Completed, Failed]


def session_of(state: JourneyState) -> Optional[JourneySession]:
    """The session held by a state, if any"""
    match state:
        case Active(session=session) | Paused(session=session) | Completed(session=session):
            return session
        case Idle() | Preparing() | Failed():
            return None
