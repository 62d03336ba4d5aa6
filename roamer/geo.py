"""Geographic utility functions."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from .config import CONFIG

if TYPE_CHECKING:
    from .models import Coordinate


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate distance between two points in meters using Haversine formula"""
    R = CONFIG["earth_radius"]

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)

    a = (math.sin(delta_phi / 2) ** 2 +
         math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return R * c


def bearing_between(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate bearing from point 1 to point 2 in degrees (0-360, 0=North)"""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_lambda = math.radians(lon2 - lon1)

    x = math.sin(delta_lambda) * math.cos(phi2)
    y = (math.cos(phi1) * math.sin(phi2) -
         math.sin(phi1) * math.cos(phi2) * math.cos(delta_lambda))

    bearing = math.degrees(math.atan2(x, y))
    return (bearing + 360) % 360


def bearing_to_compass(bearing: float) -> str:
    """Convert bearing to compass direction"""
    directions = ["north", "northeast", "east", "southeast",
                  "south", "southwest", "west", "northwest"]
    index = round(bearing / 45) % 8
    return directions[index]


def destination_point(origin: "Coordinate", distance: float, bearing: float) -> "Coordinate":
    """Project a point `distance` meters from origin along `bearing` degrees.

    Spherical earth, standard forward geodesic formula.
    """
    from .models import Coordinate

    theta = math.radians(bearing)
    phi1 = math.radians(origin.lat)
    lambda1 = math.radians(origin.lon)
    delta = distance / CONFIG["earth_radius"]

    phi2 = math.asin(
        math.sin(phi1) * math.cos(delta) +
        math.cos(phi1) * math.sin(delta) * math.cos(theta)
    )
    lambda2 = lambda1 + math.atan2(
        math.sin(theta) * math.sin(delta) * math.cos(phi1),
        math.cos(delta) - math.sin(phi1) * math.sin(phi2)
    )

    return Coordinate(lat=math.degrees(phi2), lon=math.degrees(lambda2))


def interpolate_linear(a: "Coordinate", b: "Coordinate", fraction: float) -> "Coordinate":
    """Component-wise lat/lon interpolation.

    Not a great-circle slerp; only accurate over short (city-scale) segments.
    """
    from .models import Coordinate

    return Coordinate(
        lat=a.lat + (b.lat - a.lat) * fraction,
        lon=a.lon + (b.lon - a.lon) * fraction,
    )
