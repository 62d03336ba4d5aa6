"""Road routing via an OSRM HTTP server."""

from typing import Optional

import requests

from .config import CONFIG
from .errors import NoRouteFound
from .logger import Logger
from .models import Coordinate, Route


class OSRMRouter:
    """Fetch routes from OSRM route/v1 endpoints.

    `servers` maps a route category ("walking", "driving") to a
    (base_url, profile) pair. Categories without a server (e.g. "transit")
    raise NoRouteFound so callers fall back.
    """

    def __init__(self, servers: Optional[dict] = None, timeout: Optional[float] = None,
                 logger: Optional[Logger] = None):
        self.servers = servers or CONFIG["osrm_servers"]
        self.timeout = timeout or CONFIG["routing_timeout"]
        self.logger = logger or Logger()

    def route(self, start: Coordinate, end: Coordinate, category: str) -> Route:
        if category not in self.servers:
            raise NoRouteFound(f"No routing server for category: {category}")
        base, profile = self.servers[category]

        # OSRM takes lon,lat pairs
        coords = f"{start.lon},{start.lat};{end.lon},{end.lat}"
        url = (
            f"{base}/route/v1/{profile}/{coords}"
            "?overview=full&geometries=geojson&steps=false"
        )

        try:
            r = requests.get(url, timeout=self.timeout)
            r.raise_for_status()
            data = r.json()
        except (requests.RequestException, ValueError) as e:
            self.logger.log("Routing request failed", {"category": category, "error": str(e)})
            raise NoRouteFound(str(e)) from e

        if data.get("code") != "Ok" or not data.get("routes"):
            raise NoRouteFound(f"OSRM returned {data.get('code')}")

        route = data["routes"][0]
        geometry = [Coordinate(lat=lat, lon=lon) for lon, lat in route["geometry"]["coordinates"]]
        if not geometry:
            raise NoRouteFound("OSRM returned an empty geometry")

        return Route(coordinates=tuple(geometry), distance=float(route["distance"]),
                     destination=end)
