"""Place search over OpenStreetMap via the Overpass API, with disk caching."""

import hashlib
import json
import os
import time
from typing import Optional

import requests

from .config import CONFIG
from .errors import SearchFailed
from .logger import Logger
from .models import Coordinate, PlaceResult

_TRANSIT_FILTERS = [
    '["station"="subway"]',
    '["railway"="station"]["subway"="yes"]',
    '["public_transport"="station"]',
]

# Free-text query -> Overpass tag filters. Unknown queries match by name.
QUERY_FILTERS = {
    "restaurant": ['["amenity"="restaurant"]'],
    "cafe": ['["amenity"="cafe"]'],
    "park": ['["leisure"="park"]'],
    "museum": ['["tourism"="museum"]'],
    "landmark": ['["tourism"~"^(attraction|viewpoint|artwork)$"]', '["historic"]'],
    "road": ['["highway"]'],
}
for _term in CONFIG["subway_search_terms"]:
    QUERY_FILTERS[_term] = _TRANSIT_FILTERS

_CATEGORY_TAGS = ("amenity", "tourism", "leisure", "historic", "highway", "shop")


def _category_from_tags(tags: dict) -> Optional[str]:
    if (tags.get("public_transport") == "station" or tags.get("station") == "subway"
            or tags.get("railway") == "station"):
        return "public_transport"
    for key in _CATEGORY_TAGS:
        if key in tags:
            return tags[key] if tags[key] != "yes" else key
    return None


class OverpassPlaceSearch:
    """Search named places around a point"""

    CACHE_DIR = "overpass_cache"

    def __init__(self, url: Optional[str] = None, cache_dir: Optional[str] = CACHE_DIR,
                 cache_max_age: Optional[float] = None, logger: Optional[Logger] = None):
        self.url = url or CONFIG["overpass_url"]
        self.cache_dir = cache_dir
        self.cache_max_age = cache_max_age or CONFIG["place_cache_max_age"]
        self.logger = logger or Logger()

    def build_query(self, query: str, center: Coordinate, radius: float) -> str:
        around = f"(around:{radius:.0f},{center.lat},{center.lon})"
        filters = QUERY_FILTERS.get(query.lower())
        if filters is None:
            escaped = query.replace("\\", "\\\\").replace('"', '\\"')
            filters = [f'["name"~"{escaped}",i]']
        body = "\n".join(f"  nwr{f}{around};" for f in filters)
        timeout = CONFIG["overpass_timeout"]
        return f"[out:json][timeout:{timeout}];\n(\n{body}\n);\nout center tags;"

    def _cache_path(self, overpass_query: str) -> str:
        h = hashlib.md5(overpass_query.encode()).hexdigest()[:12]
        return os.path.join(self.cache_dir, f"places_{h}.json")

    def _read_cache(self, overpass_query: str) -> Optional[dict]:
        if not self.cache_dir:
            return None
        path = self._cache_path(overpass_query)
        try:
            if time.time() - os.path.getmtime(path) > self.cache_max_age:
                return None
            with open(path) as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError):
            return None

    def _write_cache(self, overpass_query: str, data: dict):
        if not self.cache_dir or not data.get("elements"):
            return
        try:
            os.makedirs(self.cache_dir, exist_ok=True)
            with open(self._cache_path(overpass_query), "w") as f:
                json.dump(data, f)
        except OSError as e:
            self.logger.log("Could not write place cache", {"dir": self.cache_dir, "error": str(e)})

    def _fetch(self, overpass_query: str) -> dict:
        cached = self._read_cache(overpass_query)
        if cached is not None:
            return cached

        try:
            response = requests.post(self.url, data={"data": overpass_query},
                                     timeout=CONFIG["overpass_timeout"] + 30)
            if response.status_code == 429:
                raise SearchFailed("Overpass rate limit reached", throttled=True)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            self.logger.log("Overpass query failed", {"error": str(e)})
            raise SearchFailed(f"Overpass query failed: {e}") from e

        self._write_cache(overpass_query, data)
        return data

    def search(self, query: str, center: Coordinate, radius: float) -> list[PlaceResult]:
        """Named places matching `query` within `radius` meters, nearest first"""
        data = self._fetch(self.build_query(query, center, radius))

        results = []
        for element in data.get("elements", []):
            tags = element.get("tags", {})
            name = tags.get("name")
            if not name:
                continue
            if "lat" in element:
                coordinate = Coordinate(lat=element["lat"], lon=element["lon"])
            elif "center" in element:
                coordinate = Coordinate(lat=element["center"]["lat"], lon=element["center"]["lon"])
            else:
                continue
            results.append(PlaceResult(name=name, coordinate=coordinate,
                                       category=_category_from_tags(tags)))

        results.sort(key=lambda p: center.distance_to(p.coordinate))
        return results
