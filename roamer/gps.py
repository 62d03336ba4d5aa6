"""Location sources for the journey start point."""

import json
import subprocess
from typing import Optional

from .errors import LocationPermissionDenied, LocationUnavailable
from .models import Coordinate


class GPS:
    """GPS access via Termux API"""

    def __init__(self):
        self.last_location: Optional[Coordinate] = None
        self.consecutive_failures = 0

    def get_location(self, timeout: int = 30) -> Coordinate:
        """Get current location using termux-location"""
        try:
            result = subprocess.run(
                ["termux-location", "-p", "gps", "-r", "once"],
                capture_output=True,
                text=True,
                timeout=timeout
            )
        except subprocess.TimeoutExpired as e:
            self.consecutive_failures += 1
            raise LocationUnavailable("GPS fix timed out") from e
        except FileNotFoundError as e:
            self.consecutive_failures += 1
            raise LocationUnavailable("termux-location not installed") from e

        if result.returncode != 0:
            self.consecutive_failures += 1
            error_msg = result.stderr.strip() if result.stderr else "unknown error"
            if "permission" in error_msg.lower():
                raise LocationPermissionDenied(error_msg)
            raise LocationUnavailable(error_msg)

        if not result.stdout or not result.stdout.strip():
            self.consecutive_failures += 1
            raise LocationUnavailable("Empty GPS response")

        try:
            data = json.loads(result.stdout)
            location = Coordinate(lat=data["latitude"], lon=data["longitude"])
        except (json.JSONDecodeError, KeyError) as e:
            self.consecutive_failures += 1
            raise LocationUnavailable(f"Unreadable GPS response: {e}") from e

        self.last_location = location
        self.consecutive_failures = 0
        return location

    def get_status(self) -> str:
        """Get GPS status string"""
        if self.consecutive_failures == 0:
            return "GPS OK"
        return f"GPS: {self.consecutive_failures} consecutive failures"


class FixedLocation:
    """Location source that always reports the same point"""

    def __init__(self, lat: float, lon: float):
        self.location = Coordinate(lat=lat, lon=lon)

    def get_location(self, timeout: int = 30) -> Coordinate:
        return self.location

    def get_status(self) -> str:
        return "Fixed location"
