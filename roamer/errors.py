"""Journey error types."""


class JourneyError(Exception):
    """Base class for errors raised while preparing or running a journey"""

    default_message = "Journey error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


class NoRouteFound(JourneyError):
    default_message = "No route found"


class NoNearbySubwayLine(JourneyError):
    default_message = ("No subway line found nearby (search radius 10 km). "
                       "Make sure there is a station near you or pick another transport mode.")


class SearchFailed(JourneyError):
    default_message = "Place search failed"

    def __init__(self, message: str | None = None, throttled: bool = False):
        super().__init__(message)
        self.throttled = throttled


class LocationPermissionDenied(JourneyError):
    default_message = "Location permission denied"


class LocationUnavailable(JourneyError):
    default_message = "Location unavailable"


class UnknownJourneyError(JourneyError):
    default_message = "Unknown error"
