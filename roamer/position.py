"""Time-based virtual position along a journey route."""

from bisect import bisect_left

from .models import Coordinate, JourneySession, VirtualPosition


def _coordinate_at(session: JourneySession, progress: float) -> Coordinate:
    route = session.route
    if progress <= 0:
        return route[0]
    if progress >= 1:
        return route[-1]

    cumulative = session.cumulative_distances
    if len(cumulative) < 2:
        return route[-1]

    # Position follows the polyline's own length, which can differ from total_distance
    target = cumulative[-1] * progress
    index = min(bisect_left(cumulative, target, 1), len(cumulative) - 1)
    segment_start = cumulative[index - 1]
    segment_length = cumulative[index] - segment_start
    if segment_length <= 0:
        return route[index - 1]

    fraction = (target - segment_start) / segment_length
    return route[index - 1].interpolate_to(route[index], fraction)


def position_at(session: JourneySession, now: float) -> VirtualPosition:
    """Where the traveller is at wall-clock time `now`.

    distance_traveled is scaled from the nominal total_distance, not the
    route's measured length.
    """
    elapsed = now - session.start_time
    progress = min(max(elapsed / session.duration, 0.0), 1.0)

    return VirtualPosition(
        coordinate=_coordinate_at(session, progress),
        progress=progress,
        distance_traveled=session.total_distance * progress,
        remaining_time=max(session.duration - elapsed, 0.0),
    )
