"""Journey state machine: preparation, ticking, pause/resume/cancel."""

from __future__ import annotations

import asyncio
import random
import time
from dataclasses import replace
from typing import Callable, Optional, Sequence

from .config import CONFIG
from .discovery import POIDiscoveryScheduler
from .errors import JourneyError, LocationPermissionDenied, LocationUnavailable, UnknownJourneyError
from .lifecycle import AppLifecycle
from .logger import Logger
from .models import (
    Active, Completed, Coordinate, DiscoveredPOI, Failed, Idle, JourneySession,
    JourneyState, Paused, Preparing, SubwayStation, TransportMode, VirtualPosition,
    session_of,
)
from .position import position_at
from .subway import SubwayRouteBuilder
from .synth import RouteSynthesizer


class JourneyManager:
    """Owns the journey state and drives the periodic position update.

    All state mutation happens on the event loop the manager is used from;
    provider calls are pushed to worker threads and their results merged back
    here, tagged with the journey generation so stale results are dropped.
    """

    def __init__(self, router, places, location_source=None,
                 lifecycle: Optional[AppLifecycle] = None,
                 rng: Optional[random.Random] = None,
                 logger: Optional[Logger] = None,
                 clock: Callable[[], float] = time.time,
                 tick_interval: Optional[float] = None,
                 reduced_tick_interval: Optional[float] = None,
                 reduced_activity: bool = False,
                 search_delay: Optional[float] = None,
                 scan_delay: Optional[float] = None):
        self.logger = logger or Logger()
        self.rng = rng or random.Random()
        self.clock = clock
        self.location_source = location_source

        self.synthesizer = RouteSynthesizer(router, places, rng=self.rng, logger=self.logger)
        self.subway = SubwayRouteBuilder(places, rng=self.rng, logger=self.logger,
                                         search_delay=search_delay)
        self.scheduler = POIDiscoveryScheduler(places, logger=self.logger, scan_delay=scan_delay)

        self.normal_tick_interval = tick_interval or CONFIG["tick_interval"]
        self.reduced_tick_interval = reduced_tick_interval or CONFIG["reduced_tick_interval"]
        self._reduced_activity = reduced_activity

        # Published state
        self.state: JourneyState = Idle()
        self.current_position: Optional[VirtualPosition] = None
        self.location_error: Optional[JourneyError] = None

        self._generation = 0
        self._ticker: Optional[asyncio.Task] = None
        self._tasks: set[asyncio.Task] = set()
        self._in_background = False

        self.lifecycle = lifecycle
        self._lifecycle_token = None
        if lifecycle is not None:
            self._lifecycle_token = lifecycle.subscribe(self.on_background, self.on_foreground)

    # -- published views --

    @property
    def discovered_pois(self) -> list[DiscoveredPOI]:
        return list(self.scheduler.discovered)

    @property
    def session(self) -> Optional[JourneySession]:
        return session_of(self.state)

    @property
    def tick_interval(self) -> float:
        return self.reduced_tick_interval if self._reduced_activity else self.normal_tick_interval

    @property
    def reduced_activity(self) -> bool:
        return self._reduced_activity

    @reduced_activity.setter
    def reduced_activity(self, value: bool):
        self._reduced_activity = value
        if self.is_ticking:
            self._start_ticker()

    @property
    def is_ticking(self) -> bool:
        return self._ticker is not None and not self._ticker.done()

    def get_state(self) -> dict:
        """Current state as dict for logging"""
        state = {"state": type(self.state).__name__, "pois": len(self.scheduler.discovered)}
        session = self.session
        if session:
            state["mode"] = session.transport_mode.value
            state["total_distance"] = round(session.total_distance)
        if self.current_position:
            pos = self.current_position
            state["location"] = pos.coordinate.to_dict()
            state["progress"] = round(pos.progress, 4)
            state["distance_traveled"] = round(pos.distance_traveled)
            state["remaining_time"] = round(pos.remaining_time)
        if isinstance(self.state, Failed):
            state["reason"] = self.state.reason
        return state

    def _set_state(self, state: JourneyState):
        self.state = state
        self.logger.log("Journey state", {"state": type(state).__name__})

    # -- journey control --

    async def start_journey(self, location: Optional[Coordinate], mode: TransportMode,
                            duration: float,
                            preset_stations: Optional[Sequence[SubwayStation]] = None,
                            in_city: bool = False) -> JourneyState:
        """Prepare a new journey and start ticking it.

        With no location the location source is asked for one; if that fails
        the error is published in `location_error` and the state is left alone.
        `in_city` treats the location as a city centre for subway rides:
        the ride starts on a random station's line rather than the nearest.
        """
        if duration <= 0:
            raise ValueError("duration must be positive")

        if location is None:
            try:
                location = await self._acquire_location()
            except (LocationPermissionDenied, LocationUnavailable) as e:
                self.location_error = e
                self.logger.log("Location error", {"error": str(e)})
                return self.state
        self.location_error = None

        self._stop_ticker()
        self._generation += 1
        generation = self._generation
        self.current_position = None
        self.scheduler.reset()
        self._set_state(Preparing())

        distance = mode.target_distance(duration)
        self.logger.log("Starting journey", {
            "mode": mode.value,
            "duration": duration,
            "target_distance": distance,
            "location": location.to_dict(),
        })

        try:
            session = await self._prepare_session(location, mode, duration, preset_stations,
                                                  in_city)
        except JourneyError as e:
            self._fail(generation, str(e))
            return self.state
        except Exception as e:
            self.logger.log("Journey preparation crashed", {"error": repr(e)})
            self._fail(generation, str(UnknownJourneyError(str(e) or None)))
            return self.state

        if generation != self._generation:
            self.logger.log("Discarding stale journey preparation", {"session": session.id})
            return self.state

        self._set_state(Active(session))
        self._spawn(self._record_start_area(session, generation))
        self._start_ticker()
        self.update()
        return self.state

    def _fail(self, generation: int, reason: str):
        if generation == self._generation:
            self._set_state(Failed(reason))

    async def _acquire_location(self) -> Coordinate:
        if self.location_source is None:
            raise LocationUnavailable("No location source configured")
        return await asyncio.to_thread(self.location_source.get_location)

    async def _prepare_session(self, location: Coordinate, mode: TransportMode, duration: float,
                               preset_stations: Optional[Sequence[SubwayStation]],
                               in_city: bool = False) -> JourneySession:
        if mode is TransportMode.SUBWAY:
            subway_route = await asyncio.to_thread(
                self.subway.build, location, mode.target_distance(duration), preset_stations,
                in_city
            )
            coordinates = subway_route.coordinates
            return JourneySession(
                id=JourneySession.new_id(),
                start_location=coordinates[0],
                destination_location=coordinates[-1],
                route=coordinates,
                total_distance=subway_route.total_distance,
                duration=duration,
                transport_mode=mode,
                start_time=self.clock(),
                subway_stations=subway_route.stations,
            )

        route = await asyncio.to_thread(self.synthesizer.synthesize, location, mode, duration)
        return JourneySession(
            id=JourneySession.new_id(),
            start_location=location,
            destination_location=route.destination,
            route=route.coordinates,
            total_distance=route.distance,
            duration=duration,
            transport_mode=mode,
            start_time=self.clock(),
        )

    def pause_journey(self):
        match self.state:
            case Active(session=session):
                self._stop_ticker()
                self._set_state(Paused(session=session, paused_at=self.clock()))
            case Idle() | Preparing() | Paused() | Completed() | Failed():
                return

    def resume_journey(self):
        match self.state:
            case Paused(session=session, paused_at=paused_at):
                elapsed = paused_at - session.start_time
                resumed = replace(session, start_time=self.clock() - elapsed)
                self._set_state(Active(resumed))
                self._start_ticker()
            case Idle() | Preparing() | Active() | Completed() | Failed():
                return

    def cancel_journey(self):
        self._stop_ticker()
        self._generation += 1
        self.current_position = None
        self.scheduler.reset()
        self._set_state(Idle())

    def _complete(self, session: JourneySession):
        self._stop_ticker()
        self._set_state(Completed(session))
        self.logger.log("Journey complete", {
            "distance": round(session.total_distance),
            "duration": session.duration,
            "pois": [poi.name for poi in self.scheduler.discovered],
        })

    # -- ticking --

    def update(self, now: Optional[float] = None) -> Optional[VirtualPosition]:
        """One tick: move the position, detect completion, maybe look for POIs"""
        match self.state:
            case Active(session=session):
                pass
            case Idle() | Preparing() | Paused() | Completed() | Failed():
                return None

        now = self.clock() if now is None else now
        position = position_at(session, now)
        self.current_position = position

        if position.remaining_time <= 0:
            self._complete(session)
            return position

        if self.scheduler.should_check(session, position, now):
            self.scheduler.mark_checked(position.coordinate, now)
            self._spawn(self._discover(session, self._generation, position.coordinate))

        return position

    def _start_ticker(self):
        self._stop_ticker()
        if self._in_background:
            return
        loop = asyncio.get_running_loop()
        self._ticker = loop.create_task(self._run_ticker(self.tick_interval))

    def _stop_ticker(self):
        if self._ticker is not None:
            self._ticker.cancel()
            self._ticker = None

    async def _run_ticker(self, interval: float):
        while True:
            await asyncio.sleep(interval)
            self.update()

    # -- lifecycle --

    def on_background(self):
        self._in_background = True
        self._stop_ticker()
        self.logger.log("Entered background, ticker stopped")

    def on_foreground(self):
        self._in_background = False
        match self.state:
            case Active():
                self._start_ticker()
                self.update()
                self.logger.log("Became active, ticker restarted")
            case Idle() | Preparing() | Paused() | Completed() | Failed():
                pass

    def close(self):
        """Stop ticking and detach from lifecycle signals"""
        self._stop_ticker()
        if self.lifecycle is not None and self._lifecycle_token is not None:
            self.lifecycle.unsubscribe(self._lifecycle_token)
            self._lifecycle_token = None

    # -- background tasks --

    def _spawn(self, coro):
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task):
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            self.logger.log("Background task failed", {"error": repr(task.exception())})

    async def drain(self):
        """Wait for in-flight searches to finish"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _is_current(self, session_id: str, generation: int) -> bool:
        if generation != self._generation:
            return False
        match self.state:
            case Active(session=session) | Paused(session=session):
                return session.id == session_id
            case Idle() | Preparing() | Completed() | Failed():
                return False

    async def _record_start_area(self, session: JourneySession, generation: int):
        names = await asyncio.to_thread(self.scheduler.scan_start_area, session.start_location)
        if not self._is_current(session.id, generation):
            self.logger.log("Discarding stale start area scan", {"session": session.id})
            return
        self.scheduler.record_start_area(names)

    async def _discover(self, session: JourneySession, generation: int, coordinate: Coordinate):
        candidates = []
        try:
            candidates = await asyncio.to_thread(self.scheduler.find_candidates, coordinate)
        finally:
            if generation == self._generation:
                self.scheduler.finish_check(self.clock())

        if not self._is_current(session.id, generation):
            self.logger.log("Discarding stale POI results", {"session": session.id})
            return
        self.scheduler.merge(coordinate, candidates, self.clock())
