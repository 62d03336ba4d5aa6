#!/usr/bin/env python3
"""
Roamer - Timed virtual journeys with point-of-interest discovery

Usage:
    python -m roamer [minutes] [options]

Options:
    --mode MODE       walking, cycling, driving or subway (default: walking)
    --lat LAT         Starting latitude (default: GPS fix via termux-location)
    --lon LON         Starting longitude
    --stations FILE   JSON list of {"name", "lat", "lon"} preset subway stations
    --city            Treat --lat/--lon as a city centre (subway: random line)
    --reduced         Reduced activity mode (slower position updates)
    --seed N          Seed for destination bearing / station choice
    --log FILE        Log file path (default: roamer_TIMESTAMP.log)
    --html FILE       Write a map of the journey to an HTML file on exit

Send SIGUSR1 / SIGUSR2 to simulate the app going to background / foreground.
"""

import argparse
import asyncio
import json
import random
import signal
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Optional

from .config import CONFIG
from .geo import bearing_between, bearing_to_compass
from .gps import GPS, FixedLocation
from .journey import JourneyManager
from .lifecycle import AppLifecycle
from .logger import Logger
from .models import Active, Completed, Failed, Paused, SubwayStation, TransportMode
from .osm import OverpassPlaceSearch
from .preview import render_journey_map
from .routing import OSRMRouter


def load_stations(path: str) -> list[SubwayStation]:
    with open(path) as f:
        return [SubwayStation.from_dict(d) for d in json.load(f)]


async def run_journey(manager: JourneyManager, lifecycle: AppLifecycle, args) -> None:
    loop = asyncio.get_running_loop()
    for name, handler in (("SIGUSR1", lifecycle.enter_background),
                          ("SIGUSR2", lifecycle.become_active)):
        if hasattr(signal, name):
            loop.add_signal_handler(getattr(signal, name), handler)

    stations = load_stations(args.stations) if args.stations else None
    mode = TransportMode(args.mode)

    try:
        await manager.start_journey(None, mode, args.minutes * 60, stations, in_city=args.city)
        if manager.location_error:
            print(f"Could not get location: {manager.location_error}")
            return
        if isinstance(manager.state, Failed):
            print(f"Journey failed: {manager.state.reason}")
            return

        session = manager.session
        dest = session.destination_location
        heading = bearing_to_compass(bearing_between(
            session.start_location.lat, session.start_location.lon, dest.lat, dest.lon
        ))
        print(f"Heading {heading}, {session.total_distance:.0f}m over {args.minutes:g} minutes")

        seen = 0
        last_log = 0.0
        while isinstance(manager.state, (Active, Paused)):
            await asyncio.sleep(1)
            pois = manager.discovered_pois
            for poi in pois[seen:]:
                print(f"Discovered: {poi.name}")
            seen = len(pois)
            if time.time() - last_log >= CONFIG["log_interval"]:
                manager.logger.log("STATE", manager.get_state())
                last_log = time.time()

        if isinstance(manager.state, Completed):
            print("Journey complete!")
        await manager.drain()
    finally:
        manager.close()


def finish_journey(manager: JourneyManager, html: Optional[str] = None) -> dict:
    """Cancel an unfinished journey, export the map and log the summary.

    Position and discoveries are read before cancelling, which clears them.
    """
    session = manager.session
    position = manager.current_position
    pois = manager.discovered_pois

    if isinstance(manager.state, (Active, Paused)):
        manager.cancel_journey()

    if html and session:
        render_journey_map(session, html, pois, position)
        print(f"Journey map saved to: {html}")

    summary = {
        "state": type(manager.state).__name__,
        "distance": position.distance_traveled if position else 0,
        "pois": [poi.name for poi in pois],
    }
    manager.logger.log("Journey summary", summary)
    return summary


def main():
    parser = argparse.ArgumentParser(
        description="Roamer - Timed virtual journeys with point-of-interest discovery"
    )
    parser.add_argument("minutes", type=float, nargs="?", default=25.0,
                        help="Journey duration in minutes (default: 25)")
    parser.add_argument("--mode", choices=[m.value for m in TransportMode], default="walking",
                        help="Transport mode (default: walking)")
    parser.add_argument("--lat", type=float, metavar="LAT",
                        help="Starting latitude (default: GPS)")
    parser.add_argument("--lon", type=float, metavar="LON",
                        help="Starting longitude (default: GPS)")
    parser.add_argument("--stations", metavar="FILE",
                        help="JSON file of preset subway stations")
    parser.add_argument("--city", action="store_true",
                        help="Start location is a city centre: ride a random subway line")
    parser.add_argument("--reduced", action="store_true",
                        help="Reduced activity mode (slower updates)")
    parser.add_argument("--seed", type=int,
                        help="Random seed for reproducible journeys")
    parser.add_argument("--log", metavar="FILE",
                        help="Log file path (default: roamer_TIMESTAMP.log)")
    parser.add_argument("--html", metavar="FILE",
                        help="Write a journey map to an HTML file on exit")

    args = parser.parse_args()

    if (args.lat is None) != (args.lon is None):
        parser.error("--lat and --lon must be used together")
    if args.city and args.lat is None:
        parser.error("--city needs --lat and --lon")
    if args.minutes <= 0:
        parser.error("minutes must be positive")
    if args.stations and not Path(args.stations).exists():
        print(f"Stations file not found: {args.stations}")
        sys.exit(1)

    log_path = args.log
    if not log_path:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_path = f"roamer_{timestamp}.log"
    logger = Logger(log_path)

    location_source = FixedLocation(args.lat, args.lon) if args.lat is not None else GPS()
    lifecycle = AppLifecycle()
    manager = JourneyManager(
        OSRMRouter(logger=logger),
        OverpassPlaceSearch(logger=logger),
        location_source=location_source,
        lifecycle=lifecycle,
        rng=random.Random(args.seed),
        logger=logger,
        reduced_activity=args.reduced,
    )

    print("\n=== Roamer ===")
    print(f"Mode: {args.mode}, duration: {args.minutes:g} minutes")
    print("Press Ctrl+C to stop")
    print()

    try:
        asyncio.run(run_journey(manager, lifecycle, args))
    except KeyboardInterrupt:
        print("\nJourney interrupted")
        logger.log("Journey interrupted by user")
    finally:
        summary = finish_journey(manager, args.html)

        print("\nJourney summary:")
        print(f"  State: {summary['state']}")
        print(f"  Distance: {summary['distance']:.0f}m")
        print(f"  Discovered: {len(summary['pois'])}")
        logger.close()


if __name__ == "__main__":
    main()
