"""HTML map export of a journey."""

from typing import Iterable, Optional

import folium

from .models import DiscoveredPOI, JourneySession, VirtualPosition


def build_journey_map(session: JourneySession,
                      discovered: Iterable[DiscoveredPOI] = (),
                      position: Optional[VirtualPosition] = None) -> folium.Map:
    """Create an interactive map with the route, stations, POIs and position."""
    start = session.start_location
    m = folium.Map(
        location=[start.lat, start.lon],
        zoom_start=15,
        tiles="CartoDB positron"
    )
    folium.TileLayer("OpenStreetMap", name="OpenStreetMap").add_to(m)

    route_layer = folium.FeatureGroup(name="Route", show=True)
    coords = [[c.lat, c.lon] for c in session.route]
    folium.PolyLine(
        coords,
        weight=5,
        color="#3b82f6",
        opacity=0.8,
        popup=folium.Popup(
            f"<b>{session.transport_mode.value}</b><br>{session.total_distance/1000:.2f} km",
            max_width=200
        )
    ).add_to(route_layer)

    folium.Marker(
        [start.lat, start.lon],
        popup="Start",
        icon=folium.Icon(color="blue", icon="home")
    ).add_to(route_layer)
    dest = session.destination_location
    folium.Marker(
        [dest.lat, dest.lon],
        popup="Destination",
        icon=folium.Icon(color="red", icon="flag")
    ).add_to(route_layer)
    route_layer.add_to(m)

    if session.subway_stations:
        station_layer = folium.FeatureGroup(name="Stations", show=True)
        for station in session.subway_stations:
            folium.CircleMarker(
                [station.coordinate.lat, station.coordinate.lon],
                radius=6,
                color="#333333",
                fill=True,
                fill_color="#f97316",
                fill_opacity=1,
                popup=station.name
            ).add_to(station_layer)
        station_layer.add_to(m)

    poi_layer = folium.FeatureGroup(name="Discovered", show=True)
    for poi in discovered:
        folium.Marker(
            [poi.coordinate.lat, poi.coordinate.lon],
            popup=f"<b>{poi.name}</b><br>{poi.category}",
            icon=folium.Icon(color="green", icon="star")
        ).add_to(poi_layer)
    poi_layer.add_to(m)

    if position is not None:
        folium.CircleMarker(
            [position.coordinate.lat, position.coordinate.lon],
            radius=9,
            color="white",
            fill=True,
            fill_color="#ef4444",
            fill_opacity=1,
            popup=f"{position.progress * 100:.0f}%"
        ).add_to(m)

    m.fit_bounds([[min(c[0] for c in coords), min(c[1] for c in coords)],
                  [max(c[0] for c in coords), max(c[1] for c in coords)]])
    folium.LayerControl().add_to(m)
    return m


def render_journey_map(session: JourneySession, path: str,
                       discovered: Iterable[DiscoveredPOI] = (),
                       position: Optional[VirtualPosition] = None) -> str:
    """Write the journey map to an HTML file and return its path"""
    build_journey_map(session, discovered, position).save(path)
    return path
