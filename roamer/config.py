"""Configuration settings for Roamer."""

CONFIG = {
    # Transport speeds (km/h)
    "speeds_kmh": {
        "walking": 5.0,
        "cycling": 18.0,
        "driving": 50.0,
        "subway": 35.0,
    },
    "earth_radius": 6371000,  # meters
    # Journey ticker
    "tick_interval": 1.5,  # seconds
    "reduced_tick_interval": 3.0,  # seconds - reduced activity mode
    # Destination validation
    "destination_attempts": 5,
    "destination_validation_radius": 500,  # meters
    # Subway line reconstruction
    "subway_search_radius": 10000,  # meters - find the nearest station
    "subway_line_radius": 5000,  # meters - gather line-mates around it
    "subway_city_radius": 5000,  # meters - stations around a city centre
    "subway_duplicate_distance": 50,  # meters - closer stations are the same station
    "subway_point_spacing": 50,  # meters between interpolated points
    "subway_min_points_per_segment": 20,
    "subway_max_coordinates": 50000,
    "subway_search_delay": 0.2,  # seconds between search terms
    "subway_search_terms": [
        "subway station",
        "metro station",
        "underground station",
        "地铁站",
        "轨道交通",
        "捷运站",
        "transit station",
    ],
    "subway_name_keywords": [
        "subway", "metro", "underground", "station",
        "地铁", "站", "轨道", "捷运",
    ],
    # POI discovery
    "poi_check_interval": 300,  # seconds between checks
    "poi_min_move": 50,  # meters moved since the last check
    "minimum_travel_distance": 200,  # meters from start before discovering
    "discovery_radius": 100,  # meters
    "discovery_query": "landmark",
    "discovery_max_results": 2,
    "discovery_cooldown": 2.0,  # seconds after each query (provider throttling)
    "start_area_queries": ["restaurant", "landmark", "park", "cafe", "museum"],
    "start_area_delay": 0.3,  # seconds between start-area queries
    # Providers
    "osrm_servers": {
        "walking": ("https://routing.openstreetmap.de/routed-foot", "foot"),
        "driving": ("https://routing.openstreetmap.de/routed-car", "driving"),
    },
    "routing_timeout": 30,  # seconds
    "overpass_url": "https://overpass-api.de/api/interpreter",
    "overpass_timeout": 25,  # seconds
    "place_cache_max_age": 24 * 3600,  # seconds
    "log_interval": 10,  # seconds between CLI state log entries
}
