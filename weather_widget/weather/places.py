# ABOUTME: Nearest-place lookup against a table of world capitals
# ABOUTME: Uses haversine great-circle distance to name a coordinate pair

import math
from dataclasses import dataclass
from typing import Sequence

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class Place:
    """Named location"""
    name: str
    latitude: float
    longitude: float


CAPITALS = [
    Place("London", 51.5074, -0.1278),
    Place("Paris", 48.8566, 2.3522),
    Place("Berlin", 52.5200, 13.4050),
    Place("Madrid", 40.4168, -3.7038),
    Place("Lisbon", 38.7223, -9.1393),
    Place("Rome", 41.9028, 12.4964),
    Place("Amsterdam", 52.3676, 4.9041),
    Place("Brussels", 50.8503, 4.3517),
    Place("Dublin", 53.3498, -6.2603),
    Place("Vienna", 48.2082, 16.3738),
    Place("Bern", 46.9480, 7.4474),
    Place("Prague", 50.0755, 14.4378),
    Place("Warsaw", 52.2297, 21.0122),
    Place("Budapest", 47.4979, 19.0402),
    Place("Copenhagen", 55.6761, 12.5683),
    Place("Oslo", 59.9139, 10.7522),
    Place("Stockholm", 59.3293, 18.0686),
    Place("Helsinki", 60.1699, 24.9384),
    Place("Tallinn", 59.4370, 24.7536),
    Place("Riga", 56.9496, 24.1052),
    Place("Vilnius", 54.6872, 25.2797),
    Place("Kyiv", 50.4501, 30.5234),
    Place("Athens", 37.9838, 23.7275),
    Place("Belgrade", 44.7866, 20.4489),
    Place("Bucharest", 44.4268, 26.1025),
    Place("Sofia", 42.6977, 23.3219),
    Place("Ankara", 39.9334, 32.8597),
    Place("Reykjavik", 64.1466, -21.9426),
    Place("Cairo", 30.0444, 31.2357),
    Place("Nairobi", -1.2921, 36.8219),
    Place("Pretoria", -25.7479, 28.2293),
    Place("Abuja", 9.0765, 7.3986),
    Place("Rabat", 34.0209, -6.8416),
    Place("Washington", 38.9072, -77.0369),
    Place("Ottawa", 45.4215, -75.6972),
    Place("Mexico City", 19.4326, -99.1332),
    Place("Brasilia", -15.7975, -47.8919),
    Place("Buenos Aires", -34.6037, -58.3816),
    Place("Santiago", -33.4489, -70.6693),
    Place("Lima", -12.0464, -77.0428),
    Place("Bogota", 4.7110, -74.0721),
    Place("Tokyo", 35.6762, 139.6503),
    Place("Seoul", 37.5665, 126.9780),
    Place("Beijing", 39.9042, 116.4074),
    Place("New Delhi", 28.6139, 77.2090),
    Place("Bangkok", 13.7563, 100.5018),
    Place("Jakarta", -6.2088, 106.8456),
    Place("Singapore", 1.3521, 103.8198),
    Place("Canberra", -35.2809, 149.1300),
    Place("Wellington", -41.2865, 174.7762),
]


def haversine(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in km between two WGS84 points."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def find_closest_place(
    latitude: float,
    longitude: float,
    places: Sequence[Place] = CAPITALS
) -> str:
    """
    Name of the place nearest to the given coordinates.

    Ties go to the entry listed first.

    Raises:
        ValueError: places is empty
    """
    if not places:
        raise ValueError("No places to search")

    closest = places[0]
    smallest = haversine(latitude, longitude, closest.latitude, closest.longitude)

    for place in places[1:]:
        distance = haversine(latitude, longitude, place.latitude, place.longitude)
        if distance < smallest:
            closest = place
            smallest = distance

    return closest.name
