# ABOUTME: Data models for hourly forecast samples and cached forecast results
# ABOUTME: Provides the Present/Error/NotPresent result variants, units and WMO codes

from dataclasses import dataclass
from enum import Enum
from typing import Union


@dataclass(frozen=True)
class ForecastSample:
    """One hour of forecast data"""
    timestamp: int              # Epoch seconds, aligned to the hour
    precipitation: float        # mm
    temperature: float
    wind_speed: float
    wind_direction: float       # Degrees, 0-360
    weather_code: int           # WMO code, 0 = clear sky
    surface_pressure: float     # hPa

    def __str__(self) -> str:
        return (
            f"{self.temperature:.1f}° "
            f"rain {self.precipitation:.1f}mm, "
            f"wind {self.wind_speed:.1f} @ {self.wind_direction:.0f}°"
        )


@dataclass(frozen=True)
class Present:
    """Successfully fetched forecast, ordered by ascending timestamp"""
    samples: tuple[ForecastSample, ...]

    def __post_init__(self):
        if not self.samples:
            raise ValueError("Present forecast must contain at least one sample")
        # Accept any sequence but store an immutable tuple
        object.__setattr__(self, "samples", tuple(self.samples))


@dataclass(frozen=True)
class Error:
    """Failed fetch, message is for display only"""
    message: str


@dataclass(frozen=True)
class NotPresent:
    """No fetch has completed yet"""


NOT_PRESENT = NotPresent()

ForecastResult = Union[Present, Error, NotPresent]


@dataclass(frozen=True)
class CacheState:
    """
    Snapshot of the forecast cache.

    Replaced as a whole on every refresh so readers never see a result
    paired with timestamps from a different attempt.
    """
    result: ForecastResult = NOT_PRESENT
    last_update: float = 0.0    # Last successful fetch
    last_attempt: float = 0.0   # Last fetch, successful or not


class TemperatureUnit(str, Enum):
    """Temperature units, values match the Open-Meteo query parameter"""
    CELSIUS = "celsius"
    FAHRENHEIT = "fahrenheit"

    @property
    def symbol(self) -> str:
        return "°C" if self is TemperatureUnit.CELSIUS else "°F"


class WindSpeedUnit(str, Enum):
    """Wind speed units, values match the Open-Meteo query parameter"""
    KMH = "kmh"
    MS = "ms"
    MPH = "mph"
    KNOTS = "kn"

    @property
    def label(self) -> str:
        return {
            WindSpeedUnit.KMH: "km/h",
            WindSpeedUnit.MS: "m/s",
            WindSpeedUnit.MPH: "mph",
            WindSpeedUnit.KNOTS: "kn",
        }[self]


class PressureUnit(Enum):
    """Display units for surface pressure, upstream always reports hPa"""
    MMHG = ("mmHg", 0.75006375541921)
    HPA = ("hPa", 1.0)

    def __init__(self, label: str, multiplier: float) -> None:
        self.label = label
        self.multiplier = multiplier

    @classmethod
    def from_label(cls, label: str) -> "PressureUnit":
        for unit in cls:
            if unit.label.lower() == label.lower() or unit.name.lower() == label.lower():
                return unit
        raise ValueError(f"Unknown pressure unit: {label}")

    def convert(self, hpa: float) -> float:
        return hpa * self.multiplier


class WeatherCode:
    """WMO weather interpretation codes as reported by Open-Meteo"""

    CLEAR = 0

    DESCRIPTIONS = {
        0: "Clear sky",
        1: "Mainly clear",
        2: "Partly cloudy",
        3: "Overcast",
        45: "Fog",
        48: "Rime fog",
        51: "Light drizzle",
        53: "Drizzle",
        55: "Dense drizzle",
        56: "Freezing drizzle",
        57: "Dense freezing drizzle",
        61: "Light rain",
        63: "Rain",
        65: "Heavy rain",
        66: "Freezing rain",
        67: "Heavy freezing rain",
        71: "Light snow",
        73: "Snow",
        75: "Heavy snow",
        77: "Snow grains",
        80: "Light showers",
        81: "Showers",
        82: "Violent showers",
        85: "Snow showers",
        86: "Heavy snow showers",
        95: "Thunderstorm",
        96: "Thunderstorm with hail",
        99: "Thunderstorm with heavy hail",
    }

    @classmethod
    def describe(cls, code: int) -> str:
        return cls.DESCRIPTIONS.get(code, "Unknown")
