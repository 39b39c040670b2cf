# ABOUTME: Application configuration including location, units and refresh timing
# ABOUTME: Config reads the environment once, WidgetSettings is the live settings store

import os
import threading
from dataclasses import dataclass, field, fields, replace
from dotenv import load_dotenv

from weather_widget.weather.models import PressureUnit, TemperatureUnit, WindSpeedUnit

load_dotenv()

MIN_FORECAST_HOURS = 2
MAX_FORECAST_HOURS = 10


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


def _clamp_hours(hours: int) -> int:
    return max(MIN_FORECAST_HOURS, min(MAX_FORECAST_HOURS, hours))


class Config:
    """Application configuration"""

    # Location: Greenwich, London
    LATITUDE = float(os.getenv("WEATHER_LATITUDE", "51.49141"))
    LONGITUDE = float(os.getenv("WEATHER_LONGITUDE", "-0.035749"))
    CITY_NAME = os.getenv("WEATHER_CITY_NAME", "London")

    # Forecast window shown in the widget, 2-10 hours
    FORECAST_HOURS = _clamp_hours(int(os.getenv("FORECAST_HOURS", "5")))

    # Units
    TEMPERATURE_UNIT = os.getenv("TEMPERATURE_UNIT", "celsius")
    WIND_SPEED_UNIT = os.getenv("WIND_SPEED_UNIT", "kmh")
    PRESSURE_UNIT = os.getenv("PRESSURE_UNIT", "mmHg")

    # What the status line shows
    SHOW_WIND = _env_bool("SHOW_WIND", "true")
    SHOW_TEMPERATURE = _env_bool("SHOW_TEMPERATURE", "true")

    # Rain bar colour (RGB hex)
    RAIN_BAR_COLOR = os.getenv("RAIN_BAR_COLOR", "#4287f5")

    # Refresh timing
    # No new attempt within this window after the previous one
    REFRESH_DEBOUNCE_SECONDS = int(os.getenv("REFRESH_DEBOUNCE_SECONDS", "30"))
    # A successful forecast older than this gets refreshed
    FORECAST_STALE_SECONDS = int(os.getenv("FORECAST_STALE_SECONDS", "300"))  # 5 minutes
    # Background loop tick
    POLL_INTERVAL_SECONDS = int(os.getenv("POLL_INTERVAL_SECONDS", "20"))
    # HTTP timeout for the forecast API
    FETCH_TIMEOUT_SECONDS = int(os.getenv("FETCH_TIMEOUT_SECONDS", "10"))

    # Web page
    PORT = int(os.getenv("PORT", "8080"))

    # Debug mode
    DEBUG = os.getenv("DEBUG", "false").lower() == "true"


@dataclass
class WidgetSettings:
    """
    User-editable widget settings.

    The forecast fetcher reads these at fetch time. Changes go through
    update() so a fetch never sees a half-applied change.
    """
    latitude: float = 51.49141
    longitude: float = -0.035749
    hours: int = 5
    temperature_unit: TemperatureUnit = TemperatureUnit.CELSIUS
    wind_speed_unit: WindSpeedUnit = WindSpeedUnit.KMH
    pressure_unit: PressureUnit = PressureUnit.MMHG
    city_name: str = "London"
    show_wind: bool = True
    show_temperature: bool = True
    rain_bar_color: str = "#4287f5"
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False, compare=False)

    def __post_init__(self):
        self.temperature_unit = TemperatureUnit(self.temperature_unit)
        self.wind_speed_unit = WindSpeedUnit(self.wind_speed_unit)
        if not isinstance(self.pressure_unit, PressureUnit):
            self.pressure_unit = PressureUnit.from_label(self.pressure_unit)
        self.validate()

    @classmethod
    def from_config(cls) -> "WidgetSettings":
        """Build settings from environment-backed Config."""
        return cls(
            latitude=Config.LATITUDE,
            longitude=Config.LONGITUDE,
            hours=Config.FORECAST_HOURS,
            temperature_unit=TemperatureUnit(Config.TEMPERATURE_UNIT),
            wind_speed_unit=WindSpeedUnit(Config.WIND_SPEED_UNIT),
            pressure_unit=PressureUnit.from_label(Config.PRESSURE_UNIT),
            city_name=Config.CITY_NAME,
            show_wind=Config.SHOW_WIND,
            show_temperature=Config.SHOW_TEMPERATURE,
            rain_bar_color=Config.RAIN_BAR_COLOR,
        )

    def validate(self) -> None:
        """Raise ValueError if any field is out of range."""
        if not MIN_FORECAST_HOURS <= self.hours <= MAX_FORECAST_HOURS:
            raise ValueError(
                f"Hours must be {MIN_FORECAST_HOURS}-{MAX_FORECAST_HOURS}, got {self.hours}"
            )
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"Latitude must be -90..90, got {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"Longitude must be -180..180, got {self.longitude}")

    def snapshot(self) -> "WidgetSettings":
        """Consistent copy for one fetch."""
        with self._lock:
            return replace(self)

    def update(self, **changes) -> None:
        """
        Apply changes atomically.

        Args:
            **changes: Field names and new values

        Raises:
            ValueError: Unknown field or invalid value; nothing is applied
        """
        known = {f.name for f in fields(self) if not f.name.startswith("_")}
        unknown = set(changes) - known
        if unknown:
            raise ValueError(f"Unknown settings: {sorted(unknown)}")

        with self._lock:
            candidate = replace(self, **changes)
            for name in changes:
                setattr(self, name, getattr(candidate, name))
