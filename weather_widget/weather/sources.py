# ABOUTME: Open-Meteo API client for hourly forecast data
# ABOUTME: Fetches per-metric hourly series and merges them into ForecastSample lists

import logging
import time
from typing import Optional

import requests

from weather_widget.config import Config, WidgetSettings
from weather_widget.weather.models import (
    ForecastSample,
    TemperatureUnit,
    WeatherCode,
    WindSpeedUnit,
)

log = logging.getLogger(__name__)

# Hourly metric names as requested from Open-Meteo
PRECIPITATION = "precipitation"
TEMPERATURE = "temperature_2m"
WIND_SPEED = "wind_speed_10m"
WIND_DIRECTION = "wind_direction_10m"
WEATHER_CODE = "weather_code"
SURFACE_PRESSURE = "surface_pressure"

HOURLY_METRICS = [
    PRECIPITATION,
    TEMPERATURE,
    WIND_SPEED,
    WIND_DIRECTION,
    WEATHER_CODE,
    SURFACE_PRESSURE,
]

# Samples from up to one hour ago are still shown, so the current hour is included
LOOKBACK_SECONDS = 60 * 60


class ForecastFetchError(Exception):
    """Upstream returned something we can't turn into a forecast"""


def _series(hourly: dict, times: list, metric: str) -> dict[int, float]:
    """Map timestamp -> value for one metric, skipping gaps."""
    values = hourly.get(metric) or []
    return {
        int(t): v
        for t, v in zip(times, values)
        if v is not None
    }


def merge_hourly(hourly: dict, now: float, hours: int) -> list[ForecastSample]:
    """
    Merge per-metric hourly series into forecast samples.

    Precipitation is the key series: each of its timestamps newer than
    one hour ago becomes a sample. Other metrics are joined on timestamp
    and default to 0.0 where missing (weather code defaults to clear sky).

    Args:
        hourly: Open-Meteo "hourly" block, unixtime timestamps under "time"
        now: Current epoch seconds
        hours: Max number of samples to return

    Returns:
        Samples sorted by timestamp, at most `hours` long

    Raises:
        ForecastFetchError: Missing time/precipitation series or nothing left after filtering
    """
    if "time" not in hourly or PRECIPITATION not in hourly:
        raise ForecastFetchError(f"Hourly data missing time or {PRECIPITATION} series")

    times = hourly["time"] or []
    cutoff = now - LOOKBACK_SECONDS

    precipitation = _series(hourly, times, PRECIPITATION)
    temperature = _series(hourly, times, TEMPERATURE)
    wind_speed = _series(hourly, times, WIND_SPEED)
    wind_direction = _series(hourly, times, WIND_DIRECTION)
    weather_code = _series(hourly, times, WEATHER_CODE)
    surface_pressure = _series(hourly, times, SURFACE_PRESSURE)

    samples = [
        ForecastSample(
            timestamp=t,
            precipitation=float(rain),
            temperature=float(temperature.get(t, 0.0)),
            wind_speed=float(wind_speed.get(t, 0.0)),
            wind_direction=float(wind_direction.get(t, 0.0)),
            weather_code=int(weather_code.get(t, WeatherCode.CLEAR)),
            surface_pressure=float(surface_pressure.get(t, 0.0)),
        )
        for t, rain in sorted(precipitation.items())
        if t > cutoff
    ]

    if not samples:
        raise ForecastFetchError("Forecast contains no upcoming hours")

    return samples[:hours]


class OpenMeteoClient:
    """Client for fetching hourly forecasts from Open-Meteo"""

    BASE_URL = "https://api.open-meteo.com/v1/forecast"
    FORECAST_DAYS = 2

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout if timeout is not None else Config.FETCH_TIMEOUT_SECONDS

    def fetch_hourly(
        self,
        latitude: float,
        longitude: float,
        hours: int,
        temperature_unit: TemperatureUnit = TemperatureUnit.CELSIUS,
        wind_speed_unit: WindSpeedUnit = WindSpeedUnit.KMH,
    ) -> list[ForecastSample]:
        """
        Fetch the next `hours` hourly samples for a location.

        Args:
            latitude: WGS84 latitude
            longitude: WGS84 longitude
            hours: Max samples to return
            temperature_unit: Unit for temperature values
            wind_speed_unit: Unit for wind speed values

        Returns:
            Merged samples, oldest first

        Raises:
            ValueError: Coordinates out of range
            requests.RequestException: Network or HTTP error
            ForecastFetchError: Malformed response
        """
        if not -90.0 <= latitude <= 90.0 or not -180.0 <= longitude <= 180.0:
            raise ValueError(f"Invalid coordinates: {latitude}, {longitude}")

        params = {
            "latitude": latitude,
            "longitude": longitude,
            "hourly": ",".join(HOURLY_METRICS),
            "forecast_days": self.FORECAST_DAYS,
            "temperature_unit": TemperatureUnit(temperature_unit).value,
            "wind_speed_unit": WindSpeedUnit(wind_speed_unit).value,
            "timeformat": "unixtime",
            "timezone": "auto",
        }

        log.debug(f"Fetching forecast for {latitude},{longitude}")
        response = requests.get(self.BASE_URL, params=params, timeout=self.timeout)
        response.raise_for_status()

        try:
            data = response.json()
        except ValueError as e:
            raise ForecastFetchError(f"Response is not JSON: {e}") from e

        hourly = data.get("hourly") if isinstance(data, dict) else None
        if not isinstance(hourly, dict):
            raise ForecastFetchError(f"Response has no hourly block: {data}")

        samples = merge_hourly(hourly, now=time.time(), hours=hours)
        log.info(f"Fetched {len(samples)} forecast hours for {latitude},{longitude}")
        return samples

    def __call__(self, settings: WidgetSettings) -> list[ForecastSample]:
        """Fetch using the current widget settings."""
        return self.fetch_hourly(
            latitude=settings.latitude,
            longitude=settings.longitude,
            hours=settings.hours,
            temperature_unit=settings.temperature_unit,
            wind_speed_unit=settings.wind_speed_unit,
        )
