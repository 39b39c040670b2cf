# ABOUTME: Text rendering for the weather widget status line and forecast table
# ABOUTME: Pure functions over ForecastResult so any UI layer can display them

from datetime import datetime
from typing import Optional, Sequence

from weather_widget.config import WidgetSettings
from weather_widget.weather.models import (
    Error,
    ForecastResult,
    ForecastSample,
    Present,
    WeatherCode,
)

NO_DATA = "No data"
NO_PRECIPITATION = "No precipitation expected"

# Rain amount (mm) that fills the whole bar
MAX_RAIN_MM = 15.0
MIN_BAR_HEIGHT = 3

# (lower bound exclusive, arrow), first match wins.
# Arrows point where the wind blows to.
WIND_ARROWS = [
    (337.5, "↓"),
    (292.5, "↘"),
    (247.5, "→"),
    (202.5, "↗"),
    (157.5, "↑"),
    (122.5, "↖"),
    (67.5, "←"),
    (22.5, "↙"),
]


def wind_arrow(degrees: float) -> str:
    """Arrow glyph for a wind direction in degrees."""
    for bound, arrow in WIND_ARROWS:
        if degrees > bound:
            return arrow
    return "↓"


def format_temperature(value: float) -> str:
    """Rounded temperature with a + sign above zero."""
    rounded = round(value)
    return f"+{rounded}" if rounded > 0 else str(rounded)


def precipitation_expected(samples: Sequence[ForecastSample]) -> bool:
    return any(sample.precipitation > 0.0 for sample in samples)


def status_text(result: ForecastResult, settings: WidgetSettings) -> str:
    """
    Short text for the status bar.

    Shows the first hour's wind arrow and speed and/or temperature,
    depending on the show_wind/show_temperature settings.
    """
    if not isinstance(result, Present):
        return NO_DATA

    first = result.samples[0]
    parts = []
    if settings.show_wind:
        parts.append(f"{wind_arrow(first.wind_direction)}{round(first.wind_speed)}")
    if settings.show_temperature:
        parts.append(format_temperature(first.temperature))
    return " ".join(parts)


def weather_description(result: ForecastResult) -> str:
    """Description of the current hour's weather, empty without data."""
    if not isinstance(result, Present):
        return ""
    return WeatherCode.describe(result.samples[0].weather_code)


def tooltip_text(result: ForecastResult) -> str:
    if isinstance(result, Error):
        return result.message
    return weather_description(result)


def format_hour(timestamp: int, tz=None) -> str:
    return datetime.fromtimestamp(timestamp, tz=tz).strftime("%H") + "h"


def forecast_rows(
    result: ForecastResult,
    settings: WidgetSettings,
    tz=None
) -> list[dict[str, str]]:
    """
    Table rows for the detailed forecast popup.

    The precipitation column is only filled when any hour has rain.
    Weather descriptions are added for codes beyond overcast.

    Returns:
        One dict per hour with keys hour, temperature, precipitation,
        pressure, wind, direction. Empty for Error/NotPresent.
    """
    if not isinstance(result, Present):
        return []

    show_rain = precipitation_expected(result.samples)
    rows = []
    for sample in result.samples:
        precipitation = ""
        if show_rain:
            if sample.weather_code > 3:
                precipitation = WeatherCode.describe(sample.weather_code) + " "
            if sample.precipitation > 0.0:
                precipitation += f"{sample.precipitation} mm"

        pressure = settings.pressure_unit.convert(sample.surface_pressure)
        rows.append({
            "hour": format_hour(sample.timestamp, tz),
            "temperature": f"{format_temperature(sample.temperature)} {settings.temperature_unit.symbol}",
            "precipitation": precipitation.strip(),
            "pressure": f"{round(pressure)} {settings.pressure_unit.label}",
            "wind": f"{round(sample.wind_speed)} {settings.wind_speed_unit.label}",
            "direction": wind_arrow(sample.wind_direction),
        })
    return rows


def bar_level(value: float, max_height: int, max_value: float = MAX_RAIN_MM) -> int:
    """Rain bar height in pixels, never below MIN_BAR_HEIGHT for any rain."""
    if value == 0.0:
        return 0
    if value >= max_value:
        return max_height
    height = value / max_value * max_height
    if height <= MIN_BAR_HEIGHT:
        return MIN_BAR_HEIGHT
    return int(height)


def now_fraction(samples: Sequence[ForecastSample], now: float) -> Optional[float]:
    """
    Position of the current time across the forecast window.

    The window runs from the first sample's hour to the end of the last
    sample's hour. Returns None for an empty sequence.
    """
    if not samples:
        return None
    start = samples[0].timestamp
    span = samples[-1].timestamp + 3600 - start
    return min(1.0, max(0.0, (now - start) / span))


def rain_bars_html(
    result: ForecastResult,
    color: str,
    now: float,
    bar_height: int = 24,
    bar_width: int = 10
) -> str:
    """
    Inline rain bar chart with a marker at the current time.

    Empty unless the result is Present and some rain is expected.
    """
    if not isinstance(result, Present) or not precipitation_expected(result.samples):
        return ""

    slot = bar_width + 2
    bars = []
    for sample in result.samples:
        level = bar_level(sample.precipitation, bar_height)
        bars.append(
            f'<div style="width: {bar_width}px; height: {level}px; margin: 0 1px; '
            f'background: {color};"></div>'
        )

    marker = ""
    fraction = now_fraction(result.samples, now)
    if fraction is not None:
        left = round(fraction * slot * len(result.samples))
        marker = (
            f'<div class="now-marker" style="position: absolute; left: {left}px; '
            f'top: 0; bottom: 0; width: 1px; background: #888;"></div>'
        )

    return (
        f'<div style="position: relative; display: flex; align-items: flex-end; '
        f'height: {bar_height}px;">{"".join(bars)}{marker}</div>'
    )
