# ABOUTME: Tests for widget status line and forecast table formatting
# ABOUTME: Validates wind arrows, temperature signs, rain bars and row contents

from datetime import timezone

import pytest

from conftest import make_sample, make_samples
from weather_widget.config import WidgetSettings
from weather_widget.ui.formatting import (
    NO_DATA,
    bar_level,
    format_temperature,
    forecast_rows,
    now_fraction,
    precipitation_expected,
    rain_bars_html,
    status_text,
    tooltip_text,
    weather_description,
    wind_arrow,
)
from weather_widget.weather.models import Error, NOT_PRESENT, Present, PressureUnit, WindSpeedUnit


class TestWindArrow:
    """Tests for direction -> arrow mapping"""

    @pytest.mark.parametrize("degrees,arrow", [
        (0.0, "↓"),
        (22.5, "↓"),
        (45.0, "↙"),
        (90.0, "←"),
        (135.0, "↖"),
        (180.0, "↑"),
        (225.0, "↗"),
        (270.0, "→"),
        (315.0, "↘"),
        (350.0, "↓"),
    ])
    def test_arrows(self, degrees, arrow):
        assert wind_arrow(degrees) == arrow


class TestFormatTemperature:
    def test_positive_gets_plus(self):
        assert format_temperature(12.4) == "+12"

    def test_zero_has_no_sign(self):
        assert format_temperature(0.2) == "0"

    def test_negative(self):
        assert format_temperature(-3.6) == "-4"


class TestStatusText:
    """Tests for the short status line"""

    def test_no_data_for_error_and_not_present(self):
        settings = WidgetSettings()

        assert status_text(NOT_PRESENT, settings) == NO_DATA
        assert status_text(Error("boom"), settings) == NO_DATA

    def test_wind_and_temperature(self):
        result = Present([make_sample(wind_direction=270.0, wind_speed=11.6, temperature=7.0)])

        assert status_text(result, WidgetSettings()) == "→12 +7"

    def test_only_temperature(self):
        result = Present([make_sample(temperature=-2.0)])
        settings = WidgetSettings(show_wind=False)

        assert status_text(result, settings) == "-2"

    def test_nothing_shown(self):
        settings = WidgetSettings(show_wind=False, show_temperature=False)

        assert status_text(Present(make_samples(1)), settings) == ""


class TestTooltip:
    def test_error_shows_message(self):
        assert tooltip_text(Error("ConnectionError")) == "ConnectionError"

    def test_not_present_is_empty(self):
        assert tooltip_text(NOT_PRESENT) == ""

    def test_present_shows_weather(self):
        assert tooltip_text(Present([make_sample(weather_code=3)])) == "Overcast"
        assert weather_description(Present([make_sample(weather_code=3)])) == "Overcast"


class TestForecastRows:
    """Tests for the detailed forecast table"""

    def test_empty_without_data(self):
        assert forecast_rows(NOT_PRESENT, WidgetSettings()) == []
        assert forecast_rows(Error("x"), WidgetSettings()) == []

    def test_row_per_sample(self):
        rows = forecast_rows(Present(make_samples(4)), WidgetSettings())

        assert len(rows) == 4

    def test_row_contents(self):
        sample = make_sample(
            temperature=15.2,
            surface_pressure=1013.25,
            wind_speed=20.4,
            wind_direction=90.0,
        )
        settings = WidgetSettings(pressure_unit=PressureUnit.MMHG, wind_speed_unit=WindSpeedUnit.KNOTS)

        row = forecast_rows(Present([sample]), settings, tz=timezone.utc)[0]

        assert row["hour"].endswith("h")
        assert row["temperature"] == "+15 °C"
        assert row["pressure"] == "760 mmHg"
        assert row["wind"] == "20 kn"
        assert row["direction"] == "←"

    def test_hour_column_in_given_timezone(self):
        sample = make_sample(timestamp=1_700_002_800)  # 23:00 UTC

        row = forecast_rows(Present([sample]), WidgetSettings(), tz=timezone.utc)[0]

        assert row["hour"] == "23h"

    def test_precipitation_blank_when_dry(self):
        rows = forecast_rows(Present(make_samples(3)), WidgetSettings())

        assert all(row["precipitation"] == "" for row in rows)

    def test_precipitation_with_description(self):
        samples = [
            make_sample(hour=0, precipitation=0.0, weather_code=2),
            make_sample(hour=1, precipitation=1.5, weather_code=63),
        ]

        rows = forecast_rows(Present(samples), WidgetSettings())

        assert rows[0]["precipitation"] == ""
        assert rows[1]["precipitation"] == "Rain 1.5 mm"

    def test_precipitation_expected(self):
        assert precipitation_expected(make_samples(3)) is False
        assert precipitation_expected([make_sample(precipitation=0.1)]) is True


class TestBarLevel:
    """Tests for rain bar heights"""

    def test_no_rain_no_bar(self):
        assert bar_level(0.0, 20) == 0

    def test_light_rain_minimum_height(self):
        assert bar_level(0.1, 20) == 3

    def test_heavy_rain_full_height(self):
        assert bar_level(15.0, 20) == 20
        assert bar_level(40.0, 20) == 20

    def test_proportional(self):
        assert bar_level(7.5, 20) == 10


class TestNowFraction:
    def test_empty(self):
        assert now_fraction([], 0.0) is None

    def test_middle_of_window(self):
        samples = make_samples(2)
        start = samples[0].timestamp

        assert now_fraction(samples, start + 3600) == pytest.approx(0.5)

    def test_clamped(self):
        samples = make_samples(2)

        assert now_fraction(samples, samples[0].timestamp - 100) == 0.0
        assert now_fraction(samples, samples[-1].timestamp + 10_000) == 1.0


class TestRainBarsHtml:
    """Tests for the inline rain chart"""

    def test_empty_without_rain(self):
        samples = make_samples(3)

        assert rain_bars_html(Present(samples), "#4287f5", samples[0].timestamp) == ""
        assert rain_bars_html(NOT_PRESENT, "#4287f5", 0.0) == ""

    def test_one_bar_per_sample_in_color(self):
        samples = [make_sample(hour=0, precipitation=15.0), make_sample(hour=1, precipitation=0.0)]

        html = rain_bars_html(Present(samples), "#4287f5", samples[0].timestamp, bar_height=24)

        assert html.count("background: #4287f5;") == 2
        assert "height: 24px; margin" in html
        assert "height: 0px; margin" in html

    def test_now_marker_at_current_time(self):
        samples = [make_sample(hour=0, precipitation=2.0), make_sample(hour=1, precipitation=2.0)]
        now = samples[0].timestamp + 3600

        html = rain_bars_html(Present(samples), "#4287f5", now, bar_width=10)

        assert 'class="now-marker"' in html
        assert "left: 12px;" in html
