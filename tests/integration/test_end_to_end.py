# ABOUTME: End-to-end tests from HTTP response to rendered status line
# ABOUTME: Wires the real client, cache and poller with mocked requests

from unittest.mock import MagicMock, patch

import pytest
import requests

from conftest import BASE_TIME, FakeClock, InlineExecutor
from weather_widget.cache.manager import ForecastCache
from weather_widget.cache.poller import ForecastPoller
from weather_widget.config import WidgetSettings
from weather_widget.ui.formatting import NO_DATA, forecast_rows, status_text
from weather_widget.weather.models import Error, NotPresent, Present
from weather_widget.weather.sources import OpenMeteoClient

HOUR = 3600


def create_open_meteo_response(hours: int = 12, rain: float = 0.0):
    """Mocked Open-Meteo hourly response starting at the current hour"""
    start = int(BASE_TIME) // HOUR * HOUR
    times = [start + i * HOUR for i in range(hours)]
    response = MagicMock()
    response.status_code = 200
    response.raise_for_status = MagicMock()
    response.json.return_value = {
        "latitude": 51.5,
        "longitude": -0.04,
        "hourly": {
            "time": times,
            "precipitation": [rain] * hours,
            "temperature_2m": [8.0] * hours,
            "wind_speed_10m": [14.0] * hours,
            "wind_direction_10m": [200.0] * hours,
            "weather_code": [61 if rain else 1] * hours,
            "surface_pressure": [1000.0] * hours,
        },
    }
    return response


@pytest.fixture
def wired():
    clock = FakeClock()
    settings = WidgetSettings()
    cache = ForecastCache(
        fetcher=OpenMeteoClient(timeout=5),
        settings=settings,
        clock=clock,
        executor=InlineExecutor()
    )
    return clock, settings, cache


@pytest.mark.integration
def test_first_read_then_forecast(wired):
    """NotPresent on first read, Present with configured hours afterwards"""
    clock, settings, cache = wired

    with patch('weather_widget.weather.sources.requests.get') as mock_get, \
         patch('weather_widget.weather.sources.time', **{'time.return_value': BASE_TIME}):
        mock_get.return_value = create_open_meteo_response()

        first = cache.get_cached()
        clock.advance(31)
        second = cache.get_cached()

    assert isinstance(first, NotPresent)
    assert isinstance(second, Present)
    assert len(second.samples) == settings.hours
    assert status_text(second, settings) == "↑14 +8"


@pytest.mark.integration
def test_network_failure_then_recovery(wired):
    """A failed fetch shows an error, the next read after debounce recovers"""
    clock, settings, cache = wired

    with patch('weather_widget.weather.sources.requests.get') as mock_get, \
         patch('weather_widget.weather.sources.time', **{'time.return_value': BASE_TIME}):
        mock_get.side_effect = [
            requests.ConnectionError("Connection refused"),
            create_open_meteo_response(rain=2.0),
        ]

        cache.get_cached()
        failed = cache.get_cached()
        assert isinstance(failed, Error)
        assert "ConnectionError" in failed.message
        assert status_text(failed, settings) == NO_DATA

        clock.advance(31)
        cache.get_cached()
        recovered = cache.get_cached()

    assert isinstance(recovered, Present)
    assert forecast_rows(recovered, settings)[0]["precipitation"] == "Rain 2.0 mm"
    assert mock_get.call_count == 2


@pytest.mark.integration
def test_settings_change_refetches_with_new_units(wired):
    """Changing units refetches immediately with the new parameters"""
    clock, settings, cache = wired

    with patch('weather_widget.weather.sources.requests.get') as mock_get, \
         patch('weather_widget.weather.sources.time', **{'time.return_value': BASE_TIME}):
        mock_get.return_value = create_open_meteo_response()
        cache.refresh()

        cache.settings_changed(wind_speed_unit="kn", hours=3)

    params = mock_get.call_args[1]["params"]
    assert params["wind_speed_unit"] == "kn"
    assert len(cache.state.result.samples) == 3


@pytest.mark.integration
def test_poller_only_fetches_with_consumer(wired):
    clock, settings, cache = wired
    poller = ForecastPoller(cache)

    with patch('weather_widget.weather.sources.requests.get') as mock_get, \
         patch('weather_widget.weather.sources.time', **{'time.return_value': BASE_TIME}):
        mock_get.return_value = create_open_meteo_response()

        poller.tick()
        assert mock_get.call_count == 0

        cache.attach()
        poller.tick()
        assert mock_get.call_count == 1

    assert isinstance(cache.state.result, Present)
