# ABOUTME: NiceGUI status page showing the cached hourly forecast
# ABOUTME: Each connected browser is a display consumer of the forecast cache

import logging
import threading
import time

from nicegui import app, ui, Client

from weather_widget.cache.manager import ForecastCache
from weather_widget.cache.poller import ForecastPoller
from weather_widget.config import Config, WidgetSettings, MIN_FORECAST_HOURS, MAX_FORECAST_HOURS
from weather_widget.ui.formatting import (
    NO_PRECIPITATION,
    forecast_rows,
    precipitation_expected,
    rain_bars_html,
    status_text,
    tooltip_text,
    weather_description,
)
from weather_widget.weather.models import Error, Present, PressureUnit, TemperatureUnit, WindSpeedUnit
from weather_widget.weather.places import find_closest_place
from weather_widget.weather.sources import OpenMeteoClient

log = logging.getLogger(__name__)

BAR_HEIGHT = 24

# Wire everything once per process
settings = WidgetSettings.from_config()
cache = ForecastCache.from_config(fetcher=OpenMeteoClient(), settings=settings)
poller = ForecastPoller(cache, interval_seconds=Config.POLL_INTERVAL_SECONDS)

app.on_startup(poller.start)
app.on_shutdown(poller.stop)
app.on_shutdown(cache.shutdown)

COLUMNS = [
    {"name": "hour", "label": "Time", "field": "hour"},
    {"name": "temperature", "label": "Temp", "field": "temperature"},
    {"name": "precipitation", "label": "Precipitation", "field": "precipitation"},
    {"name": "pressure", "label": "Pressure", "field": "pressure"},
    {"name": "wind", "label": "Wind", "field": "wind"},
    {"name": "direction", "label": "", "field": "direction"},
]


@ui.page('/')
async def index(client: Client):
    """Status line, rain bars, forecast table and settings"""

    ui.add_head_html("""
    <style>
        body {
            font-family: monospace;
        }
        .status {
            font-size: 32px;
            font-weight: bold;
        }
        .error {
            color: #c00;
            white-space: pre-wrap;
        }
    </style>
    """)

    with ui.column().classes('w-full items-center'):
        title = ui.label().style('font-size: 20px;')
        status = ui.label('No data').classes('status')
        with status:
            tooltip = ui.tooltip('')
        bars = ui.html('', sanitize=False)
        error = ui.label().classes('error')
        table = ui.table(columns=COLUMNS, rows=[], row_key='hour')
        footer = ui.label()

        with ui.expansion('Settings'):
            latitude = ui.number('Latitude', value=settings.latitude, format='%.5f')
            longitude = ui.number('Longitude', value=settings.longitude, format='%.5f')
            city = ui.input('City', value=settings.city_name)
            hours = ui.select(
                list(range(MIN_FORECAST_HOURS, MAX_FORECAST_HOURS + 1)),
                value=settings.hours,
                label='Hours'
            )
            temperature_unit = ui.select(
                {unit.value: unit.symbol for unit in TemperatureUnit},
                value=settings.temperature_unit.value,
                label='Temperature'
            )
            wind_speed_unit = ui.select(
                {unit.value: unit.label for unit in WindSpeedUnit},
                value=settings.wind_speed_unit.value,
                label='Wind speed'
            )
            pressure_unit = ui.select(
                {unit.name: unit.label for unit in PressureUnit},
                value=settings.pressure_unit.name,
                label='Pressure'
            )
            show_wind = ui.checkbox('Show wind', value=settings.show_wind)
            show_temperature = ui.checkbox('Show temperature', value=settings.show_temperature)

            def fill_city():
                if latitude.value is None or longitude.value is None:
                    return
                city.value = find_closest_place(float(latitude.value), float(longitude.value))

            latitude.on_value_change(fill_city)
            longitude.on_value_change(fill_city)

            def apply_settings():
                try:
                    cache.settings_changed(
                        latitude=float(latitude.value),
                        longitude=float(longitude.value),
                        city_name=city.value,
                        hours=int(hours.value),
                        temperature_unit=TemperatureUnit(temperature_unit.value),
                        wind_speed_unit=WindSpeedUnit(wind_speed_unit.value),
                        pressure_unit=PressureUnit[pressure_unit.value],
                        show_wind=show_wind.value,
                        show_temperature=show_temperature.value,
                    )
                except (TypeError, ValueError) as e:
                    log.warning(f"Rejected settings change: {e}")
                    ui.notify(f'Wrong format: {e}', type='warning')
                    return
                ui.notify('Settings applied, refreshing forecast')

            ui.button('Apply', on_click=apply_settings)

    def update_display():
        result = cache.get_cached()
        description = weather_description(result)
        title.text = f'{description} in {settings.city_name}' if description else settings.city_name
        status.text = status_text(result, settings)
        tooltip.text = tooltip_text(result)
        bars.content = rain_bars_html(result, settings.rain_bar_color, time.time(), BAR_HEIGHT)
        error.text = result.message if isinstance(result, Error) else ''
        table.rows = forecast_rows(result, settings)
        if isinstance(result, Present) and not precipitation_expected(result.samples):
            footer.text = NO_PRECIPITATION
        else:
            footer.text = ''

    # Set from the refresh worker; UI updates stay on the event loop
    refreshed = threading.Event()

    def on_refresh(result):
        refreshed.set()

    def repaint_if_refreshed():
        if refreshed.is_set():
            refreshed.clear()
            update_display()

    await client.connected()
    cache.attach(on_refresh)
    # Disconnect handlers also fire on reconnect, so attach again on every handshake
    client.on_connect(lambda: cache.attach(on_refresh))
    client.on_disconnect(lambda: cache.detach(on_refresh))

    update_display()
    ui.timer(5.0, update_display)
    ui.timer(0.5, repaint_if_refreshed)


if __name__ in {"__main__", "__mp_main__"}:
    logging.basicConfig(level=logging.DEBUG if Config.DEBUG else logging.INFO)
    ui.run(
        title='Weather Widget',
        host='0.0.0.0',
        port=Config.PORT,
        reload=False
    )
