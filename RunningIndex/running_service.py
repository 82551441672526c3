"""Running index service - fetch weather, apply defaults, score."""
import logging
from dataclasses import dataclass
from typing import List, Optional

from running_index import RunningIndexResult, compute_running_index
from weather_data import CurrentConditions, Forecast, ForecastHour, ObservationDefaults, WeatherObservation
from weather_service import WeatherService


@dataclass
class CurrentIndex:
    conditions: CurrentConditions
    observation: WeatherObservation
    defaulted: List[str]
    result: RunningIndexResult


@dataclass
class HourlyIndex:
    hour: ForecastHour
    observation: WeatherObservation
    defaulted: List[str]
    result: RunningIndexResult


@dataclass
class ForecastIndex:
    forecast: Forecast
    hours: List[HourlyIndex]


class RunningService:
    """Scores current and forecast weather for one location."""

    def __init__(
        self,
        weather_service: WeatherService,
        defaults: Optional[ObservationDefaults] = None,
        pm25: Optional[float] = None,
    ):
        """
        Args:
            weather_service: Source of nowcast/forecast data
            defaults: Neutral values for missing readings
            pm25: PM2.5 reading (µg/m³) to score with, if known
        """
        self.weather_service = weather_service
        self.defaults = defaults or ObservationDefaults()
        self.pm25 = pm25

    def current_index(self) -> CurrentIndex:
        conditions = self.weather_service.get_current()
        observation, defaulted = self.defaults.resolve(
            conditions.temp_c,
            conditions.humidity_pct,
            conditions.wind_ms,
            conditions.precip_mm,
            pm25=self.pm25,
        )
        if defaulted:
            logging.warning(f"Nowcast missing {', '.join(defaulted)}; using defaults")
        result = compute_running_index(observation)
        logging.info(f"Running index now: {result.score} ({result.grade.value})")
        return CurrentIndex(conditions, observation, defaulted, result)

    def hourly_index(self) -> ForecastIndex:
        forecast = self.weather_service.get_forecast()
        hourly: List[HourlyIndex] = []
        for hour in forecast.hours:
            observation, defaulted = self.defaults.resolve(
                hour.temp_c,
                hour.humidity_pct,
                hour.wind_ms,
                hour.precip_mm,
                pm25=self.pm25,
            )
            if defaulted:
                logging.debug(f"Forecast {hour.fcst_date}{hour.fcst_time} missing {', '.join(defaulted)}")
            hourly.append(HourlyIndex(hour, observation, defaulted, compute_running_index(observation)))
        logging.info(f"Running index for {len(hourly)} forecast hours")
        return ForecastIndex(forecast, hourly)
