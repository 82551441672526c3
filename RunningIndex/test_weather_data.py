"""Tests for weather_data module."""
from datetime import datetime, timezone

from weather_data import (
    CurrentConditions,
    Defaulted,
    Measured,
    ObservationDefaults,
    WeatherObservation,
)


def _conditions(**overrides):
    values = dict(
        nx=60,
        ny=127,
        base_date="20250115",
        base_time="1400",
        temp_c=3.2,
        humidity_pct=45.0,
        wind_ms=1.8,
        precip_mm=0.0,
    )
    values.update(overrides)
    return CurrentConditions(**values)


def test_base_datetime_is_kst():
    conditions = _conditions()
    assert conditions.base_datetime == datetime(2025, 1, 15, 5, 0, tzinfo=timezone.utc)


def test_is_stale():
    conditions = _conditions()
    now = datetime(2025, 1, 15, 7, 0, tzinfo=timezone.utc)  # 16:00 KST, two hours later

    assert conditions.is_stale(max_age_seconds=3600, now=now) is True
    assert conditions.is_stale(max_age_seconds=3 * 3600, now=now) is False


def test_reading_tags():
    defaults = ObservationDefaults()
    assert defaults.reading(0.0, 10.0) == Measured(0.0)
    assert defaults.reading(None, 10.0) == Defaulted(10.0)


def test_resolve_keeps_measured_values():
    observation, defaulted = ObservationDefaults().resolve(3.2, 45.0, 1.8, 0.0, pm25=12.0)

    assert observation == WeatherObservation(temp_c=3.2, humidity_pct=45.0, wind_ms=1.8, precip_mm=0.0, pm25=12.0)
    assert defaulted == []


def test_resolve_fills_missing_values():
    defaults = ObservationDefaults(temp_c=11.0, humidity_pct=55.0, wind_ms=2.0, precip_mm=0.0)
    observation, defaulted = defaults.resolve(None, None, 4.0, None)

    assert observation.temp_c == 11.0
    assert observation.humidity_pct == 55.0
    assert observation.wind_ms == 4.0
    assert observation.precip_mm == 0.0
    assert observation.pm25 is None
    assert defaulted == ["tempC", "humidityPct", "precipMm"]


def test_real_zero_is_not_defaulted():
    """A measured 0 °C must not be confused with a missing reading."""
    observation, defaulted = ObservationDefaults().resolve(0.0, 50.0, 0.0, 0.0)
    assert observation.temp_c == 0.0
    assert "tempC" not in defaulted
    assert "windMs" not in defaulted
