"""Tests for running index scoring."""
import math

import pytest

from running_index import (
    ADVICE_AIR,
    ADVICE_COLD,
    ADVICE_HEAT,
    ADVICE_PRECIP,
    ADVICE_WIND,
    SUMMARIES,
    Grade,
    compute_running_index,
    grade_for_score,
    score_humidity,
    score_pm25,
    score_precipitation,
    score_temperature,
    score_wind,
)
from weather_data import WeatherObservation


@pytest.fixture
def evening_in_seoul():
    """Mild winter evening, the reference example."""
    return WeatherObservation(temp_c=6.5, humidity_pct=52, wind_ms=2.8, precip_mm=0, pm25=18)


def test_reference_example(evening_in_seoul):
    result = compute_running_index(evening_in_seoul)

    assert result.factors["tempC"].score == 32
    assert result.factors["humidityPct"].score == 20
    assert result.factors["windMs"].score == 15
    assert result.factors["precipMm"].score == 15
    assert result.factors["pm25"].score == 8
    assert result.score == 90
    assert result.grade is Grade.GREAT
    assert result.summary == SUMMARIES[Grade.GREAT]
    assert result.advice == ()


def test_factors_echo_raw_values(evening_in_seoul):
    result = compute_running_index(evening_in_seoul)
    assert result.factors["tempC"].value == 6.5
    assert result.factors["pm25"].value == 18


@pytest.mark.parametrize("temp,expected", [
    (12.0, 40),
    (10.0, 40),
    (15.0, 40),
    (15.0001, 32),
    (9.999, 32),
    (5.0, 32),
    (20.0, 32),
    (0.0, 24),
    (25.0, 24),
    (-0.1, 14),
    (-5.0, 14),
    (28.0, 14),
    (-10.0, 6),
    (30.0, 6),
    (-10.0001, 0),
    (30.1, 0),
    (45.0, 0),
])
def test_temperature_bands(temp, expected):
    assert score_temperature(temp) == expected


@pytest.mark.parametrize("humidity,expected", [
    (40, 20),
    (60, 20),
    (60.0001, 15),
    (30, 15),
    (70, 15),
    (20, 10),
    (80, 10),
    (19.9, 5),
    (95, 5),
    (-1, 5),
])
def test_humidity_bands(humidity, expected):
    assert score_humidity(humidity) == expected


@pytest.mark.parametrize("wind,expected", [
    (2, 15),
    (4, 15),
    (0, 10),
    (1.99, 10),
    (4.01, 8),
    (6, 8),
    (6.01, 5),
    (8, 5),
    (8.001, 0),
    (50, 0),
    (-0.5, 0),
])
def test_wind_bands(wind, expected):
    assert score_wind(wind) == expected


@pytest.mark.parametrize("precip,expected", [
    (0, 15),
    (-1, 15),
    (0.1, 8),
    (1, 8),
    (1.01, 0),
    (30, 0),
])
def test_precipitation_bands(precip, expected):
    assert score_precipitation(precip) == expected


@pytest.mark.parametrize("pm25,expected", [
    (None, 8),
    (0, 10),
    (15, 10),
    (15.5, 8),
    (35, 8),
    (36, 4),
    (75, 4),
    (76, 0),
])
def test_pm25_bands(pm25, expected):
    assert score_pm25(pm25) == expected


@pytest.mark.parametrize("score,grade", [
    (100, Grade.GREAT),
    (85, Grade.GREAT),
    (84, Grade.GOOD),
    (70, Grade.GOOD),
    (69, Grade.OK),
    (50, Grade.OK),
    (49, Grade.BAD),
    (30, Grade.BAD),
    (29, Grade.AWFUL),
    (0, Grade.AWFUL),
])
def test_grade_thresholds(score, grade):
    assert grade_for_score(score) is grade


def test_grade_is_monotonic():
    order = [Grade.AWFUL, Grade.BAD, Grade.OK, Grade.GOOD, Grade.GREAT]
    ranks = [order.index(grade_for_score(s)) for s in range(0, 101)]
    assert ranks == sorted(ranks)


def test_advice_order():
    observation = WeatherObservation(temp_c=-1, humidity_pct=50, wind_ms=7, precip_mm=2, pm25=40)
    result = compute_running_index(observation)
    assert result.advice == (ADVICE_PRECIP, ADVICE_WIND, ADVICE_COLD, ADVICE_AIR)
    assert ADVICE_HEAT not in result.advice


def test_heat_advice():
    result = compute_running_index(WeatherObservation(temp_c=25, humidity_pct=50, wind_ms=3))
    assert result.advice == (ADVICE_HEAT,)


def test_advice_uses_raw_values_not_scores():
    """Wind of exactly 6 m/s still scores 8 but triggers the wind advisory."""
    result = compute_running_index(WeatherObservation(temp_c=12, humidity_pct=50, wind_ms=6))
    assert result.factors["windMs"].score == 8
    assert result.advice == (ADVICE_WIND,)


def test_missing_pm25_is_neutral_and_silent():
    result = compute_running_index(WeatherObservation(temp_c=12, humidity_pct=50, wind_ms=3, pm25=None))
    assert result.factors["pm25"].score == 8
    assert result.factors["pm25"].value is None
    assert ADVICE_AIR not in result.advice


def test_best_and_worst_case_bounds():
    best = compute_running_index(WeatherObservation(temp_c=12, humidity_pct=50, wind_ms=3, precip_mm=0, pm25=5))
    worst = compute_running_index(WeatherObservation(temp_c=40, humidity_pct=99, wind_ms=20, precip_mm=10, pm25=200))
    assert best.score == 100
    assert best.grade is Grade.GREAT
    assert worst.score == 5
    assert worst.grade is Grade.AWFUL
    assert worst.summary == SUMMARIES[Grade.AWFUL]


@pytest.mark.parametrize("temp,humidity,wind,precip,pm25", [
    (-30, 0, 0, 0, None),
    (12, 50, 3, 0, 10),
    (22, 75, 5, 0.5, 50),
    (31, 90, 12, 5, 100),
])
def test_total_is_sum_of_factors_within_bounds(temp, humidity, wind, precip, pm25):
    result = compute_running_index(WeatherObservation(temp, humidity, wind, precip, pm25))
    total = sum(f.score for f in result.factors.values())
    assert 0 <= result.score <= 100
    assert result.score == total


def test_nan_falls_to_lowest_bands():
    nan = math.nan
    result = compute_running_index(WeatherObservation(temp_c=nan, humidity_pct=nan, wind_ms=nan, precip_mm=nan, pm25=nan))
    assert result.factors["tempC"].score == 0
    assert result.factors["humidityPct"].score == 5
    assert result.factors["windMs"].score == 0
    assert result.factors["precipMm"].score == 0
    assert result.factors["pm25"].score == 0
    assert result.score == 5
    assert result.advice == ()


def test_infinity_does_not_crash():
    result = compute_running_index(WeatherObservation(temp_c=math.inf, humidity_pct=-math.inf, wind_ms=math.inf, precip_mm=math.inf))
    assert result.score == 5 + 8
    assert result.grade is Grade.AWFUL
