"""Running suitability index - pure scoring functions for testability."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple

from weather_data import WeatherObservation


class Grade(str, Enum):
    GREAT = "GREAT"
    GOOD = "GOOD"
    OK = "OK"
    BAD = "BAD"
    AWFUL = "AWFUL"


@dataclass(frozen=True)
class FactorScore:
    value: Optional[float]
    score: int


@dataclass(frozen=True)
class RunningIndexResult:
    """Score (0-100), grade, summary and advisories for one observation."""
    score: int
    grade: Grade
    summary: str
    advice: Tuple[str, ...] = ()
    factors: Dict[str, FactorScore] = field(default_factory=dict)


SUMMARIES = {
    Grade.GREAT: "러닝 최적 조건입니다. 템포/인터벌도 무난합니다.",
    Grade.GOOD: "데일리 조깅/LSD에 좋습니다.",
    Grade.OK: "가볍게 뛰기엔 무난하지만 강훈련은 비추입니다.",
    Grade.BAD: "야외 러닝은 부담될 수 있습니다. 강도 낮추거나 실내 권장입니다.",
    Grade.AWFUL: "야외 러닝 비권장입니다. 컨디션/체온/호흡기 리스크가 큽니다.",
}

ADVICE_PRECIP = "강수 주의"
ADVICE_WIND = "바람 강함"
ADVICE_COLD = "노면 결빙/보온 주의"
ADVICE_HEAT = "열 스트레스 주의"
ADVICE_AIR = "공기질 나쁨(실내 고려)"

# Lower bounds of each grade, best first
GRADE_THRESHOLDS = (
    (85, Grade.GREAT),
    (70, Grade.GOOD),
    (50, Grade.OK),
    (30, Grade.BAD),
)


def clamp(n: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, n))


def score_temperature(temp_c: float) -> int:
    """
    Score air temperature, 40 points max.

    Optimum is 10-15°C; bands step down towards cold and heat.
    """
    if 10 <= temp_c <= 15:
        return 40
    if 5 <= temp_c < 10 or 15 < temp_c <= 20:
        return 32
    if 0 <= temp_c < 5 or 20 < temp_c <= 25:
        return 24
    if -5 <= temp_c < 0 or 25 < temp_c <= 28:
        return 14
    if -10 <= temp_c < -5 or 28 < temp_c <= 30:
        return 6
    return 0


def score_humidity(humidity_pct: float) -> int:
    """Score relative humidity, 20 points max (never below 5)."""
    if 40 <= humidity_pct <= 60:
        return 20
    if 30 <= humidity_pct < 40 or 60 < humidity_pct <= 70:
        return 15
    if 20 <= humidity_pct < 30 or 70 < humidity_pct <= 80:
        return 10
    return 5


def score_wind(wind_ms: float) -> int:
    """Score wind speed in m/s, 15 points max."""
    if 2 <= wind_ms <= 4:
        return 15
    if 0 <= wind_ms < 2:
        return 10
    if 4 < wind_ms <= 6:
        return 8
    if 6 < wind_ms <= 8:
        return 5
    return 0


def score_precipitation(precip_mm: float) -> int:
    if precip_mm <= 0:
        return 15
    if 0 < precip_mm <= 1:
        return 8
    return 0


def score_pm25(pm25: Optional[float]) -> int:
    """Score PM2.5 in µg/m³, 10 points max; a missing reading is neutral (8)."""
    if pm25 is None:
        return 8
    if pm25 <= 15:
        return 10
    if pm25 <= 35:
        return 8
    if pm25 <= 75:
        return 4
    return 0


def grade_for_score(score: int) -> Grade:
    for threshold, grade in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return Grade.AWFUL


def summary_for_grade(grade: Grade) -> str:
    return SUMMARIES[grade]


def advice_for(observation: WeatherObservation) -> Tuple[str, ...]:
    """
    Collect advisories from raw values, in display order.

    Every check runs independently of the others and of the score.
    """
    advice = []
    if observation.precip_mm > 0:
        advice.append(ADVICE_PRECIP)
    if observation.wind_ms >= 6:
        advice.append(ADVICE_WIND)
    if observation.temp_c <= 0:
        advice.append(ADVICE_COLD)
    if observation.temp_c >= 25:
        advice.append(ADVICE_HEAT)
    if observation.pm25 is not None and observation.pm25 >= 36:
        advice.append(ADVICE_AIR)
    return tuple(advice)


def compute_running_index(observation: WeatherObservation) -> RunningIndexResult:
    """
    Compute the running suitability index for one observation.

    Args:
        observation: Weather values with defaults already applied

    Returns:
        RunningIndexResult: Total score, grade, summary, advisories and
        the per-factor breakdown
    """
    t = score_temperature(observation.temp_c)
    h = score_humidity(observation.humidity_pct)
    w = score_wind(observation.wind_ms)
    p = score_precipitation(observation.precip_mm)
    a = score_pm25(observation.pm25)

    total = clamp(t + h + w + p + a, 0, 100)
    grade = grade_for_score(total)

    return RunningIndexResult(
        score=total,
        grade=grade,
        summary=summary_for_grade(grade),
        advice=advice_for(observation),
        factors={
            "tempC": FactorScore(observation.temp_c, t),
            "humidityPct": FactorScore(observation.humidity_pct, h),
            "windMs": FactorScore(observation.wind_ms, w),
            "precipMm": FactorScore(observation.precip_mm, p),
            "pm25": FactorScore(observation.pm25, a),
        },
    )
