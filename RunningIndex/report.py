"""Report shaping for running index output - pure functions for testability."""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from kma_grid import GridCell
from running_index import RunningIndexResult
from running_service import CurrentIndex, ForecastIndex
from weather_data import CurrentConditions, Forecast

PROVIDER_NAME = "KMA"

GRADE_LABELS = {
    "GREAT": "최고",
    "GOOD": "좋음",
    "OK": "보통",
    "BAD": "나쁨",
    "AWFUL": "매우 나쁨",
}


def _iso_now() -> str:
    return datetime.now(tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.000Z")


def grid_payload(lat: float, lon: float, cell: GridCell) -> Dict[str, Any]:
    return {"lat": lat, "lon": lon, "nx": cell.nx, "ny": cell.ny}


def current_payload(lat: float, lon: float, conditions: CurrentConditions) -> Dict[str, Any]:
    """Nowcast values keyed the way API consumers expect them."""
    return {
        "lat": lat,
        "lon": lon,
        "nx": conditions.nx,
        "ny": conditions.ny,
        "base_date": conditions.base_date,
        "base_time": conditions.base_time,
        "parsed": {
            "tempC": conditions.temp_c,
            "humidityPct": conditions.humidity_pct,
            "windMs": conditions.wind_ms,
            "precipMm": conditions.precip_mm,
        },
    }


def forecast_payload(forecast: Forecast) -> Dict[str, Any]:
    return {
        "nx": forecast.nx,
        "ny": forecast.ny,
        "base_date": forecast.base_date,
        "base_time": forecast.base_time,
        "hourly": [
            {
                "at": hour.at,
                "fcstDate": hour.fcst_date,
                "fcstTime": hour.fcst_time,
                "tempC": hour.temp_c,
                "humidityPct": hour.humidity_pct,
                "windMs": hour.wind_ms,
                "popPct": hour.pop_pct,
                "precipMm": hour.precip_mm,
            }
            for hour in forecast.hours
        ],
    }


def result_payload(result: RunningIndexResult) -> Dict[str, Any]:
    return {
        "score": result.score,
        "grade": result.grade.value,
        "summary": result.summary,
        "advice": list(result.advice),
        "factors": {
            name: {"value": factor.value, "score": factor.score}
            for name, factor in result.factors.items()
        },
    }


def index_payload(
    lat: float,
    lon: float,
    current: CurrentIndex,
    location: Optional[str] = None,
    at: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Running index for the current hour.

    Args:
        lat: Requested latitude
        lon: Requested longitude
        current: Scored nowcast
        location: Display name for the location, if known
        at: Timestamp to report; defaults to now (UTC)

    Returns:
        Dict with request echo, score fields and provider metadata
    """
    payload: Dict[str, Any] = {
        "location": location,
        "at": at or _iso_now(),
        "request": {"lat": lat, "lon": lon},
    }
    payload.update(result_payload(current.result))
    payload["defaulted"] = list(current.defaulted)
    payload["raw"] = {
        "provider": PROVIDER_NAME,
        "nx": current.conditions.nx,
        "ny": current.conditions.ny,
        "baseDate": current.conditions.base_date,
        "baseTime": current.conditions.base_time,
        "updatedAt": _iso_now(),
    }
    return payload


def hourly_index_payload(lat: float, lon: float, forecast_index: ForecastIndex) -> Dict[str, Any]:
    forecast = forecast_index.forecast
    hourly: List[Dict[str, Any]] = []
    for item in forecast_index.hours:
        entry: Dict[str, Any] = {
            "at": item.hour.at,
            "fcstDate": item.hour.fcst_date,
            "fcstTime": item.hour.fcst_time,
            "popPct": item.hour.pop_pct,
        }
        entry.update(result_payload(item.result))
        entry["defaulted"] = list(item.defaulted)
        hourly.append(entry)
    return {
        "request": {"lat": lat, "lon": lon},
        "nx": forecast.nx,
        "ny": forecast.ny,
        "base_date": forecast.base_date,
        "base_time": forecast.base_time,
        "hourly": hourly,
    }


def _fmt(value: Optional[float], unit: str) -> str:
    if value is None:
        return "N/A"
    return f"{value:g}{unit}"


def format_index_lines(result: RunningIndexResult, label: Optional[str] = None) -> List[str]:
    """
    Human readable lines for terminal output.

    Example:
        ["Score 90/100 GREAT (최고)", "러닝 최적 조건입니다. ...",
         "Temp 6.5°C [32]  Hum 52% [20]  Wind 2.8m/s [15]  Rain 0mm [15]  PM2.5 18 [8]"]
    """
    grade = result.grade.value
    head = f"Score {result.score}/100 {grade} ({GRADE_LABELS[grade]})"
    if label:
        head = f"{label}  {head}"

    f = result.factors
    details = "  ".join([
        f"Temp {_fmt(f['tempC'].value, '°C')} [{f['tempC'].score}]",
        f"Hum {_fmt(f['humidityPct'].value, '%')} [{f['humidityPct'].score}]",
        f"Wind {_fmt(f['windMs'].value, 'm/s')} [{f['windMs'].score}]",
        f"Rain {_fmt(f['precipMm'].value, 'mm')} [{f['precipMm'].score}]",
        f"PM2.5 {_fmt(f['pm25'].value, '')} [{f['pm25'].score}]",
    ])

    lines = [head, result.summary, details]
    if result.advice:
        lines.append("Advice: " + ", ".join(result.advice))
    return lines
