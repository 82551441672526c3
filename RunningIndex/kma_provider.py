"""KMA (Korea Meteorological Administration) ultra short-term API provider."""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

import requests

from kma_grid import GridCell, project
from precipitation import is_missing_marker, precipitation_mm
from weather_data import KST, CurrentConditions, Forecast, ForecastHour
from weather_provider import WeatherProviderBase, WeatherProviderError

KMA_BASE_URL = "https://apihub.kma.go.kr/api/typ02/openApi/VilageFcstInfoService_2.0"

RESULT_OK = "00"
RESULT_NO_DATA = "03"
# Provider-side failures; everything else (bad params, key, quota) is permanent
RETRYABLE_RESULT_CODES = {"01", "02", "04", "05"}

# Forecast category -> ForecastHour attribute
FORECAST_FIELDS = {
    "T1H": "temp_c",
    "TMP": "temp_c",
    "REH": "humidity_pct",
    "WSD": "wind_ms",
    "POP": "pop_pct",
}
FORECAST_PRECIP_CATEGORIES = ("RN1", "PCP")


def _utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def base_date_time(moment: datetime, minute: str = "00") -> Tuple[str, str]:
    """
    Pick base_date/base_time for a request issued at the given moment.

    Args:
        moment: Aware datetime (any timezone)
        minute: Minute suffix, "00" for nowcast and "30" for forecast

    Returns:
        Tuple of (YYYYMMDD, HHmm) in KST
    """
    kst = moment.astimezone(KST)
    return kst.strftime("%Y%m%d"), f"{kst:%H}{minute}"


def kst_to_utc_iso(fcst_date: str, fcst_time: str) -> str:
    """
    Convert a KST YYYYMMDD + HHmm pair to an ISO 8601 UTC string.

    Raises:
        ValueError: If the date or time is malformed
    """
    local = datetime.strptime(fcst_date + fcst_time, "%Y%m%d%H%M").replace(tzinfo=KST)
    return local.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.000Z")


def _safe_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        logging.warning(f"Ignoring non-numeric KMA value: {value!r}")
        return None
    if is_missing_marker(number):
        logging.debug(f"Treating KMA missing marker {value!r} as absent")
        return None
    return number


class KmaProvider(WeatherProviderBase):
    """
    Weather provider using the KMA API hub village forecast service.

    Uses getUltraSrtNcst (nowcast) and getUltraSrtFcst (hourly forecast
    for roughly the next six hours). Both are addressed by the KMA 5 km
    grid cell, which is recomputed from lat/lon on every request.
    """

    def __init__(
        self,
        service_key: str,
        lat: float,
        lon: float,
        timeout: float = 8,
        base_url: str = KMA_BASE_URL,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize KMA provider.

        Args:
            service_key: KMA API hub authKey
            lat: Latitude in decimal degrees
            lon: Longitude in decimal degrees
            timeout: HTTP request timeout in seconds
            base_url: Service root, overridable for mirrors and tests
            clock: Returns the current aware datetime (for tests)
        """
        self.service_key = service_key
        self.lat = lat
        self.lon = lon
        self.timeout = timeout
        self.base_url = base_url.rstrip("/")
        self.clock = clock or _utc_now

    def grid_cell(self) -> GridCell:
        return project(self.lat, self.lon)

    def get_current(self) -> CurrentConditions:
        """
        Fetch the ultra short-term nowcast (T1H, REH, WSD, RN1).

        Returns:
            CurrentConditions: Latest observations for the grid cell

        Raises:
            WeatherProviderError: If the API request fails
        """
        cell = self.grid_cell()
        now = self.clock()
        base_date, base_time = base_date_time(now, "00")
        items = self._call("getUltraSrtNcst", cell, base_date, base_time)
        if not items:
            # The current hour is published ~40 minutes late; use the previous batch
            base_date, base_time = base_date_time(now - timedelta(hours=1), "00")
            logging.info(f"Nowcast empty, retrying with base_time={base_time}")
            items = self._call("getUltraSrtNcst", cell, base_date, base_time)

        conditions = CurrentConditions(
            nx=cell.nx,
            ny=cell.ny,
            base_date=base_date,
            base_time=base_time,
            temp_c=None,
            humidity_pct=None,
            wind_ms=None,
        )
        for item in items:
            value = item.get("obsrValue")
            category = item.get("category")
            if category == "T1H":
                conditions.temp_c = _safe_float(value)
            elif category == "REH":
                conditions.humidity_pct = _safe_float(value)
            elif category == "WSD":
                conditions.wind_ms = _safe_float(value)
            elif category == "RN1":
                amount = precipitation_mm(value)
                conditions.precip_mm = amount if amount is not None else 0.0

        logging.info(
            f"Parsed nowcast nx={cell.nx} ny={cell.ny}: temp={conditions.temp_c} "
            f"humidity={conditions.humidity_pct} wind={conditions.wind_ms} precip={conditions.precip_mm}"
        )
        return conditions

    def get_forecast(self) -> Forecast:
        """
        Fetch the ultra short-term forecast, grouped by forecast hour.

        Returns:
            Forecast: Hours sorted by forecast date/time

        Raises:
            WeatherProviderError: If the API request fails
        """
        cell = self.grid_cell()
        now = self.clock()
        base_date, base_time = base_date_time(now, "30")
        items = self._call("getUltraSrtFcst", cell, base_date, base_time)
        if not items:
            base_date, base_time = base_date_time(now - timedelta(hours=1), "30")
            logging.info(f"Forecast empty, retrying with base_time={base_time}")
            items = self._call("getUltraSrtFcst", cell, base_date, base_time)

        hours: Dict[str, ForecastHour] = {}
        for item in items:
            fcst_date = str(item.get("fcstDate") or "")
            fcst_time = str(item.get("fcstTime") or "")
            if not fcst_date or not fcst_time:
                continue
            key = fcst_date + fcst_time
            hour = hours.get(key)
            if hour is None:
                try:
                    at = kst_to_utc_iso(fcst_date, fcst_time)
                except ValueError as e:
                    logging.error(f"Malformed forecast time in KMA item: {item}")
                    raise WeatherProviderError(f"Malformed forecast item {fcst_date}{fcst_time}: {str(e)}") from e
                hour = ForecastHour(
                    at=at,
                    fcst_date=fcst_date,
                    fcst_time=fcst_time,
                )
                hours[key] = hour

            category = item.get("category")
            value = item.get("fcstValue")
            if category in FORECAST_FIELDS:
                setattr(hour, FORECAST_FIELDS[category], _safe_float(value))
            elif category in FORECAST_PRECIP_CATEGORIES:
                hour.precip_mm = precipitation_mm(value)

        forecast = Forecast(
            nx=cell.nx,
            ny=cell.ny,
            base_date=base_date,
            base_time=base_time,
            hours=[hours[key] for key in sorted(hours)],
        )
        logging.info(f"Parsed forecast nx={cell.nx} ny={cell.ny}: {len(forecast.hours)} hours")
        return forecast

    def _call(self, operation: str, cell: GridCell, base_date: str, base_time: str) -> List[Dict[str, Any]]:
        """Issue one API request and return its item list (possibly empty)."""
        if not self.service_key:
            raise WeatherProviderError("KMA service key missing", retryable=False)

        url = f"{self.base_url}/{operation}"
        params = {
            "authKey": self.service_key,
            "pageNo": 1,
            "numOfRows": 1000,
            "dataType": "JSON",
            "base_date": base_date,
            "base_time": base_time,
            "nx": cell.nx,
            "ny": cell.ny,
        }

        try:
            logging.info(f"KMA {operation} request: base_date={base_date}, base_time={base_time}, nx={cell.nx}, ny={cell.ny}")
            response = requests.get(url, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logging.error(f"Network error during API request: {e}")
            raise WeatherProviderError(f"Network error: {str(e)}") from e

        logging.info(f"API response status: {response.status_code}")
        if not response.ok:
            logging.error(f"API request failed with status {response.status_code}")
            self._handle_error_response(response)

        try:
            data = response.json()
        except ValueError as e:
            logging.error(f"Failed to decode API response: {e}")
            raise WeatherProviderError(f"Invalid JSON response: {str(e)}") from e

        return self._extract_items(data)

    def _extract_items(self, data: Any) -> List[Dict[str, Any]]:
        if not isinstance(data, dict) or not isinstance(data.get("response"), dict):
            raise WeatherProviderError("Response missing 'response' block")
        body = data["response"]
        header = body.get("header") or {}
        if not isinstance(header, dict):
            raise WeatherProviderError("Response 'header' is not an object")
        code = str(header.get("resultCode", RESULT_OK))

        if code == RESULT_NO_DATA:
            logging.warning(f"KMA returned no data: {header.get('resultMsg')}")
            return []
        if code != RESULT_OK:
            message = header.get("resultMsg", "Unknown error")
            logging.error(f"KMA API error response: {header}")
            raise WeatherProviderError(
                f"KMA API error {code}: {message}",
                retryable=code in RETRYABLE_RESULT_CODES,
            )

        try:
            items = ((body.get("body") or {}).get("items") or {}).get("item") or []
        except AttributeError as e:
            raise WeatherProviderError(f"Malformed response body: {str(e)}") from e
        if not isinstance(items, list):
            raise WeatherProviderError("Response 'item' is not a list")
        malformed = [item for item in items if not isinstance(item, dict)]
        if malformed:
            logging.error(f"Non-object KMA items: {malformed[:3]}")
            raise WeatherProviderError(f"Malformed item in KMA response: {malformed[0]!r}")
        logging.debug(f"KMA returned {len(items)} items")
        return items

    def _handle_error_response(self, response: requests.Response) -> None:
        """Parse and raise error from a non-2xx KMA response."""
        message = response.text[:200]
        try:
            error_data = response.json()
        except ValueError:
            error_data = None
        if isinstance(error_data, dict):
            result = error_data.get("result") or {}
            header = (error_data.get("response") or {}).get("header") or {}
            message = result.get("message") or header.get("resultMsg") or message

        logging.error(f"KMA error response: HTTP {response.status_code}, body: {response.text[:500]}")
        raise WeatherProviderError(
            f"HTTP {response.status_code}: {message}",
            status_code=response.status_code,
        )
