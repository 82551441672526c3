"""Weather service with caching and retries."""
import logging
import time
from typing import Any, Callable, Dict, Optional, Tuple

from weather_data import CurrentConditions, Forecast
from weather_provider import WeatherProviderBase, WeatherProviderError


class WeatherService:
    """
    Service that wraps a weather provider with caching and retries.

    Nowcast and forecast are cached separately; each is fetched again
    only when its cache entry is older than its TTL.
    """

    def __init__(
        self,
        provider: WeatherProviderBase,
        cache_ttl_seconds: int = 600,  # 10 minutes default
        forecast_ttl_seconds: int = 1800,
        max_retries: int = 3,
        retry_delay_seconds: float = 1.0
    ):
        """
        Initialize weather service.

        Args:
            provider: Weather provider to use
            cache_ttl_seconds: How long to cache nowcast results
            forecast_ttl_seconds: How long to cache forecast results
            max_retries: Maximum number of attempts on transient errors
            retry_delay_seconds: Base delay between attempts
        """
        self.provider = provider
        self.cache_ttl_seconds = cache_ttl_seconds
        self.forecast_ttl_seconds = forecast_ttl_seconds
        self.max_retries = max_retries
        self.retry_delay_seconds = retry_delay_seconds

        self._cache: Dict[str, Tuple[float, Any]] = {}

    def get_current(self) -> CurrentConditions:
        """
        Get the latest nowcast, using cache if still fresh.

        Raises:
            WeatherProviderError: If all retries fail and no cache exists
        """
        return self._get("current", self.provider.get_current, self.cache_ttl_seconds)

    def get_forecast(self) -> Forecast:
        """
        Get the hourly forecast, using cache if still fresh.

        Raises:
            WeatherProviderError: If all retries fail and no cache exists
        """
        return self._get("forecast", self.provider.get_forecast, self.forecast_ttl_seconds)

    def _get(self, kind: str, fetch: Callable[[], Any], ttl: float) -> Any:
        current_time = time.time()
        cached = self._cache.get(kind)

        # Check if cache is still valid
        if cached is not None:
            cache_age = current_time - cached[0]
            if cache_age < ttl:
                logging.debug(f"Using cached {kind} data (age: {cache_age:.1f}s, TTL: {ttl}s)")
                return cached[1]
            logging.info(f"{kind} cache expired (age: {cache_age:.1f}s > TTL: {ttl}s), fetching new data")

        logging.info(f"Fetching {kind} weather from provider...")
        last_error: Optional[WeatherProviderError] = None
        for attempt in range(self.max_retries):
            try:
                logging.debug(f"{kind} fetch attempt {attempt + 1}/{self.max_retries}")
                new_data = fetch()
                self._cache[kind] = (current_time, new_data)
                return new_data
            except WeatherProviderError as e:
                last_error = e
                logging.warning(f"{kind} fetch attempt {attempt + 1} failed: {e}")
                if not e.retryable:
                    logging.error("Non-retryable error, stopping retries")
                    break
                if attempt < self.max_retries - 1:
                    retry_delay = self.retry_delay_seconds * (attempt + 1)
                    logging.info(f"Retrying in {retry_delay}s...")
                    time.sleep(retry_delay)

        # All retries failed
        if cached is not None:
            cache_age = current_time - cached[0]
            logging.warning(f"All retries failed, using stale {kind} cache (age: {cache_age:.1f}s)")
            return cached[1]

        logging.error(f"Failed to fetch {kind} weather after {self.max_retries} attempts, no cache available")
        raise WeatherProviderError(
            f"Failed to fetch {kind} weather after {self.max_retries} attempts: {last_error}",
            status_code=last_error.status_code if last_error else None,
            retryable=last_error.retryable if last_error else True,
        )
