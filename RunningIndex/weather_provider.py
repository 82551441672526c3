"""Weather provider abstraction - allows swapping different weather APIs."""
from abc import ABC, abstractmethod
from typing import Optional

from weather_data import CurrentConditions, Forecast


class WeatherProviderBase(ABC):
    """Abstract base class for weather data providers."""

    @abstractmethod
    def get_current(self) -> CurrentConditions:
        """
        Fetch the latest observed conditions.

        Returns:
            CurrentConditions: Nowcast for the provider's location

        Raises:
            WeatherProviderError: If the provider fails to fetch data
        """
        pass

    @abstractmethod
    def get_forecast(self) -> Forecast:
        """
        Fetch the short-horizon hourly forecast.

        Returns:
            Forecast: Hourly forecast for the provider's location

        Raises:
            WeatherProviderError: If the provider fails to fetch data
        """
        pass


class WeatherProviderError(Exception):
    """Exception raised when a weather provider fails."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        retryable: Optional[bool] = None,
    ):
        """
        Args:
            message: Human readable failure description
            status_code: HTTP status of the failed response, if any
            retryable: Whether another attempt may succeed; by default
                everything except HTTP 4xx is retryable
        """
        super().__init__(message)
        self.status_code = status_code
        if retryable is None:
            retryable = status_code is None or not 400 <= status_code < 500
        self.retryable = retryable
