"""Integration tests - can optionally hit the real KMA API (disabled by default)."""
import os

import pytest

from kma_provider import KmaProvider
from running_service import RunningService
from weather_service import WeatherService


@pytest.mark.skipif(
    not os.environ.get("KMA_SERVICE_KEY"),
    reason="KMA_SERVICE_KEY not set - skipping integration test"
)
def test_kma_nowcast_integration():
    """
    Integration test that hits the real KMA API hub.

    Set KMA_SERVICE_KEY environment variable to run this test.
    """
    provider = KmaProvider(
        service_key=os.environ["KMA_SERVICE_KEY"],
        lat=37.5665,
        lon=126.978,
    )

    conditions = provider.get_current()

    assert (conditions.nx, conditions.ny) == (60, 127)
    assert conditions.temp_c is not None


@pytest.mark.skipif(
    not os.environ.get("KMA_SERVICE_KEY"),
    reason="KMA_SERVICE_KEY not set - skipping integration test"
)
def test_running_index_integration():
    """Integration test for the full fetch and score path."""
    provider = KmaProvider(
        service_key=os.environ["KMA_SERVICE_KEY"],
        lat=37.5665,
        lon=126.978,
    )
    service = WeatherService(provider, cache_ttl_seconds=60)
    running = RunningService(service)

    current = running.current_index()
    assert 0 <= current.result.score <= 100

    forecast_index = running.hourly_index()
    for item in forecast_index.hours:
        assert 0 <= item.result.score <= 100
