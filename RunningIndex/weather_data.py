"""Weather domain model - pure data structures independent of the KMA API."""
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple, Union

KST = timezone(timedelta(hours=9))


@dataclass(frozen=True)
class Measured:
    """A value reported by the provider."""
    value: float


@dataclass(frozen=True)
class Defaulted:
    """A neutral value substituted because the provider reported nothing."""
    value: float


Reading = Union[Measured, Defaulted]


@dataclass(frozen=True)
class WeatherObservation:
    """Normalized input to the running index scorer."""
    temp_c: float
    humidity_pct: float
    wind_ms: float
    precip_mm: float = 0.0
    pm25: Optional[float] = None  # None = no air quality reading


@dataclass
class CurrentConditions:
    """Parsed ultra short-term nowcast (초단기실황) for one grid cell."""
    nx: int
    ny: int
    base_date: str  # YYYYMMDD (KST)
    base_time: str  # HHmm (KST)
    temp_c: Optional[float]
    humidity_pct: Optional[float]
    wind_ms: Optional[float]
    precip_mm: float = 0.0

    @property
    def base_datetime(self) -> datetime:
        """Issuance time of this batch as an aware KST datetime."""
        return datetime.strptime(self.base_date + self.base_time, "%Y%m%d%H%M").replace(tzinfo=KST)

    def is_stale(self, max_age_seconds: int = 5400, now: Optional[datetime] = None) -> bool:
        """Check if this batch is older than max_age_seconds."""
        now = now or datetime.now(tz=timezone.utc)
        age = (now - self.base_datetime).total_seconds()
        return age > max_age_seconds


@dataclass
class ForecastHour:
    """One hour of the ultra short-term forecast (초단기예보)."""
    at: str  # ISO 8601, UTC
    fcst_date: str  # YYYYMMDD (KST)
    fcst_time: str  # HHmm (KST)
    temp_c: Optional[float] = None
    humidity_pct: Optional[float] = None
    wind_ms: Optional[float] = None
    pop_pct: Optional[float] = None  # precipitation probability, not scored
    precip_mm: Optional[float] = None


@dataclass
class Forecast:
    """Ultra short-term forecast for one grid cell, hours in ascending order."""
    nx: int
    ny: int
    base_date: str
    base_time: str
    hours: List[ForecastHour] = field(default_factory=list)


@dataclass(frozen=True)
class ObservationDefaults:
    """
    Neutral values substituted for missing readings before scoring.

    PM2.5 has no default; the scorer gives a missing reading its
    neutral score.
    """
    temp_c: float = 10.0
    humidity_pct: float = 50.0
    wind_ms: float = 0.0
    precip_mm: float = 0.0

    def reading(self, value: Optional[float], default: float) -> Reading:
        if value is None:
            return Defaulted(default)
        return Measured(value)

    def resolve(
        self,
        temp_c: Optional[float],
        humidity_pct: Optional[float],
        wind_ms: Optional[float],
        precip_mm: Optional[float],
        pm25: Optional[float] = None,
    ) -> Tuple[WeatherObservation, List[str]]:
        """
        Build a scorer input, substituting defaults for missing values.

        Returns:
            Tuple of (observation, names of the factors that were defaulted)
        """
        readings = {
            "tempC": self.reading(temp_c, self.temp_c),
            "humidityPct": self.reading(humidity_pct, self.humidity_pct),
            "windMs": self.reading(wind_ms, self.wind_ms),
            "precipMm": self.reading(precip_mm, self.precip_mm),
        }
        defaulted = [name for name, r in readings.items() if isinstance(r, Defaulted)]
        observation = WeatherObservation(
            temp_c=readings["tempC"].value,
            humidity_pct=readings["humidityPct"].value,
            wind_ms=readings["windMs"].value,
            precip_mm=readings["precipMm"].value,
            pm25=pm25,
        )
        return observation, defaulted
