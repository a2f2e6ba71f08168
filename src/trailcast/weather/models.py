"""Normalized weather facts."""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class RainfallSample:
    """One raw precipitation sample for display."""

    time: datetime
    precipitation_mm: float


@dataclass(frozen=True)
class DailyRainfall:
    date: date
    rain_mm: float


@dataclass(frozen=True)
class HourlyTemperature:
    time: datetime
    temperature: Optional[float]


@dataclass(frozen=True)
class TargetDayWeather:
    """Weather for the ride date.

    Attributes:
        date: Target date
        temperature: Temperature at ride start (°C), daily fallback applied
        temp_max: Daily maximum (°C)
        rain_probability: Max precipitation probability for the day (%)
        rain_sum: Total precipitation forecast for the day (mm)
        hourly_temperatures: Hourly temperatures on the target date
    """

    date: date
    temperature: Optional[float] = None
    temp_max: Optional[float] = None
    rain_probability: Optional[float] = None
    rain_sum: Optional[float] = None
    hourly_temperatures: list[HourlyTemperature] = field(default_factory=list)


@dataclass(frozen=True)
class CurrentConditions:
    """Conditions right now, for display only."""

    time: Optional[datetime] = None
    temperature: Optional[float] = None
    temp_max: Optional[float] = None
    rain_probability: Optional[float] = None
    precipitation_mm: Optional[float] = None


@dataclass(frozen=True)
class WeatherFacts:
    """Per-trail weather snapshot for one target date.

    Derived fresh from a raw provider payload every time a date is
    requested; never stored.
    """

    rainfall_accumulated: float
    rain_window_hours: int
    target: TargetDayWeather
    current: CurrentConditions = field(default_factory=CurrentConditions)
    rainfall_series: list[RainfallSample] = field(default_factory=list)
    daily_rainfall: list[DailyRainfall] = field(default_factory=list)

    @property
    def target_date(self) -> date:
        return self.target.date

    @property
    def has_data(self) -> bool:
        return bool(self.rainfall_series or self.daily_rainfall)

    @classmethod
    def empty(cls, target_date: date, rain_window_hours: int = 0) -> "WeatherFacts":
        """Zero-valued facts used when no payload is available."""
        return cls(
            rainfall_accumulated=0.0,
            rain_window_hours=rain_window_hours,
            target=TargetDayWeather(date=target_date),
        )
