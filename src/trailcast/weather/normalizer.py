"""Parse raw provider payloads into WeatherFacts for a target date.

Each provider normalizer only converts its payload into two canonical
frames, both in local time:

- daily:  date, temp_max, temp_min, temp_avg, precip_probability, precip_sum
- hourly: time, temperature, precipitation, precip_probability

The derivations (rain window, ride-start temperature, probability,
current conditions) are shared and depend only on (payload, date, now),
so a cached payload can be re-parsed for any date without a fetch.
"""

import logging
from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional
from zoneinfo import ZoneInfo

import pandas as pd

from trailcast.config import DEFAULT_TIMEZONE, RIDE_START_HOUR, TEMP_TOLERANCE_HOURS
from trailcast.errors import MalformedPayloadError
from trailcast.weather.models import (
    CurrentConditions,
    DailyRainfall,
    HourlyTemperature,
    RainfallSample,
    TargetDayWeather,
    WeatherFacts,
)

logger = logging.getLogger(__name__)

DAILY_COLUMNS = ["date", "temp_max", "temp_min", "temp_avg", "precip_probability", "precip_sum"]
HOURLY_COLUMNS = ["time", "temperature", "precipitation", "precip_probability"]


def _padded(values: Any, n: int) -> list:
    """Coerce a provider array to a list of length n (missing -> None)."""
    values = list(values) if isinstance(values, list) else []
    values = values[:n]
    return values + [None] * (n - len(values))


def _numeric(values: Any, n: int) -> pd.Series:
    series = pd.Series(_padded(values, n), dtype="object")
    return pd.to_numeric(series, errors="coerce").astype("float64")


def _opt(value: Any) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    return float(value)


def _empty_hourly() -> pd.DataFrame:
    return pd.DataFrame({
        "time": pd.Series([], dtype="datetime64[ns]"),
        "temperature": pd.Series([], dtype="float64"),
        "precipitation": pd.Series([], dtype="float64"),
        "precip_probability": pd.Series([], dtype="float64"),
    })


def _finish(frame: pd.DataFrame, time_column: str) -> pd.DataFrame:
    frame = frame.dropna(subset=[time_column])
    return frame.sort_values(time_column).reset_index(drop=True)


class WeatherNormalizer(ABC):
    """Turn a raw payload plus target date into WeatherFacts.

    Args:
        rain_window_hours: Look-back window for rainfall accumulation,
            ending at ride start on the target date
        ride_start_hour: Local hour the ride starts
        temp_tolerance_hours: Max distance from ride start for an hourly
            temperature sample to be used
    """

    name: str = "provider"
    default_rain_window_hours: int = 48

    def __init__(
        self,
        rain_window_hours: Optional[int] = None,
        ride_start_hour: int = RIDE_START_HOUR,
        temp_tolerance_hours: float = TEMP_TOLERANCE_HOURS,
    ):
        self.rain_window_hours = rain_window_hours or self.default_rain_window_hours
        self.ride_start_hour = ride_start_hour
        self.temp_tolerance_hours = temp_tolerance_hours

    @abstractmethod
    def to_frames(self, payload: Any) -> tuple[pd.DataFrame, pd.DataFrame]:
        """Convert a payload to (daily, hourly) frames in local time.

        Raises:
            MalformedPayloadError: If there is no daily series
        """

    @abstractmethod
    def local_now(self, payload: Any, now: datetime) -> pd.Timestamp:
        """Convert an aware UTC ``now`` to the payload's local time (naive)."""

    def parse(
        self,
        payload: Any,
        target_date: date,
        now: Optional[datetime] = None,
    ) -> WeatherFacts:
        """Derive WeatherFacts for ``target_date`` from a raw payload.

        Args:
            payload: Raw provider response
            target_date: Ride date
            now: Moment of parsing (aware; naive is taken as UTC)

        Returns:
            WeatherFacts; target-date fields are None when the payload
            does not cover the date

        Raises:
            MalformedPayloadError: If the payload has no usable daily series
        """
        if now is None:
            now = datetime.now(timezone.utc)
        elif now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)

        try:
            daily, hourly = self.to_frames(payload)
        except (TypeError, ValueError, OverflowError) as e:
            raise MalformedPayloadError(f"Invalid {self.name} response: {e}") from e
        now_local = self.local_now(payload, now)

        target_ts = pd.Timestamp(target_date)
        ride_start = target_ts + pd.Timedelta(hours=self.ride_start_hour)

        day_rows = daily[daily["date"] == target_ts]
        day = day_rows.iloc[0] if not day_rows.empty else None

        if day is None:
            logger.debug(f"{self.name}: target date {target_date} not in payload")
            rainfall = 0.0
            target = TargetDayWeather(date=target_date)
        else:
            hourly_target = hourly[hourly["time"].dt.normalize() == target_ts]
            rainfall = self._rainfall_window(daily, hourly, target_ts, ride_start)
            target = TargetDayWeather(
                date=target_date,
                temperature=self._ride_start_temperature(day, hourly, ride_start),
                temp_max=_opt(day["temp_max"]),
                rain_probability=self._rain_probability(day, hourly_target),
                rain_sum=_opt(day["precip_sum"]),
                hourly_temperatures=[
                    HourlyTemperature(
                        time=row.time.to_pydatetime(),
                        temperature=_opt(row.temperature),
                    )
                    for row in hourly_target.itertuples(index=False)
                ],
            )

        return WeatherFacts(
            rainfall_accumulated=rainfall,
            rain_window_hours=self.rain_window_hours,
            target=target,
            current=self._current_conditions(daily, hourly, now_local),
            rainfall_series=self._rainfall_series(daily, hourly),
            daily_rainfall=[
                DailyRainfall(date=row.date.date(), rain_mm=_opt(row.precip_sum) or 0.0)
                for row in daily.itertuples(index=False)
            ],
        )

    # -------------------------------------------------------------------------
    # Derivations
    # -------------------------------------------------------------------------

    def _rainfall_window(
        self,
        daily: pd.DataFrame,
        hourly: pd.DataFrame,
        target_ts: pd.Timestamp,
        ride_start: pd.Timestamp,
    ) -> float:
        """Total precipitation over the look-back window ending at ride start.

        Uses hourly precipitation when the window has any; otherwise sums
        the daily totals of the whole days before the target date.
        """
        window_start = ride_start - pd.Timedelta(hours=self.rain_window_hours)
        in_window = hourly[(hourly["time"] > window_start) & (hourly["time"] <= ride_start)]
        hourly_precip = in_window["precipitation"].dropna()

        if not hourly_precip.empty:
            total = hourly_precip.sum()
        else:
            days = max(1, self.rain_window_hours // 24)
            first_day = target_ts - pd.Timedelta(days=days)
            mask = (daily["date"] >= first_day) & (daily["date"] < target_ts)
            total = daily.loc[mask, "precip_sum"].sum()

        return round(float(total), 1)

    def _ride_start_temperature(
        self,
        day: pd.Series,
        hourly: pd.DataFrame,
        ride_start: pd.Timestamp,
    ) -> Optional[float]:
        temps = hourly.dropna(subset=["temperature"])
        if not temps.empty:
            distance = (temps["time"] - ride_start).abs()
            nearest = distance.idxmin()
            if distance[nearest] <= pd.Timedelta(hours=self.temp_tolerance_hours):
                return float(temps.loc[nearest, "temperature"])

        temp_avg = _opt(day["temp_avg"])
        if temp_avg is not None:
            return temp_avg

        temp_min, temp_max = _opt(day["temp_min"]), _opt(day["temp_max"])
        if temp_min is not None and temp_max is not None:
            return (temp_min + temp_max) / 2
        return None

    def _rain_probability(
        self, day: pd.Series, hourly_target: pd.DataFrame
    ) -> Optional[float]:
        # Reported at several granularities; the highest one wins.
        candidates = [_opt(day["precip_probability"])]
        candidates.extend(float(p) for p in hourly_target["precip_probability"].dropna())
        candidates = [c for c in candidates if c is not None]
        return max(candidates) if candidates else None

    def _current_conditions(
        self,
        daily: pd.DataFrame,
        hourly: pd.DataFrame,
        now_local: pd.Timestamp,
    ) -> CurrentConditions:
        today = daily[daily["date"] == now_local.normalize()]
        today_row = today.iloc[0] if not today.empty else None
        today_max = _opt(today_row["temp_max"]) if today_row is not None else None

        if not hourly.empty:
            nearest = (hourly["time"] - now_local).abs().idxmin()
            row = hourly.loc[nearest]
            probability = _opt(row["precip_probability"])
            if probability is None and today_row is not None:
                probability = _opt(today_row["precip_probability"])
            return CurrentConditions(
                time=row["time"].to_pydatetime(),
                temperature=_opt(row["temperature"]),
                temp_max=today_max,
                rain_probability=probability,
                precipitation_mm=_opt(row["precipitation"]),
            )

        if daily.empty:
            return CurrentConditions()

        nearest = (daily["date"] - now_local.normalize()).abs().idxmin()
        row = daily.loc[nearest]
        return CurrentConditions(
            time=row["date"].to_pydatetime(),
            temperature=_opt(row["temp_max"]),
            temp_max=_opt(row["temp_max"]),
            rain_probability=_opt(row["precip_probability"]),
            precipitation_mm=_opt(row["precip_sum"]),
        )

    def _rainfall_series(
        self, daily: pd.DataFrame, hourly: pd.DataFrame
    ) -> list[RainfallSample]:
        samples = hourly.dropna(subset=["precipitation"])
        if not samples.empty:
            return [
                RainfallSample(time=row.time.to_pydatetime(), precipitation_mm=float(row.precipitation))
                for row in samples.itertuples(index=False)
            ]
        return [
            RainfallSample(time=row.date.to_pydatetime(), precipitation_mm=_opt(row.precip_sum) or 0.0)
            for row in daily.itertuples(index=False)
        ]


class OpenMeteoNormalizer(WeatherNormalizer):
    """Open-Meteo payloads (``timezone=auto``: times are already local)."""

    name = "open-meteo"
    default_rain_window_hours = 96

    def to_frames(self, payload: Any) -> tuple[pd.DataFrame, pd.DataFrame]:
        daily = payload.get("daily") if isinstance(payload, dict) else None
        if not isinstance(daily, dict) or not isinstance(daily.get("time"), list) or not daily["time"]:
            raise MalformedPayloadError("Invalid Open-Meteo response: missing daily data")

        n = len(daily["time"])
        daily_frame = _finish(pd.DataFrame({
            "date": pd.Series(pd.to_datetime(daily["time"], errors="coerce")).dt.normalize(),
            "temp_max": _numeric(daily.get("temperature_2m_max"), n),
            "temp_min": _numeric(daily.get("temperature_2m_min"), n),
            "temp_avg": _numeric(daily.get("temperature_2m_mean"), n),
            "precip_probability": _numeric(daily.get("precipitation_probability_max"), n),
            "precip_sum": _numeric(daily.get("precipitation_sum"), n),
        }), "date")
        if daily_frame.empty:
            raise MalformedPayloadError("Invalid Open-Meteo response: no parseable daily dates")

        hourly = payload.get("hourly")
        if not isinstance(hourly, dict) or not isinstance(hourly.get("time"), list) or not hourly["time"]:
            return daily_frame, _empty_hourly()

        m = len(hourly["time"])
        hourly_frame = _finish(pd.DataFrame({
            "time": pd.Series(pd.to_datetime(hourly["time"], errors="coerce")),
            "temperature": _numeric(hourly.get("temperature_2m"), m),
            "precipitation": _numeric(hourly.get("precipitation"), m),
            "precip_probability": _numeric(hourly.get("precipitation_probability"), m),
        }), "time")
        return daily_frame, hourly_frame

    def local_now(self, payload: Any, now: datetime) -> pd.Timestamp:
        offset = 0
        if isinstance(payload, dict):
            try:
                offset = int(payload.get("utc_offset_seconds") or 0)
            except (TypeError, ValueError):
                offset = 0
        local = now.astimezone(timezone.utc) + timedelta(seconds=offset)
        return pd.Timestamp(local.replace(tzinfo=None))


class TomorrowNormalizer(WeatherNormalizer):
    """Tomorrow.io payloads (UTC timelines, converted to local time)."""

    name = "tomorrow.io"
    default_rain_window_hours = 48

    def __init__(self, *args, tz: str = DEFAULT_TIMEZONE, **kwargs):
        super().__init__(*args, **kwargs)
        self.tz = ZoneInfo(tz)

    def _local_times(self, entries: list) -> pd.Series:
        times = [e.get("time") if isinstance(e, dict) else None for e in entries]
        parsed = pd.to_datetime(pd.Series(times, dtype="object"), utc=True, errors="coerce")
        return parsed.dt.tz_convert(self.tz).dt.tz_localize(None)

    @staticmethod
    def _values(entries: list, field: str) -> list:
        out = []
        for entry in entries:
            values = entry.get("values") if isinstance(entry, dict) else None
            out.append(values.get(field) if isinstance(values, dict) else None)
        return out

    def to_frames(self, payload: Any) -> tuple[pd.DataFrame, pd.DataFrame]:
        timelines = payload.get("timelines") if isinstance(payload, dict) else None
        daily = timelines.get("daily") if isinstance(timelines, dict) else None
        if not isinstance(daily, list) or not daily:
            raise MalformedPayloadError("Invalid Tomorrow.io response: missing daily timeline")

        n = len(daily)
        prob_max = _numeric(self._values(daily, "precipitationProbabilityMax"), n)
        prob_avg = _numeric(self._values(daily, "precipitationProbabilityAvg"), n)
        daily_frame = _finish(pd.DataFrame({
            "date": self._local_times(daily).dt.normalize(),
            "temp_max": _numeric(self._values(daily, "temperatureMax"), n),
            "temp_min": _numeric(self._values(daily, "temperatureMin"), n),
            "temp_avg": _numeric(self._values(daily, "temperatureAvg"), n),
            "precip_probability": pd.concat([prob_max, prob_avg], axis=1).max(axis=1),
            "precip_sum": _numeric(self._values(daily, "rainAccumulationSum"), n),
        }), "date")
        if daily_frame.empty:
            raise MalformedPayloadError("Invalid Tomorrow.io response: no parseable daily times")

        hourly = timelines.get("hourly")
        if not isinstance(hourly, list) or not hourly:
            return daily_frame, _empty_hourly()

        m = len(hourly)
        accumulation = _numeric(self._values(hourly, "rainAccumulation"), m)
        intensity = _numeric(self._values(hourly, "rainIntensity"), m)
        hourly_frame = _finish(pd.DataFrame({
            "time": self._local_times(hourly),
            "temperature": _numeric(self._values(hourly, "temperature"), m),
            "precipitation": accumulation.fillna(intensity),
            "precip_probability": _numeric(self._values(hourly, "precipitationProbability"), m),
        }), "time")
        return daily_frame, hourly_frame

    def local_now(self, payload: Any, now: datetime) -> pd.Timestamp:
        return pd.Timestamp(now.astimezone(self.tz).replace(tzinfo=None))
