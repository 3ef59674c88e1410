"""
Trend math over ordered series. No database access here.

A sample series is an ordered sequence of (date, value) pairs, oldest first.
Dates need not be contiguous; windows count samples, not calendar days.
"""
from __future__ import annotations
from datetime import date, timedelta
from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from cut_sprint.schemas.responses import (
    MovingAveragePoint, WeightChange, WeightPrediction, WeightStats, WeightStep,
)
from cut_sprint.utils.rounding import round2

Sample = Tuple[date, float]

NUTRITION_RELATIVE_THRESHOLD = 0.05
WEIGHT_ABSOLUTE_THRESHOLD = 0.5
STEP_DEAD_BAND = 0.1


def _to_series(samples: Sequence[Sample]) -> pd.Series:
    if not samples:
        return pd.Series([], dtype=float)
    dates, values = zip(*samples)
    return pd.Series(np.asarray(values, dtype=float), index=list(dates))


def _half_averages(values: Sequence[float]) -> Tuple[float, float]:
    arr = np.asarray(values, dtype=float)
    mid = len(arr) // 2  # odd length: middle element goes to the second half
    return float(arr[:mid].mean()), float(arr[mid:].mean())


def _direction(first: float, second: float, threshold: float) -> str:
    diff = second - first
    if abs(diff) <= threshold:
        return "stable"
    return "increasing" if diff > 0 else "decreasing"


def classify_trend(values: Sequence[float], relative_threshold: float = NUTRITION_RELATIVE_THRESHOLD) -> str:
    """Split-half comparison; stable within relative_threshold of the first-half average."""
    if len(values) < 2:
        return "stable"
    first, second = _half_averages(values)
    return _direction(first, second, abs(first) * relative_threshold)


def classify_weight_trend(values: Sequence[float], absolute_threshold: float = WEIGHT_ABSOLUTE_THRESHOLD) -> str:
    if len(values) < 2:
        return "stable"
    first, second = _half_averages(values)
    return _direction(first, second, absolute_threshold)


def moving_average(samples: Sequence[Sample], window: int) -> List[MovingAveragePoint]:
    """Trailing average over `window` samples; empty when there are fewer samples than that."""
    if window < 1 or len(samples) < window:
        return []
    s = _to_series(samples)
    rolled = s.rolling(window=window).mean().dropna()
    return [MovingAveragePoint(date=d, average=round2(v)) for d, v in rolled.items()]


def weight_change(samples: Sequence[Sample]) -> Optional[WeightChange]:
    """First vs last sample of an already date-filtered series; None below two samples."""
    if len(samples) < 2:
        return None
    start_weight = float(samples[0][1])
    end_weight = float(samples[-1][1])
    change = round2(end_weight - start_weight)
    change_percent = round2(change / start_weight * 100) if start_weight else 0.0
    return WeightChange(
        start_weight=start_weight,
        end_weight=end_weight,
        change=change,
        change_percent=change_percent,
    )


def prediction_confidence(week: int) -> str:
    if week <= 2:
        return "high"
    if week <= 3:
        return "medium"
    return "low"


def average_daily_change(samples: Sequence[Sample]) -> float:
    if len(samples) < 2:
        return 0.0
    observed_days = (samples[-1][0] - samples[0][0]).days
    if observed_days <= 0:
        return 0.0
    return (samples[-1][1] - samples[0][1]) / observed_days


def predict(samples: Sequence[Sample], weeks_ahead: int, today: date) -> List[WeightPrediction]:
    """
    Linear extrapolation of the latest sample by the observed average daily
    change. Confidence only goes down as the horizon grows.
    Returns [] when there is no measurable change to extrapolate.
    """
    daily = average_daily_change(samples)
    if daily == 0:
        return []

    latest = float(samples[-1][1])
    out = []
    for week in range(1, weeks_ahead + 1):
        out.append(WeightPrediction(
            date=today + timedelta(days=7 * week),
            predicted_value=round2(latest + daily * 7 * week),
            confidence=prediction_confidence(week),
        ))
    return out


def step_trends(samples: Sequence[Sample]) -> List[WeightStep]:
    """Sample-to-sample direction with a small dead band around zero."""
    if len(samples) < 2:
        return []
    s = _to_series(samples)
    diffs = s.diff().iloc[1:]

    steps = []
    for (d, weight), change in zip(list(samples)[1:], diffs.to_numpy()):
        change = round2(float(change))
        if change > STEP_DEAD_BAND:
            trend = "up"
        elif change < -STEP_DEAD_BAND:
            trend = "down"
        else:
            trend = "stable"
        steps.append(WeightStep(date=d, weight=float(weight), change=change, trend=trend))
    return steps


def weight_stats(samples: Sequence[Sample], days: int) -> WeightStats:
    """Summary over a `days`-long window; all zeros and stable when there are no samples."""
    if not samples:
        return WeightStats(
            current_weight=0, start_weight=0, total_change=0, average_change=0,
            highest_weight=0, lowest_weight=0, trend="stable",
        )

    s = _to_series(samples)
    total_change = round2(float(s.iloc[-1] - s.iloc[0]))
    return WeightStats(
        current_weight=float(s.iloc[-1]),
        start_weight=float(s.iloc[0]),
        total_change=total_change,
        average_change=round2(total_change / days) if days else 0.0,
        highest_weight=float(s.max()),
        lowest_weight=float(s.min()),
        trend=classify_weight_trend(s.tolist()),
    )
