from __future__ import annotations
from datetime import date, timedelta
from typing import List, Optional, Sequence

import pandas as pd
from sqlalchemy.orm import Session

from cut_sprint.errors import NotFound
from cut_sprint.models.weight import Weight
from cut_sprint.schemas.responses import (
    Insight, InsightsResponse, MovingAveragePoint, NutritionTrends, TrendsResponse,
    WeightChange, WeightPrediction, WeightStats, WeightStep, WeightUpdate,
)
from cut_sprint.services.meal_service import daily_summaries
from cut_sprint.services.trend_analyzer import (
    classify_trend, classify_weight_trend, moving_average, predict, step_trends,
    weight_change, weight_stats,
)
from cut_sprint.services.user_service import get_user

WEIGHT_SOURCES = ("manual", "apple_health", "google_fit")
REMIND_AFTER_DAYS = 3
STATS_WINDOW_DAYS = 30
# extra days fetched so a sparse log still fills the averaging window
MOVING_AVERAGE_LOOKBACK_PAD = 10

# 7-day insight bands
CALORIES_LOW, CALORIES_HIGH = 1200, 2000
PROTEIN_LOW, PROTEIN_HIGH = 60, 120


def add_weight(
    db: Session,
    user_id: int,
    day: date,
    value_kg: float,
    note: Optional[str] = None,
    flags: Optional[Sequence[str]] = None,
    source: str = "manual",
) -> Weight:
    get_user(db, user_id)
    if value_kg <= 0:
        raise ValueError("value_kg must be positive")
    if source not in WEIGHT_SOURCES:
        raise ValueError(f"Unknown weight source '{source}'")
    row = Weight(
        user_id=user_id,
        date=day,
        value_kg=value_kg,
        note=note,
        flags=sorted(set(flags or [])),
        source=source,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def weights_in_range(db: Session, user_id: int, start: date, end: date) -> List[Weight]:
    return (
        db.query(Weight)
        .filter(Weight.user_id == user_id, Weight.date >= start, Weight.date <= end)
        .order_by(Weight.date, Weight.id)
        .all()
    )


def latest_weight(db: Session, user_id: int) -> Optional[Weight]:
    return (
        db.query(Weight)
        .filter(Weight.user_id == user_id)
        .order_by(Weight.date.desc(), Weight.id.desc())
        .first()
    )


def get_weight(db: Session, weight_id: int) -> Weight:
    row = db.get(Weight, weight_id)
    if not row:
        raise NotFound(f"Weight entry {weight_id} not found.")
    return row


def update_weight(db: Session, weight_id: int, changes: WeightUpdate) -> Weight:
    row = get_weight(db, weight_id)
    fields = changes.model_dump(exclude_unset=True)
    for required in ("value_kg", "source", "date"):
        if required in fields and fields[required] is None:
            raise ValueError(f"{required} cannot be cleared")
    if "source" in fields and fields["source"] not in WEIGHT_SOURCES:
        raise ValueError(f"Unknown weight source '{fields['source']}'")
    if "flags" in fields:
        fields["flags"] = sorted(set(fields["flags"] or []))
    for field, value in fields.items():
        setattr(row, field, value)
    db.commit()
    db.refresh(row)
    return row


def delete_weight(db: Session, weight_id: int) -> None:
    db.delete(get_weight(db, weight_id))
    db.commit()


def weights_with_flag(db: Session, user_id: int, flag: str) -> List[Weight]:
    """Weigh-ins carrying `flag`, newest first."""
    # flags is a JSON list, matched here rather than in SQL
    rows = (
        db.query(Weight)
        .filter(Weight.user_id == user_id)
        .order_by(Weight.date.desc(), Weight.id.desc())
        .all()
    )
    return [w for w in rows if flag in (w.flags or [])]


def _samples(db: Session, user_id: int, start: date, end: date):
    return [(w.date, w.value_kg) for w in weights_in_range(db, user_id, start, end)]


def weight_trend(db: Session, user_id: int, today: date, days: int = 30) -> List[WeightStep]:
    return step_trends(_samples(db, user_id, today - timedelta(days=days), today))


def weight_moving_average(db: Session, user_id: int, today: date, window: int = 7) -> List[MovingAveragePoint]:
    start = today - timedelta(days=window + MOVING_AVERAGE_LOOKBACK_PAD)
    return moving_average(_samples(db, user_id, start, today), window)


def weight_statistics(db: Session, user_id: int, today: date, days: int = STATS_WINDOW_DAYS) -> WeightStats:
    return weight_stats(_samples(db, user_id, today - timedelta(days=days), today), days)


def weight_predictions(db: Session, user_id: int, today: date, weeks: int = 4) -> List[WeightPrediction]:
    samples = _samples(db, user_id, today - timedelta(days=STATS_WINDOW_DAYS), today)
    return predict(samples, weeks, today)


def weight_change_between(db: Session, user_id: int, start: date, end: date) -> Optional[WeightChange]:
    return weight_change(_samples(db, user_id, start, end))


def should_remind_to_weigh_in(db: Session, user_id: int, today: date) -> bool:
    last = latest_weight(db, user_id)
    if last is None:
        return True
    return (today - last.date).days > REMIND_AFTER_DAYS


# ---------- nutrition analytics over daily summaries ----------

def nutrition_trends(db: Session, user_id: int, today: date, days: int = 30) -> TrendsResponse:
    get_user(db, user_id)
    summaries = daily_summaries(db, user_id, today - timedelta(days=days), today)

    weights = [s.weight for s in summaries if s.weight is not None]
    trends = NutritionTrends(
        calories_trend=classify_trend([s.total_calories for s in summaries]),
        protein_trend=classify_trend([s.total_protein for s in summaries]),
        fat_trend=classify_trend([s.total_fat for s in summaries]),
        carbs_trend=classify_trend([s.total_carbs for s in summaries]),
        weight_trend=classify_weight_trend(weights),
    )
    return TrendsResponse(summaries=summaries, trends=trends)


def _band(value: float, low: float, high: float) -> str:
    if value > high:
        return "high"
    if value < low:
        return "low"
    return "normal"


def nutrition_insights(db: Session, user_id: int, today: date) -> InsightsResponse:
    """7-day averages with low/normal/high status and plain-language recommendations."""
    get_user(db, user_id)
    summaries = daily_summaries(db, user_id, today - timedelta(days=7), today)
    if not summaries:
        return InsightsResponse(insights=[], recommendations=[])

    df = pd.DataFrame([s.model_dump() for s in summaries])
    avg_calories = float(df["total_calories"].mean())
    avg_protein = float(df["total_protein"].mean())

    insights = [
        Insight(type="calories", value=round(avg_calories, 2), label="Average daily calories",
                status=_band(avg_calories, CALORIES_LOW, CALORIES_HIGH)),
        Insight(type="protein", value=round(avg_protein, 2), label="Average daily protein (g)",
                status=_band(avg_protein, PROTEIN_LOW, PROTEIN_HIGH)),
    ]

    weights = df["weight"].dropna()
    if len(weights) > 1:
        change = round(float(weights.iloc[-1] - weights.iloc[0]), 2)
        status = "gain" if change > 0 else "loss" if change < 0 else "stable"
        insights.append(Insight(type="weight", value=change, label="Weight change (kg)", status=status))

    recommendations = []
    if avg_calories < CALORIES_LOW:
        recommendations.append("Consider eating more calories per day")
    if avg_protein < PROTEIN_LOW:
        recommendations.append("Increase protein intake: add more meat, fish or legumes")

    return InsightsResponse(insights=insights, recommendations=recommendations)
