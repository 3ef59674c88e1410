"""
Weekly calorie budgets: one active row per user per Monday-start week,
auto-created from the profile the first time a week is touched.
"""
from __future__ import annotations
import logging
from datetime import date, timedelta
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from cut_sprint import config
from cut_sprint.errors import BudgetConflict, NotFound
from cut_sprint.models.user import User
from cut_sprint.models.weekly_budget import WeeklyBudget
from cut_sprint.models.weight import Weight
from cut_sprint.schemas.responses import (
    BudgetAdjustment, BudgetStatusOut, BudgetSuggestions, CompensationDay, CompensationPlan,
    DailyBreakdown, WeeklyBudgetCreate, WeeklyBudgetUpdate, WeeklyProgress,
)
from cut_sprint.services.nutrients_sql import intake_between, intake_on
from cut_sprint.services.nutrition_calculator import weekly_target
from cut_sprint.services.trend_analyzer import weight_change
from cut_sprint.services.user_service import get_user
from cut_sprint.utils.dates import day_of_week, in_day_range, is_calendar_weekend, week_bounds
from cut_sprint.utils.rounding import round2, round_half_up

logger = logging.getLogger(__name__)


def is_weekend(profile, day: date) -> bool:
    if getattr(profile, "weekend_mode", None) != "active":
        return False
    return in_day_range(day_of_week(day), profile.weekend_start_day, profile.weekend_end_day)


# ---------- lookup / crud ----------

def _find_week_budget(db: Session, user_id: int, start: date) -> Optional[WeeklyBudget]:
    return (
        db.query(WeeklyBudget)
        .filter(WeeklyBudget.user_id == user_id, WeeklyBudget.start_date == start)
        .one_or_none()
    )


def _apply_profile_targets(budget: WeeklyBudget, user: User) -> None:
    target = weekly_target(user)
    budget.target_calories = target.total_calories
    budget.target_protein = target.target_protein
    budget.target_fat = target.target_fat
    budget.target_carbs = target.target_carbs
    budget.weekend_bonus_calories = target.weekend_bonus_calories


def current_budget(db: Session, user_id: int, today: date) -> WeeklyBudget:
    """
    Budget for the week containing `today`, created from the profile when the
    week has no row yet. An existing row is returned as stored, whatever its
    status. Safe to call concurrently: a losing insert re-reads the winner's
    row instead of failing.
    """
    user = get_user(db, user_id)
    start, end = week_bounds(today)

    budget = _find_week_budget(db, user_id, start)
    if budget is not None:
        return budget

    budget = WeeklyBudget(user_id=user_id, start_date=start, end_date=end, status="active")
    _apply_profile_targets(budget, user)
    db.add(budget)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info("Weekly budget for user %s week %s created concurrently; re-reading", user_id, start)
        budget = _find_week_budget(db, user_id, start)
        if budget is None:
            raise
        return budget

    db.refresh(budget)
    logger.info("Auto-created weekly budget %s for user %s (%s..%s, %s kcal)",
                budget.id, user_id, start, end, budget.target_calories)
    return budget


def get_budget(db: Session, budget_id: int) -> WeeklyBudget:
    budget = db.get(WeeklyBudget, budget_id)
    if not budget:
        raise NotFound(f"Weekly budget {budget_id} not found.")
    return budget


def list_budgets(db: Session, user_id: int, limit: int = 10) -> List[WeeklyBudget]:
    return (
        db.query(WeeklyBudget)
        .filter(WeeklyBudget.user_id == user_id)
        .order_by(WeeklyBudget.start_date.desc())
        .limit(limit)
        .all()
    )


def create_budget(db: Session, user_id: int, payload: WeeklyBudgetCreate) -> WeeklyBudget:
    get_user(db, user_id)
    # budgets are looked up by their Monday, so only whole Monday..Sunday weeks are accepted
    if (payload.start_date, payload.end_date) != week_bounds(payload.start_date):
        raise ValueError("A weekly budget must run from a Monday to the following Sunday")

    budget = WeeklyBudget(user_id=user_id, status="active", **payload.model_dump())
    db.add(budget)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise BudgetConflict(f"User {user_id} already has a budget starting {payload.start_date}")
    db.refresh(budget)
    return budget


def update_budget(db: Session, budget_id: int, changes: WeeklyBudgetUpdate) -> WeeklyBudget:
    budget = get_budget(db, budget_id)
    for field, value in changes.model_dump(exclude_unset=True).items():
        setattr(budget, field, value)
    db.commit()
    db.refresh(budget)
    return budget


# ---------- daily / weekend ----------

def daily_breakdown(db: Session, user_id: int, day: date) -> DailyBreakdown:
    budget = current_budget(db, user_id, day)
    weekend = is_weekend(get_user(db, user_id), day)
    bonus = budget.weekend_bonus_calories if weekend else 0

    target = round_half_up(budget.target_calories / 7) + bonus
    actual = intake_on(db, user_id, day)["calories"]
    return DailyBreakdown(
        date=day,
        target_calories=target,
        actual_calories=actual,
        remaining_calories=target - actual,
        is_weekend=weekend,
        weekend_bonus=bonus,
    )


def weekend_compensation_plan(db: Session, user_id: int, weekend_date: date) -> CompensationPlan:
    """
    Spread the weekend bonus as a deficit over the next weekdays after
    `weekend_date`, skipping Saturdays and Sundays.
    """
    budget = current_budget(db, user_id, weekend_date)
    bonus = budget.weekend_bonus_calories
    if not bonus:
        return CompensationPlan(weekend_bonus=0, compensation_days=[], total_compensation=0)

    per_day = round_half_up(bonus / config.COMPENSATION_DAYS)
    days = []
    current = weekend_date
    while len(days) < config.COMPENSATION_DAYS:
        current += timedelta(days=1)
        if is_calendar_weekend(current):
            continue
        days.append(CompensationDay(date=current, compensation_calories=per_day))

    return CompensationPlan(weekend_bonus=bonus, compensation_days=days, total_compensation=bonus)


# ---------- progress ----------

def _weight_samples(db: Session, user_id: int, start: date, end: date):
    rows = (
        db.query(Weight.date, Weight.value_kg)
        .filter(Weight.user_id == user_id, Weight.date >= start, Weight.date <= end)
        .order_by(Weight.date, Weight.id)
        .all()
    )
    return [(r.date, r.value_kg) for r in rows]


def weekly_progress(db: Session, user_id: int, week_of: date) -> WeeklyProgress:
    """Progress for the week containing `week_of`. weight_loss is positive when weight went down."""
    start, end = week_bounds(week_of)
    budget = current_budget(db, user_id, start)
    user = get_user(db, user_id)

    actual = intake_between(db, user_id, start, end)["calories"]
    change = weight_change(_weight_samples(db, user_id, start, end))
    target_loss = user.target_weekly_loss
    if target_loss is None:
        target_loss = config.DEFAULT_WEEKLY_LOSS_KG

    progress = round_half_up(actual / budget.target_calories * 100) if budget.target_calories else 0
    return WeeklyProgress(
        week_start=start,
        week_end=end,
        target_calories=budget.target_calories,
        actual_calories=actual,
        deficit=budget.target_calories - actual,
        weight_start=change.start_weight if change else 0,
        weight_end=change.end_weight if change else 0,
        weight_loss=round2(-change.change) if change else 0,
        target_loss=target_loss,
        progress_percentage=progress,
    )


def budget_suggestions(db: Session, user_id: int, today: date) -> BudgetSuggestions:
    progress = weekly_progress(db, user_id, today)
    pct = progress.progress_percentage

    suggestions: List[str] = []
    adjustments: List[BudgetAdjustment] = []
    if pct > 110:
        suggestions += [
            "You are more than 10% over this week's budget",
            "Consider more activity next week",
            "Check weekend mode, the bonus may be too high",
        ]
    elif pct < 90:
        suggestions += [
            "You are well below this week's budget",
            "Make sure you are eating enough",
            "Check whether your budget is set too low",
        ]
    else:
        suggestions.append("Great, you are within this week's budget")

    if progress.weight_loss > 0 and progress.target_loss > 0:
        ratio = progress.weight_loss / progress.target_loss
        if ratio > 1.5:
            suggestions.append("You are losing weight faster than planned")
            adjustments.append(BudgetAdjustment(
                type="increase_calories", value=200, reason="Increase daily calories by 200 kcal"))
        elif ratio < 0.5:
            suggestions.append("You are losing weight slower than planned")
            adjustments.append(BudgetAdjustment(
                type="decrease_calories", value=200, reason="Decrease daily calories by 200 kcal"))

    return BudgetSuggestions(
        message=f"Progress: {pct}% of the weekly budget used",
        suggestions=suggestions,
        adjustments=adjustments,
    )


def budget_status(db: Session, user_id: int, today: date) -> BudgetStatusOut:
    progress = weekly_progress(db, user_id, today)

    # today counts as a remaining day
    remaining_days = max(0, (progress.week_end - today).days + 1)
    remaining_calories = progress.target_calories - progress.actual_calories
    average = round_half_up(remaining_calories / remaining_days) if remaining_days else 0

    return BudgetStatusOut(
        is_on_track=progress.progress_percentage <= 100,
        remaining_days=remaining_days,
        average_remaining_per_day=average,
        can_afford_weekend=average >= config.MIN_DAILY_CALORIES,
    )
