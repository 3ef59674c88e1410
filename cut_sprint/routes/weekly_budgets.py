from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from cut_sprint.database import get_db
from cut_sprint.routes.deps import current_user_id, or_today, service_errors
from cut_sprint.schemas.responses import (
    BudgetStatusOut, BudgetSuggestions, CompensationPlan, DailyBreakdown, WeeklyBudgetCreate,
    WeeklyBudgetOut, WeeklyBudgetUpdate, WeeklyProgress,
)
from cut_sprint.services import weekly_budget_service as budgets

router = APIRouter(prefix="/weekly-budgets", tags=["Weekly budget"])


def _owned_budget(db: Session, budget_id: int, user_id: int):
    budget = budgets.get_budget(db, budget_id)
    if budget.user_id != user_id:
        raise HTTPException(status_code=404, detail=f"Weekly budget {budget_id} not found.")
    return budget


@router.get("/current", response_model=WeeklyBudgetOut,
            summary="Budget of the current week, created from the profile if missing")
def get_current(
    day: Optional[date] = Query(None, description="any day of the wanted week; defaults to today"),
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    with service_errors():
        return budgets.current_budget(db, user_id, or_today(day))


@router.get("", response_model=List[WeeklyBudgetOut])
def list_budgets(
    limit: int = Query(10, ge=1, le=100),
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    return budgets.list_budgets(db, user_id, limit)


@router.post("", response_model=WeeklyBudgetOut, status_code=201)
def create_budget(payload: WeeklyBudgetCreate, user_id: int = Depends(current_user_id), db: Session = Depends(get_db)):
    with service_errors():
        return budgets.create_budget(db, user_id, payload)


@router.get("/breakdown", response_model=DailyBreakdown)
def get_breakdown(
    day: Optional[date] = None,
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    with service_errors():
        return budgets.daily_breakdown(db, user_id, or_today(day))


@router.get("/compensation", response_model=CompensationPlan,
            summary="Spread the weekend bonus over the following weekdays")
def get_compensation(weekend_date: date, user_id: int = Depends(current_user_id), db: Session = Depends(get_db)):
    with service_errors():
        return budgets.weekend_compensation_plan(db, user_id, weekend_date)


@router.get("/progress", response_model=WeeklyProgress)
def get_progress(
    week_of: Optional[date] = Query(None, description="any day of the wanted week; defaults to today"),
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    with service_errors():
        return budgets.weekly_progress(db, user_id, or_today(week_of))


@router.get("/suggestions", response_model=BudgetSuggestions)
def get_suggestions(user_id: int = Depends(current_user_id), db: Session = Depends(get_db)):
    with service_errors():
        return budgets.budget_suggestions(db, user_id, date.today())


@router.get("/status", response_model=BudgetStatusOut)
def get_status(user_id: int = Depends(current_user_id), db: Session = Depends(get_db)):
    with service_errors():
        return budgets.budget_status(db, user_id, date.today())


@router.get("/{budget_id}", response_model=WeeklyBudgetOut)
def get_budget(budget_id: int, user_id: int = Depends(current_user_id), db: Session = Depends(get_db)):
    with service_errors():
        return _owned_budget(db, budget_id, user_id)


@router.patch("/{budget_id}", response_model=WeeklyBudgetOut)
def update_budget(
    budget_id: int,
    changes: WeeklyBudgetUpdate,
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    with service_errors():
        _owned_budget(db, budget_id, user_id)
        return budgets.update_budget(db, budget_id, changes)
