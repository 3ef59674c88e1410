from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from cut_sprint.database import get_db
from cut_sprint.models.product import Product
from cut_sprint.routes.deps import current_user_id, or_today, service_errors
from cut_sprint.schemas.responses import (
    DailyNutritionTarget, DailySummary, MealCreate, MealOut, MealSuggestions, MealType, MealUpdate,
    NutritionInfo, ScaleRequest, WeeklyNutritionTarget,
)
from cut_sprint.schemas.user_schema import UserProfile
from cut_sprint.services import meal_service
from cut_sprint.services.nutrition_calculator import scale_nutrition, weekly_target
from cut_sprint.services.user_service import daily_target_for, get_user

router = APIRouter(prefix="/nutrition", tags=["Nutrition"])


@router.get("/profile", response_model=UserProfile, summary="Inputs used for target calculation")
def get_profile(user_id: int = Depends(current_user_id), db: Session = Depends(get_db)):
    with service_errors():
        return get_user(db, user_id)


@router.get("/targets/daily", response_model=DailyNutritionTarget, summary="Daily calorie and macro target")
def get_daily_target(user_id: int = Depends(current_user_id), db: Session = Depends(get_db)):
    with service_errors():
        return daily_target_for(db, user_id)


@router.get("/targets/weekly", response_model=WeeklyNutritionTarget,
            summary="Weekly target including the weekend bonus")
def get_weekly_target(user_id: int = Depends(current_user_id), db: Session = Depends(get_db)):
    with service_errors():
        return weekly_target(get_user(db, user_id))


@router.post("/scale", response_model=NutritionInfo, summary="Nutrition of a product quantity")
def scale_product(payload: ScaleRequest, db: Session = Depends(get_db)):
    product = db.get(Product, payload.product_id)
    if not product:
        raise HTTPException(status_code=404, detail=f"Product {payload.product_id} not found.")
    return scale_nutrition(product, payload.quantity_grams)


@router.post("/meals", response_model=MealOut, status_code=201)
def create_meal(payload: MealCreate, user_id: int = Depends(current_user_id), db: Session = Depends(get_db)):
    with service_errors():
        return meal_service.log_meal(
            db, user_id, payload.date, payload.type,
            [(i.product_id, i.quantity_grams) for i in payload.items],
            notes=payload.notes,
        )


def _owned_meal(db: Session, meal_id: int, user_id: int):
    meal = meal_service.get_meal(db, meal_id)
    if meal.user_id != user_id:
        raise HTTPException(status_code=404, detail=f"Meal {meal_id} not found.")
    return meal


@router.get("/meals", response_model=List[MealOut], summary="Meals logged on a day")
def list_meals(
    day: Optional[date] = Query(None, description="defaults to today"),
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    return meal_service.meals_on(db, user_id, or_today(day))


@router.get("/meals/suggestions", response_model=MealSuggestions,
            summary="What to eat next, from the macros still missing today")
def get_meal_suggestions(
    meal_type: MealType,
    day: Optional[date] = Query(None, description="defaults to today"),
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    with service_errors():
        return meal_service.meal_suggestions(db, user_id, or_today(day), meal_type)


@router.get("/meals/{meal_id}", response_model=MealOut)
def get_meal(meal_id: int, user_id: int = Depends(current_user_id), db: Session = Depends(get_db)):
    with service_errors():
        return _owned_meal(db, meal_id, user_id)


@router.patch("/meals/{meal_id}", response_model=MealOut)
def update_meal(
    meal_id: int,
    changes: MealUpdate,
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    with service_errors():
        _owned_meal(db, meal_id, user_id)
        return meal_service.update_meal(db, meal_id, changes)


@router.delete("/meals/{meal_id}", status_code=204)
def delete_meal(meal_id: int, user_id: int = Depends(current_user_id), db: Session = Depends(get_db)):
    with service_errors():
        _owned_meal(db, meal_id, user_id)
        meal_service.delete_meal(db, meal_id)
    return Response(status_code=204)


@router.get("/summary/daily", response_model=NutritionInfo)
def get_daily_summary(
    day: Optional[date] = Query(None, description="defaults to today"),
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    return meal_service.daily_nutrition_summary(db, user_id, or_today(day))


@router.get("/summary/range", response_model=NutritionInfo)
def get_range_summary(
    start: date,
    end: date,
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    if end < start:
        raise HTTPException(status_code=422, detail="end must not be before start")
    return meal_service.range_nutrition_summary(db, user_id, start, end)


@router.get("/summaries", response_model=List[DailySummary], summary="Per-day totals with the day's weight")
def get_daily_summaries(
    start: date,
    end: date,
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    if end < start:
        raise HTTPException(status_code=422, detail="end must not be before start")
    return meal_service.daily_summaries(db, user_id, start, end)
