from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session

from cut_sprint.errors import NotFound
from cut_sprint.models.meal import Meal
from cut_sprint.models.product import Product
from cut_sprint.models.weight import Weight
from cut_sprint.schemas.responses import (
    DailySummary, MealSuggestions, MealUpdate, NutritionInfo, ProductOut,
)
from cut_sprint.services.nutrients_sql import intake_between, intake_by_day, intake_on
from cut_sprint.services.nutrition_calculator import scale_nutrition
from cut_sprint.services.user_service import daily_target_for, get_user
from cut_sprint.utils.rounding import round2

MEAL_ORDER = {"breakfast": 0, "lunch": 1, "dinner": 2, "snack": 3}

# remaining-macro thresholds below which a nutrient is called out as missing
LOW_PROTEIN_G, LOW_CARBS_G, LOW_FAT_G = 20, 30, 10
RICH_IN = {"protein": ("protein_per_100g", 15), "carbs": ("carbs_per_100g", 20), "fat": ("fat_per_100g", 10)}
NUTRIENT_SUGGESTION_LIMIT = 3
MEAL_TYPE_SUGGESTION_LIMIT = 10
MEAL_TYPE_KEYWORDS = {
    "breakfast": ["oat", "yogurt", "milk", "bread"],
    "lunch": ["chicken", "rice", "pasta", "vegetable"],
    "dinner": ["cottage cheese", "cheese", "bread", "vegetable"],
    "snack": ["nut", "fruit", "yogurt"],
}


def _item_totals(db: Session, items: Iterable[Tuple[int, float]]) -> Dict[str, float]:
    totals = {"calories": 0.0, "protein": 0.0, "fat": 0.0, "carbs": 0.0}
    for product_id, grams in items:
        product = db.get(Product, product_id)
        if not product:
            raise NotFound(f"Product {product_id} not found.")
        info = scale_nutrition(product, grams)
        for k in totals:
            totals[k] += getattr(info, k)
    return totals


def _set_totals(meal: Meal, totals: Dict[str, float]) -> None:
    meal.total_calories = totals["calories"]
    meal.total_protein = round2(totals["protein"])
    meal.total_fat = round2(totals["fat"])
    meal.total_carbs = round2(totals["carbs"])


def log_meal(
    db: Session,
    user_id: int,
    day: date,
    meal_type: str,
    items: Iterable[Tuple[int, float]],
    notes: Optional[str] = None,
) -> Meal:
    """Store a meal whose totals are the scaled sum of (product_id, grams) items."""
    get_user(db, user_id)
    meal = Meal(user_id=user_id, date=day, type=meal_type, notes=notes)
    _set_totals(meal, _item_totals(db, items))
    db.add(meal)
    db.commit()
    db.refresh(meal)
    return meal


def get_meal(db: Session, meal_id: int) -> Meal:
    meal = db.get(Meal, meal_id)
    if not meal:
        raise NotFound(f"Meal {meal_id} not found.")
    return meal


def meals_on(db: Session, user_id: int, day: date) -> List[Meal]:
    """The day's meals in breakfast, lunch, dinner, snack order."""
    meals = db.query(Meal).filter(Meal.user_id == user_id, Meal.date == day).order_by(Meal.id).all()
    return sorted(meals, key=lambda m: MEAL_ORDER.get(m.type, len(MEAL_ORDER)))


def update_meal(db: Session, meal_id: int, changes: MealUpdate) -> Meal:
    meal = get_meal(db, meal_id)
    fields = changes.model_dump(exclude_unset=True, exclude={"items"})
    for required in ("type", "date"):
        if required in fields and fields[required] is None:
            raise ValueError(f"{required} cannot be cleared")
    if changes.items is not None:
        _set_totals(meal, _item_totals(db, [(i.product_id, i.quantity_grams) for i in changes.items]))
    for field, value in fields.items():
        setattr(meal, field, value)
    db.commit()
    db.refresh(meal)
    return meal


def delete_meal(db: Session, meal_id: int) -> None:
    db.delete(get_meal(db, meal_id))
    db.commit()


def _products_rich_in(db: Session, nutrient: str) -> List[Product]:
    column, minimum = RICH_IN[nutrient]
    return (
        db.query(Product)
        .filter(Product.is_global.is_(True), getattr(Product, column) >= minimum)
        .order_by(Product.id)
        .limit(NUTRIENT_SUGGESTION_LIMIT)
        .all()
    )


def _products_for_meal_type(db: Session, meal_type: str) -> List[Product]:
    keywords = MEAL_TYPE_KEYWORDS[meal_type]
    return (
        db.query(Product)
        .filter(Product.is_global.is_(True), or_(*[Product.name.ilike(f"%{k}%") for k in keywords]))
        .order_by(Product.id)
        .limit(MEAL_TYPE_SUGGESTION_LIMIT)
        .all()
    )


def meal_suggestions(db: Session, user_id: int, day: date, meal_type: str) -> MealSuggestions:
    """
    Compare the day's intake with the daily target and point at the most
    missing macro: protein first, then carbs, then fat. When nothing is short,
    products that fit `meal_type` are offered instead.
    """
    target = daily_target_for(db, user_id)
    eaten = intake_on(db, user_id, day)
    remaining = NutritionInfo(
        calories=target.calories - eaten["calories"],
        protein=round2(target.protein_g - eaten["protein"]),
        fat=round2(target.fat_g - eaten["fat"]),
        carbs=round2(target.carbs_g - eaten["carbs"]),
    )

    if remaining.protein < LOW_PROTEIN_G:
        message = "Protein is running low, add cottage cheese, chicken or yogurt"
        products = _products_rich_in(db, "protein")
    elif remaining.carbs < LOW_CARBS_G:
        message = "Few carbs left before training, add a banana, rice or oatmeal"
        products = _products_rich_in(db, "carbs")
    elif remaining.fat < LOW_FAT_G:
        message = "Fat is running low, add nuts, olive oil or avocado"
        products = _products_rich_in(db, "fat")
    else:
        message = "Your day looks well balanced"
        products = _products_for_meal_type(db, meal_type)

    return MealSuggestions(
        message=message,
        remaining=remaining,
        products=[ProductOut.model_validate(p) for p in products],
    )


def daily_nutrition_summary(db: Session, user_id: int, day: date) -> NutritionInfo:
    return NutritionInfo(**intake_on(db, user_id, day))


def range_nutrition_summary(db: Session, user_id: int, start: date, end: date) -> NutritionInfo:
    return NutritionInfo(**intake_between(db, user_id, start, end))


def daily_summaries(db: Session, user_id: int, start: date, end: date) -> List[DailySummary]:
    """One row per day that has meals or a weigh-in, ordered by date."""
    by_day = {r["day"]: r for r in intake_by_day(db, user_id, start, end)}

    weights = (
        db.query(Weight)
        .filter(Weight.user_id == user_id, Weight.date >= start, Weight.date <= end)
        .order_by(Weight.date, Weight.id)
        .all()
    )
    last_weight = {}
    for w in weights:
        last_weight[w.date] = w.value_kg

    out = []
    for day in sorted(set(by_day) | set(last_weight)):
        r = by_day.get(day, {})
        out.append(DailySummary(
            date=day,
            total_calories=r.get("calories", 0.0),
            total_protein=r.get("protein", 0.0),
            total_fat=r.get("fat", 0.0),
            total_carbs=r.get("carbs", 0.0),
            weight=last_weight.get(day),
        ))
    return out
