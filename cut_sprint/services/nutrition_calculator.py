"""
BMR/TDEE, daily and weekly macro targets, and per-100 g product scaling.

Profiles are read by attribute, so both `models.user.User` rows and
`schemas.user_schema.UserProfile` values are accepted.
"""
from __future__ import annotations

from cut_sprint import config
from cut_sprint.errors import IncompleteProfile
from cut_sprint.schemas.responses import DailyNutritionTarget, NutritionInfo, WeeklyNutritionTarget
from cut_sprint.utils.rounding import round2, round_half_up

REQUIRED_FIELDS = ("weight", "height", "age", "gender")


def require_complete(profile) -> None:
    missing = [f for f in REQUIRED_FIELDS if getattr(profile, f, None) is None]
    if missing:
        raise IncompleteProfile(missing)


def bmr(profile) -> float:
    """Mifflin-St Jeor. Any non-male gender uses the female offset."""
    require_complete(profile)
    base = 10 * profile.weight + 6.25 * profile.height - 5 * profile.age
    if profile.gender == "male":
        return base + config.MALE_BMR_OFFSET
    return base + config.NON_MALE_BMR_OFFSET


def activity_multiplier(activity_level: str | None) -> float:
    level = activity_level or config.DEFAULT_ACTIVITY_LEVEL
    try:
        return config.ACTIVITY_MULTIPLIERS[level]
    except KeyError:
        raise ValueError(f"Unknown activity level '{level}'")


def tdee(profile) -> float:
    return bmr(profile) * activity_multiplier(getattr(profile, "activity_level", None))


def daily_deficit(profile) -> float:
    weekly_loss = getattr(profile, "target_weekly_loss", None)
    if weekly_loss is None:
        weekly_loss = config.DEFAULT_WEEKLY_LOSS_KG
    return weekly_loss * config.KCAL_PER_KG_FAT / 7


def daily_target(profile) -> DailyNutritionTarget:
    calories = round_half_up(tdee(profile) - daily_deficit(profile))
    if config.MIN_SAFE_CALORIES is not None:
        calories = max(calories, int(config.MIN_SAFE_CALORIES))

    protein = round_half_up(profile.weight * config.PROTEIN_G_PER_KG)
    fat = round_half_up(calories * config.FAT_CALORIE_SHARE / 9)
    carbs = round_half_up((calories - protein * 4 - fat * 9) / 4)
    return DailyNutritionTarget(calories=calories, protein_g=protein, fat_g=fat, carbs_g=carbs)


def weekend_bonus(profile) -> int:
    return config.WEEKEND_BONUS_CALORIES if getattr(profile, "weekend_mode", None) == "active" else 0


def weekly_target(profile) -> WeeklyNutritionTarget:
    # The bonus is granted for a fixed number of weekend days, whatever span
    # weekend_start_day..weekend_end_day covers.
    daily = daily_target(profile)
    bonus = weekend_bonus(profile)
    return WeeklyNutritionTarget(
        total_calories=daily.calories * 7 + bonus * config.WEEKEND_BONUS_DAYS,
        daily_average_calories=daily.calories,
        target_protein=daily.protein_g * 7,
        target_fat=daily.fat_g * 7,
        target_carbs=daily.carbs_g * 7,
        weekend_bonus_calories=bonus,
    )


def scale_nutrition(product, quantity_grams: float) -> NutritionInfo:
    multiplier = quantity_grams / 100
    return NutritionInfo(
        calories=round_half_up(product.calories_per_100g * multiplier),
        protein=round2(product.protein_per_100g * multiplier),
        fat=round2(product.fat_per_100g * multiplier),
        carbs=round2(product.carbs_per_100g * multiplier),
        fiber=round2((getattr(product, "fiber_per_100g", 0) or 0) * multiplier),
        sodium=round2((getattr(product, "sodium_per_100g", 0) or 0) * multiplier),
    )
