"""
Local meal estimator used when the language-model endpoint is unavailable.

Keyword lookup over a small fixed food table. Values are the typical portion
figures (kcal, protein g, carbs g, fat g); a matched food contributes once no
matter how many of its aliases appear.
"""
import random
import re
from datetime import datetime
from typing import Dict, List, Optional, Tuple, Union

from cut_sprint.schemas.ai_schema import (
    AnalyzedMeal, ClarificationNeeded, NutritionAnalysis, NutritionAnalysisData,
)

FOODS: Dict[str, Tuple[float, float, float, float]] = {
    "chicken":  (165, 31.0, 0.0, 3.6),   # per 100 g
    "rice":     (130, 2.7, 28.0, 0.3),   # per 100 g
    "egg":      (155, 13.0, 1.1, 11.0),  # per piece
    "bread":    (265, 9.0, 49.0, 3.2),   # per 100 g
    "milk":     (61, 3.2, 4.8, 3.3),     # per 100 ml
    "banana":   (89, 1.1, 23.0, 0.3),    # per piece
    "apple":    (52, 0.3, 14.0, 0.2),    # per piece
    "broccoli": (34, 2.8, 7.0, 0.4),     # per 100 g
}

ALIASES = {
    "chicken": ["chicken", "kurczak", "pierś", "piers"],
    "rice": ["rice", "ryż", "ryz"],
    "egg": ["egg", "jajko", "jajka", "jaja"],
    "bread": ["bread", "toast", "sandwich", "chleb", "kanapka"],
    "milk": ["milk", "mleko"],
    "banana": ["banana", "banan"],
    "apple": ["apple", "jabłko", "jablko"],
    "broccoli": ["broccoli", "brokuł", "brokul"],
}

# placeholder ranges (inclusive low, exclusive high) when no food is recognised
PLACEHOLDER = {"calories": (200, 500), "protein": (10, 30), "carbs": (20, 50), "fat": (5, 15)}

_UNIT_AFTER_NUMBER = re.compile(
    r"\d+(?:[.,]\d+)?\s*(?:g|kg|ml|l|gr|grams?|pcs|szt)\b", re.IGNORECASE
)
_UNIT_WORDS = re.compile(
    r"\b(?:grams?|gramów|pieces?|slices?|tablespoons?|tbsp|teaspoons?|tsp|cups?|glass(?:es)?|"
    r"sztuk[ia]?|kawał(?:ek|ki)|łyżk[aię]|łyżeczk[aię]|szklank[aię]|plaster(?:ek|ki)?)\b",
    re.IGNORECASE,
)
_COUNT_BEFORE_WORD = re.compile(r"\b\d+(?:[.,]\d+)?\s+[^\W\d_]{2,}", re.UNICODE)

# an alias must start a word; inflected endings ("eggs", "kurczaka") still match
_FOOD_PATTERNS = {
    food: re.compile(r"\b(?:" + "|".join(map(re.escape, names)) + r")\w*")
    for food, names in ALIASES.items()
}

CLARIFICATION_QUESTION = "I need more detail about the amount. How much exactly did you eat?"
CLARIFICATION_SUGGESTIONS = [
    "Give the weight in grams (e.g. 200g)",
    "Give the number of pieces (e.g. 2 eggs)",
    "Give the volume (e.g. 1 glass)",
    "Describe the portion size (e.g. a medium banana)",
]


def _normalize(s: str) -> str:
    return (s or "").strip().lower()


def has_portion(text: str) -> bool:
    t = _normalize(text)
    return bool(
        _UNIT_AFTER_NUMBER.search(t) or _UNIT_WORDS.search(t) or _COUNT_BEFORE_WORD.search(t)
    )


def matched_foods(text: str) -> List[str]:
    t = _normalize(text)
    return [food for food, pattern in _FOOD_PATTERNS.items() if pattern.search(t)]


def meal_type_for_hour(hour: int) -> Tuple[str, str]:
    if hour < 12:
        return "breakfast", "Breakfast"
    if hour < 16:
        return "lunch", "Lunch"
    if hour < 20:
        return "dinner", "Dinner"
    return "snack", "Snack"


def _totals(text: str) -> Dict[str, float]:
    foods = matched_foods(text)
    if foods:
        totals = {"calories": 0.0, "protein": 0.0, "carbs": 0.0, "fat": 0.0}
        for food in foods:
            kcal, protein, carbs, fat = FOODS[food]
            totals["calories"] += kcal
            totals["protein"] += protein
            totals["carbs"] += carbs
            totals["fat"] += fat
        return {k: round(v, 1) for k, v in totals.items()}

    rng = random.Random(_normalize(text))
    return {k: float(rng.randrange(lo, hi)) for k, (lo, hi) in PLACEHOLDER.items()}


def estimate(text: str, now: Optional[datetime] = None) -> Union[NutritionAnalysis, ClarificationNeeded]:
    """Always returns a valid analysis result; never raises on free text."""
    if not has_portion(text):
        return ClarificationNeeded(
            question=CLARIFICATION_QUESTION,
            suggestions=list(CLARIFICATION_SUGGESTIONS),
        )

    totals = _totals(text)
    meal_type, meal_name = meal_type_for_hour((now or datetime.now()).hour)
    return NutritionAnalysis(
        data=NutritionAnalysisData(
            totalCalories=totals["calories"],
            totalProtein=totals["protein"],
            totalCarbs=totals["carbs"],
            totalFat=totals["fat"],
            meals=[AnalyzedMeal(name=meal_name, mealType=meal_type, **totals)],
            confidence="medium" if matched_foods(text) else "low",
            notes="Estimated locally from the given amounts (fallback mode)",
        )
    )
