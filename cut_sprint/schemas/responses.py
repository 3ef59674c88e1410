import datetime
from datetime import date
from typing import List, Literal, Optional
from pydantic import BaseModel, Field

BudgetStatus = Literal["active", "completed", "cancelled"]
MealType = Literal["breakfast", "lunch", "dinner", "snack"]
Trend = Literal["increasing", "decreasing", "stable"]
Confidence = Literal["high", "medium", "low"]
WeightSource = Literal["manual", "apple_health", "google_fit"]


class DailyNutritionTarget(BaseModel):
    calories: int
    protein_g: int
    fat_g: int
    carbs_g: int


class WeeklyNutritionTarget(BaseModel):
    total_calories: int
    daily_average_calories: int
    target_protein: int
    target_fat: int
    target_carbs: int
    weekend_bonus_calories: int


class NutritionInfo(BaseModel):
    calories: float = 0
    protein: float = 0
    fat: float = 0
    carbs: float = 0
    fiber: Optional[float] = None
    sodium: Optional[float] = None


class WeeklyBudgetOut(BaseModel):
    id: int
    user_id: int
    start_date: date
    end_date: date
    target_calories: int
    target_protein: int
    target_fat: int
    target_carbs: int
    weekend_bonus_calories: int
    status: BudgetStatus

    class Config:
        from_attributes = True


class WeeklyBudgetCreate(BaseModel):
    start_date: date
    end_date: date
    target_calories: int = Field(..., gt=0)
    target_protein: int = Field(..., ge=0)
    target_fat: int = Field(..., ge=0)
    target_carbs: int = Field(..., ge=0)
    weekend_bonus_calories: int = Field(0, ge=0)


class WeeklyBudgetUpdate(BaseModel):
    target_calories: Optional[int] = Field(None, gt=0)
    target_protein: Optional[int] = Field(None, ge=0)
    target_fat: Optional[int] = Field(None, ge=0)
    target_carbs: Optional[int] = Field(None, ge=0)
    weekend_bonus_calories: Optional[int] = Field(None, ge=0)
    status: Optional[BudgetStatus] = None


class DailyBreakdown(BaseModel):
    date: date
    target_calories: int
    actual_calories: float
    remaining_calories: float
    is_weekend: bool
    weekend_bonus: int


class CompensationDay(BaseModel):
    date: date
    compensation_calories: int


class CompensationPlan(BaseModel):
    weekend_bonus: int
    compensation_days: List[CompensationDay]
    total_compensation: int


class WeeklyProgress(BaseModel):
    week_start: date
    week_end: date
    target_calories: int
    actual_calories: float
    deficit: float
    weight_start: float
    weight_end: float
    weight_loss: float
    target_loss: float
    progress_percentage: int


class BudgetAdjustment(BaseModel):
    type: Literal["increase_calories", "decrease_calories"]
    value: int
    reason: str


class BudgetSuggestions(BaseModel):
    message: str
    suggestions: List[str]
    adjustments: List[BudgetAdjustment]


class BudgetStatusOut(BaseModel):
    is_on_track: bool
    remaining_days: int
    average_remaining_per_day: int
    can_afford_weekend: bool


class WeightChange(BaseModel):
    start_weight: float
    end_weight: float
    change: float
    change_percent: float


class MovingAveragePoint(BaseModel):
    date: date
    average: float


class WeightPrediction(BaseModel):
    date: date
    predicted_value: float
    confidence: Confidence


class WeightStep(BaseModel):
    date: date
    weight: float
    change: float
    trend: Literal["up", "down", "stable"]


class WeightStats(BaseModel):
    current_weight: float
    start_weight: float
    total_change: float
    average_change: float
    highest_weight: float
    lowest_weight: float
    trend: Trend


class DailySummary(BaseModel):
    date: date
    total_calories: float
    total_protein: float
    total_fat: float
    total_carbs: float
    weight: Optional[float] = None


class NutritionTrends(BaseModel):
    calories_trend: Trend
    protein_trend: Trend
    fat_trend: Trend
    carbs_trend: Trend
    weight_trend: Trend


class TrendsResponse(BaseModel):
    summaries: List[DailySummary]
    trends: NutritionTrends


class Insight(BaseModel):
    type: str
    value: float
    label: str
    status: Literal["low", "normal", "high", "gain", "loss", "stable"]


class InsightsResponse(BaseModel):
    insights: List[Insight]
    recommendations: List[str]


class ScaleRequest(BaseModel):
    product_id: int
    quantity_grams: float = Field(..., gt=0)


class MealItemIn(BaseModel):
    product_id: int
    quantity_grams: float = Field(..., gt=0)


class MealCreate(BaseModel):
    date: date
    type: MealType
    items: List[MealItemIn] = Field(..., min_length=1)
    notes: Optional[str] = Field(None, max_length=255)


class MealOut(BaseModel):
    id: int
    user_id: int
    date: date
    type: MealType
    total_calories: float
    total_protein: float
    total_fat: float
    total_carbs: float
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class WeightCreate(BaseModel):
    date: date
    value_kg: float = Field(..., gt=0)
    note: Optional[str] = Field(None, max_length=255)
    flags: List[str] = []
    source: WeightSource = "manual"


class WeightOut(BaseModel):
    id: int
    user_id: int
    date: date
    value_kg: float
    note: Optional[str] = None
    flags: List[str] = []
    source: WeightSource

    class Config:
        from_attributes = True


class WeightUpdate(BaseModel):
    value_kg: Optional[float] = Field(None, gt=0)
    note: Optional[str] = Field(None, max_length=255)
    flags: Optional[List[str]] = None
    source: Optional[WeightSource] = None
    date: Optional[datetime.date] = None


class MealUpdate(BaseModel):
    """Fields left out keep their stored value; new items replace the meal's totals."""
    type: Optional[MealType] = None
    items: Optional[List[MealItemIn]] = Field(None, min_length=1)
    notes: Optional[str] = Field(None, max_length=255)
    date: Optional[datetime.date] = None


class ProductOut(BaseModel):
    id: int
    name: str
    brand: Optional[str] = None
    calories_per_100g: float
    protein_per_100g: float
    fat_per_100g: float
    carbs_per_100g: float

    class Config:
        from_attributes = True


class MealSuggestions(BaseModel):
    message: str
    remaining: NutritionInfo
    products: List[ProductOut]
