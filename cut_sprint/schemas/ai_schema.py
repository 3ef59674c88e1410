from typing import Annotated, List, Literal, Union
from pydantic import BaseModel, Field

MealType = Literal["breakfast", "lunch", "dinner", "snack"]


class AnalyzedMeal(BaseModel):
    name: str
    mealType: MealType
    calories: float = Field(..., ge=0)
    protein: float = Field(..., ge=0)
    carbs: float = Field(..., ge=0)
    fat: float = Field(..., ge=0)


class NutritionAnalysisData(BaseModel):
    totalCalories: float = Field(..., ge=0)
    totalProtein: float = Field(..., ge=0)
    totalCarbs: float = Field(..., ge=0)
    totalFat: float = Field(..., ge=0)
    meals: List[AnalyzedMeal] = []
    confidence: Literal["high", "medium", "low"] = "medium"
    notes: str = ""


class NutritionAnalysis(BaseModel):
    type: Literal["nutrition_analysis"] = "nutrition_analysis"
    data: NutritionAnalysisData


class ClarificationNeeded(BaseModel):
    type: Literal["clarification_needed"] = "clarification_needed"
    question: str
    suggestions: List[str] = []


AnalysisResult = Annotated[Union[NutritionAnalysis, ClarificationNeeded], Field(discriminator="type")]


class AnalyzeRequest(BaseModel):
    input: str = Field(..., min_length=1, max_length=1000)


class QuotaDecision(BaseModel):
    allowed: bool
    currentUsage: int
    dailyLimit: int


class UsageOut(BaseModel):
    currentUsage: int
    dailyLimit: int


class AnalyzeResponse(BaseModel):
    source: Literal["llm", "fallback"]
    data: AnalysisResult
    usage: UsageOut
