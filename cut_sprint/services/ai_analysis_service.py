"""
Free-text meal analysis through a language model, with a local estimator
standing in whenever the endpoint cannot give a usable answer.
"""
from __future__ import annotations
import logging
from datetime import date, datetime
from typing import Dict, List, Optional, Tuple, Union

from pydantic import TypeAdapter, ValidationError
from sqlalchemy.orm import Session

from cut_sprint import config
from cut_sprint.errors import QuotaExceeded, UpstreamUnavailable
from cut_sprint.models.meal import MealAnalysis
from cut_sprint.schemas.ai_schema import (
    AnalysisResult, AnalyzeResponse, ClarificationNeeded, NutritionAnalysis, UsageOut,
)
from cut_sprint.services.ai_gate import check_and_reserve
from cut_sprint.services.user_service import get_user
from cut_sprint.utils import food_estimator
from cut_sprint.utils.llm_client import LLMClient, parse_json_content

logger = logging.getLogger(__name__)

_result_adapter = TypeAdapter(AnalysisResult)

SYSTEM_PROMPT = "You are a nutrition expert. Always answer in JSON following the instructions."

INSTRUCTIONS = [
    "Estimate calories and macronutrients (protein, carbs, fat in grams) of the described food",
    "Use typical portion sizes only when the description names a portion",
    "If the amount of any item is unclear, ask for clarification instead of guessing",
    "Round calories to whole numbers and macros to one decimal place",
]

RESPONSE_FORMAT = """\
- With enough information, return an analysis:
{
  "type": "nutrition_analysis",
  "data": {
    "totalCalories": number,
    "totalProtein": number,
    "totalCarbs": number,
    "totalFat": number,
    "meals": [
      {"name": "string", "mealType": "breakfast|lunch|dinner|snack",
       "calories": number, "protein": number, "carbs": number, "fat": number}
    ],
    "confidence": "high|medium|low",
    "notes": "string"
  }
}
- When information is missing, return a question:
{
  "type": "clarification_needed",
  "question": "string",
  "suggestions": ["string"]
}"""

Result = Union[NutritionAnalysis, ClarificationNeeded]


def build_messages(text: str, region: str) -> List[Dict[str, str]]:
    instructions = "\n".join(f"- {i}" for i in INSTRUCTIONS)
    user_prompt = f"""USER LANGUAGE/REGION: {region}
Use the standard portion sizes for {region}.

INSTRUCTIONS:
{instructions}

MEALS:
- If no time is given, pick the meal type from the hour:
  before 12:00 breakfast, 12:00-16:00 lunch, 16:00-20:00 dinner, after 20:00 snack
- Split a description of several meals into separate entries

RESPONSE FORMAT:
{RESPONSE_FORMAT}

MEAL DESCRIPTION:
"{text}"

ANSWER (JSON only):"""
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": user_prompt},
    ]


def _ask_model(client: LLMClient, text: str, region: str) -> Result:
    content = client.complete(build_messages(text, region))
    payload = parse_json_content(content)
    try:
        return _result_adapter.validate_python(payload)
    except ValidationError as e:
        raise UpstreamUnavailable(f"LLM answer does not match the result schema: {e.error_count()} errors") from e


def analyze_with_source(
    text: str,
    region: Optional[str] = None,
    client: Optional[LLMClient] = None,
    now: Optional[datetime] = None,
) -> Tuple[Result, str]:
    """Returns the result and where it came from: "llm" or "fallback"."""
    client = client or LLMClient()
    region = region or config.DEFAULT_REGION
    try:
        return _ask_model(client, text, region), "llm"
    except UpstreamUnavailable as e:
        logger.warning("Meal analysis falling back to local estimate: %s", e)
        return food_estimator.estimate(text, now=now), "fallback"


def analyze(
    text: str,
    region: Optional[str] = None,
    client: Optional[LLMClient] = None,
    now: Optional[datetime] = None,
) -> Result:
    """Never raises on upstream trouble; the local estimate is always a valid result."""
    result, _ = analyze_with_source(text, region, client, now)
    return result


def analyze_for_user(
    db: Session,
    user_id: int,
    text: str,
    today: date,
    client: Optional[LLMClient] = None,
    now: Optional[datetime] = None,
) -> AnalyzeResponse:
    user = get_user(db, user_id)
    decision = check_and_reserve(db, user_id, today)
    if not decision.allowed:
        raise QuotaExceeded(decision.currentUsage, decision.dailyLimit)

    result, source = analyze_with_source(text, user.region, client, now)
    db.add(MealAnalysis(
        user_id=user_id,
        input_text=text,
        analysis_result=result.model_dump(),
        source=source,
        meal_date=today,
    ))
    db.commit()

    return AnalyzeResponse(
        source=source,
        data=result,
        usage=UsageOut(currentUsage=decision.currentUsage, dailyLimit=decision.dailyLimit),
    )
