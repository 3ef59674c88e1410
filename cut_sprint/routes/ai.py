from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from cut_sprint.database import get_db
from cut_sprint.routes.deps import current_user_id, service_errors
from cut_sprint.schemas.ai_schema import AnalyzeRequest, AnalyzeResponse, UsageOut
from cut_sprint.services.ai_analysis_service import analyze_for_user
from cut_sprint.services.ai_gate import get_usage

router = APIRouter(prefix="/ai", tags=["AI analysis"])


@router.post("/analyze", response_model=AnalyzeResponse, summary="Analyze a free-text meal description",
             description="""
Takes one analysis from the user's daily quota, then asks the language model.
If the model is unreachable or answers with something unusable, a local
estimate is returned instead (`source = "fallback"`).

- 429 when the daily quota is used up, with `currentUsage` and `dailyLimit`
""")
def analyze_meal(payload: AnalyzeRequest, user_id: int = Depends(current_user_id), db: Session = Depends(get_db)):
    with service_errors():
        return analyze_for_user(db, user_id, payload.input, date.today())


@router.get("/limits", response_model=UsageOut)
def get_limits(user_id: int = Depends(current_user_id), db: Session = Depends(get_db)):
    return get_usage(db, user_id, date.today())
