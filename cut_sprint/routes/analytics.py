from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from cut_sprint.database import get_db
from cut_sprint.routes.deps import current_user_id, or_today, service_errors
from cut_sprint.schemas.responses import InsightsResponse, TrendsResponse
from cut_sprint.services import weight_service

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.get("/trends", response_model=TrendsResponse)
def get_trends(
    days: int = Query(30, ge=1, le=365),
    today: Optional[date] = None,
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    with service_errors():
        return weight_service.nutrition_trends(db, user_id, or_today(today), days)


@router.get("/insights", response_model=InsightsResponse, summary="7-day averages and recommendations")
def get_insights(today: Optional[date] = None, user_id: int = Depends(current_user_id), db: Session = Depends(get_db)):
    with service_errors():
        return weight_service.nutrition_insights(db, user_id, or_today(today))
