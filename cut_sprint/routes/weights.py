from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from cut_sprint.database import get_db
from cut_sprint.routes.deps import current_user_id, or_today, service_errors
from cut_sprint.schemas.responses import (
    MovingAveragePoint, WeightChange, WeightCreate, WeightOut, WeightPrediction, WeightStats, WeightStep,
    WeightUpdate,
)
from cut_sprint.services import weight_service

router = APIRouter(prefix="/weights", tags=["Weight"])


@router.post("", response_model=WeightOut, status_code=201)
def add_weight(payload: WeightCreate, user_id: int = Depends(current_user_id), db: Session = Depends(get_db)):
    with service_errors():
        return weight_service.add_weight(
            db, user_id, payload.date, payload.value_kg,
            note=payload.note, flags=payload.flags, source=payload.source,
        )


@router.get("", response_model=List[WeightOut])
def list_weights(start: date, end: date, user_id: int = Depends(current_user_id), db: Session = Depends(get_db)):
    return weight_service.weights_in_range(db, user_id, start, end)


@router.get("/trend", response_model=List[WeightStep])
def get_trend(
    days: int = Query(30, ge=1, le=365),
    today: Optional[date] = None,
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    return weight_service.weight_trend(db, user_id, or_today(today), days)


@router.get("/moving-average", response_model=List[MovingAveragePoint])
def get_moving_average(
    window: int = Query(7, ge=1, le=60),
    today: Optional[date] = None,
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    return weight_service.weight_moving_average(db, user_id, or_today(today), window)


@router.get("/predictions", response_model=List[WeightPrediction])
def get_predictions(
    weeks: int = Query(4, ge=1, le=12),
    today: Optional[date] = None,
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    return weight_service.weight_predictions(db, user_id, or_today(today), weeks)


@router.get("/stats", response_model=WeightStats)
def get_stats(
    days: int = Query(30, ge=1, le=365),
    today: Optional[date] = None,
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    return weight_service.weight_statistics(db, user_id, or_today(today), days)


@router.get("/change", response_model=Optional[WeightChange],
            summary="First vs last weigh-in in the range; null with fewer than two")
def get_change(start: date, end: date, user_id: int = Depends(current_user_id), db: Session = Depends(get_db)):
    if end < start:
        raise HTTPException(status_code=422, detail="end must not be before start")
    return weight_service.weight_change_between(db, user_id, start, end)


@router.get("/reminder")
def get_reminder(today: Optional[date] = None, user_id: int = Depends(current_user_id), db: Session = Depends(get_db)):
    return {"remind": weight_service.should_remind_to_weigh_in(db, user_id, or_today(today))}


@router.get("/flagged", response_model=List[WeightOut], summary="Weigh-ins carrying a flag, newest first")
def list_flagged(flag: str, user_id: int = Depends(current_user_id), db: Session = Depends(get_db)):
    return weight_service.weights_with_flag(db, user_id, flag)


def _owned_weight(db: Session, weight_id: int, user_id: int):
    row = weight_service.get_weight(db, weight_id)
    if row.user_id != user_id:
        raise HTTPException(status_code=404, detail=f"Weight entry {weight_id} not found.")
    return row


@router.patch("/{weight_id}", response_model=WeightOut)
def update_weight(
    weight_id: int,
    changes: WeightUpdate,
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    with service_errors():
        _owned_weight(db, weight_id, user_id)
        return weight_service.update_weight(db, weight_id, changes)


@router.delete("/{weight_id}", status_code=204)
def delete_weight(weight_id: int, user_id: int = Depends(current_user_id), db: Session = Depends(get_db)):
    with service_errors():
        _owned_weight(db, weight_id, user_id)
        weight_service.delete_weight(db, weight_id)
    return Response(status_code=204)
