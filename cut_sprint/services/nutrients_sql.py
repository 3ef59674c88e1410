from datetime import date
from typing import Dict, List
from sqlalchemy.orm import Session
from cut_sprint.sql import fetch_one, fetch_all


def _as_totals(row: Dict) -> Dict[str, float]:
    row = row or {}
    return {
        "calories": float(row.get("calories") or 0),
        "protein": float(row.get("protein") or 0),
        "fat": float(row.get("fat") or 0),
        "carbs": float(row.get("carbs") or 0),
    }


def intake_between(db: Session, user_id: int, start: date, end: date) -> Dict[str, float]:
    row = fetch_one(
        db,
        """
        SELECT
          COALESCE(SUM(m.total_calories),0) AS calories,
          COALESCE(SUM(m.total_protein),0)  AS protein,
          COALESCE(SUM(m.total_fat),0)      AS fat,
          COALESCE(SUM(m.total_carbs),0)    AS carbs
        FROM meals m
        WHERE m.user_id=:uid
          AND m.date BETWEEN :s AND :e
        """, {"uid": user_id, "s": start.isoformat(), "e": end.isoformat()}
    )
    return _as_totals(row)


def intake_on(db: Session, user_id: int, day: date) -> Dict[str, float]:
    return intake_between(db, user_id, day, day)


def intake_by_day(db: Session, user_id: int, start: date, end: date) -> List[Dict]:
    rows = fetch_all(
        db,
        """
        SELECT
          m.date                 AS day,
          SUM(m.total_calories)  AS calories,
          SUM(m.total_protein)   AS protein,
          SUM(m.total_fat)       AS fat,
          SUM(m.total_carbs)     AS carbs
        FROM meals m
        WHERE m.user_id=:uid
          AND m.date BETWEEN :s AND :e
        GROUP BY m.date
        ORDER BY m.date
        """, {"uid": user_id, "s": start.isoformat(), "e": end.isoformat()}
    )
    # SQLite hands DATE columns back as text
    return [{"day": date.fromisoformat(str(r["day"])[:10]), **_as_totals(r)} for r in rows]
