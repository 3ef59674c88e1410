"""
Per-user daily quota for meal analyses.

The counter row is keyed by (user_id, usage_date); a new day simply starts a
new row. Reservation is a single conditional UPDATE so that concurrent
requests cannot push the count past the limit.
"""
from __future__ import annotations
import logging
from datetime import date
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from cut_sprint import config
from cut_sprint.schemas.ai_schema import QuotaDecision, UsageOut
from cut_sprint.sql import execute, fetch_one

logger = logging.getLogger(__name__)

_RESERVE = """
    UPDATE ai_analysis_usage
       SET count = count + 1
     WHERE user_id=:uid AND usage_date=:d AND count < :limit
"""
_READ = "SELECT count FROM ai_analysis_usage WHERE user_id=:uid AND usage_date=:d"
_INSERT_FIRST = "INSERT INTO ai_analysis_usage (user_id, usage_date, count) VALUES (:uid, :d, 1)"


def check_and_reserve(db: Session, user_id: int, today: date, limit: Optional[int] = None) -> QuotaDecision:
    """Take one analysis from today's quota if any is left. Commits its own transaction."""
    limit = config.AI_DAILY_LIMIT if limit is None else limit
    params = {"uid": user_id, "d": today.isoformat(), "limit": limit}

    while True:
        if execute(db, _RESERVE, params) == 1:
            count = fetch_one(db, _READ, params)["count"]
            db.commit()
            return QuotaDecision(allowed=True, currentUsage=count, dailyLimit=limit)

        row = fetch_one(db, _READ, params)
        if row is not None or limit <= 0:
            db.commit()
            current = row["count"] if row else 0
            logger.info("AI analysis quota exhausted for user %s on %s (%s/%s)", user_id, today, current, limit)
            return QuotaDecision(allowed=False, currentUsage=current, dailyLimit=limit)

        # first analysis of the day
        try:
            execute(db, _INSERT_FIRST, params)
            db.commit()
            return QuotaDecision(allowed=True, currentUsage=1, dailyLimit=limit)
        except IntegrityError:
            # another request created today's row first; retry against it
            db.rollback()


def get_usage(db: Session, user_id: int, today: date, limit: Optional[int] = None) -> UsageOut:
    limit = config.AI_DAILY_LIMIT if limit is None else limit
    row = fetch_one(db, _READ, {"uid": user_id, "d": today.isoformat()})
    return UsageOut(currentUsage=row["count"] if row else 0, dailyLimit=limit)
