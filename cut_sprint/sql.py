from typing import Any, Dict, List, Optional
from sqlalchemy import text
from sqlalchemy.engine import Row
from sqlalchemy.orm import Session


def fetch_one(db: Session, sql: str, params: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
    row: Optional[Row] = db.execute(text(sql), params or {}).fetchone()
    return dict(row._mapping) if row else None


def fetch_all(db: Session, sql: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
    rows = db.execute(text(sql), params or {}).fetchall()
    return [dict(r._mapping) for r in rows]


def execute(db: Session, sql: str, params: Optional[Dict[str, Any]] = None) -> int:
    """Run a write statement and return the affected row count."""
    result = db.execute(text(sql), params or {})
    return result.rowcount
