from contextlib import contextmanager
from datetime import date
from typing import Optional

from fastapi import Header, HTTPException

from cut_sprint.errors import BudgetConflict, IncompleteProfile, NotFound, QuotaExceeded


def current_user_id(x_user_id: int = Header(..., description="Authenticated user id set by the gateway")) -> int:
    return x_user_id


def or_today(d: Optional[date]) -> date:
    return d or date.today()


@contextmanager
def service_errors():
    """Translate service exceptions into HTTP responses."""
    try:
        yield
    except IncompleteProfile as e:
        raise HTTPException(status_code=422, detail={"message": str(e), "missing": e.missing})
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except BudgetConflict as e:
        raise HTTPException(status_code=409, detail=str(e))
    except QuotaExceeded as e:
        raise HTTPException(status_code=429, detail={"message": str(e), **e.to_dict()})
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
