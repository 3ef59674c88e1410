from typing import List


class CutSprintError(Exception):
    """Base class for errors raised by the cut-sprint services."""


class IncompleteProfile(CutSprintError, ValueError):
    def __init__(self, missing: List[str]):
        self.missing = list(missing)
        super().__init__(f"Profile is missing required fields: {', '.join(self.missing)}")


class NotFound(CutSprintError, LookupError):
    pass


class QuotaExceeded(CutSprintError):
    def __init__(self, current_usage: int, daily_limit: int):
        self.current_usage = current_usage
        self.daily_limit = daily_limit
        super().__init__(f"Daily limit exceeded ({current_usage}/{daily_limit})")

    def to_dict(self) -> dict:
        return {"currentUsage": self.current_usage, "dailyLimit": self.daily_limit}


class UpstreamUnavailable(CutSprintError):
    """The language-model endpoint failed; callers fall back to local estimation."""


class BudgetConflict(CutSprintError, ValueError):
    """A weekly budget already exists for that user and start date."""
