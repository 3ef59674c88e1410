from typing import Literal, Optional
from pydantic import BaseModel, Field

Gender = Literal["male", "female", "other"]
ActivityLevel = Literal["sedentary", "light", "moderate", "active", "very_active"]
WeekendMode = Literal["active", "inactive"]


class UserProfile(BaseModel):
    """Physiological inputs for target calculation, read from a `users` row."""

    id: Optional[int] = None
    weight: Optional[float] = Field(None, description="kg")
    height: Optional[float] = Field(None, description="cm")
    age: Optional[int] = None
    gender: Optional[Gender] = None
    activity_level: Optional[ActivityLevel] = None
    target_weekly_loss: Optional[float] = Field(None, description="kg per week")
    weekend_mode: WeekendMode = "inactive"
    weekend_start_day: int = Field(5, ge=0, le=6, description="0=Sunday..6=Saturday")
    weekend_end_day: int = Field(0, ge=0, le=6)
    region: Optional[str] = None

    class Config:
        from_attributes = True
