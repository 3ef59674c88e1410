from sqlalchemy.orm import Session

from cut_sprint.errors import NotFound
from cut_sprint.models.user import User
from cut_sprint.services.nutrition_calculator import daily_target
from cut_sprint.schemas.responses import DailyNutritionTarget


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFound(f"User {user_id} not found.")
    return user


def daily_target_for(db: Session, user_id: int) -> DailyNutritionTarget:
    return daily_target(get_user(db, user_id))
