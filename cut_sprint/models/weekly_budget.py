from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import relationship
from cut_sprint.database import Base


class WeeklyBudget(Base):
    __tablename__ = "weekly_budgets"
    __table_args__ = (
        UniqueConstraint("user_id", "start_date", name="uq_weekly_budget_user_week"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    target_calories = Column(Integer, nullable=False)
    target_protein = Column(Integer, nullable=False)
    target_fat = Column(Integer, nullable=False)
    target_carbs = Column(Integer, nullable=False)
    weekend_bonus_calories = Column(Integer, nullable=False, default=0)
    status = Column(String(16), nullable=False, default="active")  # active | completed | cancelled
    created_at = Column(DateTime(timezone=False), server_default=func.now(), nullable=False)

    user = relationship("User", back_populates="weekly_budgets")
