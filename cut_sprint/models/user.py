from sqlalchemy import Column, Integer, String, Float, DateTime, func
from sqlalchemy.orm import relationship
from cut_sprint.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    display_name = Column(String(100))
    weight = Column(Float, nullable=True)          # kg
    height = Column(Float, nullable=True)          # cm
    age = Column(Integer, nullable=True)
    gender = Column(String(10), nullable=True)     # male | female | other
    activity_level = Column(String(20), nullable=False, default="moderate")
    target_weekly_loss = Column(Float, nullable=False, default=0.5)  # kg/week
    weekend_mode = Column(String(10), nullable=False, default="inactive")
    weekend_start_day = Column(Integer, nullable=False, default=5)   # 0=Sunday..6=Saturday
    weekend_end_day = Column(Integer, nullable=False, default=0)
    region = Column(String(8))
    created_at = Column(DateTime(timezone=False), server_default=func.now(), nullable=False)

    meals = relationship("Meal", back_populates="user", cascade="all, delete-orphan")
    weights = relationship("Weight", back_populates="user", cascade="all, delete-orphan")
    weekly_budgets = relationship("WeeklyBudget", back_populates="user", cascade="all, delete-orphan")
