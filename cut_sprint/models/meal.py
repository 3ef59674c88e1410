from sqlalchemy import Column, Integer, Float, String, Date, DateTime, ForeignKey, JSON, func
from sqlalchemy.orm import relationship
from cut_sprint.database import Base


class Meal(Base):
    __tablename__ = "meals"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    type = Column(String(16), nullable=False)  # breakfast | lunch | dinner | snack
    total_calories = Column(Float, nullable=False, default=0)
    total_protein = Column(Float, nullable=False, default=0)
    total_fat = Column(Float, nullable=False, default=0)
    total_carbs = Column(Float, nullable=False, default=0)
    notes = Column(String(255))
    created_at = Column(DateTime(timezone=False), server_default=func.now(), nullable=False)

    user = relationship("User", back_populates="meals")


class MealAnalysis(Base):
    __tablename__ = "meal_analyses"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    input_text = Column(String(1000), nullable=False)
    analysis_result = Column(JSON, nullable=False)
    source = Column(String(16), nullable=False)  # llm | fallback
    meal_date = Column(Date, nullable=False)
    created_at = Column(DateTime(timezone=False), server_default=func.now(), nullable=False)
