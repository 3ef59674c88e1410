from sqlalchemy import Column, Integer, Date, ForeignKey, UniqueConstraint
from cut_sprint.database import Base


class AIAnalysisUsage(Base):
    __tablename__ = "ai_analysis_usage"
    __table_args__ = (
        UniqueConstraint("user_id", "usage_date", name="uq_ai_usage_user_day"),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    usage_date = Column(Date, nullable=False)
    count = Column(Integer, nullable=False, default=0)
