from sqlalchemy import Column, Integer, Float, String, Date, DateTime, ForeignKey, JSON, func
from sqlalchemy.orm import relationship
from cut_sprint.database import Base


class Weight(Base):
    __tablename__ = "weights"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    value_kg = Column(Float, nullable=False)
    note = Column(String(255))
    flags = Column(JSON, nullable=False, default=list)
    source = Column(String(16), nullable=False, default="manual")  # manual | apple_health | google_fit
    created_at = Column(DateTime(timezone=False), server_default=func.now(), nullable=False)

    user = relationship("User", back_populates="weights")
