from sqlalchemy import Column, Integer, String, Boolean, Float
from cut_sprint.database import Base


class Product(Base):
    __tablename__ = "products"

    id                = Column(Integer, primary_key=True)
    name              = Column(String(255), nullable=False)
    brand             = Column(String(100))
    barcode           = Column(String(64), index=True)
    unit              = Column(String(16), nullable=False, default="g")
    calories_per_100g = Column(Float, nullable=False)
    protein_per_100g  = Column(Float, nullable=False)
    fat_per_100g      = Column(Float, nullable=False)
    carbs_per_100g    = Column(Float, nullable=False)
    fiber_per_100g    = Column(Float, nullable=False, default=0)
    sodium_per_100g   = Column(Float, nullable=False, default=0)
    is_global         = Column(Boolean, nullable=False, default=True)
