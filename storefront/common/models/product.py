from sqlalchemy import Boolean, Column, DateTime, Float, Integer, JSON, Numeric, String, Text, func
from .base import Base


class Product(Base):
    __tablename__ = "product"

    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(12, 2), nullable=False)
    original_price = Column(Numeric(12, 2), nullable=True)
    category = Column(String(128), nullable=True)
    brand = Column(String(128), nullable=True)
    images = Column(JSON, nullable=True)
    stock = Column(Integer, nullable=False, default=0)
    rating = Column(Float, nullable=False, default=0)
    num_reviews = Column(Integer, nullable=False, default=0)
    featured = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
