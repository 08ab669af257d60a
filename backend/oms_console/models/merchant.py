"""
Merchant (tenant) model
"""
from sqlalchemy import Column, String, Integer
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP
from oms_console.database import Base


class Merchant(Base):
    """
    Merchant - owner of products and inventory.

    Every product and inventory row is scoped to exactly one merchant; lookups
    never cross merchant boundaries.
    """
    __tablename__ = "merchants"

    merchant_id = Column(Integer, primary_key=True, autoincrement=True)
    merchant_name = Column(String(255), nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    # Relationships
    users = relationship("User", back_populates="merchant")
    products = relationship("Product", back_populates="merchant", cascade="all, delete-orphan")
