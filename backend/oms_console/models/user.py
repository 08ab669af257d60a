"""
User model
"""
from sqlalchemy import Column, String, Integer, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP
from oms_console.database import Base


class User(Base):
    """
    Console user. Authentication lives outside this service; only the
    user -> merchant association is read here.
    """
    __tablename__ = "users"

    user_id = Column(String(64), primary_key=True)
    merchant_id = Column(Integer, ForeignKey("merchants.merchant_id", ondelete="SET NULL"), nullable=True)
    email = Column(String(255), nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    # Relationships
    merchant = relationship("Merchant", back_populates="users")
