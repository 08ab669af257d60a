"""
Product model
"""
from sqlalchemy import Column, String, Integer, Numeric, ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP
from oms_console.database import Base


class Product(Base):
    """
    Product catalogue entry.

    (merchant_id, product_name) is the upsert key for CSV imports. SKU is
    generated on creation and never rewritten by an upsert.
    """
    __tablename__ = "products"

    product_id = Column(Integer, primary_key=True, autoincrement=True)
    merchant_id = Column(Integer, ForeignKey("merchants.merchant_id", ondelete="CASCADE"), nullable=False, index=True)
    product_name = Column(String(255), nullable=False)
    sku = Column(String(100), nullable=False)
    category = Column(String(100), nullable=False, default="Uncategorized")
    brand = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    hsn_code = Column(String(20), nullable=True)  # Harmonized System of Nomenclature (GST classification)
    gst_rate = Column(Numeric(5, 2), nullable=False, default=18.00)  # percent, e.g. 18.00
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    merchant = relationship("Merchant", back_populates="products")
    inventory = relationship("Inventory", back_populates="product", uselist=False, cascade="all, delete-orphan")

    __table_args__ = (
        UniqueConstraint("merchant_id", "product_name", name="uq_products_merchant_name"),
        UniqueConstraint("merchant_id", "sku", name="uq_products_merchant_sku"),
    )
