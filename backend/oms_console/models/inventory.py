"""
Inventory model - one stock/price row per product
"""
from sqlalchemy import Column, String, Integer, Numeric, ForeignKey, CheckConstraint, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP
from oms_console.database import Base


class Inventory(Base):
    """
    Inventory record for a product (one-to-one, keyed by merchant_id + product_id).

    Low stock is derived (quantity_available <= reorder_level) and not stored.
    """
    __tablename__ = "inventory"

    inventory_id = Column(Integer, primary_key=True, autoincrement=True)
    merchant_id = Column(Integer, ForeignKey("merchants.merchant_id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.product_id", ondelete="CASCADE"), nullable=False)
    sku = Column(String(100), nullable=False, index=True)  # copy of products.sku for SKU-based stock updates
    quantity_available = Column(Integer, nullable=False, default=0)
    reorder_level = Column(Integer, nullable=False, default=0)
    cost_price = Column(Numeric(12, 2), nullable=False, default=0)
    selling_price = Column(Numeric(12, 2), nullable=False, default=0)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    product = relationship("Product", back_populates="inventory")

    __table_args__ = (
        UniqueConstraint("merchant_id", "product_id", name="uq_inventory_merchant_product"),
        CheckConstraint("quantity_available >= 0", name="ck_inventory_quantity_non_negative"),
        CheckConstraint("reorder_level >= 0", name="ck_inventory_reorder_non_negative"),
        CheckConstraint("cost_price >= 0", name="ck_inventory_cost_non_negative"),
        CheckConstraint("selling_price >= 0", name="ck_inventory_selling_non_negative"),
    )

    @property
    def is_low_stock(self) -> bool:
        return (self.quantity_available or 0) <= (self.reorder_level or 0)
