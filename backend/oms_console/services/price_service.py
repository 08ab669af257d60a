"""
Price updates for a single product's inventory row
"""
import logging
from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.orm import Session

from oms_console.database import transaction_scope
from oms_console.schemas.product import InventoryResponse
from oms_console.services.inventory_service import get_merchant_inventory, require_non_negative
from oms_console.services.merchant_service import require_merchant_id

logger = logging.getLogger(__name__)


def _set_price(db: Session, user_id: str, product_id: int, column: str, price) -> InventoryResponse:
    merchant_id = require_merchant_id(db, user_id)

    with transaction_scope(db):
        inventory = get_merchant_inventory(db, merchant_id, product_id)
        setattr(inventory, column, Decimal(str(price)))
        inventory.updated_at = func.now()

    db.refresh(inventory)
    logger.info(f"Set {column} of product {product_id} to {price} (merchant {merchant_id})")
    return InventoryResponse.model_validate(inventory)


def update_cost_price(db: Session, user_id: str, product_id: int, price) -> InventoryResponse:
    """Set the unit (cost) price; must be a number >= 0."""
    require_non_negative(price, "Valid unit price is required")
    return _set_price(db, user_id, product_id, "cost_price", price)


def update_selling_price(db: Session, user_id: str, product_id: int, price) -> InventoryResponse:
    """Set the selling price; must be a number >= 0."""
    require_non_negative(price, "Valid selling price is required")
    return _set_price(db, user_id, product_id, "selling_price", price)
