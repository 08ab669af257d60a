"""
Inventory Service - stock corrections and inventory edits
"""
import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from oms_console.database import transaction_scope
from oms_console.exceptions import NotFoundError, ValidationFailedError
from oms_console.models import Inventory, Product
from oms_console.schemas.csv_import import StockUpdateRow
from oms_console.schemas.product import BulkStockUpdate, InventoryResponse, ProductInventoryUpdate
from oms_console.services.merchant_service import require_merchant_id
from oms_console.services.product_service import apply_partial_update

logger = logging.getLogger(__name__)

PRODUCT_NOT_FOUND = "Product not found or not associated with your merchant"
INVENTORY_NOT_FOUND = "Product inventory not found or not associated with your merchant"


def require_non_negative(value, message: str):
    """Return value when it is a number >= 0, else raise ValidationFailedError(message)."""
    if value is None or isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise ValidationFailedError(message)
    if isinstance(value, Decimal) and not value.is_finite():
        raise ValidationFailedError(message)
    if value < 0:
        raise ValidationFailedError(message)
    return value


def get_merchant_inventory(db: Session, merchant_id: int, product_id: int) -> Inventory:
    """Inventory row of the merchant's product; NotFoundError otherwise."""
    inventory = db.query(Inventory).filter(
        Inventory.merchant_id == merchant_id,
        Inventory.product_id == product_id,
    ).first()
    if inventory is None:
        raise NotFoundError(INVENTORY_NOT_FOUND)
    return inventory


class InventoryService:
    """Stock updates by name/SKU (CSV and bulk) and single-record inventory edits"""

    @staticmethod
    def find_inventory_for_row(db: Session, merchant_id: int, row: StockUpdateRow) -> Optional[Inventory]:
        """
        Inventory row targeted by a stock-update row.

        Name present -> exact product name only (SKU is ignored even if the name
        does not match). No name -> SKU.
        """
        query = db.query(Inventory).join(
            Product, Product.product_id == Inventory.product_id
        ).filter(Inventory.merchant_id == merchant_id)

        if row.name:
            query = query.filter(Product.product_name == row.name)
        elif row.sku:
            query = query.filter(Product.sku == row.sku)
        else:
            return None
        return query.first()

    @staticmethod
    def update_stock_by_name_or_sku(db: Session, merchant_id: int, row: StockUpdateRow) -> Optional[Inventory]:
        """
        Set quantity_available for the row's product. Returns the inventory row,
        or None when no product matched. Does not commit.
        """
        inventory = InventoryService.find_inventory_for_row(db, merchant_id, row)
        if inventory is None:
            return None

        inventory.quantity_available = row.stock
        inventory.updated_at = func.now()
        db.flush()
        return inventory

    @staticmethod
    def bulk_update_inventory(db: Session, user_id: str, updates: List[BulkStockUpdate]) -> int:
        """
        Apply SKU stock updates in one transaction. SKUs the merchant does not
        have are skipped. Any exception rolls back the whole list and is re-raised.

        Returns the number of inventory rows updated.
        """
        merchant_id = require_merchant_id(db, user_id)
        updated = 0

        with transaction_scope(db):
            for update in updates:
                inventory = db.query(Inventory).filter(
                    Inventory.merchant_id == merchant_id,
                    Inventory.sku == update.sku,
                ).first()
                if inventory is None:
                    logger.debug(f"Bulk update: SKU {update.sku} not found for merchant {merchant_id}, skipped")
                    continue

                inventory.quantity_available = update.stock_quantity
                inventory.updated_at = func.now()
                updated += 1

        logger.info(f"Bulk inventory update for merchant {merchant_id}: {updated}/{len(updates)} rows updated")
        return updated

    @staticmethod
    def update_stock(db: Session, user_id: str, product_id: int, quantity: int) -> InventoryResponse:
        """Set quantity_available of one product"""
        require_non_negative(quantity, "Valid quantity is required")
        merchant_id = require_merchant_id(db, user_id)

        with transaction_scope(db):
            inventory = get_merchant_inventory(db, merchant_id, product_id)
            inventory.quantity_available = int(quantity)
            inventory.updated_at = func.now()

        db.refresh(inventory)
        return InventoryResponse.model_validate(inventory)

    @staticmethod
    def update_reorder_level(db: Session, user_id: str, product_id: int, reorder_level: int) -> InventoryResponse:
        """Set reorder_level of one product"""
        require_non_negative(reorder_level, "Valid reorder level is required")
        merchant_id = require_merchant_id(db, user_id)

        with transaction_scope(db):
            inventory = get_merchant_inventory(db, merchant_id, product_id)
            inventory.reorder_level = int(reorder_level)
            inventory.updated_at = func.now()

        db.refresh(inventory)
        return InventoryResponse.model_validate(inventory)

    @staticmethod
    def update_product_and_inventory(
        db: Session,
        user_id: str,
        product_id: int,
        update: ProductInventoryUpdate,
    ) -> Product:
        """
        Partial product update plus stock/reorder level, all or nothing.

        Raises NotFoundError (and writes nothing) when the product or its
        inventory row does not belong to the user's merchant.
        """
        merchant_id = require_merchant_id(db, user_id)

        with transaction_scope(db):
            product = db.query(Product).filter(
                Product.merchant_id == merchant_id,
                Product.product_id == product_id,
            ).first()
            if product is None:
                raise NotFoundError(PRODUCT_NOT_FOUND)

            apply_partial_update(product, update)

            inventory = get_merchant_inventory(db, merchant_id, product_id)
            if update.quantity is not None:
                inventory.quantity_available = update.quantity
            if update.reorder_level is not None:
                inventory.reorder_level = update.reorder_level
            inventory.updated_at = func.now()

        db.refresh(product)
        logger.info(f"Updated product {product_id} and its inventory for merchant {merchant_id}")
        return product
