"""
Product service - single-product creation and catalogue edits.

Creation runs the duplicate check and the inserts in one transaction. Partial
updates write only the fields the caller explicitly set, through a fixed
column map (no column names are taken from input).
"""
import logging
from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from oms_console.config import settings
from oms_console.database import transaction_scope
from oms_console.exceptions import DuplicateProductError, NotFoundError, ValidationFailedError
from oms_console.models import Inventory, Product
from oms_console.schemas.product import (
    BasicProductCreate,
    LowStockProduct,
    ProductCreate,
    ProductCreated,
    ProductPartialUpdate,
    ProductResponse,
    ProductUpdate,
)
from oms_console.services.duplicate_check import DuplicateResolver
from oms_console.services.merchant_service import require_merchant_id
from oms_console.utils.sku import generate_unique_sku, is_sku_unique, validate_sku_format

logger = logging.getLogger(__name__)

PRODUCT_NOT_FOUND = "Product not found or not associated with your merchant"

# Fields of ProductPartialUpdate that map onto products columns
PARTIAL_UPDATE_COLUMNS = ("product_name", "brand", "description", "hsn_code", "gst_rate")


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def partial_update_values(update: ProductPartialUpdate) -> Dict[str, object]:
    """
    Column values for the fields explicitly set on `update`.

    - product_name is written only when non-blank
    - brand, description, hsn_code: blank clears the column
    - gst_rate: None resets to the default rate
    """
    fields = update.model_dump(exclude_unset=True)
    values: Dict[str, object] = {}
    for column in PARTIAL_UPDATE_COLUMNS:
        if column not in fields:
            continue
        value = fields[column]
        if column == "product_name":
            if _clean(value):
                values[column] = _clean(value)
        elif column == "gst_rate":
            values[column] = settings.DEFAULT_GST_RATE if value is None else value
        else:
            values[column] = _clean(value)
    return values


def apply_partial_update(product: Product, update: ProductPartialUpdate) -> Dict[str, object]:
    """Set the explicitly-provided fields on the product; returns what was written."""
    values = partial_update_values(update)
    for column, value in values.items():
        setattr(product, column, value)
    return values


def _get_merchant_product(db: Session, merchant_id: int, product_id: int) -> Product:
    product = db.query(Product).filter(
        Product.merchant_id == merchant_id,
        Product.product_id == product_id,
    ).first()
    if product is None:
        raise NotFoundError(PRODUCT_NOT_FOUND)
    return product


class ProductService:
    """Single-product create/update and low-stock listing"""

    @staticmethod
    def add_product(db: Session, user_id: str, data: ProductCreate) -> ProductCreated:
        """
        Create a product and its inventory row.

        Raises DuplicateProductError when the same name and brand exist. When
        the name is used by another brand the product is created as
        "<name> (<brand>)" and name_modified is True.
        """
        merchant_id = require_merchant_id(db, user_id)
        name = data.name.strip()
        brand = _clean(data.brand)

        try:
            with transaction_scope(db):
                check = DuplicateResolver.resolve(db, merchant_id, name, brand)
                if check.is_duplicate:
                    raise DuplicateProductError(name, check.existing_product.brand)

                final_name = check.modified_name if check.outcome == "rename" else name
                sku = generate_unique_sku(db, merchant_id)

                product = Product(
                    merchant_id=merchant_id,
                    product_name=final_name,
                    sku=sku,
                    category=_clean(data.category) or settings.DEFAULT_CATEGORY,
                    brand=brand,
                    description=_clean(data.description),
                    hsn_code=_clean(data.hsn_code),
                    gst_rate=data.gst_rate,
                )
                db.add(product)
                db.flush()

                db.add(Inventory(
                    merchant_id=merchant_id,
                    product_id=product.product_id,
                    sku=sku,
                    quantity_available=data.stock,
                    reorder_level=data.reorder_level,
                    cost_price=data.cost_price,
                    selling_price=data.selling_price,
                ))
                db.flush()
                product_id = product.product_id
        except IntegrityError:
            # Name taken and no brand given to rename with
            existing = DuplicateResolver.find_by_name(db, merchant_id, name)
            if existing is None:
                raise
            raise DuplicateProductError(name, existing.brand)

        if final_name != name:
            logger.info(f"Created product '{final_name}' (requested '{name}') for merchant {merchant_id}")
        return ProductCreated(
            product_id=product_id,
            sku=sku,
            original_name=name,
            final_name=final_name,
            name_modified=final_name != name,
        )

    @staticmethod
    def create_basic_product(db: Session, user_id: str, data: BasicProductCreate) -> ProductResponse:
        """Create a catalogue product without inventory. An explicit SKU must be valid and unused."""
        merchant_id = require_merchant_id(db, user_id)
        name = data.name.strip()

        with transaction_scope(db):
            existing = DuplicateResolver.find_by_name(db, merchant_id, name)
            if existing is not None:
                raise DuplicateProductError(name, existing.brand)

            sku = _clean(data.sku)
            if sku:
                if not validate_sku_format(sku):
                    raise ValidationFailedError(f"Invalid SKU format: {sku}")
                if not is_sku_unique(db, merchant_id, sku):
                    raise ValidationFailedError(f"SKU {sku} already exists")
            else:
                sku = generate_unique_sku(db, merchant_id)

            product = Product(
                merchant_id=merchant_id,
                product_name=name,
                sku=sku,
                category=_clean(data.category) or settings.DEFAULT_CATEGORY,
                description=_clean(data.description),
                hsn_code=_clean(data.hsn_code),
                gst_rate=data.gst_rate,
            )
            db.add(product)

        db.refresh(product)
        return ProductResponse.model_validate(product)

    @staticmethod
    def update_product(db: Session, user_id: str, product_id: int, data: ProductUpdate) -> ProductResponse:
        """
        Overwrite name, description, category, HSN code and GST rate.

        The SKU never changes after creation; a submitted SKU must equal the
        stored one.
        """
        merchant_id = require_merchant_id(db, user_id)

        try:
            with transaction_scope(db):
                product = _get_merchant_product(db, merchant_id, product_id)
                if data.sku is not None and data.sku.strip() != product.sku:
                    raise ValidationFailedError(f"SKU cannot be changed (product {product_id} has SKU {product.sku})")

                product.product_name = data.name.strip()
                product.description = _clean(data.description)
                product.category = _clean(data.category) or settings.DEFAULT_CATEGORY
                product.hsn_code = _clean(data.hsn_code)
                product.gst_rate = data.gst_rate
        except IntegrityError as e:
            raise ValidationFailedError(f'Product name "{data.name.strip()}" is already used') from e

        db.refresh(product)
        return ProductResponse.model_validate(product)

    @staticmethod
    def update_product_partial(
        db: Session,
        user_id: str,
        product_id: int,
        update: ProductPartialUpdate,
    ) -> Optional[ProductResponse]:
        """Write only the explicitly-set fields. Returns None when nothing was set."""
        if not partial_update_values(update):
            return None
        merchant_id = require_merchant_id(db, user_id)

        try:
            with transaction_scope(db):
                product = _get_merchant_product(db, merchant_id, product_id)
                apply_partial_update(product, update)
        except IntegrityError as e:
            raise ValidationFailedError(f'Product name "{update.product_name}" is already used') from e

        db.refresh(product)
        return ProductResponse.model_validate(product)

    @staticmethod
    def get_low_stock_products(db: Session, user_id: str) -> List[LowStockProduct]:
        """Products at or below their reorder level, lowest stock first"""
        merchant_id = require_merchant_id(db, user_id)
        rows = db.query(
            Product.product_id,
            Product.product_name,
            Product.sku,
            Product.category,
            Product.brand,
            Inventory.quantity_available,
            Inventory.reorder_level,
            Inventory.cost_price,
        ).join(
            Inventory, Inventory.product_id == Product.product_id
        ).filter(
            Product.merchant_id == merchant_id,
            Inventory.quantity_available <= Inventory.reorder_level,
        ).order_by(
            Inventory.quantity_available.asc(),
            Product.product_name.asc(),
        ).all()

        return [
            LowStockProduct(
                product_id=row.product_id,
                product_name=row.product_name,
                sku=row.sku,
                category=row.category,
                brand=row.brand,
                quantity_available=row.quantity_available,
                reorder_level=row.reorder_level,
                unit_price=row.cost_price,
            )
            for row in rows
        ]
