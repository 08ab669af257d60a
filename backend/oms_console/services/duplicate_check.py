"""
Duplicate check for single-product creation.

A product is identified by (merchant, name, brand). Creating a product whose
name is already used by a different brand does not fail: the new product is
renamed to "<name> (<brand>)" when that name is still free.
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from oms_console.models import Product
from oms_console.schemas.product import DuplicateCheckResult, ExistingProduct

logger = logging.getLogger(__name__)


def nullable_equals(column, value: Optional[str]):
    """
    Equality predicate for a nullable column.

    None matches only NULL; any other value (including "") matches only an
    equal stored value, never NULL.
    """
    if value is None:
        return column.is_(None)
    return column == value


def modified_product_name(name: str, brand: str) -> str:
    return f"{name} ({brand})"


class DuplicateResolver:
    """Decides duplicate / rename / clear for a requested (name, brand)."""

    @staticmethod
    def find_exact(db: Session, merchant_id: int, name: str, brand: Optional[str]) -> Optional[Product]:
        return db.query(Product).filter(
            Product.merchant_id == merchant_id,
            Product.product_name == name,
            nullable_equals(Product.brand, brand),
        ).first()

    @staticmethod
    def find_by_name(db: Session, merchant_id: int, name: str) -> Optional[Product]:
        return db.query(Product).filter(
            Product.merchant_id == merchant_id,
            Product.product_name == name,
        ).first()

    @staticmethod
    def resolve(
        db: Session,
        merchant_id: int,
        name: str,
        brand: Optional[str],
    ) -> DuplicateCheckResult:
        """
        Check a requested product against the merchant's catalogue.

        1. Same name and brand -> duplicate.
        2. Same name, other brand, and a brand was given -> try "<name> (<brand>)".
        3. That name free -> rename; taken -> duplicate of the product holding it.
        4. Otherwise -> clear.
        """
        exact = DuplicateResolver.find_exact(db, merchant_id, name, brand)
        if exact:
            return DuplicateCheckResult(
                outcome="duplicate",
                existing_product=ExistingProduct.model_validate(exact),
            )

        if brand and DuplicateResolver.find_by_name(db, merchant_id, name):
            candidate = modified_product_name(name, brand)
            taken = DuplicateResolver.find_by_name(db, merchant_id, candidate)
            if taken is None:
                logger.info(f"Name conflict for '{name}' (merchant {merchant_id}); using '{candidate}'")
                return DuplicateCheckResult(outcome="rename", modified_name=candidate)

            # Renamed variant already exists: creating under the original
            # name would collide again, so treat it as a duplicate.
            logger.info(f"Renamed variant '{candidate}' already exists for merchant {merchant_id}")
            return DuplicateCheckResult(
                outcome="duplicate",
                existing_product=ExistingProduct.model_validate(taken),
            )

        return DuplicateCheckResult(outcome="clear")
