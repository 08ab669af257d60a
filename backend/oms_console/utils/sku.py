"""
SKU generation utilities.

Format: SKU-YYYYMMDD-HHMMSS-XXXXX where XXXXX is a random uppercase
alphanumeric string. SKUs are unique per merchant and never change after the
product is created.
"""
import logging
import re
import secrets
import string
import time
from datetime import datetime
from typing import Optional, Set

from sqlalchemy.orm import Session

from oms_console.models import Product

logger = logging.getLogger(__name__)

_SKU_ALPHABET = string.ascii_uppercase + string.digits
_SKU_PATTERN = re.compile(r"^[A-Z0-9][A-Z0-9\-_]{2,99}$", re.IGNORECASE)


def _random_suffix(length: int) -> str:
    return "".join(secrets.choice(_SKU_ALPHABET) for _ in range(length))


def generate_sku(now: Optional[datetime] = None) -> str:
    """Build a timestamped SKU candidate (uniqueness not checked)."""
    now = now or datetime.now()
    return f"SKU-{now.strftime('%Y%m%d')}-{now.strftime('%H%M%S')}-{_random_suffix(5)}"


def generate_batch_skus(count: int) -> list:
    """Generate `count` distinct SKU candidates for a multi-row insert."""
    skus: Set[str] = set()
    result = []
    while len(result) < count:
        sku = generate_sku()
        if sku in skus:
            continue
        skus.add(sku)
        result.append(sku)
    return result


def is_sku_unique(
    db: Session,
    merchant_id: int,
    sku: str,
    exclude_product_id: Optional[int] = None,
) -> bool:
    """True when no other product of the merchant uses this SKU."""
    query = db.query(Product.product_id).filter(
        Product.merchant_id == merchant_id,
        Product.sku == sku,
    )
    if exclude_product_id is not None:
        query = query.filter(Product.product_id != exclude_product_id)
    return query.first() is None


def generate_unique_sku(db: Session, merchant_id: int, max_retries: int = 5) -> str:
    """
    Generate a SKU that is not yet used by the merchant.

    Falls back to a millisecond-timestamp SKU with a longer random part when
    every attempt collides.
    """
    for attempt in range(max_retries):
        sku = generate_sku()
        if is_sku_unique(db, merchant_id, sku):
            logger.debug(f"Generated SKU {sku} for merchant {merchant_id} (attempt {attempt + 1})")
            return sku
        logger.warning(f"SKU collision for merchant {merchant_id}: {sku} (attempt {attempt + 1})")
        time.sleep(0.01)

    fallback = f"SKU-{int(time.time() * 1000)}-{_random_suffix(8)}"
    logger.warning(f"Using fallback SKU {fallback} for merchant {merchant_id}")
    return fallback


def validate_sku_format(sku: str) -> bool:
    """Letters, digits, '-' and '_'; 3-100 chars; must start with a letter or digit."""
    return bool(sku) and bool(_SKU_PATTERN.match(sku))
