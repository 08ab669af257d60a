"""
Batch writer for product CSV imports.

Records are written in consecutive chunks. Each chunk is one transaction:
a multi-row product upsert keyed by (merchant_id, product_name), then a
multi-row inventory upsert keyed by (merchant_id, product_id). A failing chunk
is rolled back alone and every record in it is reported as an error; the
following chunks still run. Chunks run strictly in order.
"""
import logging
from typing import Callable, Dict, List, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from oms_console.config import settings
from oms_console.database import transaction_scope
from oms_console.models import Inventory, Product
from oms_console.schemas.csv_import import BatchWriteResult, ProductRow, WrittenRecord
from oms_console.utils.sku import generate_batch_skus

logger = logging.getLogger(__name__)

# on_batch_start(batch_number, total_batches, batch_len, processed_before)
BatchStartCallback = Callable[[int, int, int, int], None]
# on_batch_end(batch_number, total_batches, batch_len, processed_after, errors_so_far)
BatchEndCallback = Callable[[int, int, int, int, List[str]], None]

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _upsert_insert(db: Session, table):
    """INSERT construct supporting ON CONFLICT for the session's database."""
    dialect = db.get_bind().dialect.name
    try:
        return _UPSERT_DIALECTS[dialect](table)
    except KeyError:
        raise RuntimeError(f"Batch upsert is not supported on '{dialect}'")


def chunked(records: Sequence, size: int) -> List[Sequence]:
    """Consecutive slices of `size` items; the last may be shorter."""
    if size < 1:
        raise ValueError("batch_size must be at least 1")
    return [records[i:i + size] for i in range(0, len(records), size)]


def _error_text(error: Exception) -> str:
    # DBAPI errors wrapped by SQLAlchemy carry the SQL; the driver message is enough here
    return str(getattr(error, "orig", None) or error).strip()


def upsert_products(db: Session, merchant_id: int, batch: Sequence[ProductRow]) -> Dict[str, tuple]:
    """
    Insert or update the batch's products in one statement.

    Returns {product_name: (product_id, sku)}. Existing products keep their SKU;
    category, brand, description, HSN code and GST rate are overwritten.
    Within one batch the last row for a name wins.
    """
    latest: Dict[str, ProductRow] = {}
    for record in batch:
        latest[record.name] = record

    skus = generate_batch_skus(len(latest))
    values = [
        {
            "merchant_id": merchant_id,
            "product_name": record.name,
            "sku": sku,
            "category": record.category or settings.DEFAULT_CATEGORY,
            "brand": record.brand or None,
            "description": record.description or None,
            "hsn_code": record.hsn_code or None,
            "gst_rate": record.gst_rate,
        }
        for record, sku in zip(latest.values(), skus)
    ]

    table = Product.__table__
    stmt = _upsert_insert(db, table).values(values)
    stmt = stmt.on_conflict_do_update(
        index_elements=["merchant_id", "product_name"],
        set_={
            "category": stmt.excluded.category,
            "brand": stmt.excluded.brand,
            "description": stmt.excluded.description,
            "hsn_code": stmt.excluded.hsn_code,
            "gst_rate": stmt.excluded.gst_rate,
            "updated_at": func.now(),
        },
    ).returning(table.c.product_id, table.c.sku, table.c.product_name)

    rows = db.execute(stmt).all()
    return {row.product_name: (row.product_id, row.sku) for row in rows}


def upsert_inventory(
    db: Session,
    merchant_id: int,
    batch: Sequence[ProductRow],
    products: Dict[str, tuple],
) -> int:
    """Insert or update one inventory row per product of the batch. Returns rows written."""
    latest: Dict[str, ProductRow] = {}
    for record in batch:
        latest[record.name] = record

    values = []
    for name, record in latest.items():
        product_id, sku = products[name]
        values.append({
            "merchant_id": merchant_id,
            "product_id": product_id,
            "sku": sku,
            "quantity_available": record.stock,
            "reorder_level": record.reorder_level,
            "cost_price": record.cost_price,
            "selling_price": record.selling_price,
        })

    table = Inventory.__table__
    stmt = _upsert_insert(db, table).values(values)
    stmt = stmt.on_conflict_do_update(
        index_elements=["merchant_id", "product_id"],
        set_={
            "quantity_available": stmt.excluded.quantity_available,
            "reorder_level": stmt.excluded.reorder_level,
            "cost_price": stmt.excluded.cost_price,
            "selling_price": stmt.excluded.selling_price,
            "updated_at": func.now(),
        },
    )
    db.execute(stmt)
    return len(values)


def write_batches(
    db: Session,
    merchant_id: int,
    records: Sequence[ProductRow],
    batch_size: Optional[int] = None,
    on_batch_start: Optional[BatchStartCallback] = None,
    on_batch_end: Optional[BatchEndCallback] = None,
    errors: Optional[List[str]] = None,
) -> BatchWriteResult:
    """
    Write all records batch by batch.

    `errors` may carry earlier (parse) errors; batch errors are appended to it
    and the same list is returned in the result. on_batch_end always receives
    the number of records attempted so far, whether the batch committed or not.
    """
    batch_size = batch_size or settings.IMPORT_BATCH_SIZE
    all_errors: List[str] = errors if errors is not None else []
    succeeded: List[WrittenRecord] = []

    batches = chunked(records, batch_size)
    total_batches = len(batches)
    logger.info(
        f"Starting batch write of {len(records)} products in {total_batches} batches "
        f"(batch size: {batch_size}, merchant: {merchant_id})"
    )

    processed = 0
    for index, batch in enumerate(batches):
        batch_number = index + 1
        if on_batch_start:
            on_batch_start(batch_number, total_batches, len(batch), processed)

        try:
            with transaction_scope(db):
                products = upsert_products(db, merchant_id, batch)
                upsert_inventory(db, merchant_id, batch, products)

            for record in batch:
                product_id, sku = products[record.name]
                succeeded.append(WrittenRecord(
                    product_id=product_id,
                    sku=sku,
                    name=record.name,
                    stock=record.stock,
                    reorder_level=record.reorder_level,
                    cost_price=record.cost_price,
                    selling_price=record.selling_price,
                ))
            logger.info(
                f"Batch {batch_number}/{total_batches} committed "
                f"({len(batch)} items, {len(succeeded)} written so far)"
            )
        except Exception as e:
            message = _error_text(e)
            logger.error(f"Batch {batch_number}/{total_batches} rolled back: {message}", exc_info=True)
            for record in batch:
                all_errors.append(f"Error creating product {record.name}: {message}")

        processed += len(batch)
        if on_batch_end:
            on_batch_end(batch_number, total_batches, len(batch), processed, all_errors)

    return BatchWriteResult(succeeded=succeeded, errors=all_errors)
