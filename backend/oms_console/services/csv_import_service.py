"""
CSV import orchestration.

Product CSV:  parse -> batch upsert (one transaction per batch) -> summary
Stock CSV:    parse -> per-row stock update (savepoint per row, one commit) -> summary

Whole-upload problems (unknown user, unreadable file, no valid rows) raise
before anything is written. Problems with single rows or batches are collected
in the summary's error_details. Progress events go to the publisher given to
the service; publishing never interrupts an import.
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from oms_console.config import settings
from oms_console.database import transaction_scope
from oms_console.exceptions import NoValidRowsError
from oms_console.schemas.csv_import import ProductImportResult, StockUpdateResult, UpdatedStock
from oms_console.services.batch_writer import write_batches
from oms_console.services.csv_parser import parse_product_csv, parse_stock_update_csv
from oms_console.services.inventory_service import InventoryService
from oms_console.services.merchant_service import require_merchant_id
from oms_console.services.progress import ProgressPublisher, ProgressReporter, percent

logger = logging.getLogger(__name__)


def _summary(action: str, count: int, errors: List[str]) -> str:
    message = f"Successfully {action} {count} products"
    if errors:
        message += f" with {len(errors)} errors"
    return message


class CsvImportService:
    """Runs product and stock-update CSV imports for one user's merchant"""

    def __init__(self, publisher: Optional[ProgressPublisher] = None, batch_size: Optional[int] = None):
        self.reporter = ProgressReporter(publisher)
        self.batch_size = batch_size or settings.IMPORT_BATCH_SIZE

    def process_product_csv(self, db: Session, user_id: str, raw: bytes, upload_id: str) -> ProductImportResult:
        """
        Create or update products (and their inventory) from a product CSV.

        Re-importing the same file updates the same rows; SKUs of existing
        products are kept.
        """
        merchant_id = require_merchant_id(db, user_id)
        parsed = parse_product_csv(raw)
        if not parsed.records:
            raise NoValidRowsError()

        records = parsed.records
        total = len(records)
        errors = list(parsed.errors)
        logger.info(
            f"Product CSV upload {upload_id}: {total} valid rows, {len(errors)} parse errors "
            f"(merchant {merchant_id})"
        )

        self.reporter.emit(upload_id, 0, "Starting upload...", total, 0, errors, False)

        def on_batch_start(batch_number, total_batches, batch_len, processed_before):
            self.reporter.emit_batch(
                upload_id, percent(processed_before, total), batch_number, total_batches,
                batch_len, total, processed_before, errors,
            )

        def on_batch_end(batch_number, total_batches, batch_len, processed_after, errors_so_far):
            self.reporter.emit_batch(
                upload_id, percent(processed_after, total), batch_number, total_batches,
                batch_len, total, processed_after, errors_so_far,
            )

        result = write_batches(
            db,
            merchant_id,
            records,
            batch_size=self.batch_size,
            on_batch_start=on_batch_start,
            on_batch_end=on_batch_end,
            errors=errors,
        )

        created = len(result.succeeded)
        message = _summary("processed", created, result.errors)
        self.reporter.emit(upload_id, 100, "Upload completed!", total, total, result.errors, True, message)
        logger.info(f"Product CSV upload {upload_id} finished: {message}")

        return ProductImportResult(created=created, errors=len(result.errors), error_details=result.errors)

    def process_stock_update_csv(self, db: Session, user_id: str, raw: bytes, upload_id: str) -> StockUpdateResult:
        """
        Set stock levels from a CSV of (product name or SKU, stock).

        All rows share one transaction; each row runs in its own savepoint so a
        database error on one row is recorded and the other rows still apply.
        """
        merchant_id = require_merchant_id(db, user_id)
        parsed = parse_stock_update_csv(raw)
        if not parsed.records:
            raise NoValidRowsError()

        records = parsed.records
        total = len(records)
        errors = list(parsed.errors)
        updated: List[UpdatedStock] = []

        self.reporter.emit(upload_id, 0, "Starting stock update...", total, 0, errors, False)

        with transaction_scope(db):
            for index, row in enumerate(records):
                self.reporter.emit(upload_id, percent(index, total), row.label, total, index, errors, False)
                try:
                    with db.begin_nested():
                        inventory = InventoryService.update_stock_by_name_or_sku(db, merchant_id, row)
                except Exception as e:
                    logger.error(f"Error updating stock from CSV for {row.label}: {e}")
                    errors.append(f"Error updating stock for {row.label}: {e}")
                    continue

                if inventory is None:
                    errors.append(f"Product not found: {row.label}")
                    continue
                updated.append(UpdatedStock(
                    product_id=inventory.product_id,
                    sku=inventory.sku,
                    new_stock=row.stock,
                ))

        message = _summary("updated stock for", len(updated), errors)
        self.reporter.emit(upload_id, 100, "Stock update completed!", total, total, errors, True, message)
        logger.info(f"Stock CSV upload {upload_id} finished: {message}")

        return StockUpdateResult(updated=len(updated), errors=len(errors), error_details=errors)
