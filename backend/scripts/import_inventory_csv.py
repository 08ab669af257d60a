"""
Import a product or stock-update CSV directly into the database.

Bypasses any HTTP layer. Uses the same parsing, batching and progress rules as
the services:
- products: create/update products and inventory in batches (IMPORT_BATCH_SIZE)
- stock:    set stock by product name (or SKU when the name is blank)

Usage (from backend/):
  python scripts/import_inventory_csv.py products --file path/to.csv --user-id USER_ID
  python scripts/import_inventory_csv.py stock --file path/to.csv --user-id USER_ID

Optional:
  --upload-id ID  Id used on progress events (default: generated)
  --db-url URL    Override database URL (default: from DATABASE_URL / DB_* env)
  --dry-run       Parse the file and print row/error counts only; do not write to DB
"""
import argparse
import logging
import sys
import uuid
from pathlib import Path

# Add backend to path when run as script
_backend = Path(__file__).resolve().parent.parent
if str(_backend) not in sys.path:
    sys.path.insert(0, str(_backend))

from oms_console.config import settings
from oms_console.database import SessionLocal
from oms_console.exceptions import InventoryError
from oms_console.services.csv_import_service import CsvImportService
from oms_console.services.csv_parser import parse_product_csv, parse_stock_update_csv
from oms_console.services.progress import LoggingProgressPublisher

logger = logging.getLogger("import_inventory_csv")


def _print_errors(errors, limit: int = 10) -> None:
    for err in errors[:limit]:
        print(f"  Error: {err}")
    if len(errors) > limit:
        print(f"  ... and {len(errors) - limit} more errors")


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Import a product or stock-update CSV into the inventory tables.",
        epilog="Example: python scripts/import_inventory_csv.py products --file products.csv --user-id abc123",
    )
    parser.add_argument("mode", choices=["products", "stock"], help="CSV kind")
    parser.add_argument("--file", "-f", type=Path, required=True, help="Path to CSV file")
    parser.add_argument("--user-id", required=True, help="User whose merchant owns the products")
    parser.add_argument("--upload-id", default=None, help="Upload id for progress events")
    parser.add_argument(
        "--db-url",
        default=None,
        help="Database URL (default: from DATABASE_URL / DB_* env)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=None,
        help=f"Rows per batch (default: {settings.IMPORT_BATCH_SIZE})",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only parse file and print counts; do not write to DB",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    path = args.file
    if not path.is_file():
        print(f"ERROR: File not found: {path}")
        return 1
    raw = path.read_bytes()

    if args.dry_run:
        try:
            parsed = parse_product_csv(raw) if args.mode == "products" else parse_stock_update_csv(raw)
        except InventoryError as e:
            print(f"ERROR: {e}")
            return 1
        print(f"Parsed {len(parsed.records)} valid rows from {path.name} ({len(parsed.errors)} rejected)")
        _print_errors(parsed.errors)
        print("Dry-run: not writing to DB.")
        return 0

    # Use default DB from settings unless --db-url provided
    if args.db_url:
        from sqlalchemy import create_engine
        from sqlalchemy.orm import sessionmaker
        engine = create_engine(args.db_url)
        session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
        db = session_factory()
    else:
        db = SessionLocal()

    upload_id = args.upload_id or str(uuid.uuid4())
    service = CsvImportService(LoggingProgressPublisher(), batch_size=args.batch_size)

    try:
        if args.mode == "products":
            result = service.process_product_csv(db, args.user_id, raw, upload_id)
            print(f"Import finished: {result.created} products created/updated, {result.errors} errors.")
        else:
            result = service.process_stock_update_csv(db, args.user_id, raw, upload_id)
            print(f"Stock update finished: {result.updated} products updated, {result.errors} errors.")
        _print_errors(result.error_details)
        return 0
    except InventoryError as e:
        print(f"ERROR: {e}")
        return 1
    except Exception as e:
        db.rollback()
        logger.exception(f"Import {upload_id} failed")
        print(f"ERROR: {e}")
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
