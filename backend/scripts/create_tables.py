"""
Create the merchants, users, products and inventory tables.

Usage (from backend/):
  python scripts/create_tables.py [--db-url URL]
"""
import argparse
import logging
import sys
from pathlib import Path

# Add backend to path when run as script
_backend = Path(__file__).resolve().parent.parent
if str(_backend) not in sys.path:
    sys.path.insert(0, str(_backend))

from sqlalchemy import create_engine

from oms_console.config import settings
from oms_console.models import Base

logger = logging.getLogger("create_tables")


def main() -> int:
    parser = argparse.ArgumentParser(description="Create inventory tables (existing tables are left alone).")
    parser.add_argument("--db-url", default=None, help="Database URL (default: from DATABASE_URL / DB_* env)")
    args = parser.parse_args()

    logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    engine = create_engine(args.db_url or settings.database_connection_string)
    try:
        Base.metadata.create_all(bind=engine)
    except Exception as e:
        logger.error(f"Could not create tables: {e}")
        return 1
    finally:
        engine.dispose()

    logger.info(f"Tables ready: {', '.join(sorted(Base.metadata.tables))}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
