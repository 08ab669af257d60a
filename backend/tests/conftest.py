"""
Pytest fixtures: in-memory SQLite database shared by one test.

SQLite needs two tweaks for SAVEPOINT and per-batch transactions to behave like
PostgreSQL under pysqlite: autocommit at the driver level and an explicit BEGIN
emitted by SQLAlchemy.
"""
import sys
from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Allow running from a checkout without installing the package
_backend = Path(__file__).resolve().parent.parent
if str(_backend) not in sys.path:
    sys.path.insert(0, str(_backend))

from oms_console.models import Base, Inventory, Merchant, Product, User

USER_ID = "user-1"
OTHER_USER_ID = "user-2"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def merchant(db):
    """Merchant 1 owned by USER_ID, plus a second merchant for isolation checks"""
    merchant = Merchant(merchant_id=1, merchant_name="Acme Traders")
    other = Merchant(merchant_id=2, merchant_name="Other Store")
    db.add_all([merchant, other])
    db.flush()
    db.add_all([
        User(user_id=USER_ID, merchant_id=1, email="owner@acme.test"),
        User(user_id=OTHER_USER_ID, merchant_id=2, email="owner@other.test"),
        User(user_id="orphan", merchant_id=None, email="orphan@nowhere.test"),
    ])
    db.commit()
    return merchant


@pytest.fixture
def make_product(db, merchant):
    """Factory inserting a product with its inventory row and committing"""
    counter = {"n": 0}

    def _make(
        name,
        brand=None,
        sku=None,
        stock=10,
        reorder_level=5,
        cost_price="10.00",
        selling_price="15.00",
        merchant_id=1,
        category="General",
    ):
        counter["n"] += 1
        sku = sku or f"TEST-SKU-{counter['n']:04d}"
        product = Product(
            merchant_id=merchant_id,
            product_name=name,
            sku=sku,
            category=category,
            brand=brand,
            gst_rate=Decimal("18.00"),
        )
        db.add(product)
        db.flush()
        db.add(Inventory(
            merchant_id=merchant_id,
            product_id=product.product_id,
            sku=sku,
            quantity_available=stock,
            reorder_level=reorder_level,
            cost_price=Decimal(cost_price),
            selling_price=Decimal(selling_price),
        ))
        db.commit()
        return product

    return _make


def csv_bytes(*lines: str) -> bytes:
    return ("\n".join(lines) + "\n").encode("utf-8")
