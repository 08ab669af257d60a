"""Tests for single-record inventory edits, bulk SKU updates and price updates."""
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from conftest import USER_ID
from oms_console.exceptions import MerchantNotFoundError, NotFoundError, ValidationFailedError
from oms_console.models import Inventory, Product
from oms_console.schemas.product import BulkStockUpdate, InventoryResponse, ProductInventoryUpdate
from oms_console.services import price_service
from oms_console.services.inventory_service import InventoryService, require_non_negative


class TestBulkUpdate:
    """bulk_update_inventory"""

    def test_unknown_skus_are_skipped(self, db, make_product):
        a = make_product("A", sku="SKU-A", stock=1)
        b = make_product("B", sku="SKU-B", stock=1)

        updated = InventoryService.bulk_update_inventory(db, USER_ID, [
            BulkStockUpdate(sku="SKU-A", stock_quantity=11),
            BulkStockUpdate(sku="SKU-MISSING", stock_quantity=5),
            BulkStockUpdate(sku="SKU-B", stock_quantity=22),
        ])

        assert updated == 2
        db.refresh(a)
        db.refresh(b)
        assert a.inventory.quantity_available == 11
        assert b.inventory.quantity_available == 22

    def test_failure_rolls_back_everything(self, db, make_product):
        a = make_product("A", sku="SKU-A", stock=1)
        b = make_product("B", sku="SKU-B", stock=1)
        updates = [
            BulkStockUpdate(sku="SKU-A", stock_quantity=11),
            # skips validation so the database check constraint rejects it at commit
            BulkStockUpdate.model_construct(sku="SKU-B", stock_quantity=-5),
        ]

        with pytest.raises(IntegrityError):
            InventoryService.bulk_update_inventory(db, USER_ID, updates)

        db.refresh(a)
        db.refresh(b)
        assert a.inventory.quantity_available == 1
        assert b.inventory.quantity_available == 1

    def test_other_merchant_skus_not_touched(self, db, make_product):
        foreign = make_product("A", sku="SKU-A", stock=3, merchant_id=2)
        assert InventoryService.bulk_update_inventory(db, USER_ID, [BulkStockUpdate(sku="SKU-A", stock_quantity=9)]) == 0
        db.refresh(foreign)
        assert foreign.inventory.quantity_available == 3


class TestSingleEdits:
    """update_stock / update_reorder_level / update_product_and_inventory"""

    def test_update_stock(self, db, make_product):
        product = make_product("Widget", stock=1, reorder_level=5)
        inventory = InventoryService.update_stock(db, USER_ID, product.product_id, 30)
        assert isinstance(inventory, InventoryResponse)
        assert inventory.quantity_available == 30
        assert inventory.is_low_stock is False

    def test_update_stock_to_reorder_level_is_low(self, db, make_product):
        product = make_product("Widget", stock=30, reorder_level=5)
        inventory = InventoryService.update_stock(db, USER_ID, product.product_id, 5)
        assert inventory.is_low_stock is True
        assert inventory.sku == product.sku

    @pytest.mark.parametrize("bad", [-1, None, "5", True])
    def test_update_stock_rejects_invalid_quantity(self, db, make_product, bad):
        product = make_product("Widget")
        with pytest.raises(ValidationFailedError, match="Valid quantity is required"):
            InventoryService.update_stock(db, USER_ID, product.product_id, bad)

    def test_update_stock_other_merchant(self, db, make_product):
        foreign = make_product("Widget", merchant_id=2)
        with pytest.raises(NotFoundError, match="not associated with your merchant"):
            InventoryService.update_stock(db, USER_ID, foreign.product_id, 3)

    def test_update_reorder_level(self, db, make_product):
        product = make_product("Widget", reorder_level=1)
        inventory = InventoryService.update_reorder_level(db, USER_ID, product.product_id, 8)
        assert inventory.reorder_level == 8
        assert inventory.is_low_stock is False
        with pytest.raises(ValidationFailedError, match="Valid reorder level is required"):
            InventoryService.update_reorder_level(db, USER_ID, product.product_id, -2)

    def test_unknown_user(self, db, make_product):
        product = make_product("Widget")
        with pytest.raises(MerchantNotFoundError):
            InventoryService.update_stock(db, "nobody", product.product_id, 1)

    def test_update_product_and_inventory(self, db, make_product):
        product = make_product("Widget", brand="Acme", stock=1, reorder_level=1)
        updated = InventoryService.update_product_and_inventory(
            db, USER_ID, product.product_id,
            ProductInventoryUpdate(product_name="Widget Pro", brand="", quantity=12, reorder_level=4),
        )

        assert updated.product_name == "Widget Pro"
        assert updated.brand is None
        assert updated.inventory.quantity_available == 12
        assert updated.inventory.reorder_level == 4

    def test_update_product_and_inventory_missing_inventory(self, db, make_product):
        product = make_product("Widget", brand="Acme")
        db.query(Inventory).filter(Inventory.product_id == product.product_id).delete()
        db.commit()

        with pytest.raises(NotFoundError, match="Product inventory not found"):
            InventoryService.update_product_and_inventory(
                db, USER_ID, product.product_id, ProductInventoryUpdate(product_name="Renamed", quantity=3),
            )
        # product change rolled back with the failed inventory update
        assert db.query(Product).filter(Product.product_id == product.product_id).one().product_name == "Widget"

    def test_update_product_and_inventory_unknown_product(self, db, merchant):
        with pytest.raises(NotFoundError, match="Product not found"):
            InventoryService.update_product_and_inventory(db, USER_ID, 999, ProductInventoryUpdate(quantity=1))


class TestPrices:
    """price_service"""

    def test_update_cost_price(self, db, make_product):
        product = make_product("Widget", cost_price="1.00")
        inventory = price_service.update_cost_price(db, USER_ID, product.product_id, Decimal("3.75"))
        assert isinstance(inventory, InventoryResponse)
        assert inventory.cost_price == Decimal("3.75")

    def test_update_selling_price_accepts_float(self, db, make_product):
        product = make_product("Widget", selling_price="1.00")
        inventory = price_service.update_selling_price(db, USER_ID, product.product_id, 12.5)
        assert inventory.selling_price == Decimal("12.50")

    def test_negative_prices_rejected(self, db, make_product):
        product = make_product("Widget")
        with pytest.raises(ValidationFailedError, match="Valid unit price is required"):
            price_service.update_cost_price(db, USER_ID, product.product_id, -1)
        with pytest.raises(ValidationFailedError, match="Valid selling price is required"):
            price_service.update_selling_price(db, USER_ID, product.product_id, Decimal("NaN"))

    def test_other_merchant_price(self, db, make_product):
        foreign = make_product("Widget", merchant_id=2)
        with pytest.raises(NotFoundError):
            price_service.update_cost_price(db, USER_ID, foreign.product_id, 1)


def test_require_non_negative_passes_value_through():
    assert require_non_negative(0, "bad") == 0
    assert require_non_negative(Decimal("2.5"), "bad") == Decimal("2.5")
