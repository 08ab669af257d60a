"""Tests for single-product creation, catalogue edits and low-stock listing."""
from decimal import Decimal

import pytest

from conftest import USER_ID
from oms_console.exceptions import DuplicateProductError, MerchantNotFoundError, NotFoundError, ValidationFailedError
from oms_console.models import Inventory, Product
from oms_console.schemas.product import (
    BasicProductCreate,
    ProductCreate,
    ProductPartialUpdate,
    ProductResponse,
    ProductUpdate,
)
from oms_console.services.product_service import ProductService, partial_update_values


class TestAddProduct:
    """add_product"""

    def test_creates_product_and_inventory(self, db, merchant):
        created = ProductService.add_product(db, USER_ID, ProductCreate(
            name="Widget", brand="Acme", stock=4, reorder_level=2,
            cost_price=Decimal("1.50"), selling_price=Decimal("3.00"),
        ))

        assert created.final_name == "Widget"
        assert created.name_modified is False
        assert created.sku.startswith("SKU-")
        inventory = db.query(Inventory).filter(Inventory.product_id == created.product_id).one()
        assert inventory.quantity_available == 4
        assert inventory.sku == created.sku

    def test_duplicate_name_and_brand(self, db, make_product):
        make_product("Widget", brand="Acme")
        with pytest.raises(DuplicateProductError) as exc_info:
            ProductService.add_product(db, USER_ID, ProductCreate(name="Widget", brand="Acme"))
        assert str(exc_info.value) == (
            'Product "Widget" with brand "Acme" already exists. Please use a different name or brand.'
        )
        assert db.query(Product).count() == 1

    def test_duplicate_without_brand_says_no_brand(self, db, make_product):
        make_product("Widget")
        with pytest.raises(DuplicateProductError, match='brand "No Brand"'):
            ProductService.add_product(db, USER_ID, ProductCreate(name="Widget"))

    def test_other_brand_is_renamed(self, db, make_product):
        make_product("Widget", brand="Acme")
        created = ProductService.add_product(db, USER_ID, ProductCreate(name="Widget", brand="Globex"))

        assert created.original_name == "Widget"
        assert created.final_name == "Widget (Globex)"
        assert created.name_modified is True
        assert db.query(Product).filter(Product.product_name == "Widget (Globex)").one().brand == "Globex"

    def test_renamed_variant_taken(self, db, make_product):
        make_product("Widget", brand="Acme")
        make_product("Widget (Globex)", brand="Globex")
        with pytest.raises(DuplicateProductError):
            ProductService.add_product(db, USER_ID, ProductCreate(name="Widget", brand="Globex"))
        assert db.query(Product).count() == 2

    def test_name_taken_by_branded_product_without_brand(self, db, make_product):
        make_product("Widget", brand="Acme")
        with pytest.raises(DuplicateProductError, match='brand "Acme"'):
            ProductService.add_product(db, USER_ID, ProductCreate(name="Widget"))
        assert db.query(Product).count() == 1

    def test_unknown_user(self, db, merchant):
        with pytest.raises(MerchantNotFoundError):
            ProductService.add_product(db, "nobody", ProductCreate(name="Widget"))


class TestBasicProduct:
    """create_basic_product"""

    def test_generated_sku(self, db, merchant):
        product = ProductService.create_basic_product(db, USER_ID, BasicProductCreate(name="Widget"))
        assert product.sku.startswith("SKU-")
        assert product.category == "Uncategorized"
        assert db.query(Inventory).count() == 0

    def test_explicit_sku(self, db, merchant):
        product = ProductService.create_basic_product(db, USER_ID, BasicProductCreate(name="Widget", sku="WID-001"))
        assert product.sku == "WID-001"

    def test_sku_already_used(self, db, make_product):
        make_product("Gadget", sku="WID-001")
        with pytest.raises(ValidationFailedError, match="already exists"):
            ProductService.create_basic_product(db, USER_ID, BasicProductCreate(name="Widget", sku="WID-001"))

    def test_invalid_sku_format(self, db, merchant):
        with pytest.raises(ValidationFailedError, match="Invalid SKU format"):
            ProductService.create_basic_product(db, USER_ID, BasicProductCreate(name="Widget", sku="-x"))


class TestUpdates:
    """update_product / update_product_partial"""

    def test_full_update_keeps_sku(self, db, make_product):
        product = make_product("Widget", sku="OLD-001")
        updated = ProductService.update_product(db, USER_ID, product.product_id, ProductUpdate(
            name="Widget v2", description=" Sturdy ", category="Tools",
            hsn_code="8205", gst_rate=Decimal("12"),
        ))

        assert isinstance(updated, ProductResponse)
        assert updated.product_name == "Widget v2"
        assert updated.sku == "OLD-001"
        assert updated.description == "Sturdy"
        assert updated.gst_rate == Decimal("12")
        inventory = db.query(Inventory).filter(Inventory.product_id == product.product_id).one()
        assert inventory.sku == "OLD-001"

    def test_full_update_accepts_unchanged_sku(self, db, make_product):
        product = make_product("Widget", sku="OLD-001")
        updated = ProductService.update_product(db, USER_ID, product.product_id, ProductUpdate(
            name="Widget v2", sku="OLD-001", category="Tools",
        ))
        assert updated.sku == "OLD-001"

    def test_full_update_rejects_sku_change(self, db, make_product):
        product = make_product("Widget", sku="OLD-001")
        with pytest.raises(ValidationFailedError, match="SKU cannot be changed"):
            ProductService.update_product(db, USER_ID, product.product_id, ProductUpdate(
                name="Widget v2", sku="NEW-001", category="Tools",
            ))

        stored = db.query(Product).filter(Product.product_id == product.product_id).one()
        assert stored.sku == "OLD-001"
        assert stored.product_name == "Widget"
        assert stored.inventory.sku == "OLD-001"

    def test_full_update_name_conflict(self, db, make_product):
        make_product("Gadget")
        product = make_product("Widget")
        with pytest.raises(ValidationFailedError, match="already used"):
            ProductService.update_product(db, USER_ID, product.product_id, ProductUpdate(
                name="Gadget", sku=product.sku, category="Tools",
            ))

    def test_full_update_other_merchant(self, db, make_product):
        foreign = make_product("Widget", merchant_id=2)
        with pytest.raises(NotFoundError):
            ProductService.update_product(db, USER_ID, foreign.product_id, ProductUpdate(
                name="Mine now", sku="MINE-001", category="Tools",
            ))

    def test_partial_update_only_touches_set_fields(self, db, make_product):
        product = make_product("Widget", brand="Acme")
        updated = ProductService.update_product_partial(
            db, USER_ID, product.product_id, ProductPartialUpdate(description="New text"),
        )
        assert updated.description == "New text"
        assert updated.brand == "Acme"
        assert updated.product_name == "Widget"

    def test_partial_update_with_nothing_set(self, db, make_product):
        product = make_product("Widget")
        assert ProductService.update_product_partial(db, USER_ID, product.product_id, ProductPartialUpdate()) is None

    def test_partial_update_values(self):
        values = partial_update_values(ProductPartialUpdate(
            product_name="  ", brand="", description=" d ", hsn_code=None, gst_rate=None,
        ))
        assert values == {"brand": None, "description": "d", "hsn_code": None, "gst_rate": Decimal("18.00")}

    def test_partial_update_values_keeps_zero_gst(self):
        assert partial_update_values(ProductPartialUpdate(gst_rate=Decimal("0"))) == {"gst_rate": Decimal("0")}


def test_low_stock_products(db, make_product):
    make_product("Plenty", stock=50, reorder_level=5)
    make_product("Edge", stock=5, reorder_level=5, cost_price="2.00")
    make_product("Empty", stock=0, reorder_level=3)
    make_product("Foreign", stock=0, reorder_level=3, merchant_id=2)

    low = ProductService.get_low_stock_products(db, USER_ID)

    assert [p.product_name for p in low] == ["Empty", "Edge"]
    assert low[1].unit_price == Decimal("2.00")
    assert low[0].quantity_available == 0
