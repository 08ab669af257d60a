"""
Product and inventory schemas for service inputs/outputs
"""
from decimal import Decimal
from typing import Literal, Optional
from pydantic import BaseModel, Field


class ProductCreate(BaseModel):
    """Create a product together with its inventory row (single-product flow)"""
    name: str = Field(..., min_length=1, max_length=255)
    category: str = Field(default="Uncategorized", max_length=100)
    brand: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    stock: int = Field(default=0, ge=0)
    reorder_level: int = Field(default=0, ge=0)
    cost_price: Decimal = Field(default=Decimal("0"), ge=0, description="Unit (cost) price")
    selling_price: Decimal = Field(default=Decimal("0"), ge=0)
    hsn_code: Optional[str] = Field(None, max_length=20)
    gst_rate: Decimal = Field(default=Decimal("18.00"), ge=0, le=100)


class ProductCreated(BaseModel):
    """Result of add_product; final_name differs from original_name after a brand rename"""
    product_id: int
    sku: str
    original_name: str
    final_name: str
    name_modified: bool


class BasicProductCreate(BaseModel):
    """Catalogue-only product (no inventory row); SKU optional, generated when absent"""
    name: str = Field(..., min_length=1, max_length=255)
    sku: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    category: str = Field(default="Uncategorized", max_length=100)
    hsn_code: Optional[str] = Field(None, max_length=20)
    gst_rate: Decimal = Field(default=Decimal("18.00"), ge=0, le=100)


class ProductUpdate(BaseModel):
    """Full overwrite of a product's catalogue fields (SKU excluded)"""
    name: str = Field(..., min_length=1, max_length=255)
    sku: Optional[str] = Field(None, max_length=100, description="Must match the stored SKU; SKUs are immutable")
    description: Optional[str] = None
    category: str = Field(..., max_length=100)
    hsn_code: Optional[str] = Field(None, max_length=20)
    gst_rate: Decimal = Field(default=Decimal("18.00"), ge=0, le=100)


class ProductPartialUpdate(BaseModel):
    """
    Partial product update. Only fields explicitly set are written
    (model_dump(exclude_unset=True)); setting brand/description/hsn_code to
    None or "" clears the column.
    """
    product_name: Optional[str] = Field(None, max_length=255)
    brand: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    hsn_code: Optional[str] = Field(None, max_length=20)
    gst_rate: Optional[Decimal] = Field(None, ge=0, le=100)


class ProductInventoryUpdate(ProductPartialUpdate):
    """Partial product update plus stock and reorder level, applied in one transaction"""
    quantity: Optional[int] = Field(None, ge=0)
    reorder_level: Optional[int] = Field(None, ge=0)


class BulkStockUpdate(BaseModel):
    """One entry of a bulk SKU stock update"""
    sku: str
    stock_quantity: int = Field(..., ge=0)


class ExistingProduct(BaseModel):
    """Product row found by the duplicate check"""
    product_id: int
    product_name: str
    brand: Optional[str] = None

    class Config:
        from_attributes = True


class DuplicateCheckResult(BaseModel):
    """
    Outcome of the duplicate check:
    - duplicate: same name and brand already exist (existing_product set)
    - rename: name taken by another brand, modified_name is free to use
    - clear: no conflict
    """
    outcome: Literal["duplicate", "rename", "clear"]
    existing_product: Optional[ExistingProduct] = None
    modified_name: Optional[str] = None

    @property
    def is_duplicate(self) -> bool:
        return self.outcome == "duplicate"


class ProductResponse(BaseModel):
    """Product catalogue fields"""
    product_id: int
    merchant_id: int
    product_name: str
    sku: str
    category: str
    brand: Optional[str] = None
    description: Optional[str] = None
    hsn_code: Optional[str] = None
    gst_rate: Decimal

    class Config:
        from_attributes = True


class InventoryResponse(BaseModel):
    """Inventory row with derived low-stock flag"""
    product_id: int
    sku: str
    quantity_available: int
    reorder_level: int
    cost_price: Decimal
    selling_price: Decimal
    is_low_stock: bool

    class Config:
        from_attributes = True


class LowStockProduct(BaseModel):
    """Product whose quantity_available <= reorder_level"""
    product_id: int
    product_name: str
    sku: str
    category: str
    brand: Optional[str] = None
    quantity_available: int
    reorder_level: int
    unit_price: Decimal
