"""
CSV import schemas: parsed rows, batch results and import summaries.
Parsed rows are not validated by pydantic beyond types; the parser applies the
business rules and records rejections as error strings.
"""
from decimal import Decimal
from typing import Generic, List, Optional, TypeVar
from pydantic import BaseModel, Field


class StockUpdateRow(BaseModel):
    """Row of a stock-correction CSV. Name wins over SKU when both are present."""
    name: Optional[str] = None
    sku: Optional[str] = None
    stock: int = 0

    @property
    def label(self) -> str:
        return self.name or self.sku or "Unknown"


class ProductRow(BaseModel):
    """Row of a full product CSV (product + inventory fields)"""
    name: str
    category: Optional[str] = None
    brand: Optional[str] = None
    description: Optional[str] = None
    stock: int = 0
    reorder_level: int = 0
    cost_price: Decimal = Decimal("0")
    selling_price: Decimal = Decimal("0")
    hsn_code: Optional[str] = None
    gst_rate: Decimal = Decimal("18.00")


RowT = TypeVar("RowT")


class ParseResult(BaseModel, Generic[RowT]):
    """Rows that passed validation plus one error string per rejected row"""
    records: List[RowT] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)


class WrittenRecord(BaseModel):
    """Product + inventory row as committed by the batch writer"""
    product_id: int
    sku: str
    name: str
    stock: int
    reorder_level: int
    cost_price: Decimal
    selling_price: Decimal


class BatchWriteResult(BaseModel):
    """Outcome of writing all batches: committed records and per-record errors"""
    succeeded: List[WrittenRecord] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)


class UpdatedStock(BaseModel):
    """One successful stock correction"""
    product_id: int
    sku: str
    new_stock: int


class ProductImportResult(BaseModel):
    """Final summary of a product CSV import"""
    created: int = 0
    errors: int = 0
    error_details: List[str] = Field(default_factory=list)


class StockUpdateResult(BaseModel):
    """Final summary of a stock-update CSV import"""
    updated: int = 0
    errors: int = 0
    error_details: List[str] = Field(default_factory=list)
