"""
Pydantic schemas for service inputs and outputs
"""
from .product import (
    ProductCreate, ProductCreated, BasicProductCreate, ProductUpdate,
    ProductPartialUpdate, ProductInventoryUpdate, BulkStockUpdate,
    ExistingProduct, DuplicateCheckResult, ProductResponse, InventoryResponse,
    LowStockProduct,
)
from .csv_import import (
    StockUpdateRow, ProductRow, ParseResult, WrittenRecord, BatchWriteResult,
    UpdatedStock, ProductImportResult, StockUpdateResult,
)
from .progress import ProgressEvent, CSV_UPLOAD_PROGRESS_EVENT

__all__ = [
    # Product
    "ProductCreate",
    "ProductCreated",
    "BasicProductCreate",
    "ProductUpdate",
    "ProductPartialUpdate",
    "ProductInventoryUpdate",
    "BulkStockUpdate",
    "ExistingProduct",
    "DuplicateCheckResult",
    "ProductResponse",
    "InventoryResponse",
    "LowStockProduct",
    # CSV import
    "StockUpdateRow",
    "ProductRow",
    "ParseResult",
    "WrittenRecord",
    "BatchWriteResult",
    "UpdatedStock",
    "ProductImportResult",
    "StockUpdateResult",
    # Progress
    "ProgressEvent",
    "CSV_UPLOAD_PROGRESS_EVENT",
]
