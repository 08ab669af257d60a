"""
Business logic services for the OMS console inventory core
"""
from .csv_import_service import CsvImportService
from .duplicate_check import DuplicateResolver
from .inventory_service import InventoryService
from .product_service import ProductService
from .progress import ProgressReporter

__all__ = [
    "CsvImportService",
    "DuplicateResolver",
    "InventoryService",
    "ProductService",
    "ProgressReporter",
]
