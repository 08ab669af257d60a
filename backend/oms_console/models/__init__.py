"""
Database models for the OMS console
"""
from oms_console.database import Base

# Import all models
from .merchant import Merchant
from .user import User
from .product import Product
from .inventory import Inventory

__all__ = [
    "Base",
    "Merchant",
    "User",
    "Product",
    "Inventory",
]
