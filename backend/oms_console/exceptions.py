"""
Service-level errors.

All subclass ValueError so callers that only know the service raises
ValueError keep working. Row- and batch-level problems during an import are
collected as strings and never raised; only whole-upload failures are.
"""


class InventoryError(ValueError):
    """Base class for inventory service errors"""


class MerchantNotFoundError(InventoryError):
    """The user has no merchant association"""

    def __init__(self, message: str = "User not found"):
        super().__init__(message)


class InvalidUploadError(InventoryError):
    """The uploaded buffer is empty or cannot be read as delimited text"""


class NoValidRowsError(InventoryError):
    """Parsing finished but produced no usable rows"""

    def __init__(self, message: str = "No valid products found in CSV"):
        super().__init__(message)


class DuplicateProductError(InventoryError):
    """A product with the same name and brand already exists for the merchant"""

    def __init__(self, name: str, existing_brand: str = None):
        self.name = name
        self.existing_brand = existing_brand or "No Brand"
        super().__init__(
            f'Product "{name}" with brand "{self.existing_brand}" already exists. '
            "Please use a different name or brand."
        )


class NotFoundError(InventoryError, LookupError):
    """Target product/inventory row does not exist for this merchant"""


class ValidationFailedError(InventoryError):
    """Input value failed a business rule (e.g. negative quantity)"""
