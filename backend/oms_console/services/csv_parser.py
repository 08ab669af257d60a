"""
CSV row parsing for inventory uploads.

Two variants:
- stock update: product name or SKU + stock
- product: full product + inventory fields

Headers are matched case-insensitively with spaces/hyphens treated as
underscores, so "Stock Quantity", "stock_quantity" and "STOCK-QUANTITY" are the
same column. A bad row never aborts the file: it is reported in `errors` with
its raw content and skipped. Parsing has no side effects and can be repeated on
the same buffer.
"""
import json
import logging
from decimal import Decimal, InvalidOperation
from io import BytesIO
from typing import Callable, Dict, List, Optional

import pandas as pd

from oms_console.config import settings
from oms_console.exceptions import InvalidUploadError
from oms_console.schemas.csv_import import ParseResult, ProductRow, StockUpdateRow

logger = logging.getLogger(__name__)

# Canonical field -> accepted headers, tried in order (first non-blank wins)
FIELD_ALIASES: Dict[str, List[str]] = {
    "name": ["product_name", "Product Name"],
    "sku": ["sku", "SKU"],
    "stock": ["stock", "Stock", "stock_quantity", "Stock Quantity"],
    "category": ["category", "Category"],
    "brand": ["brand", "Brand"],
    "description": ["description", "Description"],
    "reorder_level": ["reorder_level", "Reorder Level"],
    "cost_price": ["cost_price", "Cost Price", "unit_price", "Unit Price"],
    "selling_price": ["selling_price", "Selling Price"],
    "hsn_code": ["hsn_code", "HSN Code"],
    "gst_rate": ["gst_rate", "GST Rate"],
}


def _normalize_header(name) -> str:
    return str(name).strip().lower().replace(' ', '_').replace('-', '_')


def _normalize_row(row: Dict) -> Dict[str, str]:
    """Key the row by normalized header; the first occurrence of a header wins."""
    normalized: Dict[str, str] = {}
    for key, value in row.items():
        normalized.setdefault(_normalize_header(key), value)
    return normalized


def _safe_strip(value) -> Optional[str]:
    """Strip a cell value; None for missing/blank/NaN."""
    if value is None:
        return None
    if isinstance(value, float) and value != value:  # NaN
        return None
    s = str(value).strip()
    return s or None


def _field(row: Dict[str, str], field: str) -> Optional[str]:
    """Value of a canonical field, trying its aliases in order."""
    for alias in FIELD_ALIASES[field]:
        value = _safe_strip(row.get(_normalize_header(alias)))
        if value is not None:
            return value
    return None


def _parse_int(value: Optional[str], default: int = 0) -> int:
    """Lenient integer: "12" -> 12, "12.7" -> 12, junk -> default."""
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return int(float(value))
    except (ValueError, OverflowError):
        return default


def _parse_decimal(value: Optional[str], default: Decimal) -> Decimal:
    """Decimal from text; junk, NaN and infinities give the default."""
    if value is None:
        return default
    try:
        parsed = Decimal(value.replace(',', ''))
    except InvalidOperation:
        return default
    return parsed if parsed.is_finite() else default


def _raw(row: Dict) -> str:
    return json.dumps(row, default=str, ensure_ascii=False)


def read_csv_rows(raw: bytes, bad_rows: Optional[List[str]] = None) -> List[Dict[str, str]]:
    """
    Read a CSV buffer into a list of {header: text} dicts.

    Every cell is read as text (no type inference, "" for empty and missing
    trailing cells). A line with more fields than the header is skipped and
    reported in `bad_rows` when a list is given. The header line is read as
    data so pandas never turns a first column into an implicit index.
    Raises InvalidUploadError when the buffer is empty or unreadable.
    """
    if not raw or not raw.strip():
        raise InvalidUploadError("Uploaded file is empty")

    def _on_bad_line(fields: List[str]) -> None:
        if bad_rows is not None:
            bad_rows.append(f"Error parsing row: {_raw(fields)} - unexpected number of fields ({len(fields)})")
        return None

    try:
        df = pd.read_csv(
            BytesIO(raw),
            header=None,
            dtype=str,
            keep_default_na=False,
            encoding="utf-8-sig",
            skip_blank_lines=True,
            engine="python",
            on_bad_lines=_on_bad_line,
        )
    except pd.errors.EmptyDataError as e:
        raise InvalidUploadError("Uploaded file has no header row") from e
    except (pd.errors.ParserError, UnicodeDecodeError) as e:
        raise InvalidUploadError(f"Could not read CSV: {e}") from e

    lines = df.fillna("").values.tolist()
    if not lines:
        raise InvalidUploadError("Uploaded file has no header row")

    header = [str(h) for h in lines[0]]
    rows: List[Dict[str, str]] = []
    for values in lines[1:]:
        row: Dict[str, str] = {}
        # first occurrence of a repeated header wins
        for key, value in zip(header, values):
            row.setdefault(key, value)
        rows.append(row)
    return rows


def _parse_buffer(raw: bytes, parse_rows: Callable[[List[Dict]], ParseResult]) -> ParseResult:
    bad_rows: List[str] = []
    result = parse_rows(read_csv_rows(raw, bad_rows))
    result.errors = bad_rows + result.errors
    return result


def parse_stock_update_rows(rows: List[Dict]) -> ParseResult[StockUpdateRow]:
    """Validate stock-update rows: needs a name or SKU and a non-negative stock."""
    records: List[StockUpdateRow] = []
    errors: List[str] = []

    for row in rows:
        try:
            norm = _normalize_row(row)
            record = StockUpdateRow(
                name=_field(norm, "name"),
                sku=_field(norm, "sku"),
                stock=_parse_int(_field(norm, "stock"), 0),
            )

            if not record.name and not record.sku:
                errors.append(f"Missing product name and SKU in row: {_raw(row)}")
                continue

            if record.stock < 0:
                errors.append(f"Invalid stock quantity ({record.stock}) in row: {_raw(row)}")
                continue

            records.append(record)
        except Exception as e:
            errors.append(f"Error parsing row: {_raw(row)} - {e}")

    return ParseResult[StockUpdateRow](records=records, errors=errors)


def parse_product_rows(rows: List[Dict]) -> ParseResult[ProductRow]:
    """Validate full product rows: needs a name; stock, reorder level and prices must not be negative."""
    records: List[ProductRow] = []
    errors: List[str] = []
    zero = Decimal("0")

    for row in rows:
        try:
            norm = _normalize_row(row)
            name = _field(norm, "name")
            if not name:
                errors.append(f"Missing required fields in row: {_raw(row)}")
                continue

            record = ProductRow(
                name=name,
                category=_field(norm, "category"),
                brand=_field(norm, "brand"),
                description=_field(norm, "description"),
                stock=_parse_int(_field(norm, "stock"), 0),
                reorder_level=_parse_int(_field(norm, "reorder_level"), 0),
                cost_price=_parse_decimal(_field(norm, "cost_price"), zero),
                selling_price=_parse_decimal(_field(norm, "selling_price"), zero),
                hsn_code=_field(norm, "hsn_code"),
                gst_rate=_parse_decimal(_field(norm, "gst_rate"), settings.DEFAULT_GST_RATE),
            )

            if record.stock < 0:
                errors.append(f"Invalid stock quantity ({record.stock}) in row: {_raw(row)}")
                continue
            if record.reorder_level < 0:
                errors.append(f"Invalid reorder level ({record.reorder_level}) in row: {_raw(row)}")
                continue
            if record.cost_price < 0 or record.selling_price < 0:
                errors.append(f"Invalid price in row: {_raw(row)}")
                continue

            records.append(record)
        except Exception as e:
            errors.append(f"Error parsing row: {_raw(row)} - {e}")

    return ParseResult[ProductRow](records=records, errors=errors)


def parse_stock_update_csv(raw: bytes) -> ParseResult[StockUpdateRow]:
    """Parse a stock-update CSV buffer"""
    result = _parse_buffer(raw, parse_stock_update_rows)
    logger.info(f"Parsed stock-update CSV: {len(result.records)} rows, {len(result.errors)} errors")
    return result


def parse_product_csv(raw: bytes) -> ParseResult[ProductRow]:
    """Parse a full product CSV buffer"""
    result = _parse_buffer(raw, parse_product_rows)
    logger.info(f"Parsed product CSV: {len(result.records)} rows, {len(result.errors)} errors")
    return result
