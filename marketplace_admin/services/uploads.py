"""Validation for file uploads forwarded to the backend.

- Digital product batch import: a CSV file plus the supplier it belongs to.
- Voucher import: a .csv/.xlsx/.xls/.zip file up to 10MB, or manually typed
  codes. When both are supplied the file wins.
"""

from dataclasses import dataclass
from enum import Enum

CSV_CONTENT_TYPE = "text/csv"
VOUCHER_EXTENSIONS = (".csv", ".xlsx", ".xls", ".zip")
VOUCHER_MAX_BYTES = 10 * 1024 * 1024


def validate_csv_upload(
    filename: str | None,
    content_type: str | None,
    supplier_id: int | None,
) -> dict[str, str]:
    """Errors for a batch-import upload ({} when valid)."""
    errors: dict[str, str] = {}

    if not supplier_id:
        errors["supplier_id"] = "Supplier is required"

    if not filename:
        errors["file"] = "CSV file is required"
    elif content_type != CSV_CONTENT_TYPE and not filename.lower().endswith(".csv"):
        errors["file"] = "Only CSV files are allowed"

    return errors


def validate_voucher_file(filename: str, size: int, max_bytes: int = VOUCHER_MAX_BYTES) -> str | None:
    """Error message for a voucher import file, or None when it is acceptable."""
    name = filename.lower()
    dot = name.rfind(".")
    if dot == -1 or dot == len(name) - 1:
        return "File must have a valid extension (.csv, .xlsx, .xls, or .zip)."

    if name[dot:] not in VOUCHER_EXTENSIONS:
        return "Invalid file type. Please upload a CSV, Excel (.xlsx/.xls), or ZIP file."

    if size > max_bytes:
        return f"File size exceeds {format_file_size(max_bytes)} limit."

    return None


def format_file_size(size: int) -> str:
    """Human readable size: 0 Bytes, 512 Bytes, 1.5 KB, 10 MB."""
    if size <= 0:
        return "0 Bytes"
    units = ("Bytes", "KB", "MB")
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(units) - 1:
        value /= 1024
        unit += 1
    return f"{round(value, 2):g} {units[unit]}"


class VoucherImportSource(str, Enum):
    """Where voucher codes come from."""

    FILE = "file"
    MANUAL = "manual"


@dataclass
class VoucherImportPlan:
    source: VoucherImportSource | None
    error: str | None = None


def resolve_voucher_import(has_file: bool, manual_count: int) -> VoucherImportPlan:
    """Pick the voucher import source; a file takes precedence over manual codes."""
    if has_file:
        return VoucherImportPlan(source=VoucherImportSource.FILE)
    if manual_count > 0:
        return VoucherImportPlan(source=VoucherImportSource.MANUAL)
    return VoucherImportPlan(source=None, error="Please select a file to import.")
