"""Public interface for the ``ypbank`` package.

This module exposes the package's API functions and public models/types as the
stable import surface. There is no runtime logic here, only symbol re-exports.
"""

from .api import compare, convert, decode_all, encode_all
from .errors import BankFormatError, InvalidBinaryFraming, IoFailure, MalformedText
from .formats import (
    BankFormat,
    BinaryFormat,
    CsvFormat,
    KeyValueTextFormat,
    available_formats,
    format_for_path,
    get_format,
)
from .models import (
    CompareResult,
    ComparisonReport,
    Identical,
    Mismatch,
    RecordDiff,
    Transaction,
    TxKind,
    TxStatus,
)
from .reconciliation import duplicate_ids, reconcile

__all__ = [
    # API
    "decode_all",
    "encode_all",
    "convert",
    "compare",
    "reconcile",
    "duplicate_ids",
    # Formats
    "BankFormat",
    "BinaryFormat",
    "CsvFormat",
    "KeyValueTextFormat",
    "available_formats",
    "format_for_path",
    "get_format",
    # Errors
    "BankFormatError",
    "IoFailure",
    "MalformedText",
    "InvalidBinaryFraming",
    # Models / types
    "Transaction",
    "TxKind",
    "TxStatus",
    "RecordDiff",
    "Identical",
    "Mismatch",
    "CompareResult",
    "ComparisonReport",
]
