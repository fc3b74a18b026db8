"""Reconciliation of two record sets by transaction id.

Both sides are decoded fully, then indexed ``id -> Transaction``. A duplicate
id within one side silently keeps the last record read; callers that need
duplicate detection must check for it themselves (see
:func:`duplicate_ids`).
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from typing import BinaryIO

from .formats import BankFormat, get_format
from .logging_setup import get_logger
from .models import CompareResult, Identical, Mismatch, RecordDiff, Transaction

_logger = get_logger("ypbank.reconciliation")


def _index(records: Iterable[Transaction]) -> dict[int, Transaction]:
    return {tx.id: tx for tx in records}


def reconcile(left: Iterable[Transaction], right: Iterable[Transaction]) -> CompareResult:
    """Diff two already-decoded record sets.

    ``missing_in_a`` lists ids only ``right`` has, ``missing_in_b`` ids only
    ``left`` has, and ``differing`` pairs up ids whose records are unequal.
    """

    a = _index(left)
    b = _index(right)

    missing_in_a = [tx_id for tx_id in b if tx_id not in a]
    missing_in_b = [tx_id for tx_id in a if tx_id not in b]
    differing = [
        RecordDiff(tx_id, tx_a, b[tx_id])
        for tx_id, tx_a in a.items()
        if tx_id in b and b[tx_id] != tx_a
    ]

    _logger.debug(
        "reconciled %d vs %d ids: %d missing in first, %d missing in second, %d differing",
        len(a),
        len(b),
        len(missing_in_a),
        len(missing_in_b),
        len(differing),
    )
    if not (missing_in_a or missing_in_b or differing):
        return Identical()
    return Mismatch(missing_in_a=missing_in_a, missing_in_b=missing_in_b, differing=differing)


def compare(
    format_a: str | BankFormat,
    stream_a: BinaryIO,
    format_b: str | BankFormat,
    stream_b: BinaryIO,
) -> CompareResult:
    """Decode both streams (formats may differ) and reconcile them by id."""

    left = get_format(format_a).decode_all(stream_a)
    right = get_format(format_b).decode_all(stream_b)
    return reconcile(left, right)


def duplicate_ids(records: Iterable[Transaction]) -> list[int]:
    """Return ids that occur more than once, in ascending order."""

    counts = Counter(tx.id for tx in records)
    return sorted(tx_id for tx_id, n in counts.items() if n > 1)


__all__ = ["compare", "reconcile", "duplicate_ids"]
