"""Public API for the ``ypbank`` package.

Every entry point accepts either a registry name (``"binary"``, ``"csv"``,
``"txt"`` and aliases) or a :class:`~ypbank.formats.BankFormat` instance, plus
caller-owned binary streams. Failures raise
:class:`~ypbank.errors.BankFormatError` subclasses; unknown format names raise
``ValueError``.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import BinaryIO

from .conversion import convert
from .formats import BankFormat, get_format
from .models import Transaction
from .reconciliation import compare


def decode_all(fmt: str | BankFormat, stream: BinaryIO) -> list[Transaction]:
    """Read every record from ``stream`` using ``fmt``."""

    return get_format(fmt).decode_all(stream)


def encode_all(fmt: str | BankFormat, stream: BinaryIO, records: Iterable[Transaction]) -> None:
    """Write ``records`` to ``stream`` using ``fmt``."""

    get_format(fmt).encode_all(stream, records)


__all__ = ["decode_all", "encode_all", "convert", "compare"]
