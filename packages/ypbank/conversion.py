"""Format-to-format transcoding."""

from __future__ import annotations

from typing import BinaryIO

from .formats import BankFormat, get_format
from .logging_setup import get_logger

_logger = get_logger("ypbank.conversion")


def convert(
    source_format: str | BankFormat,
    source: BinaryIO,
    dest_format: str | BankFormat,
    dest: BinaryIO,
) -> int:
    """Decode every record from ``source`` and re-encode it into ``dest``.

    Field values pass through untouched and order is preserved. Decoding
    completes before anything is written, so a malformed input leaves ``dest``
    untouched; an encode failure partway leaves the records written so far.
    Errors propagate unchanged from the failing codec.

    Returns the number of records written.
    """

    reader = get_format(source_format)
    writer = get_format(dest_format)
    records = reader.decode_all(source)
    writer.encode_all(dest, records)
    _logger.debug("converted %d records from %s to %s", len(records), reader.name, writer.name)
    return len(records)


__all__ = ["convert"]
