"""Key-value block text format.

Each record is a block introduced by a ``#`` comment line::

    # Record 1 (DEPOSIT)
    TX_ID: 1
    TX_TYPE: DEPOSIT
    FROM_USER_ID: 0
    TO_USER_ID: 42
    AMOUNT: 1000
    TIMESTAMP: 1234567890
    STATUS: SUCCESS
    DESCRIPTION: "test"

Decoding rules
--------------
- Lines are stripped. A ``#`` line closes the pending block (if it holds any
  key) and starts a new one; end of input closes the last block.
- Other lines split on the first ``:`` into key and value (both stripped). A
  value wrapped in one pair of double quotes loses that pair.
- Blank lines and lines without ``:`` are ignored, as are unknown keys. A
  repeated key overwrites the earlier value.
- Every key in :data:`KEYS` is required when a block closes.

A description containing a line break cannot be represented and is rejected
on encode.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import BinaryIO

from ..errors import IoFailure, MalformedText
from ..logging_setup import get_logger
from ..models import Transaction, TxKind, TxStatus
from .base import BankFormat, text_view, write_chunk
from .fields import parse_i64, parse_u64

KEYS: tuple[str, ...] = (
    "TX_ID",
    "TX_TYPE",
    "FROM_USER_ID",
    "TO_USER_ID",
    "AMOUNT",
    "TIMESTAMP",
    "STATUS",
    "DESCRIPTION",
)

_logger = get_logger("ypbank.formats.kv_text")


def _unquote(value: str) -> str:
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        return value[1:-1]
    return value


def _block_to_transaction(block: Mapping[str, str], *, index: int) -> Transaction:
    for key in KEYS:
        if key not in block:
            raise MalformedText(f"record {index}: missing field: {key}")
    try:
        return Transaction(
            id=parse_u64(block["TX_ID"], "TX_ID"),
            kind=TxKind.from_token(block["TX_TYPE"]),
            from_account=parse_i64(block["FROM_USER_ID"], "FROM_USER_ID"),
            to_account=parse_i64(block["TO_USER_ID"], "TO_USER_ID"),
            amount=parse_i64(block["AMOUNT"], "AMOUNT"),
            timestamp=parse_i64(block["TIMESTAMP"], "TIMESTAMP"),
            status=TxStatus.from_token(block["STATUS"]),
            description=block["DESCRIPTION"],
        )
    except ValueError as exc:
        raise MalformedText(f"record {index}: {exc}") from None


def render_record(tx: Transaction, *, number: int) -> str:
    if "\n" in tx.description or "\r" in tx.description:
        raise MalformedText(
            f"record {number}: DESCRIPTION contains a line break, which this format cannot hold"
        )
    lines = [
        f"# Record {number} ({tx.kind.value})",
        f"TX_ID: {tx.id}",
        f"TX_TYPE: {tx.kind.value}",
        f"FROM_USER_ID: {tx.from_account}",
        f"TO_USER_ID: {tx.to_account}",
        f"AMOUNT: {tx.amount}",
        f"TIMESTAMP: {tx.timestamp}",
        f"STATUS: {tx.status.value}",
        f'DESCRIPTION: "{tx.description}"',
        "",
    ]
    return "\n".join(lines) + "\n"


class KeyValueTextFormat(BankFormat):
    name = "txt"
    extension = ".txt"

    def decode_all(self, stream: BinaryIO) -> list[Transaction]:
        records: list[Transaction] = []
        current: dict[str, str] = {}
        with text_view(stream) as text:
            try:
                for raw_line in text:
                    line = raw_line.strip()
                    if line.startswith("#"):
                        if current:
                            records.append(_block_to_transaction(current, index=len(records) + 1))
                            current = {}
                        continue
                    key, sep, value = line.partition(":")
                    if not sep:
                        continue
                    current[key.strip()] = _unquote(value.strip())
            except UnicodeDecodeError as exc:
                raise MalformedText(f"input is not valid UTF-8: {exc}") from None
            except OSError as exc:
                raise IoFailure(f"read failed: {exc}") from exc
        if current:
            records.append(_block_to_transaction(current, index=len(records) + 1))
        _logger.debug("decoded %d txt records", len(records))
        return records

    def encode_all(self, stream: BinaryIO, records: Iterable[Transaction]) -> None:
        count = 0
        with text_view(stream) as text:
            for number, tx in enumerate(records, start=1):
                write_chunk(text, render_record(tx, number=number))
                count = number
        _logger.debug("encoded %d txt records", count)


__all__ = ["KeyValueTextFormat", "KEYS", "render_record"]
