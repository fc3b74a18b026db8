"""Delimited table text format (CSV).

Header (exact, written once before any record)::

    id,kind,fromAccount,toAccount,amount,timestamp,status,description

Parsing follows RFC 4180 rules via the stdlib :mod:`csv` module, so a
description containing commas, double quotes or line breaks round-trips
exactly. On decode the first non-blank row is always the header and is never
read as data; its names are not checked, only its width. Blank rows are
skipped.
"""

from __future__ import annotations

import csv
import io
import sys
from collections.abc import Iterable, Sequence
from typing import BinaryIO

from ..errors import IoFailure, MalformedText
from ..logging_setup import get_logger
from ..models import Transaction, TxKind, TxStatus
from .base import BankFormat, text_view, write_chunk
from .fields import parse_i64, parse_u64

HEADER: tuple[str, ...] = (
    "id",
    "kind",
    "fromAccount",
    "toAccount",
    "amount",
    "timestamp",
    "status",
    "description",
)

_logger = get_logger("ypbank.formats.csv_table")

# Descriptions are unbounded; lift the stdlib default of 128 KiB per field.
_FIELD_SIZE_LIMIT = min(sys.maxsize, 2**31 - 1)


def _row_to_transaction(row: Sequence[str], *, line: int) -> Transaction:
    if len(row) != len(HEADER):
        raise MalformedText(f"line {line}: expected {len(HEADER)} columns, got {len(row)}")
    raw_id, raw_kind, raw_from, raw_to, raw_amount, raw_ts, raw_status, description = row
    try:
        return Transaction(
            id=parse_u64(raw_id, "id"),
            kind=TxKind.from_token(raw_kind),
            from_account=parse_i64(raw_from, "fromAccount"),
            to_account=parse_i64(raw_to, "toAccount"),
            amount=parse_i64(raw_amount, "amount"),
            timestamp=parse_i64(raw_ts, "timestamp"),
            status=TxStatus.from_token(raw_status),
            description=description,
        )
    except ValueError as exc:
        raise MalformedText(f"line {line}: {exc}") from None


def _render_row(fields: Sequence[object]) -> str:
    # The writer only quotes characters of its line terminator, so render with
    # "\r\n" to get a bare "\r" quoted too, then end the row with "\n".
    buf = io.StringIO()
    csv.writer(buf, lineterminator="\r\n").writerow(fields)
    return buf.getvalue()[:-2] + "\n"


def render_record(tx: Transaction) -> str:
    return _render_row(
        (
            tx.id,
            tx.kind.value,
            tx.from_account,
            tx.to_account,
            tx.amount,
            tx.timestamp,
            tx.status.value,
            tx.description,
        )
    )


class CsvFormat(BankFormat):
    name = "csv"
    extension = ".csv"

    def decode_all(self, stream: BinaryIO) -> list[Transaction]:
        records: list[Transaction] = []
        with text_view(stream) as text:
            csv.field_size_limit(_FIELD_SIZE_LIMIT)
            reader = csv.reader(text, strict=True)
            header: list[str] | None = None
            try:
                for row in reader:
                    if not row:
                        continue
                    if header is None:
                        header = row
                        if len(header) != len(HEADER):
                            raise MalformedText(
                                f"line {reader.line_num}: header has {len(header)} columns, "
                                f"expected {len(HEADER)}"
                            )
                        continue
                    records.append(_row_to_transaction(row, line=reader.line_num))
            except csv.Error as exc:
                raise MalformedText(f"line {reader.line_num}: {exc}") from None
            except UnicodeDecodeError as exc:
                raise MalformedText(f"input is not valid UTF-8: {exc}") from None
            except OSError as exc:
                raise IoFailure(f"read failed: {exc}") from exc
        _logger.debug("decoded %d csv records", len(records))
        return records

    def encode_all(self, stream: BinaryIO, records: Iterable[Transaction]) -> None:
        count = 0
        with text_view(stream) as text:
            write_chunk(text, _render_row(HEADER))
            for tx in records:
                write_chunk(text, render_record(tx))
                count += 1
        _logger.debug("encoded %d csv records", count)


__all__ = ["CsvFormat", "HEADER", "render_record"]
