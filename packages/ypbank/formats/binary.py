"""Length-framed binary format.

Every record is self-framed by a 4-byte magic token followed by a fixed
header and a variable-length UTF-8 description. All integers are big-endian.

=============  =====  ===============================================
Field          Bytes  Notes
=============  =====  ===============================================
magic          4      ``59 50 42 4E`` (``b"YPBN"``)
record_size    4      u32, body length; must be >= 46
id             8      u64
kind           1      byte code (:attr:`TxKind.code`)
from_account   8      i64 (two's complement)
to_account     8      i64
amount         8      i64
timestamp      8      i64
status         1      byte code (:attr:`TxStatus.code`)
desc_len       4      u32, must be <= 4096
description    n      raw UTF-8 bytes
=============  =====  ===============================================

``record_size`` is range-checked but not used to bound the reads: fields are
read at their fixed offsets. A declared size that disagrees with the encoded
body is accepted and reported at DEBUG level.
"""

from __future__ import annotations

import struct
from collections.abc import Iterable
from typing import BinaryIO

from ..errors import InvalidBinaryFraming, IoFailure
from ..logging_setup import get_logger
from ..models import Transaction, TxKind, TxStatus
from .base import BankFormat, write_chunk

MAGIC = b"\x59\x50\x42\x4e"
MAX_DESCRIPTION_BYTES = 4096

# record_size .. desc_len, after the magic
_HEADER = struct.Struct(">IQBqqqqBI")
# Body = everything after record_size: 8+1+8+8+8+8+1+4 fixed bytes + description
MIN_RECORD_SIZE = _HEADER.size - 4

_logger = get_logger("ypbank.formats.binary")


def _read_exact(stream: BinaryIO, n: int, *, what: str) -> bytes:
    """Read exactly ``n`` bytes, looping over short reads.

    Returns fewer bytes only at end of stream; the caller decides whether that
    is a clean stop or a truncation.
    """

    chunks: list[bytes] = []
    remaining = n
    while remaining > 0:
        try:
            chunk = stream.read(remaining)
        except OSError as exc:
            raise IoFailure(f"read failed while reading {what}: {exc}") from exc
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def _require(stream: BinaryIO, n: int, *, what: str) -> bytes:
    data = _read_exact(stream, n, what=what)
    if len(data) != n:
        raise IoFailure(f"unexpected end of stream in {what}: expected {n} bytes, got {len(data)}")
    return data


class BinaryFormat(BankFormat):
    name = "binary"
    extension = ".bin"

    def decode_all(self, stream: BinaryIO) -> list[Transaction]:
        records: list[Transaction] = []
        while True:
            magic = _read_exact(stream, len(MAGIC), what="magic")
            if not magic:
                break
            if len(magic) != len(MAGIC):
                raise IoFailure(
                    f"unexpected end of stream in magic: expected {len(MAGIC)} bytes, "
                    f"got {len(magic)}"
                )
            if magic != MAGIC:
                raise InvalidBinaryFraming(f"invalid magic: {magic.hex(' ')}")
            records.append(self._decode_record(stream, index=len(records) + 1))
        _logger.debug("decoded %d binary records", len(records))
        return records

    def _decode_record(self, stream: BinaryIO, *, index: int) -> Transaction:
        header = _require(stream, _HEADER.size, what=f"record {index} header")
        (
            record_size,
            tx_id,
            kind_code,
            from_account,
            to_account,
            amount,
            timestamp,
            status_code,
            desc_len,
        ) = _HEADER.unpack(header)

        if record_size < MIN_RECORD_SIZE:
            raise InvalidBinaryFraming(
                f"record {index}: record size {record_size} is below minimum {MIN_RECORD_SIZE}"
            )
        try:
            kind = TxKind.from_code(kind_code)
            status = TxStatus.from_code(status_code)
        except ValueError as exc:
            raise InvalidBinaryFraming(f"record {index}: {exc}") from None
        if desc_len > MAX_DESCRIPTION_BYTES:
            raise InvalidBinaryFraming(
                f"record {index}: description length {desc_len} exceeds "
                f"maximum of {MAX_DESCRIPTION_BYTES} bytes"
            )

        raw_desc = _require(stream, desc_len, what=f"record {index} description")
        try:
            description = raw_desc.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidBinaryFraming(
                f"record {index}: description is not valid UTF-8: {exc}"
            ) from None

        if record_size != MIN_RECORD_SIZE + desc_len:
            _logger.debug(
                "record %d declares size %d but encodes %d body bytes; accepting",
                index,
                record_size,
                MIN_RECORD_SIZE + desc_len,
            )

        return Transaction(
            id=tx_id,
            kind=kind,
            from_account=from_account,
            to_account=to_account,
            amount=amount,
            timestamp=timestamp,
            status=status,
            description=description,
        )

    def encode_all(self, stream: BinaryIO, records: Iterable[Transaction]) -> None:
        count = 0
        for tx in records:
            write_chunk(stream, encode_record(tx))
            count += 1
        _logger.debug("encoded %d binary records", count)


def encode_record(tx: Transaction) -> bytes:
    """Render one framed record, rejecting descriptions the reader would refuse."""

    desc = tx.description.encode("utf-8")
    if len(desc) > MAX_DESCRIPTION_BYTES:
        raise InvalidBinaryFraming(
            f"record id {tx.id}: description length {len(desc)} exceeds "
            f"maximum of {MAX_DESCRIPTION_BYTES} bytes"
        )
    header = _HEADER.pack(
        MIN_RECORD_SIZE + len(desc),
        tx.id,
        tx.kind.code,
        tx.from_account,
        tx.to_account,
        tx.amount,
        tx.timestamp,
        tx.status.code,
        len(desc),
    )
    return MAGIC + header + desc


__all__ = [
    "BinaryFormat",
    "MAGIC",
    "MAX_DESCRIPTION_BYTES",
    "MIN_RECORD_SIZE",
    "encode_record",
]
