import io
import struct

import pytest

from ypbank import BinaryFormat, InvalidBinaryFraming, IoFailure, TxKind, TxStatus
from ypbank.formats.binary import MAGIC, MIN_RECORD_SIZE
from tests.helpers.samples import decode, encode, make_tx, sample_records


def _record(
    *,
    magic: bytes = MAGIC,
    record_size: int | None = None,
    tx_id: int = 1,
    kind: int = 0,
    from_account: int = 0,
    to_account: int = 42,
    amount: int = 1000,
    timestamp: int = 1234567890,
    status: int = 0,
    description: bytes = b"test",
    desc_len: int | None = None,
) -> bytes:
    """Hand-assemble one record so tests can corrupt individual fields."""

    n = len(description) if desc_len is None else desc_len
    size = MIN_RECORD_SIZE + len(description) if record_size is None else record_size
    return (
        magic
        + struct.pack(">I", size)
        + struct.pack(">Q", tx_id)
        + bytes([kind])
        + struct.pack(">q", from_account)
        + struct.pack(">q", to_account)
        + struct.pack(">q", amount)
        + struct.pack(">q", timestamp)
        + bytes([status])
        + struct.pack(">I", n)
        + description
    )


def test_encode_matches_wire_layout():
    assert encode("binary", [make_tx()]) == _record()
    assert MIN_RECORD_SIZE == 46


def test_round_trip_preserves_records_and_order():
    records = sample_records()
    assert decode("binary", encode("binary", records)) == records


def test_empty_stream_is_empty_ledger():
    assert decode("binary", b"") == []
    assert encode("binary", []) == b""


def test_negative_values_use_twos_complement():
    data = encode("binary", [make_tx(from_account=-1, amount=-2)])
    assert data[17:25] == b"\xff" * 8
    assert decode("binary", data)[0].amount == -2


def test_bad_magic_is_rejected_without_records():
    data = _record(magic=b"YPBX") + _record(tx_id=2)
    with pytest.raises(InvalidBinaryFraming, match="invalid magic"):
        decode("binary", data)


def test_bad_magic_after_good_record_halts():
    data = _record() + b"\x00" * 60
    with pytest.raises(InvalidBinaryFraming, match="invalid magic: 00 00 00 00"):
        decode("binary", data)


def test_oversized_description_length_is_named():
    data = _record(description=b"", desc_len=4097)
    with pytest.raises(InvalidBinaryFraming, match="description length 4097 exceeds"):
        decode("binary", data)


def test_description_at_cap_is_accepted():
    tx = make_tx(description="x" * 4096)
    assert decode("binary", encode("binary", [tx])) == [tx]


def test_encode_refuses_description_over_cap_before_writing():
    buf = io.BytesIO()
    ok = make_tx()
    too_long = make_tx(id=2, description="é" * 2049)  # 4098 bytes
    with pytest.raises(InvalidBinaryFraming, match="4098"):
        BinaryFormat().encode_all(buf, [ok, too_long])
    # First record is intact, nothing of the second was written.
    assert buf.getvalue() == _record()


@pytest.mark.parametrize(
    ("overrides", "message"),
    [
        ({"kind": 3}, "unknown tx_type byte: 3"),
        ({"status": 9}, "unknown status byte: 9"),
        ({"record_size": 45}, "record size 45 is below minimum 46"),
        ({"description": b"\xff\xfe"}, "not valid UTF-8"),
    ],
)
def test_invalid_fields_raise_framing_error(overrides, message):
    with pytest.raises(InvalidBinaryFraming, match=message):
        decode("binary", _record(**overrides))


def test_declared_size_mismatch_is_accepted():
    data = _record(record_size=1000)
    assert decode("binary", data) == [make_tx()]


@pytest.mark.parametrize("cut", [1, 3])
def test_partial_magic_is_io_failure(cut):
    with pytest.raises(IoFailure, match="magic"):
        decode("binary", _record() + MAGIC[:cut])


@pytest.mark.parametrize("cut", [5, 30, 54, 57])
def test_truncated_record_is_io_failure(cut):
    with pytest.raises(IoFailure, match="unexpected end of stream"):
        decode("binary", _record()[:cut])


class _Trickle(io.RawIOBase):
    """Readable stream that returns at most one byte per read call."""

    def __init__(self, data: bytes) -> None:
        self._data = io.BytesIO(data)

    def readable(self) -> bool:
        return True

    def read(self, size: int = -1) -> bytes:
        return self._data.read(min(size, 1) if size and size > 0 else 1)


def test_short_reads_are_reassembled():
    records = sample_records()
    assert BinaryFormat().decode_all(_Trickle(encode("binary", records))) == records


class _Broken(io.RawIOBase):
    def readable(self) -> bool:
        return True

    def read(self, size: int = -1) -> bytes:
        raise OSError("device gone")


def test_stream_errors_become_io_failure():
    with pytest.raises(IoFailure, match="device gone"):
        BinaryFormat().decode_all(_Broken())


def test_decoded_enums_are_members():
    tx = decode("binary", _record(kind=1, status=2))[0]
    assert tx.kind is TxKind.TRANSFER
    assert tx.status is TxStatus.PENDING
