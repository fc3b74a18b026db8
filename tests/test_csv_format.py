# ruff: noqa: E501
import io
import textwrap

import pytest

from ypbank import CsvFormat, IoFailure, MalformedText
from tests.helpers.samples import decode, encode, make_tx, sample_records

HEADER = "id,kind,fromAccount,toAccount,amount,timestamp,status,description\n"


def _csv(s: str) -> bytes:
    return textwrap.dedent(s).lstrip("\n").encode("utf-8")


def test_snapshot_of_example_record():
    assert encode("csv", [make_tx()]) == (
        HEADER + "1,DEPOSIT,0,42,1000,1234567890,SUCCESS,test\n"
    ).encode()


def test_example_text_decodes_to_example_record():
    data = _csv(
        """
        id,kind,fromAccount,toAccount,amount,timestamp,status,description
        1,DEPOSIT,0,42,1000,1234567890,SUCCESS,test
        """
    )
    assert decode("csv", data) == [make_tx()]


def test_round_trip_preserves_records_and_order():
    records = sample_records()
    assert decode("csv", encode("csv", records)) == records


def test_quoting_round_trips_delimiters_quotes_and_newlines():
    tx = make_tx(description='a,b "quoted"\nsecond line')
    data = encode("csv", [tx])
    assert b'"a,b ""quoted""\nsecond line"' in data
    assert decode("csv", data) == [tx]


@pytest.mark.parametrize("description", ["\r", "x\ry", "a\r\nb", "trailing\r"])
def test_carriage_returns_are_quoted_and_round_trip(description: str):
    tx = make_tx(description=description)
    data = encode("csv", [tx])
    assert data.endswith(('"' + description + '"\n').encode())
    assert decode("csv", data) == [tx]


def test_descriptions_beyond_default_field_limit_round_trip():
    tx = make_tx(description="x" * 200_000)
    assert decode("csv", encode("csv", [tx])) == [tx]


def test_empty_inputs():
    assert decode("csv", b"") == []
    assert encode("csv", []) == HEADER.encode()
    assert decode("csv", HEADER.encode()) == []


def test_first_row_is_always_header():
    # A data-looking first row is consumed as the header, not decoded.
    data = _csv(
        """
        7,TRANSFER,1,2,3,4,PENDING,looks like data
        1,DEPOSIT,0,42,1000,1234567890,SUCCESS,test
        """
    )
    assert decode("csv", data) == [make_tx()]


def test_blank_lines_are_skipped():
    data = (HEADER + "\n1,DEPOSIT,0,42,1000,1234567890,SUCCESS,test\n\n").encode()
    assert decode("csv", data) == [make_tx()]


def test_crlf_line_endings_are_accepted():
    data = (HEADER + "1,DEPOSIT,0,42,1000,1234567890,SUCCESS,test\n").replace("\n", "\r\n")
    assert decode("csv", data.encode()) == [make_tx()]


@pytest.mark.parametrize(
    ("row", "message"),
    [
        ("x,DEPOSIT,0,42,1000,1234567890,SUCCESS,test", "line 2: invalid id: 'x'"),
        ("-1,DEPOSIT,0,42,1000,1234567890,SUCCESS,test", "invalid id: '-1'"),
        ("1,DEPOSIT,0,42,1_000,1234567890,SUCCESS,test", "invalid amount: '1_000'"),
        ("1,DEPOSIT,0, 42,1000,1234567890,SUCCESS,test", "invalid toAccount: ' 42'"),
        ("1,DEPOSIT,0,42,1000,99999999999999999999,SUCCESS,test", "invalid timestamp"),
        ("1,DEPOSIT,abc,42,1000,1234567890,SUCCESS,test", "invalid fromAccount"),
        ("1,Deposit,0,42,1000,1234567890,SUCCESS,test", "unknown tx_type: Deposit"),
        ("1,DEPOSIT,0,42,1000,1234567890,DONE,test", "unknown status: DONE"),
        ("1,DEPOSIT,0,42,1000,1234567890,SUCCESS", "expected 8 columns, got 7"),
        ("1,DEPOSIT,0,42,1000,1234567890,SUCCESS,a,b", "expected 8 columns, got 9"),
    ],
)
def test_malformed_rows_name_the_field(row, message):
    with pytest.raises(MalformedText, match=message):
        decode("csv", (HEADER + row + "\n").encode())


def test_fails_fast_on_first_bad_row():
    data = _csv(
        """
        id,kind,fromAccount,toAccount,amount,timestamp,status,description
        1,DEPOSIT,0,42,1000,1234567890,SUCCESS,test
        2,DEPOSIT,0,42,oops,1234567890,SUCCESS,test
        3,DEPOSIT,0,42,also bad,1234567890,SUCCESS,test
        """
    )
    with pytest.raises(MalformedText, match="line 3: invalid amount: 'oops'"):
        decode("csv", data)


def test_header_width_is_checked():
    with pytest.raises(MalformedText, match="header has 3 columns"):
        decode("csv", b"id,kind,amount\n")


def test_bad_quoting_is_malformed():
    data = (HEADER + '1,DEPOSIT,0,42,1000,1234567890,SUCCESS,"unterminated\n').encode()
    with pytest.raises(MalformedText):
        decode("csv", data)


def test_invalid_utf8_is_malformed():
    data = HEADER.encode() + b"1,DEPOSIT,0,42,1000,1234567890,SUCCESS,\xff\n"
    with pytest.raises(MalformedText, match="UTF-8"):
        decode("csv", data)


def test_stream_is_left_open():
    buf = io.BytesIO()
    CsvFormat().encode_all(buf, [make_tx()])
    assert not buf.closed
    buf.seek(0)
    CsvFormat().decode_all(buf)
    assert not buf.closed


class _FullDisk(io.RawIOBase):
    def writable(self) -> bool:
        return True

    def write(self, b) -> int:
        raise OSError("no space left on device")


def test_write_errors_become_io_failure():
    with pytest.raises(IoFailure, match="no space left"):
        CsvFormat().encode_all(_FullDisk(), [make_tx()])
