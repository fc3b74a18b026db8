import io

import pytest

import ypbank
from ypbank import BinaryFormat, CsvFormat, KeyValueTextFormat, format_for_path, get_format
from tests.helpers.samples import sample_records


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("binary", BinaryFormat),
        ("bin", BinaryFormat),
        (" CSV ", CsvFormat),
        ("txt", KeyValueTextFormat),
        ("text", KeyValueTextFormat),
    ],
)
def test_get_format_resolves_names_and_aliases(name, expected):
    assert isinstance(get_format(name), expected)


def test_get_format_passes_codecs_through():
    codec = CsvFormat()
    assert get_format(codec) is codec


def test_get_format_unknown_name_lists_choices():
    with pytest.raises(ValueError, match=r"unknown format: 'xml'\. Available: binary, csv, txt"):
        get_format("xml")


def test_format_for_path_uses_extension():
    assert get_format("binary") is format_for_path("exports/ledger.BIN")
    assert format_for_path("a.csv").name == "csv"
    with pytest.raises(ValueError, match="cannot infer format from extension '.json'"):
        format_for_path("a.json")


def test_api_round_trip_by_name():
    records = sample_records()
    buf = io.BytesIO()
    ypbank.encode_all("txt", buf, records)
    buf.seek(0)
    assert ypbank.decode_all("txt", buf) == records


def test_empty_stream_decodes_to_nothing():
    for name in ypbank.available_formats():
        assert ypbank.decode_all(name, io.BytesIO(b"")) == []
