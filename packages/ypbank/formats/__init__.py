"""Record codecs and the name registry used by the API and CLI.

Usage
-----
codec = get_format("csv")            # -> BankFormat
codec = format_for_path("out.bin")   # -> BinaryFormat (by extension)
"""

from __future__ import annotations

from os import PathLike
from pathlib import Path

from .base import BankFormat
from .binary import BinaryFormat
from .csv_table import CsvFormat
from .kv_text import KeyValueTextFormat

_FORMATS: dict[str, BankFormat] = {
    codec.name: codec for codec in (BinaryFormat(), CsvFormat(), KeyValueTextFormat())
}

_ALIASES: dict[str, str] = {
    "bin": "binary",
    "text": "txt",
}


def available_formats() -> list[str]:
    return sorted(_FORMATS)


def get_format(name: str | BankFormat) -> BankFormat:
    """Resolve a registry name (or alias) to its codec; codecs pass through."""

    if isinstance(name, BankFormat):
        return name
    key = name.strip().lower()
    key = _ALIASES.get(key, key)
    try:
        return _FORMATS[key]
    except KeyError:
        raise ValueError(
            f"unknown format: {name!r}. Available: {', '.join(available_formats())}"
        ) from None


def format_for_path(path: str | PathLike[str]) -> BankFormat:
    """Infer a codec from a file extension (``.bin``, ``.csv``, ``.txt``)."""

    suffix = Path(path).suffix.lower()
    for codec in _FORMATS.values():
        if codec.extension == suffix:
            return codec
    raise ValueError(f"cannot infer format from extension {suffix!r} of {str(path)!r}")


__all__ = [
    "BankFormat",
    "BinaryFormat",
    "CsvFormat",
    "KeyValueTextFormat",
    "available_formats",
    "get_format",
    "format_for_path",
]
