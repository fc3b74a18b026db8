"""Codec contract shared by the binary, CSV and key-value text formats.

A codec turns a binary stream into a fully materialized ``list`` of
:class:`~ypbank.models.Transaction` and back. Streams belong to the caller:
codecs never open, close or seek them.

Contract
--------
- ``decode_all`` consumes the whole stream, keeps source order, and raises on
  the first malformed record (no partial result is returned). An empty stream
  yields ``[]``.
- ``encode_all`` writes records in the given order. Each record is rendered
  in memory first and handed to the stream in a single ``write`` call, so a
  failure never leaves half a record from the encoder itself (records already
  written are not rolled back).
"""

from __future__ import annotations

import abc
import io
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from typing import BinaryIO

from ..errors import IoFailure
from ..models import Transaction


class BankFormat(abc.ABC):
    """Base class for record codecs."""

    #: Registry name (``"binary"``, ``"csv"``, ``"txt"``).
    name: str = ""
    #: Conventional file extension, used by the CLI to infer a format.
    extension: str = ""

    @abc.abstractmethod
    def decode_all(self, stream: BinaryIO) -> list[Transaction]: ...

    @abc.abstractmethod
    def encode_all(self, stream: BinaryIO, records: Iterable[Transaction]) -> None: ...

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"


@contextmanager
def text_view(stream: BinaryIO) -> Iterator[io.TextIOWrapper]:
    """Wrap ``stream`` as UTF-8 text without taking ownership of it.

    ``newline=""`` keeps line endings untranslated (required by :mod:`csv`).
    The wrapper is detached on exit so closing/collecting it never closes the
    caller's stream.
    """

    wrapper = io.TextIOWrapper(stream, encoding="utf-8", newline="", write_through=True)
    try:
        yield wrapper
    finally:
        wrapper.detach()


def write_chunk(stream: BinaryIO | io.TextIOWrapper, chunk: bytes | str) -> None:
    """Write one fully rendered record, mapping stream failures to ``IoFailure``."""

    try:
        stream.write(chunk)  # type: ignore[arg-type]
    except OSError as exc:
        raise IoFailure(f"write failed: {exc}") from exc


__all__ = ["BankFormat", "text_view", "write_chunk"]
