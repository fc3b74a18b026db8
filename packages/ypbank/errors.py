"""Error taxonomy shared by every codec and by the conversion/compare pipeline.

All errors derive from :class:`BankFormatError` so callers (the CLI, or any
host application) can catch a single type and surface ``str(exc)``.
"""

from __future__ import annotations


class BankFormatError(Exception):
    """Base class for all decode/encode failures."""


class IoFailure(BankFormatError):
    """The underlying stream failed, or ended in the middle of a record."""


class MalformedText(BankFormatError):
    """A text codec could not parse a field; the message names the field."""


class InvalidBinaryFraming(BankFormatError):
    """The binary stream is structurally invalid (magic, enum byte, length, UTF-8)."""


__all__ = [
    "BankFormatError",
    "IoFailure",
    "MalformedText",
    "InvalidBinaryFraming",
]
