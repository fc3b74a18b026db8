"""Field parsers shared by the two text formats.

Integers are plain decimal (optional sign, ASCII digits only). Python's
``int()`` is more lenient (underscores, surrounding whitespace, non-ASCII
digits), so the token is checked against a pattern first.
"""

from __future__ import annotations

import re

from ..models import I64_MAX, I64_MIN, U64_MAX

_SIGNED_RE = re.compile(r"[+-]?[0-9]+", re.ASCII)
_UNSIGNED_RE = re.compile(r"\+?[0-9]+", re.ASCII)


def parse_u64(raw: str, field: str) -> int:
    if not _UNSIGNED_RE.fullmatch(raw):
        raise ValueError(f"invalid {field}: {raw!r}")
    value = int(raw)
    if value > U64_MAX:
        raise ValueError(f"invalid {field}: {raw!r} (out of range)")
    return value


def parse_i64(raw: str, field: str) -> int:
    if not _SIGNED_RE.fullmatch(raw):
        raise ValueError(f"invalid {field}: {raw!r}")
    value = int(raw)
    if not I64_MIN <= value <= I64_MAX:
        raise ValueError(f"invalid {field}: {raw!r} (out of range)")
    return value


__all__ = ["parse_u64", "parse_i64"]
