"""Data models and type aliases for ``ypbank``.

Three groups live here:

- the record model (:class:`Transaction` plus the closed :class:`TxKind` and
  :class:`TxStatus` enumerations and their byte-code/token mappings);
- reconciliation results (:class:`RecordDiff`, :class:`Identical`,
  :class:`Mismatch` and the :data:`CompareResult` alias);
- :class:`ComparisonReport`, a pydantic DTO used to render a compare result as
  JSON.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import NamedTuple, TypeAlias

from pydantic import BaseModel, ConfigDict

U64_MAX = 2**64 - 1
I64_MIN = -(2**63)
I64_MAX = 2**63 - 1

# ---------------------------------------------------------------------------
# Closed enumerations
# ---------------------------------------------------------------------------


class TxKind(str, Enum):
    """Transaction type. Values are the canonical text tokens."""

    DEPOSIT = "DEPOSIT"
    TRANSFER = "TRANSFER"
    WITHDRAWAL = "WITHDRAWAL"

    @property
    def code(self) -> int:
        return _KIND_BY_CODE.index(self)

    @classmethod
    def from_code(cls, code: int) -> TxKind:
        if 0 <= code < len(_KIND_BY_CODE):
            return _KIND_BY_CODE[code]
        raise ValueError(f"unknown tx_type byte: {code}")

    @classmethod
    def from_token(cls, token: str) -> TxKind:
        try:
            return cls(token)
        except ValueError:
            raise ValueError(f"unknown tx_type: {token}") from None


class TxStatus(str, Enum):
    """Transaction outcome. Values are the canonical text tokens."""

    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"
    PENDING = "PENDING"

    @property
    def code(self) -> int:
        return _STATUS_BY_CODE.index(self)

    @classmethod
    def from_code(cls, code: int) -> TxStatus:
        if 0 <= code < len(_STATUS_BY_CODE):
            return _STATUS_BY_CODE[code]
        raise ValueError(f"unknown status byte: {code}")

    @classmethod
    def from_token(cls, token: str) -> TxStatus:
        try:
            return cls(token)
        except ValueError:
            raise ValueError(f"unknown status: {token}") from None


# Byte code is the position in these tuples (wire contract; do not reorder).
_KIND_BY_CODE: tuple[TxKind, ...] = (TxKind.DEPOSIT, TxKind.TRANSFER, TxKind.WITHDRAWAL)
_STATUS_BY_CODE: tuple[TxStatus, ...] = (TxStatus.SUCCESS, TxStatus.FAILURE, TxStatus.PENDING)


# ---------------------------------------------------------------------------
# Core record
# ---------------------------------------------------------------------------


def _check_int(name: str, value: object, lo: int, hi: int) -> None:
    # Booleans are ints; disallow them explicitly.
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Transaction.{name} must be an int, got {type(value).__name__}")
    if not lo <= value <= hi:
        raise ValueError(f"Transaction.{name} out of range: {value}")


@dataclass(frozen=True, slots=True)
class Transaction:
    """A single ledger event.

    Attributes
    ----------
    id:
        Unsigned 64-bit key, unique within a record set by convention only.
    kind:
        :class:`TxKind`.
    from_account, to_account:
        Signed 64-bit account ids. ``0`` means "no counterparty" (a system
        deposit has ``from_account == 0``, a withdrawal ``to_account == 0``);
        this is not enforced.
    amount:
        Signed 64-bit amount in the smallest currency unit. Sign is not
        constrained.
    timestamp:
        Milliseconds since the Unix epoch (signed 64-bit).
    status:
        :class:`TxStatus`.
    description:
        Free text. Each format bounds what it can carry (the binary format
        caps the UTF-8 encoding at 4096 bytes, the key-value text format
        cannot carry line breaks).
    """

    id: int
    kind: TxKind
    from_account: int
    to_account: int
    amount: int
    timestamp: int
    status: TxStatus
    description: str

    def __post_init__(self) -> None:
        _check_int("id", self.id, 0, U64_MAX)
        for name in ("from_account", "to_account", "amount", "timestamp"):
            _check_int(name, getattr(self, name), I64_MIN, I64_MAX)
        if not isinstance(self.kind, TxKind):
            raise ValueError(f"Transaction.kind must be a TxKind, got {self.kind!r}")
        if not isinstance(self.status, TxStatus):
            raise ValueError(f"Transaction.status must be a TxStatus, got {self.status!r}")
        if not isinstance(self.description, str):
            raise ValueError("Transaction.description must be a str")
        try:
            self.description.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise ValueError(f"Transaction.description is not valid UTF-8 text: {exc}") from None

    def evolve(self, **changes: object) -> Transaction:
        """Return a copy with ``changes`` applied (validated like a new record)."""

        return replace(self, **changes)


FIELD_NAMES: tuple[str, ...] = tuple(f.name for f in fields(Transaction))


# ---------------------------------------------------------------------------
# Reconciliation results
# ---------------------------------------------------------------------------


class RecordDiff(NamedTuple):
    """Two records sharing an id whose values are not equal."""

    id: int
    left: Transaction
    """The record from the first source."""

    right: Transaction
    """The record from the second source."""

    def changed_fields(self) -> list[str]:
        return [
            name for name in FIELD_NAMES if getattr(self.left, name) != getattr(self.right, name)
        ]


@dataclass(frozen=True, slots=True)
class Identical:
    """Both sources hold the same records (matched by id)."""


@dataclass(frozen=True, slots=True)
class Mismatch:
    """The sources differ.

    Order within each list follows dict iteration of the indexed side and is
    not a contract; use :meth:`sorted` before display.
    """

    missing_in_a: list[int]
    """Ids present in the second source but absent from the first."""

    missing_in_b: list[int]
    """Ids present in the first source but absent from the second."""

    differing: list[RecordDiff]

    def sorted(self) -> Mismatch:
        return Mismatch(
            missing_in_a=sorted(self.missing_in_a),
            missing_in_b=sorted(self.missing_in_b),
            differing=sorted(self.differing, key=lambda d: d.id),
        )


CompareResult: TypeAlias = Identical | Mismatch


# ---------------------------------------------------------------------------
# JSON report DTO
# ---------------------------------------------------------------------------


class DifferingRecord(BaseModel):
    model_config = ConfigDict(strict=True, extra="forbid")
    id: int
    changed_fields: list[str]


class ComparisonReport(BaseModel):
    """Serializable summary of a compare run (ids sorted ascending)."""

    model_config = ConfigDict(strict=True, extra="forbid")

    identical: bool
    missing_in_first: list[int]
    missing_in_second: list[int]
    differing: list[DifferingRecord]

    @classmethod
    def from_result(cls, result: CompareResult) -> ComparisonReport:
        if isinstance(result, Identical):
            return cls(identical=True, missing_in_first=[], missing_in_second=[], differing=[])
        ordered = result.sorted()
        return cls(
            identical=False,
            missing_in_first=ordered.missing_in_a,
            missing_in_second=ordered.missing_in_b,
            differing=[
                DifferingRecord(id=d.id, changed_fields=d.changed_fields()) for d in ordered.differing
            ],
        )


Transactions: TypeAlias = Sequence[Transaction]


__all__ = [
    "TxKind",
    "TxStatus",
    "Transaction",
    "Transactions",
    "FIELD_NAMES",
    "RecordDiff",
    "Identical",
    "Mismatch",
    "CompareResult",
    "DifferingRecord",
    "ComparisonReport",
]
