"""Domain models for hcb_home — pure dataclasses parsed from API payloads.

The server never sends pin state; ``Organization.pinned`` is derived by
PinnedOrderStore.project() at presentation time.
"""

from dataclasses import dataclass, field
from typing import Any

from src.hcb_common.cents import parse_cents


@dataclass(frozen=True)
class Organization:
    id: str
    name: str
    icon: str | None = None
    balance_cents: int | None = None
    playground_mode: bool = False
    pinned: bool = False

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Organization":
        return cls(
            id=str(payload["id"]),
            name=str(payload.get("name") or ""),
            icon=payload.get("icon") or None,
            balance_cents=parse_cents(payload.get("balance_cents")),
            playground_mode=bool(payload.get("playground_mode", False)),
        )


@dataclass(frozen=True)
class OrganizationDetail:
    """``organizations/{id}`` — the expanded organization with its balance."""

    id: str
    balance_cents: int | None
    playground_mode: bool

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "OrganizationDetail":
        return cls(
            id=str(payload["id"]),
            balance_cents=parse_cents(payload.get("balance_cents")),
            playground_mode=bool(payload.get("playground_mode", False)),
        )


@dataclass(frozen=True)
class Invitation:
    id: str
    organization: Organization
    sender_name: str | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Invitation":
        sender = payload.get("sender") or {}
        return cls(
            id=str(payload["id"]),
            organization=Organization.from_payload(payload["organization"]),
            sender_name=sender.get("name"),
        )


@dataclass(frozen=True)
class Transaction:
    id: str
    memo: str
    amount_cents: int
    date: str | None = None
    pending: bool = False
    missing_receipt: bool = False

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Transaction":
        return cls(
            id=str(payload["id"]),
            memo=str(payload.get("memo") or ""),
            amount_cents=parse_cents(payload.get("amount_cents")) or 0,
            date=payload.get("date"),
            pending=bool(payload.get("pending", False)),
            missing_receipt=bool(payload.get("missing_receipt", False)),
        )


@dataclass(frozen=True)
class TransactionPage:
    data: list[Transaction] = field(default_factory=list)
    has_more: bool = False
    total_count: int | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "TransactionPage":
        return cls(
            data=[Transaction.from_payload(item) for item in payload.get("data") or []],
            has_more=bool(payload.get("has_more", False)),
            total_count=payload.get("total_count"),
        )
