"""Pydantic schemas for the hcb_home API."""

from typing import Any

from pydantic import BaseModel, Field

from src.hcb_cache.domain.models import CacheEntry
from src.hcb_common.cents import cents_to_display, optional_cents_to_display
from src.hcb_common.enums import HomeStatus
from src.hcb_home.domain.models import (
    Invitation,
    Organization,
    OrganizationDetail,
    Transaction,
    TransactionPage,
)

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class InvalidateRequest(BaseModel):
    prefix: str = Field(..., min_length=1, description="Cache key prefix to revalidate")


class ConnectivityRequest(BaseModel):
    online: bool


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class TransactionItem(BaseModel):
    id: str
    memo: str
    amount_cents: int
    amount_display: str
    date: str | None
    pending: bool
    missing_receipt: bool

    @classmethod
    def from_domain(cls, tx: Transaction) -> "TransactionItem":
        return cls(
            id=tx.id,
            memo=tx.memo,
            amount_cents=tx.amount_cents,
            amount_display=cents_to_display(tx.amount_cents),
            date=tx.date,
            pending=tx.pending,
            missing_receipt=tx.missing_receipt,
        )


class OrganizationItem(BaseModel):
    id: str
    name: str
    icon: str | None
    pinned: bool
    playground_mode: bool
    balance_cents: int | None
    balance_display: str | None  # None = still loading, render a placeholder
    show_transactions: bool
    transactions: list[TransactionItem]
    has_more_transactions: bool
    transactions_loading: bool

    @classmethod
    def build(
        cls,
        org: Organization,
        detail: OrganizationDetail | None,
        page: TransactionPage | None,
        show_transactions: bool,
        transactions_loading: bool,
    ) -> "OrganizationItem":
        balance = detail.balance_cents if detail is not None else org.balance_cents
        playground = detail.playground_mode if detail is not None else org.playground_mode
        return cls(
            id=org.id,
            name=org.name,
            icon=org.icon,
            pinned=org.pinned,
            playground_mode=playground,
            balance_cents=balance,
            balance_display=optional_cents_to_display(balance),
            show_transactions=show_transactions,
            transactions=[TransactionItem.from_domain(tx) for tx in page.data] if page else [],
            has_more_transactions=page.has_more if page else False,
            transactions_loading=transactions_loading and page is None,
        )


class InvitationItem(BaseModel):
    id: str
    organization_id: str
    organization_name: str
    organization_icon: str | None
    sender_name: str | None

    @classmethod
    def from_domain(cls, invitation: Invitation) -> "InvitationItem":
        return cls(
            id=invitation.id,
            organization_id=invitation.organization.id,
            organization_name=invitation.organization.name,
            organization_icon=invitation.organization.icon,
            sender_name=invitation.sender_name,
        )


class HomeResponse(BaseModel):
    status: HomeStatus
    offline: bool
    is_loading: bool
    organizations: list[OrganizationItem]
    invitations: list[InvitationItem]
    show_pin_hint: bool
    invitation_badge: int | None
    missing_receipt_badge: int | None


class TriggerResponse(BaseModel):
    trigger: str
    accepted: list[str]


class PinToggleResponse(BaseModel):
    entity_id: str
    pinned: bool
    persisted: bool


class InvalidateResponse(BaseModel):
    invalidated: list[str]


class CacheEntryResponse(BaseModel):
    key: str
    has_value: bool
    value: Any
    is_loading: bool
    is_stale: bool
    last_fetched_at: float | None
    error_kind: str | None
    error_message: str | None

    @classmethod
    def from_entry(cls, entry: CacheEntry) -> "CacheEntryResponse":
        error = entry.last_error
        return cls(
            key=entry.key,
            has_value=entry.has_value,
            value=entry.value,
            is_loading=entry.is_loading,
            is_stale=entry.is_stale,
            last_fetched_at=entry.last_fetched_at,
            error_kind=error.kind.value if error else None,
            error_message=error.message if error else None,
        )
