"""HomeService — organizations home screen on top of the sync core.

Owns the resource bindings the home screen needs and turns cache state
into one HomeResponse:

  loading  nothing cached yet, fetch in progress
  offline  nothing cached and the list fetch is failing or the device is offline
  empty    the user genuinely has no organizations and no invitations
  ready    organizations and/or invitations to show

Triggers (focus, pull-to-refresh, prefetch) are gated per stream by the
FetchScheduler; the external "apply" flow only invalidates, so the next
snapshot revalidates without blocking the caller.
"""

import logging
from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from src.context import SyncContext
from src.hcb_cache.application.binding import ResourceBinding, ResourceView
from src.hcb_common.enums import FetchErrorKind, HomeStatus, TriggerReason
from src.hcb_home.application.schemas import (
    HomeResponse,
    InvitationItem,
    OrganizationItem,
)
from src.hcb_home.domain.keys import (
    MISSING_RECEIPTS,
    ORGANIZATIONS_PREFIX,
    STREAM_INVITATIONS,
    STREAM_ORGANIZATION_DETAIL,
    STREAM_ORGANIZATIONS,
    STREAM_PREFETCH,
    STREAM_RECEIPTS,
    STREAM_TRANSACTIONS,
    USER,
    USER_CARDS,
    USER_INVITATIONS,
    USER_ORGANIZATIONS,
    organization_key,
    transactions_key,
)
from src.hcb_home.domain.models import (
    Invitation,
    Organization,
    OrganizationDetail,
    TransactionPage,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Recent activity is shown for every organization when the user has few
TRANSACTIONS_FOR_ALL_MAX = 2
PIN_HINT_MIN = 3


def _parse_items(raw: Any, parser: Callable[[dict[str, Any]], T]) -> list[T]:
    if not isinstance(raw, list):
        return []
    items: list[T] = []
    for payload in raw:
        try:
            items.append(parser(payload))
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            logger.warning("Skipping malformed item %r: %s", payload, exc)
    return items


def _parse_one(raw: Any, parser: Callable[[dict[str, Any]], T]) -> T | None:
    if not isinstance(raw, dict):
        return None
    try:
        return parser(raw)
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        logger.warning("Ignoring malformed payload: %s", exc)
        return None


class HomeService:
    def __init__(self, ctx: SyncContext) -> None:
        self._ctx = ctx
        cache = ctx.cache
        self._organizations = ResourceBinding(
            cache, USER_ORGANIZATIONS, stream=STREAM_ORGANIZATIONS, fallback=[]
        )
        self._invitations = ResourceBinding(
            cache, USER_INVITATIONS, stream=STREAM_INVITATIONS, fallback=[]
        )
        self._missing_receipts = ResourceBinding(cache, MISSING_RECEIPTS, stream=STREAM_RECEIPTS)
        self._details: dict[str, ResourceBinding] = {}
        self._transactions: dict[str, ResourceBinding] = {}
        self._unsubscribe_monitor: Callable[[], None] | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def mount(self) -> None:
        for binding in (self._organizations, self._invitations, self._missing_receipts):
            binding.open()
        if self._unsubscribe_monitor is None:
            self._unsubscribe_monitor = self._ctx.monitor.subscribe(self._on_connectivity)

    def unmount(self) -> None:
        if self._unsubscribe_monitor is not None:
            self._unsubscribe_monitor()
            self._unsubscribe_monitor = None
        for binding in (self._organizations, self._invitations, self._missing_receipts):
            binding.close()
        for bindings in (self._details, self._transactions):
            for binding in bindings.values():
                binding.close()
            bindings.clear()

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    def on_focus(self) -> list[str]:
        return self._reload(TriggerReason.FOCUS)

    def on_refresh(self) -> list[str]:
        return self._reload(TriggerReason.REFRESH)

    def _reload(self, reason: TriggerReason) -> list[str]:
        scheduler = self._ctx.scheduler
        accepted: list[str] = []
        if scheduler.should_fetch(STREAM_ORGANIZATIONS, reason):
            self._organizations.refresh()
            self._ctx.invalidation.invalidate_by_prefix(ORGANIZATIONS_PREFIX)
            accepted.append(STREAM_ORGANIZATIONS)
        if scheduler.should_fetch(STREAM_INVITATIONS, reason):
            self._invitations.refresh()
            accepted.append(STREAM_INVITATIONS)
        return accepted

    def prefetch(self) -> list[str]:
        """Warm user, cards and every organization's detail."""
        if not self._ctx.scheduler.should_fetch(STREAM_PREFETCH, TriggerReason.PREFETCH):
            return []
        keys = [USER, USER_CARDS]
        keys += [organization_key(org.id) for org in self._organization_list()]
        for key in keys:
            self._ctx.cache.preload(key, stream=STREAM_PREFETCH)
        return keys

    def after_external_flow(self) -> list[str]:
        """Membership may have changed in the browser; revalidate the lists."""
        return self._ctx.invalidation.invalidate_keys(USER_ORGANIZATIONS, USER_INVITATIONS)

    async def toggle_pin(self, org_id: str) -> bool:
        return await self._ctx.pins.toggle(org_id)

    def _on_connectivity(self, online: bool) -> None:
        if not online:
            return
        reloaded = self._reload(TriggerReason.RECONNECT)
        logger.info("Back online, revalidating home lists (reloaded: %s)", reloaded or "none")
        # Streams still in cooldown fall back to a deduped revalidation
        self._organizations.revalidate()
        self._invitations.revalidate()

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def snapshot(self) -> HomeResponse:
        orgs_view = self._organizations.read()
        invites_view = self._invitations.read()
        receipts_view = self._missing_receipts.read()

        organizations = self._ctx.pins.project(
            _parse_items(orgs_view.data, Organization.from_payload)
        )
        invitations = _parse_items(invites_view.data, Invitation.from_payload)
        offline = not self._ctx.monitor.is_online or self._is_unreachable(orgs_view)

        status = self._status(orgs_view, organizations, invitations, offline)
        items = self._organization_items(organizations) if status is HomeStatus.READY else []
        receipts = _parse_one(receipts_view.data, TransactionPage.from_payload)

        return HomeResponse(
            status=status,
            offline=offline,
            is_loading=orgs_view.is_loading,
            organizations=items,
            invitations=[InvitationItem.from_domain(inv) for inv in invitations],
            show_pin_hint=len(organizations) >= PIN_HINT_MIN,
            invitation_badge=len(invitations) or None,
            missing_receipt_badge=self._receipt_badge(receipts),
        )

    @staticmethod
    def _status(
        orgs_view: ResourceView,
        organizations: list[Organization],
        invitations: list[Invitation],
        offline: bool,
    ) -> HomeStatus:
        if not orgs_view.has_data:
            if offline or orgs_view.error is not None:
                return HomeStatus.OFFLINE
            return HomeStatus.LOADING
        if not organizations and not invitations:
            return HomeStatus.EMPTY
        return HomeStatus.READY

    @staticmethod
    def _is_unreachable(view: ResourceView) -> bool:
        return view.error is not None and view.error.kind is FetchErrorKind.NETWORK_UNREACHABLE

    @staticmethod
    def _receipt_badge(page: TransactionPage | None) -> int | None:
        if page is None:
            return None
        count = page.total_count if page.total_count is not None else len(page.data)
        return count or None

    def _organization_list(self) -> list[Organization]:
        return _parse_items(self._organizations.read().data, Organization.from_payload)

    def _organization_items(self, organizations: list[Organization]) -> list[OrganizationItem]:
        show_all = len(organizations) <= TRANSACTIONS_FOR_ALL_MAX
        with_activity = {org.id for org in organizations if show_all or org.pinned}
        self._sync_bindings(
            self._details, (org.id for org in organizations),
            organization_key, STREAM_ORGANIZATION_DETAIL,
        )
        self._sync_bindings(
            self._transactions, with_activity, transactions_key, STREAM_TRANSACTIONS
        )

        items: list[OrganizationItem] = []
        for org in organizations:
            detail = _parse_one(self._details[org.id].read().data, OrganizationDetail.from_payload)
            page: TransactionPage | None = None
            tx_loading = False
            if org.id in with_activity:
                tx_view = self._transactions[org.id].read()
                page = _parse_one(tx_view.data, TransactionPage.from_payload)
                tx_loading = tx_view.is_loading
            items.append(
                OrganizationItem.build(
                    org,
                    detail,
                    page,
                    show_transactions=org.id in with_activity,
                    transactions_loading=tx_loading,
                )
            )
        return items

    def _sync_bindings(
        self,
        bindings: dict[str, ResourceBinding],
        wanted_ids: Iterable[str],
        key_for: Callable[[str], str],
        stream: str,
    ) -> None:
        wanted = set(wanted_ids)
        for org_id in list(bindings):
            if org_id not in wanted:
                bindings.pop(org_id).close()
        for org_id in wanted:
            if org_id not in bindings:
                binding = ResourceBinding(self._ctx.cache, key_for(org_id), stream=stream)
                binding.open()
                bindings[org_id] = binding
