"""Cache keys and fetch streams used by the home screen.

Keys are API paths relative to API_BASE_URL. Everything about one
organization lives under ``organizations/{id}`` so a single prefix
invalidation refreshes balances and activity together.
"""

USER = "user"
USER_CARDS = "user/cards"
USER_ORGANIZATIONS = "user/organizations"
USER_INVITATIONS = "user/invitations"
MISSING_RECEIPTS = "user/transactions/missing_receipt"

ORGANIZATIONS_PREFIX = "organizations"

RECENT_TRANSACTIONS_LIMIT = 5

# Fetch streams (scheduler cooldowns and error debounce are per stream)
STREAM_ORGANIZATIONS = "organizations"
STREAM_INVITATIONS = "invitations"
STREAM_PREFETCH = "prefetch"
STREAM_ORGANIZATION_DETAIL = "organization_detail"
STREAM_TRANSACTIONS = "transactions"
STREAM_RECEIPTS = "receipts"


def organization_key(org_id: str) -> str:
    return f"{ORGANIZATIONS_PREFIX}/{org_id}"


def transactions_key(org_id: str, limit: int = RECENT_TRANSACTIONS_LIMIT) -> str:
    return f"{ORGANIZATIONS_PREFIX}/{org_id}/transactions?limit={limit}"
