"""Integer money helpers.

Balances arrive from the API as integer cents. No float, no Decimal.
"""


def cents_to_display(cents: int) -> str:
    """Convert cents to display string: 6500 -> '$65.00', -1200 -> '-$12.00'."""
    sign = "-" if cents < 0 else ""
    abs_cents = abs(cents)
    return f"{sign}${abs_cents // 100:,}.{abs_cents % 100:02d}"


def optional_cents_to_display(cents: int | None) -> str | None:
    """Balance not loaded yet renders as None so the UI can show a placeholder."""
    if cents is None:
        return None
    return cents_to_display(cents)


def parse_cents(raw: object) -> int | None:
    """Accept int cents from a payload field; bools and floats are rejected."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        digits = raw[1:] if raw.startswith("-") else raw
        if digits.isdigit():
            return int(raw)
    return None
