"""Naira amount helpers. Amounts are always integer kobo."""

from decimal import Decimal

KOBO_PER_NAIRA = 100
NAIRA_SIGN = "₦"


def format_naira(amount_kobo: int) -> str:
    """
    Render a kobo amount for display.

    Thousands separators are always used; kobo are shown only when non-zero.

    Example:
        500000 -> "₦5,000"
        123450 -> "₦1,234.50"
    """
    sign = "-" if amount_kobo < 0 else ""
    kobo = abs(amount_kobo)
    if kobo % KOBO_PER_NAIRA == 0:
        return f"{sign}{NAIRA_SIGN}{kobo // KOBO_PER_NAIRA:,}"
    return f"{sign}{NAIRA_SIGN}{Decimal(kobo) / KOBO_PER_NAIRA:,.2f}"
