"""
Number formatting for display.

All functions are pure and render missing values as "N/A".
"""

from typing import Optional

MISSING = "N/A"

_COMPACT_UNITS = (
    (1e12, "T"),
    (1e9, "B"),
    (1e6, "M"),
    (1e3, "K"),
)


def format_usd(value: Optional[float]) -> str:
    """
    Format a USD amount with thousands separators.

    Sub-dollar prices keep more decimals so small-cap coins stay readable.

    Examples:
        >>> format_usd(43250.5)
        '$43,250.50'
        >>> format_usd(0.000123)
        '$0.000123'
        >>> format_usd(-12.5)
        '-$12.50'
    """
    if value is None:
        return MISSING
    sign = "-" if value < 0 else ""
    magnitude = abs(value)
    if magnitude != 0 and magnitude < 1:
        return f"{sign}${magnitude:,.6f}".rstrip("0").rstrip(".")
    return f"{sign}${magnitude:,.2f}"


def format_compact_usd(value: Optional[float]) -> str:
    """
    Format large USD figures (market cap, volume) with a unit suffix.

    Examples:
        >>> format_compact_usd(1_234_000_000)
        '$1.23B'
        >>> format_compact_usd(950)
        '$950.00'
    """
    if value is None:
        return MISSING
    sign = "-" if value < 0 else ""
    magnitude = abs(value)
    for threshold, suffix in _COMPACT_UNITS:
        if magnitude >= threshold:
            return f"{sign}${magnitude / threshold:.2f}{suffix}"
    return f"{sign}${magnitude:,.2f}"


def format_percent(value: Optional[float], signed: bool = True) -> str:
    """
    Format a percentage with two decimals.

    Examples:
        >>> format_percent(5.0)
        '+5.00%'
        >>> format_percent(-1.234)
        '-1.23%'
    """
    if value is None:
        return MISSING
    if signed:
        return f"{value:+.2f}%"
    return f"{value:.2f}%"


def format_supply(value: Optional[float], symbol: str = "") -> str:
    """
    Format a coin supply as a whole number of units.

    Examples:
        >>> format_supply(19_600_000.4, "BTC")
        '19,600,000 BTC'
    """
    if value is None:
        return MISSING
    text = f"{value:,.0f}"
    return f"{text} {symbol}".strip()
