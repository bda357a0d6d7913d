"""
Presentation helpers - Display formatting kept out of the core.
"""

from src.presentation.formatting import format_compact_usd, format_percent, format_supply, format_usd

__all__ = ["format_compact_usd", "format_percent", "format_supply", "format_usd"]
