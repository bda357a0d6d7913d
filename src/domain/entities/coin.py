"""
Coin identifiers - Mapping user shorthand to canonical provider ids.
"""

# Shorthand tickers users commonly type, mapped to CoinGecko ids
COIN_ID_ALIASES: dict[str, str] = {
    "btc": "bitcoin",
    "eth": "ethereum",
    "ada": "cardano",
    "dot": "polkadot",
    "link": "chainlink",
    "ltc": "litecoin",
    "xrp": "ripple",
    "bch": "bitcoin-cash",
    "eos": "eos",
    "trx": "tron",
}


def normalize_coin_id(raw_id: str) -> str:
    """
    Resolve user input to a canonical coin id.

    Lower-cases and trims the input, then applies the alias table.
    Unknown ids are returned as-is (assumed already canonical).

    Args:
        raw_id: User-supplied coin id or ticker (e.g., " BTC ")

    Returns:
        Canonical coin id (e.g., "bitcoin").
    """
    normalized = raw_id.strip().lower()
    return COIN_ID_ALIASES.get(normalized, normalized)
