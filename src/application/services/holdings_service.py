"""
Holdings Service - Watchlist and portfolio mutation rules.

Storage belongs to the UserStorePort; the rules here decide what a
mutation does:

- Watchlist has set semantics: duplicate adds and unknown removes are no-ops.
- Portfolio is an ordered sequence addressed by index.
- Adding a coin that is already held merges into the existing holding.
  The merged purchase price is amount-weighted by default; the "simple"
  cost basis mode reproduces the legacy arithmetic mean of the two prices,
  which discards per-lot cost basis.
- Existence checks fail open: only a confirmed unknown coin blocks a write.
"""

import asyncio
import math
import weakref
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from src.domain.entities.coin import normalize_coin_id
from src.domain.entities.portfolio import PortfolioHolding
from src.domain.entities.user import UserRecord, WatchlistEntry
from src.domain.exceptions import CoinNotFoundError, InvalidIndexError, InvalidInputError
from src.domain.ports.market_data_port import MarketDataPort
from src.domain.ports.storage_port import UserStorePort
from src.infrastructure.logging import get_logger

logger = get_logger(__name__)


def parse_positive_number(value: Any, field: str) -> float:
    """
    Parse a strictly positive, finite number from user input.

    Args:
        value: Number or numeric string
        field: Field name used in the error

    Returns:
        Parsed float.

    Raises:
        InvalidInputError: If the value is missing, non-numeric or not > 0.
    """
    if value is None or isinstance(value, bool):
        raise InvalidInputError(field, value, "is required and must be a number")
    if isinstance(value, str):
        value = value.strip()
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidInputError(field, value, "must be a number")
    if not math.isfinite(number) or number <= 0:
        raise InvalidInputError(field, value)
    return number


def merge_holding(
    existing: PortfolioHolding,
    amount: float,
    purchase_price: float,
    weighted: bool = True,
) -> None:
    """
    Fold a new buy into an existing holding in place.

    Args:
        existing: Holding already in the portfolio
        amount: Units bought
        purchase_price: Price paid per unit
        weighted: Amount-weighted average price if True, else simple mean
    """
    if weighted:
        total_cost = existing.invested + amount * purchase_price
        existing.amount += amount
        existing.purchase_price = total_cost / existing.amount
    else:
        existing.amount += amount
        existing.purchase_price = (existing.purchase_price + purchase_price) / 2


class HoldingsService:
    """
    Applies watchlist and portfolio mutations for one user at a time.

    Each mutation is a load-modify-save of the user's record under a
    per-user lock, so concurrent requests of one user cannot lose updates.
    """

    def __init__(
        self,
        store: UserStorePort,
        market_data_port: MarketDataPort,
        verify_existence: bool = True,
        weighted_cost_basis: bool = True,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        """
        Initialize the service.

        Args:
            store: User record storage
            market_data_port: Used for existence checks before adding coins
            verify_existence: Check coins upstream before adding them
            weighted_cost_basis: Merge rule for repeated buys
            clock: Timestamp source for new entries
        """
        self.store = store
        self.market_data = market_data_port
        self.verify_existence = verify_existence
        self.weighted_cost_basis = weighted_cost_basis
        self._clock = clock
        # Entries disappear once no coroutine holds or waits on the lock
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

    def _lock_for(self, user_id: str) -> asyncio.Lock:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[user_id] = lock
        return lock

    async def _ensure_exists(self, raw_id: str, coin_id: str) -> None:
        """Raise CoinNotFoundError only when the provider confirms absence."""
        if not self.verify_existence:
            return
        if not await self.market_data.verify_coin_exists(coin_id):
            raise CoinNotFoundError(requested_id=raw_id, suggested_id=coin_id)

    def _normalize(self, raw_id: Any) -> str:
        if not isinstance(raw_id, str) or not raw_id.strip():
            raise InvalidInputError("coinId", raw_id, "is required")
        return normalize_coin_id(raw_id)

    async def _save(self, record: UserRecord) -> None:
        record.updated_at = self._clock()
        await self.store.save_user(record)

    # Watchlist

    async def get_watchlist(self, user_id: str) -> list[WatchlistEntry]:
        """Get the user's watchlist."""
        record = await self.store.get_user(user_id)
        return record.watchlist

    async def add_to_watchlist(self, user_id: str, raw_id: Any) -> list[WatchlistEntry]:
        """
        Add a coin to the watchlist.

        Args:
            user_id: Current user
            raw_id: Coin id or ticker as typed by the user

        Returns:
            Updated watchlist.

        Raises:
            CoinNotFoundError: Provider confirmed the coin does not exist.
            InvalidInputError: Empty coin id.
        """
        coin_id = self._normalize(raw_id)

        async with self._lock_for(user_id):
            record = await self.store.get_user(user_id)
            if record.is_watching(coin_id):
                return record.watchlist

            await self._ensure_exists(raw_id, coin_id)

            record.watchlist.append(WatchlistEntry(coin_id=coin_id, added_at=self._clock()))
            await self._save(record)

        logger.info("Added to watchlist", user_id=user_id, coin_id=coin_id)
        return record.watchlist

    async def remove_from_watchlist(self, user_id: str, raw_id: Any) -> list[WatchlistEntry]:
        """Remove a coin from the watchlist; unknown coins are ignored."""
        coin_id = self._normalize(raw_id)

        async with self._lock_for(user_id):
            record = await self.store.get_user(user_id)
            remaining = [entry for entry in record.watchlist if entry.coin_id != coin_id]
            if len(remaining) != len(record.watchlist):
                record.watchlist = remaining
                await self._save(record)
                logger.info("Removed from watchlist", user_id=user_id, coin_id=coin_id)

        return record.watchlist

    # Portfolio

    async def get_portfolio(self, user_id: str) -> list[PortfolioHolding]:
        """Get the user's holdings in stored order."""
        record = await self.store.get_user(user_id)
        return record.portfolio

    async def add_holding(
        self,
        user_id: str,
        raw_id: Any,
        amount: Any,
        purchase_price: Any,
    ) -> list[PortfolioHolding]:
        """
        Add a buy to the portfolio, merging into an existing holding of the same coin.

        Args:
            user_id: Current user
            raw_id: Coin id or ticker
            amount: Units bought (> 0)
            purchase_price: USD per unit (> 0)

        Returns:
            Updated portfolio.

        Raises:
            InvalidInputError: Missing, non-numeric or non-positive values.
            CoinNotFoundError: New coin confirmed absent upstream.
        """
        coin_id = self._normalize(raw_id)
        parsed_amount = parse_positive_number(amount, "amount")
        parsed_price = parse_positive_number(purchase_price, "purchasePrice")

        async with self._lock_for(user_id):
            record = await self.store.get_user(user_id)
            existing = record.find_holding(coin_id)

            if existing is not None:
                merge_holding(
                    existing,
                    parsed_amount,
                    parsed_price,
                    weighted=self.weighted_cost_basis,
                )
                logger.info(
                    "Merged into existing holding",
                    user_id=user_id,
                    coin_id=coin_id,
                    amount=existing.amount,
                    purchase_price=existing.purchase_price,
                )
            else:
                await self._ensure_exists(raw_id, coin_id)
                record.portfolio.append(
                    PortfolioHolding(
                        coin_id=coin_id,
                        amount=parsed_amount,
                        purchase_price=parsed_price,
                        purchase_date=self._clock(),
                    )
                )
                logger.info("Added holding", user_id=user_id, coin_id=coin_id)

            await self._save(record)

        return record.portfolio

    async def update_holding(
        self,
        user_id: str,
        index: int,
        amount: Any,
        purchase_price: Any,
    ) -> list[PortfolioHolding]:
        """
        Replace amount and purchase price of the holding at ``index``.

        Raises:
            InvalidIndexError: Index outside 0 <= index < length.
            InvalidInputError: Non-numeric or non-positive values.
        """
        parsed_amount = parse_positive_number(amount, "amount")
        parsed_price = parse_positive_number(purchase_price, "purchasePrice")

        async with self._lock_for(user_id):
            record = await self.store.get_user(user_id)
            if not 0 <= index < len(record.portfolio):
                raise InvalidIndexError(index, len(record.portfolio))

            holding = record.portfolio[index]
            holding.amount = parsed_amount
            holding.purchase_price = parsed_price
            await self._save(record)

        logger.info("Updated holding", user_id=user_id, index=index, coin_id=holding.coin_id)
        return record.portfolio

    async def remove_holding(self, user_id: str, index: int) -> list[PortfolioHolding]:
        """
        Remove the holding at ``index``.

        Raises:
            InvalidIndexError: Index outside 0 <= index < length; nothing is changed.
        """
        async with self._lock_for(user_id):
            record = await self.store.get_user(user_id)
            if not 0 <= index < len(record.portfolio):
                raise InvalidIndexError(index, len(record.portfolio))

            removed = record.portfolio.pop(index)
            await self._save(record)

        logger.info("Removed holding", user_id=user_id, index=index, coin_id=removed.coin_id)
        return record.portfolio
