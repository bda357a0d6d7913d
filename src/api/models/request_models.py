"""
API Request Models

Numeric fields are left untyped: the holdings service validates them so
that every bad value produces the same invalid_input error.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class AddWatchlistRequest(BaseModel):
    """Model for adding a coin to the watchlist."""
    model_config = ConfigDict(populate_by_name=True)

    coin_id: Optional[str] = Field(None, alias="coinId", description="Coin id or ticker")


class AddHoldingRequest(BaseModel):
    """Model for adding a holding to the portfolio."""
    model_config = ConfigDict(populate_by_name=True)

    coin_id: Optional[str] = Field(None, alias="coinId", description="Coin id or ticker")
    amount: Any = Field(None, description="Units bought")
    purchase_price: Any = Field(None, alias="purchasePrice", description="USD per unit")


class UpdateHoldingRequest(BaseModel):
    """Model for replacing amount and price of a holding."""
    model_config = ConfigDict(populate_by_name=True)

    amount: Any = Field(None, description="Units held")
    purchase_price: Any = Field(None, alias="purchasePrice", description="USD per unit")
