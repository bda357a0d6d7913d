"""API request models."""

from src.api.models.request_models import AddHoldingRequest, AddWatchlistRequest, UpdateHoldingRequest

__all__ = ["AddHoldingRequest", "AddWatchlistRequest", "UpdateHoldingRequest"]
