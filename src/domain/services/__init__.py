"""
Domain services - Pure business rules.
"""

from src.domain.services.valuation import valuate

__all__ = ["valuate"]
