"""
Authentication adapters.
"""

from src.adapters.auth.jwt_identity import JWTIdentityAdapter, issue_token

__all__ = ["JWTIdentityAdapter", "issue_token"]
