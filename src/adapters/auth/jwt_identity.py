"""
Bearer token verification (HS256 JWT).
"""

import time
from typing import Any, Optional

import jwt

from src.domain.exceptions import AuthenticationError
from src.domain.ports.identity_port import IdentityPort

ALGORITHM = "HS256"


def issue_token(
    secret_key: str,
    user_id: str,
    ttl_seconds: Optional[int] = 3600,
    claim: str = "userId",
    now: Optional[float] = None,
) -> str:
    """
    Sign a token for a user (development and tests).

    Args:
        secret_key: Shared signing secret
        user_id: Value of the user claim
        ttl_seconds: Lifetime; None for a token without expiry
        claim: Name of the user claim
        now: Issue time as Unix seconds

    Returns:
        Encoded token.
    """
    issued_at = int(now if now is not None else time.time())
    payload: dict[str, Any] = {claim: user_id, "iat": issued_at}
    if ttl_seconds is not None:
        payload["exp"] = issued_at + ttl_seconds
    return jwt.encode(payload, secret_key, algorithm=ALGORITHM)


class JWTIdentityAdapter(IdentityPort):
    """Resolve user ids from HS256 tokens signed with a shared secret."""

    def __init__(self, secret_key: str, user_claim: str = "userId", leeway: float = 0):
        self._secret_key = secret_key
        self._user_claim = user_claim
        self._leeway = leeway

    def resolve_user_id(self, token: str) -> str:
        if not token:
            raise AuthenticationError("Authentication required")
        if not self._secret_key:
            raise AuthenticationError("Token verification is not configured")

        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[ALGORITHM],
                leeway=self._leeway,
            )
        except jwt.ExpiredSignatureError as e:
            raise AuthenticationError("Token expired") from e
        except jwt.InvalidSignatureError as e:
            raise AuthenticationError("Invalid token signature") from e
        except jwt.InvalidAlgorithmError as e:
            raise AuthenticationError("Unsupported token algorithm") from e
        except jwt.DecodeError as e:
            raise AuthenticationError("Malformed token") from e
        except jwt.InvalidTokenError as e:
            raise AuthenticationError(f"Invalid token: {e}") from e

        user_id = payload.get(self._user_claim)
        if not user_id:
            raise AuthenticationError("Invalid token structure")
        return str(user_id)
