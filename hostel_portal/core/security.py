"""
Shared-secret checks for machine-to-machine endpoints.
"""

import hmac
from typing import Optional

from hostel_portal.core.exceptions import AuthenticationError

BEARER_PREFIX = "Bearer "


def bearer_token_matches(authorization: Optional[str], expected_token: str) -> bool:
    """Constant-time comparison of an ``Authorization`` header with ``Bearer <expected_token>``."""
    if not authorization:
        return False
    return hmac.compare_digest(authorization.encode(), f"{BEARER_PREFIX}{expected_token}".encode())


def require_bearer_token(authorization: Optional[str], expected_token: str) -> None:
    """
    Raises:
        AuthenticationError: the header is missing or carries another token
    """
    if not bearer_token_matches(authorization, expected_token):
        raise AuthenticationError("Invalid or missing authorization token")
