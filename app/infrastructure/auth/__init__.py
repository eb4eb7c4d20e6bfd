"""Infrastructure auth module - security and JWT validation.

Exports:
    validate_admin_token: FastAPI dependency guarding admin endpoints
    get_relay_token: Optional bearer token of a submission relay
    decode_admin_token: Verify an admin JWT and its scope
    token_scopes: Extract granted scopes from a JWT payload
"""

from infrastructure.auth.security import (
    decode_admin_token,
    get_relay_token,
    token_scopes,
    validate_admin_token,
)

__all__ = [
    "validate_admin_token",
    "get_relay_token",
    "decode_admin_token",
    "token_scopes",
]
