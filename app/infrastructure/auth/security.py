"""Infrastructure auth module - bearer JWT validation.

Cache administration endpoints require a bearer JWT signed with the shared
secret whose ``scope`` claim grants the admin scope. Submission relays use
the same secret with the relay scope.
"""

from typing import Any, Dict, Iterable, Optional, Union

from fastapi import HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import PyJWTError, decode

from infrastructure.logging import get_module_logger
from infrastructure.services import SettingsDep

logger = get_module_logger()
security = HTTPBearer(auto_error=False)


def token_scopes(payload: Dict[str, Any]) -> set[str]:
    """Scopes granted by a token.

    Accepts both the space-delimited string form (RFC 8693) and a list.
    """
    scope: Union[str, Iterable[str], None] = payload.get("scope")
    if not scope:
        return set()
    if isinstance(scope, str):
        return set(scope.split())
    return {str(item) for item in scope}


def decode_admin_token(
    token: str,
    secret: Optional[str],
    algorithms: list[str],
    required_scope: str,
) -> Dict[str, Any]:
    """Verify an admin token and its scope.

    Args:
        token: Encoded JWT
        secret: Shared signing secret; admin access is disabled when unset
        algorithms: Accepted signing algorithms
        required_scope: Scope the token must grant

    Returns:
        The decoded payload

    Raises:
        HTTPException: 503 when no secret is configured, 401 for invalid
            tokens, 403 when the scope is missing
    """
    if not secret:
        logger.error("admin_jwt_secret_not_configured")
        raise HTTPException(status_code=503, detail="Admin access is not configured")

    try:
        payload = decode(
            token,
            secret,
            algorithms=algorithms,
            options={"verify_exp": True},
        )
    except PyJWTError as e:
        logger.warning("jwt_validation_failed", error=str(e))
        raise HTTPException(status_code=401, detail=f"Invalid token: {str(e)}") from e

    if required_scope not in token_scopes(payload):
        logger.warning(
            "jwt_scope_missing",
            required_scope=required_scope,
            subject=payload.get("sub"),
        )
        raise HTTPException(status_code=403, detail="Insufficient scope")

    return payload


async def validate_admin_token(
    settings: SettingsDep,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
) -> Dict[str, Any]:
    """Validate the bearer token of an admin request.

    Returns:
        The decoded payload of the JWT token

    Raises:
        HTTPException: If the token is missing, invalid or lacks the admin scope
    """
    if (
        credentials is None
        or not credentials.scheme == "Bearer"
        or not credentials.credentials
    ):
        raise HTTPException(status_code=401, detail="Missing or invalid token")

    return decode_admin_token(
        credentials.credentials,
        secret=settings.server.ADMIN_JWT_SECRET,
        algorithms=settings.server.ADMIN_JWT_ALGORITHMS,
        required_scope=settings.server.ADMIN_JWT_SCOPE,
    )


async def get_relay_token(
    settings: SettingsDep,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
) -> Optional[Dict[str, Any]]:
    """Payload of a relay token, or None for an anonymous caller.

    A relay is a trusted backend forwarding submissions it received itself;
    only a relay may name the submitter address. A bearer token that is
    present but invalid is rejected rather than treated as anonymous.

    Raises:
        HTTPException: 401 or 403 for a bad token, 503 when no secret is set
    """
    if credentials is None or not credentials.credentials:
        return None

    return decode_admin_token(
        credentials.credentials,
        secret=settings.server.ADMIN_JWT_SECRET,
        algorithms=settings.server.ADMIN_JWT_ALGORITHMS,
        required_scope=settings.server.RELAY_JWT_SCOPE,
    )
