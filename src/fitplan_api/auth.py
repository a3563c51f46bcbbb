"""
Authentication for the FitPlan API.

Resolves the calling account from either an API key or a Supabase access
token (JWT) and hands it to routes as an explicit AccountContext.
"""
import logging
import os
from typing import Optional

import jwt
from fastapi import Depends, Header

from fitplan_api.config import settings
from fitplan_api.errors import AuthRequired, PermissionDenied
from fitplan_api.models import AccountContext

logger = logging.getLogger(__name__)

JWT_ALGORITHMS = ["HS256"]

# Identity of a bare API key (no ":user" suffix)
ADMIN_USER_ID = "admin"


async def get_current_account(
    authorization: Optional[str] = Header(None),
    x_api_key: Optional[str] = Header(None, alias="X-API-Key"),
) -> AccountContext:
    """
    Authenticate via API key OR Supabase JWT.

    Usage:
        @router.get("/protected")
        async def protected_route(account: AccountContext = Depends(get_current_account)):
            return {"user_id": account.user_id}
    """
    # Option 1: API Key authentication
    if x_api_key:
        return AccountContext(user_id=validate_api_key(x_api_key))

    # Option 2: Supabase JWT authentication
    if authorization:
        return validate_jwt(authorization)

    raise AuthRequired("Missing authentication. Provide Authorization header or X-API-Key.")


def validate_api_key(api_key: str) -> str:
    """
    Validate API key and return user_id.

    API key format options:
    - Simple: "sk_test_abc123" -> returns "admin"
    - With user: "sk_test_abc123:user_12345" -> returns "user_12345"
    """
    valid_keys = [k.strip() for k in os.getenv("API_KEYS", "").split(",") if k.strip()]

    if not valid_keys:
        logger.warning("No API keys configured (API_KEYS env var empty)")
        raise AuthRequired("API key authentication not configured")

    key_part = api_key.split(":")[0]
    if key_part not in valid_keys:
        raise AuthRequired("Invalid API key")

    if ":" in api_key:
        return api_key.split(":", 1)[1]

    return ADMIN_USER_ID


def validate_jwt(authorization: str) -> AccountContext:
    """Validate a Supabase access token and return the account it belongs to."""
    if not authorization.startswith("Bearer "):
        raise AuthRequired("Invalid authorization header format")

    token = authorization.split(" ", 1)[1]
    secret = settings.SUPABASE_JWT_SECRET or os.getenv("SUPABASE_JWT_SECRET")
    if not secret:
        logger.error("JWT validation not configured (missing SUPABASE_JWT_SECRET)")
        raise AuthRequired("JWT validation not configured")

    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=JWT_ALGORITHMS,
            options={"verify_aud": False},
        )
    except jwt.ExpiredSignatureError:
        raise AuthRequired("Token expired")
    except jwt.InvalidTokenError as e:
        raise AuthRequired(f"Invalid token: {str(e)}")

    user_id = payload.get("sub")
    if not user_id:
        raise AuthRequired("Token missing user ID")
    return AccountContext(user_id=user_id, access_token=token)


async def get_admin_account(
    account: AccountContext = Depends(get_current_account),
) -> AccountContext:
    """
    Like get_current_account, but only for catalog maintainers.

    Admins are the bare API-key identity plus any user ids listed in the
    ADMIN_USER_IDS env var (comma separated).
    """
    admin_ids = {u.strip() for u in os.getenv("ADMIN_USER_IDS", "").split(",") if u.strip()}
    admin_ids.add(ADMIN_USER_ID)
    if account.user_id not in admin_ids:
        logger.warning(f"User {account.user_id} denied access to an admin action")
        raise PermissionDenied("This action requires an admin account")
    return account
