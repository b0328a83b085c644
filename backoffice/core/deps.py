"""
FastAPI dependencies for authentication and authorization.

WHY: Dependencies resolve the bearer token into an IdentityContext once per
request, so route handlers and services never read roles off the User row
themselves.
"""

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.auth import verify_token
from backoffice.core.exceptions import (
    AuthenticationError,
    InsufficientPermissionsError,
    TokenExpiredError,
    TokenInvalidError,
)
from backoffice.core.identity import IdentityContext, ADMIN_ROLES
from backoffice.db.session import get_db
from backoffice.dao.user import UserDAO
from backoffice.models.user import User


# HTTP Bearer token security scheme
# Format: "Authorization: Bearer <token>"
security = HTTPBearer()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Get current authenticated user from JWT token.

    WHY: This dependency:
    1. Extracts token from Authorization header
    2. Verifies token signature and expiration
    3. Fetches user (with roles) from database
    4. Ensures user still exists and is active

    Raises:
        AuthenticationError: If token is invalid, expired, or user not found
    """
    try:
        payload = verify_token(credentials.credentials)
    except (TokenExpiredError, TokenInvalidError) as e:
        raise AuthenticationError(message=str(e), status_code=e.status_code)

    user_id = payload.get("user_id")
    if not user_id:
        raise AuthenticationError(message="Invalid token: missing user_id")

    # WHY: User data in token might be stale; always fetch current data
    user = await UserDAO(db).get_active(user_id)
    if not user:
        raise AuthenticationError(message="User not found or inactive", user_id=user_id)

    return user


async def get_identity(current_user: User = Depends(get_current_user)) -> IdentityContext:
    """
    Resolved caller identity passed explicitly to every service call.

    Usage:
        @router.get("/tickets")
        async def list_tickets(identity: IdentityContext = Depends(get_identity)):
            ...
    """
    return IdentityContext.build(
        user_id=current_user.id,
        contractor_id=current_user.contractor_id,
        roles=current_user.role_slugs,
    )


async def require_admin(identity: IdentityContext = Depends(get_identity)) -> IdentityContext:
    """
    Require an administrative role (superadmin, data_controller or admin).

    Raises:
        InsufficientPermissionsError: For any other role set
    """
    if not identity.is_admin:
        raise InsufficientPermissionsError(
            message="Administrator access required",
            required_roles=sorted(ADMIN_ROLES),
        )
    return identity
