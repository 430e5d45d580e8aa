from fastapi import Depends
from fastapi_clerk_auth import ClerkConfig, ClerkHTTPBearer, HTTPAuthorizationCredentials
from app.configs.app_settings import settings
from app.custom_error import ValidationError
from typing import Optional
import logging

logger = logging.getLogger(__name__)

# "clerk_auth_guard" runs first (as an instance of ClerkHTTPBearer) to:
# - read the Authorization: Bearer <JWT> header from the incoming request
# - validate the JWT against the JWKS url configured in "clerk_config"
# - hand back the decoded HTTPAuthorizationCredentials
# the admin identity is then taken from the "sub" claim.
# every admin route depends on get_current_admin_id, so no dashboard data leaves the API without a valid staff token.

clerk_config = ClerkConfig(jwks_url=settings.CLERK_JWKS_URL)
clerk_auth_guard = ClerkHTTPBearer(config=clerk_config)


async def get_current_admin_id(credentials: Optional[HTTPAuthorizationCredentials] = Depends(clerk_auth_guard)) -> str:
    """Extract the admin's clerk user ID from the JWT token"""
    if not credentials:
        raise ValidationError("Authentication required")

    admin_id = credentials.decoded.get("sub")
    if not admin_id:
        raise ValidationError("Invalid token: user ID not found")

    logger.debug(f"Authenticated admin: {admin_id}")
    return admin_id
