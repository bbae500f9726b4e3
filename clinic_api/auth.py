import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .config import AUTH_COOKIE_NAME
from .database import get_db
from .errors import AuthenticationError
from .models import User
from .security_utils import verify_jwt_token

logger = logging.getLogger(__name__)

# auto_error=False so browser clients can fall back to the token cookie
security = HTTPBearer(auto_error=False)


def extract_token(
    request: Request, credentials: Optional[HTTPAuthorizationCredentials]
) -> Optional[str]:
    """Bearer header first, then the auth cookie"""
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(AUTH_COOKIE_NAME)


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the authenticated principal (id, role) for this request"""
    token = extract_token(request, credentials)
    if not token:
        logger.warning(f"⚠️ No token provided for {request.method} {request.url.path}")
        raise AuthenticationError("Authentication required. No token provided.")

    payload = verify_jwt_token(token)
    if not payload or payload.get("id") is None:
        raise AuthenticationError("Invalid or expired token.")

    # The user must still exist and be active, whatever the token says
    user = db.query(User).filter(User.id == payload["id"]).first()
    if not user:
        logger.warning(f"⚠️ Token for unknown user id {payload['id']}")
        raise AuthenticationError("User not found.")

    if not user.is_active:
        logger.warning(f"⚠️ Inactive user {user.username} attempted access")
        raise AuthenticationError("User account is inactive.")

    logger.debug(f"✅ User authenticated: {user.username} ({user.role})")
    return user

