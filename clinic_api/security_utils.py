"""
Security utilities: password hashing, password strength rules and JWTs
"""

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import JWTError
from jose import jwt as jose_jwt
from passlib.context import CryptContext

from .config import JWT_ALGORITHM, JWT_EXPIRES_MINUTES, JWT_SECRET

logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

COMMON_PASSWORDS = ["password", "12345678", "qwerty", "abc123", "password123"]
SPECIAL_CHARACTERS = r"[!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>/?]"


# ============================================================================
# PASSWORD SECURITY
# ============================================================================


def hash_password_bcrypt(password: str) -> str:
    """Hash password using bcrypt"""
    return pwd_context.hash(password)


def verify_password_bcrypt(plain_password: str, hashed_password: str) -> bool:
    """Verify password against bcrypt hash"""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except Exception as e:
        logger.error(f"Password verification error: {e}")
        return False


def validate_password(password: Optional[str], strict: bool = False) -> dict[str, Any]:
    """
    Check a password against the clinic's rules.

    Basic mode only asks for 6 characters. Strict mode asks for 8 characters
    with upper and lower case letters, a digit and a special character, and
    rejects passwords built around common weak ones.

    Returns:
        dict with 'valid' (bool) and 'errors' (list of messages)
    """
    if not password:
        return {"valid": False, "errors": ["Password is required"]}

    errors = []
    if strict:
        if len(password) < 8:
            errors.append("Password must be at least 8 characters long")
        if not re.search(r"[A-Z]", password):
            errors.append("Password must contain at least one uppercase letter")
        if not re.search(r"[a-z]", password):
            errors.append("Password must contain at least one lowercase letter")
        if not re.search(r"[0-9]", password):
            errors.append("Password must contain at least one number")
        if not re.search(SPECIAL_CHARACTERS, password):
            errors.append(
                "Password must contain at least one special character (!@#$%^&*()_+-=[]{}|;:,.<>?)"
            )
        if any(weak in password.lower() for weak in COMMON_PASSWORDS):
            errors.append("Password is too common. Please choose a stronger password")
    elif len(password) < 6:
        errors.append("Password must be at least 6 characters long")

    return {"valid": not errors, "errors": errors}


# ============================================================================
# TOKEN GENERATION & VALIDATION
# ============================================================================


def create_jwt_token(data: dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT token

    Args:
        data: Data to encode in the token
        expires_delta: Token expiration time (default JWT_EXPIRES_MINUTES)
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=JWT_EXPIRES_MINUTES))
    to_encode.update({"exp": expire})
    return jose_jwt.encode(to_encode, JWT_SECRET, algorithm=JWT_ALGORITHM)


def verify_jwt_token(token: str) -> Optional[dict[str, Any]]:
    """
    Verify and decode a JWT token

    Returns:
        Decoded payload if valid, None if invalid or expired
    """
    try:
        return jose_jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except JWTError as e:
        logger.warning(f"JWT verification failed: {e}")
        return None


def create_user_token(user) -> str:
    """Token carrying the principal's identity and role"""
    return create_jwt_token(
        {"id": user.id, "username": user.username, "role": user.role, "name": user.name}
    )
