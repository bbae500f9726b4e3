import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..config import AUTH_COOKIE_NAME, IS_PRODUCTION, JWT_EXPIRES_MINUTES, STRICT_PASSWORD_VALIDATION
from ..database import get_db
from ..errors import AuthenticationError, Conflict, ValidationError, translate_storage_error
from ..models import DEFAULT_SERVICE_TYPE, SERVICE_TYPES, User
from ..schemas import (
    AuthResponse,
    LoginRequest,
    MeResponse,
    MessageResponse,
    RegisterRequest,
    VerifyResponse,
)
from ..security_utils import (
    create_user_token,
    hash_password_bcrypt,
    validate_password,
    verify_password_bcrypt,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])

INVALID_CREDENTIALS = "Invalid username or password"


def set_auth_cookie(response: Response, token: str):
    response.set_cookie(
        key=AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=IS_PRODUCTION,
        samesite="strict",
        max_age=JWT_EXPIRES_MINUTES * 60,
        path="/",
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(data: RegisterRequest, response: Response, db: Session = Depends(get_db)):
    """Register a staff account; the role doubles as the default service line"""
    if not data.username or not data.password or not data.name:
        raise ValidationError("username, password, and name are required")

    if len(data.username) < 3:
        raise ValidationError("Username must be at least 3 characters long")

    check = validate_password(data.password, strict=STRICT_PASSWORD_VALIDATION)
    if not check["valid"]:
        raise ValidationError("Password validation failed", details=check["errors"])

    role = data.role if data.role in SERVICE_TYPES else DEFAULT_SERVICE_TYPE

    if db.query(User.id).filter(User.username == data.username).first():
        raise Conflict("Username already exists")

    user = User(
        username=data.username,
        password_hash=hash_password_bcrypt(data.password),
        role=role,
        name=data.name,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        # Lost a race with another registration for the same username
        db.rollback()
        raise translate_storage_error(e, duplicate_message="Username already exists") from e
    db.refresh(user)

    logger.info(f"✅ Registered user {user.username} ({user.role})")
    token = create_user_token(user)
    set_auth_cookie(response, token)
    return {"message": "User registered successfully", "user": user, "token": token}


@router.post("/login", response_model=AuthResponse)
async def login(data: LoginRequest, response: Response, db: Session = Depends(get_db)):
    if not data.username or not data.password:
        raise ValidationError("username and password are required")

    user = db.query(User).filter(User.username == data.username).first()
    if not user:
        logger.warning(f"⚠️ Login attempt for unknown username {data.username}")
        raise AuthenticationError(INVALID_CREDENTIALS)

    if not user.is_active:
        raise AuthenticationError("Account is inactive. Please contact administrator.")

    if not verify_password_bcrypt(data.password, user.password_hash):
        logger.warning(f"⚠️ Wrong password for {user.username}")
        raise AuthenticationError(INVALID_CREDENTIALS)

    token = create_user_token(user)
    set_auth_cookie(response, token)
    logger.info(f"🔐 {user.username} logged in")
    return {"message": "Login successful", "user": user, "token": token}


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response, current_user: User = Depends(get_current_user)):
    response.delete_cookie(key=AUTH_COOKIE_NAME, path="/")
    return {"message": "Logout successful"}


@router.get("/verify", response_model=VerifyResponse)
async def verify(current_user: User = Depends(get_current_user)):
    """Confirm the token is still good and echo the principal"""
    return {"user": current_user, "authenticated": True}


@router.get("/me", response_model=MeResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    """Get current authenticated user"""
    return {"user": current_user}
