from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from app.core.config import settings
from app.core.errors import UnauthorizedError

ACCESS_TOKEN_TYPE = "access"
PASSWORD_RESET_TOKEN_TYPE = "password-reset"

# CryptContext handles password hashing using bcrypt
# Rounds come from settings so tests can use the bcrypt minimum
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash using constant-time comparison"""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt"""
    return pwd_context.hash(password)


def _encode(claims: dict, expires_delta: timedelta) -> str:
    to_encode = claims.copy()
    now = datetime.now(timezone.utc)
    to_encode.update({"iat": now, "exp": now + expires_delta})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_access_token(user, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token carrying the user's id, email and role"""
    role = getattr(user.role, "value", user.role)
    return _encode(
        {
            "sub": str(user.id),
            "email": user.email,
            "role": role,
            "type": ACCESS_TOKEN_TYPE,
        },
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def create_password_reset_token(user_id: int, expires_delta: Optional[timedelta] = None) -> str:
    """Create a short-lived token that can only be used to reset a password"""
    return _encode(
        {"sub": str(user_id), "type": PASSWORD_RESET_TOKEN_TYPE},
        expires_delta or timedelta(minutes=settings.PASSWORD_RESET_TOKEN_EXPIRE_MINUTES),
    )


def decode_token(token: str, expected_type: str = ACCESS_TOKEN_TYPE) -> dict:
    """
    Decode and verify a JWT token.

    Raises UnauthorizedError with "Token expired" for an expired token and
    "Invalid token" for anything else that fails verification, including a
    token issued for a different purpose.
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY,
                             algorithms=[settings.ALGORITHM])
    except ExpiredSignatureError:
        raise UnauthorizedError("Token expired")
    except JWTError:
        raise UnauthorizedError("Invalid token")

    if payload.get("type") != expected_type or payload.get("sub") is None:
        raise UnauthorizedError("Invalid token")
    return payload


def get_token_user_id(payload: dict) -> int:
    """Extract the integer user id from a decoded token's 'sub' claim"""
    try:
        return int(payload["sub"])
    except (KeyError, ValueError, TypeError):
        raise UnauthorizedError("Invalid token")
