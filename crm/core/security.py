from datetime import datetime, timedelta, UTC

import bcrypt
from jose import JWTError, jwt

from crm.config import settings
from crm.core.exceptions import UnauthorizedException


def hash_password(plain: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(plain.encode(), salt).decode()


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain.encode(), hashed.encode())
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def create_access_token(user_id: str, email: str, tenant_id: str) -> str:
    """
    Issue a signed access token bound to a user and its tenant.

    Claims:
        sub: user id
        email: user e-mail
        tenantId: id of the tenant the user belongs to
        exp/iat: expiry and issue time
    """
    now = datetime.now(UTC)
    payload = {
        "sub": user_id,
        "email": email,
        "tenantId": tenant_id,
        "iat": now,
        "exp": now + timedelta(minutes=settings.JWT_EXPIRES_MINUTES),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_jwt(token: str) -> dict:
    """
    Decode and validate a JWT access token.

    Args:
        token: JWT access token from Authorization header

    Returns:
        Decoded token payload with 'sub', 'tenantId', 'exp', etc.

    Raises:
        UnauthorizedException: If token invalid, expired, or malformed
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        raise UnauthorizedException(f"Invalid token: {str(e)}")

    # jose only validates 'exp' when present
    if payload.get("exp") is None:
        raise UnauthorizedException("Token missing expiration")

    if payload.get("sub") is None:
        raise UnauthorizedException("Token missing user identifier")

    if payload.get("tenantId") is None:
        raise UnauthorizedException("Token missing tenant identifier")

    return payload
