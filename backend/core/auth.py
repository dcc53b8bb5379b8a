# backend/core/auth.py
from passlib.context import CryptContext
from datetime import datetime, timedelta
from jose import JWTError, jwt
from typing import Optional
import logging

from core.config import settings

logger = logging.getLogger(__name__)

# Password hashing
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)

def create_jwt_token(data: dict, expires_minutes: Optional[int] = None) -> str:
    try:
        to_encode = data.copy()
        minutes = expires_minutes if expires_minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES
        expire = datetime.utcnow() + timedelta(minutes=minutes)
        to_encode.update({"exp": expire})

        encoded_jwt = jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
        return encoded_jwt
    except Exception as e:
        logger.error(f"JWT token creation failed: {e}")
        raise

def decode_jwt_token(token: str) -> Optional[dict]:
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
        return payload
    except JWTError as e:
        logger.warning(f"JWT token decode failed: {e}")
        return None


# ===== FORM NONCES =====
# A nonce is a short-lived JWT bound to one form action and one affiliate.

def create_nonce(action: str, affiliate_id: int) -> str:
    return create_jwt_token(
        {"nonce": action, "sub": str(affiliate_id)},
        expires_minutes=settings.NONCE_EXPIRE_MINUTES,
    )

def verify_nonce(token: Optional[str], action: str, affiliate_id: int) -> bool:
    if not token:
        return False

    payload = decode_jwt_token(token)
    if not payload:
        return False

    return payload.get("nonce") == action and payload.get("sub") == str(affiliate_id)
