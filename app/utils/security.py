from datetime import timedelta
from typing import Optional
import logging
import uuid

import bcrypt
import jwt

from app.config import settings
from app.utils.timeutils import utcnow

logger = logging.getLogger(__name__)


def get_password_hash(password: str) -> str:
    """Hash a password with bcrypt (salt and cost are stored in the hash)"""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Malformed hash in the database
        return False


def token_expiry():
    return utcnow() + timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS)


def create_access_token(data: dict, expires_at=None) -> str:
    """Create a signed JWT; `jti` keeps tokens unique per login"""
    to_encode = data.copy()
    now = utcnow()
    to_encode.update({
        "iat": now,
        "exp": expires_at or token_expiry(),
        "jti": uuid.uuid4().hex,
    })
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Optional[dict]:
    """Decode a JWT, returning None when it is invalid or expired"""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.PyJWTError as e:
        logger.info(f"Rejected access token: {e}")
        return None
