from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from expense_tracker.core.config import settings
from expense_tracker.core.errors import ForbiddenError

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    """False on mismatch, and on input bcrypt refuses (e.g. NUL bytes)."""
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError:
        return False



def create_access_token(user_id: int, expires_delta: Optional[timedelta] = None) -> str:
    """Sign a token binding the user id; defaults to the configured lifetime (1h)."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode = {"userId": user_id, "exp": expire}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> int:
    """Return the userId bound to a token, or raise ForbiddenError.

    Bad signature, expiry and a malformed payload all fail the same way.
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise ForbiddenError()

    user_id = payload.get("userId")
    if not isinstance(user_id, int):
        raise ForbiddenError()
    return user_id
