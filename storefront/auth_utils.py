# storefront/auth_utils.py
import hashlib
import hmac
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Header, Request

from storefront.config import Settings
from storefront.errors import UnauthorizedError

logger = logging.getLogger(__name__)

PBKDF2_ITERATIONS = 260_000
HASH_SCHEME = "pbkdf2_sha256"
TOKEN_HEADER = "auth-token"


def hash_password(password: str, salt: Optional[str] = None, iterations: int = PBKDF2_ITERATIONS) -> str:
    """Хэширует пароль PBKDF2-HMAC-SHA256 с солью.

    Результат: ``pbkdf2_sha256$<iterations>$<salt>$<hash>``.
    """
    if salt is None:
        salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), iterations)
    return f"{HASH_SCHEME}${iterations}${salt}${digest.hex()}"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Проверяет пароль, сравнивая с хэшем."""
    try:
        scheme, iterations, salt, _ = hashed_password.split("$", 3)
    except ValueError:
        return False
    if scheme != HASH_SCHEME:
        return False
    candidate = hash_password(plain_password, salt=salt, iterations=int(iterations))
    return hmac.compare_digest(candidate, hashed_password)


def create_access_token(user_id: int, settings: Settings) -> str:
    """Создает JWT токен вида {"user": {"id": ...}}; exp только если задан срок жизни."""
    to_encode = {"user": {"id": user_id}}
    if settings.token_expire_minutes is not None:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.token_expire_minutes)
        to_encode["exp"] = expire
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str, settings: Settings) -> int:
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.InvalidTokenError as e:
        logger.debug("token rejected: %s", e)
        raise UnauthorizedError("Invalid token")
    user = payload.get("user")
    user_id = user.get("id") if isinstance(user, dict) else None
    if user_id is None:
        raise UnauthorizedError("Invalid token")
    return user_id


async def fetch_user(request: Request, token: Optional[str] = Header(default=None, alias=TOKEN_HEADER)) -> int:
    """Зависимость для защищённых маршрутов: возвращает id пользователя из заголовка auth-token."""
    if not token:
        raise UnauthorizedError("Please authenticate")
    return verify_token(token, request.app.state.settings)
