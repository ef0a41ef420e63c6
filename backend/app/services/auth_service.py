"""Пароли пользователей (bcrypt) и токен сессии веб-интерфейса (JWT)."""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt

from app.config import settings
from app.models import User


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    role: str
    full_name: str
    username: str


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: Optional[str]) -> bool:
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # в базе не bcrypt-хеш
        return False


def issue_token(user: User, now: Optional[datetime] = None) -> str:
    """Токен на jwt_expire_minutes; в нём всё, что нужно для проверки роли без запроса к БД."""
    now = now or datetime.now(timezone.utc)
    claims = {
        "sub": str(user.id),
        "role": user.role.value,
        "name": user.full_name,
        "username": user.username,
        "iat": now,
        "exp": now + timedelta(minutes=settings.jwt_expire_minutes),
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def read_token(token: str) -> Optional[TokenClaims]:
    """Разобрать токен; None — подпись неверна, срок истёк или нет обязательных полей."""
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "role", "exp"]},
        )
        user_id = int(payload["sub"])
    except (jwt.PyJWTError, ValueError):
        return None
    return TokenClaims(
        user_id=user_id,
        role=payload["role"],
        full_name=payload.get("name", ""),
        username=payload.get("username", ""),
    )
