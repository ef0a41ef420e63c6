"""Веб-авторизация: логин по username+пароль (bcrypt), JWT, проверка ролей."""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer, OAuth2PasswordRequestForm
from pydantic import BaseModel
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.logging_config import get_logger
from app.core.permissions import Resource, get_menu_items, role_label, roles_for
from app.models import User, UserRole
from app.services.auth_service import hash_password, issue_token, read_token, verify_password

router = APIRouter(prefix="/auth", tags=["auth"])
security = HTTPBearer(auto_error=False)
logger = get_logger(__name__)


class UserInfo(BaseModel):
    id: int
    full_name: str
    role: str
    username: str


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserInfo


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[UserInfo]:
    has_header = credentials is not None and credentials.scheme.lower() == "bearer"
    if not has_header:
        return None
    claims = read_token(credentials.credentials)
    if claims is None:
        logger.warning("Токен не прошёл проверку (неверный или истёк)")
        return None
    return UserInfo(
        id=claims.user_id,
        full_name=claims.full_name,
        role=claims.role,
        username=claims.username,
    )


def require_roles(allowed_roles: List[UserRole]):
    async def _check(
        current_user: Optional[UserInfo] = Depends(get_current_user),
    ) -> UserInfo:
        if not current_user:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Требуется авторизация",
                headers={"WWW-Authenticate": "Bearer"},
            )
        try:
            role_enum = UserRole(current_user.role)
        except ValueError:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Неизвестная роль")
        if role_enum not in allowed_roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Доступ запрещен")
        return current_user
    return _check


RequireAnyAuth = require_roles([UserRole.ADMIN, UserRole.OPERATOR])
RequireJournalAccess = require_roles(roles_for(Resource.JOURNAL))
RequireEntryAccess = require_roles(roles_for(Resource.ENTRY))
RequireDashboardAccess = require_roles(roles_for(Resource.DASHBOARD))
RequireNotificationsAccess = require_roles(roles_for(Resource.NOTIFICATIONS))
RequireAnalyticsAccess = require_roles(roles_for(Resource.ANALYTICS))
RequireSettingsAccess = require_roles(roles_for(Resource.SETTINGS))
RequireAdmin = require_roles(roles_for(Resource.USERS))


@router.post("/login", response_model=LoginResponse)
async def login(
    form: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_db),
):
    username = (form.username or "").strip().lower()
    if not username:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Неверный логин или пароль")
    result = await db.execute(
        select(User).where(
            func.lower(User.username) == username,
            User.is_active == True,
        )
    )
    user = result.scalar_one_or_none()
    if not user or not verify_password(form.password, user.password_hash):
        logger.info("Неудачный вход: %s", username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Неверный логин или пароль",
        )
    return LoginResponse(
        access_token=issue_token(user),
        user=UserInfo(id=user.id, full_name=user.full_name, role=user.role.value, username=user.username),
    )


class MenuItem(BaseModel):
    id: str
    label: str
    view: str


class MeResponse(BaseModel):
    id: int
    full_name: str
    role: str
    role_label: str
    username: str
    menu_items: List[MenuItem]


@router.get("/me", response_model=MeResponse)
async def me(current_user: UserInfo = Depends(RequireAnyAuth)):
    """Текущий пользователь и пункты меню по роли."""
    menu = get_menu_items(current_user.role)
    return MeResponse(
        id=current_user.id,
        full_name=current_user.full_name,
        role=current_user.role,
        role_label=role_label(current_user.role),
        username=current_user.username,
        menu_items=[MenuItem(**m) for m in menu],
    )


class ChangePasswordBody(BaseModel):
    old_password: str
    new_password: str


@router.post("/change-password")
async def change_password(
    body: ChangePasswordBody,
    current_user: UserInfo = Depends(RequireAnyAuth),
    db: AsyncSession = Depends(get_db),
):
    """Смена пароля текущего пользователя (требуется старый пароль)."""
    if not body.new_password or len(body.new_password) < 4:
        raise HTTPException(status_code=400, detail="Новый пароль должен быть не менее 4 символов")
    user = await db.get(User, current_user.id)
    if not user:
        raise HTTPException(status_code=404, detail="Пользователь не найден")
    if not verify_password(body.old_password, user.password_hash):
        raise HTTPException(status_code=400, detail="Неверный текущий пароль")
    user.password_hash = hash_password(body.new_password)
    await db.flush()
    logger.info("Пароль изменён: %s", user.username)
    return {"ok": True}
