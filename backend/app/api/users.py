from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.auth import RequireAdmin, UserInfo
from app.core.database import get_db
from app.core.logging_config import get_logger
from app.models import User
from app.schemas.user import UserCreate, UserResponse
from app.services.auth_service import hash_password

router = APIRouter(prefix="/users", tags=["users"])
logger = get_logger(__name__)


def _user_to_response(u: User) -> UserResponse:
    return UserResponse(
        id=u.id,
        full_name=u.full_name,
        username=u.username,
        role=u.role.value,
        is_active=u.is_active,
    )


@router.get("", response_model=list[UserResponse])
async def list_users(
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireAdmin),
):
    result = await db.execute(select(User).order_by(User.id))
    return [_user_to_response(u) for u in result.scalars().all()]


@router.post("", response_model=UserResponse)
async def create_user(
    data: UserCreate,
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireAdmin),
):
    username = data.username.strip()
    r = await db.execute(select(User.id).where(func.lower(User.username) == username.lower()))
    if r.scalar_one_or_none() is not None:
        raise HTTPException(status_code=400, detail="Логин уже занят")
    user = User(
        full_name=data.full_name.strip(),
        username=username,
        role=data.role,
        password_hash=hash_password(data.password),
        is_active=True,
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)
    logger.info("Создан пользователь %s (%s)", user.username, user.role.value)
    return _user_to_response(user)
