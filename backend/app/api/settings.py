from dataclasses import asdict

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.auth import RequireSettingsAccess, UserInfo
from app.core.database import get_db
from app.schemas.settings import NotificationSettingsBody, NotificationSettingsResponse
from app.services import settings_service

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=NotificationSettingsResponse)
async def get_settings(
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireSettingsAccess),
):
    return NotificationSettingsResponse(**asdict(await settings_service.get_settings(db)))


@router.put("", response_model=NotificationSettingsResponse)
async def put_settings(
    body: NotificationSettingsBody,
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireSettingsAccess),
):
    saved = await settings_service.save_settings(db, body)
    return NotificationSettingsResponse(**asdict(saved))
