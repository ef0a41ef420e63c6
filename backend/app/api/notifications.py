"""Уведомления о превышении порогов: выводятся из журнала при каждом запросе."""
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.auth import RequireNotificationsAccess, UserInfo
from app.config import settings as app_settings
from app.core.database import get_db
from app.schemas.notification import NotificationResponse, NotificationsList
from app.services.derivation import derive_notifications
from app.services.notification_service import current_notifications, upsert_states
from app.services.record_service import list_records
from app.services.settings_service import get_settings

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _utc_iso(value: Optional[datetime]) -> str:
    """created_at хранится в UTC без зоны; клиенту отдаём с явным смещением."""
    if value is None:
        return ""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


async def _derived_ids(db: AsyncSession) -> list:
    records = await list_records(db)
    settings = await get_settings(db)
    return [n.id for n in derive_notifications(records, settings, limit=None)]


@router.get("", response_model=NotificationsList)
async def get_notifications(
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireNotificationsAccess),
):
    records = await list_records(db)
    settings = await get_settings(db)
    items = await current_notifications(db, records, settings, app_settings.notifications_limit)
    return NotificationsList(
        unread=sum(1 for n in items if not n.read),
        items=[
            NotificationResponse(
                id=n.id,
                title=n.title,
                message=n.message,
                comment=n.comment,
                type=n.type,
                timestamp=_utc_iso(n.timestamp),
                read=n.read,
            )
            for n in items
        ],
    )


@router.post("/read-all")
async def mark_all_read(
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireNotificationsAccess),
):
    """Отметить прочитанными все текущие уведомления."""
    count = await upsert_states(db, await _derived_ids(db), read=True)
    return {"ok": True, "count": count}


@router.post("/{notification_id}/dismiss")
async def dismiss_notification(
    notification_id: str,
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireNotificationsAccess),
):
    """Скрыть уведомление. Отметку можно поставить только на уже выведенное уведомление."""
    if notification_id not in await _derived_ids(db):
        raise HTTPException(status_code=404, detail="Уведомление не найдено")
    await upsert_states(db, [notification_id], read=True, dismissed=True)
    return {"ok": True}
