"""Журнал смен: просмотр с фильтрами и ввод данных за смену."""
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.auth import RequireEntryAccess, RequireJournalAccess, UserInfo
from app.core.database import get_db
from app.core.logging_config import get_logger
from app.models import User
from app.schemas.record import RecordCreate, RecordCreateResponse, RecordResponse
from app.services.derivation import RecordData, filter_journal, threshold_alert_text
from app.services.record_service import UnknownShift, create_record, list_records, to_data
from app.services.settings_service import get_settings
from app.services.telegram_notify import notify_threshold_exceeded

router = APIRouter(prefix="/records", tags=["records"])
logger = get_logger(__name__)


def _record_to_response(r: RecordData) -> dict:
    return dict(
        id=r.id,
        date=r.date,
        shift_id=r.shift_id,
        operator_id=r.operator_id,
        operator_name=r.operator_name,
        product_count=r.product_count,
        defect_count=r.defect_count,
        downtime_minutes=r.downtime_minutes,
        comments=r.comments,
        created_at=r.created_at.isoformat() if r.created_at else "",
    )


@router.get("", response_model=list[RecordResponse])
async def get_journal(
    search: Optional[str] = Query(None, description="ФИО оператора или дата"),
    shift_id: Optional[str] = Query(None, description="id смены или all"),
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireJournalAccess),
):
    records = await list_records(db)
    return [RecordResponse(**_record_to_response(r)) for r in filter_journal(records, search, shift_id)]


@router.post("", response_model=RecordCreateResponse)
async def post_record(
    data: RecordCreate,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    current_user: UserInfo = Depends(RequireEntryAccess),
):
    operator = await db.get(User, current_user.id)
    if operator is None or not operator.is_active:
        raise HTTPException(status_code=404, detail="Пользователь не найден")
    try:
        row = await create_record(db, data, operator.id, operator.full_name)
    except UnknownShift:
        raise HTTPException(status_code=400, detail="Смена не найдена")
    record = to_data(row)
    logger.info(
        "Запись журнала id=%s: %s смена %s, выпуск %s, брак %s, простой %s мин (%s)",
        record.id,
        record.date,
        record.shift_id,
        record.product_count,
        record.defect_count,
        record.downtime_minutes,
        record.operator_name,
    )
    settings = await get_settings(db)
    alert = threshold_alert_text(record, settings) is not None
    if alert:
        # отправка после ответа: сбой Telegram не влияет на сохранение
        background_tasks.add_task(notify_threshold_exceeded, record, settings)
    return RecordCreateResponse(**_record_to_response(record), alert_scheduled=alert)
