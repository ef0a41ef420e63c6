"""Хранилище настроек уведомлений: одна строка, последняя запись побеждает."""
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging_config import get_logger
from app.models import NotificationSettingsRow, SETTINGS_ROW_ID
from app.schemas.settings import NotificationSettingsBody
from app.services.derivation import NotificationSettings, validate_thresholds

logger = get_logger(__name__)


async def _get_or_create_row(db: AsyncSession) -> NotificationSettingsRow:
    row = await db.get(NotificationSettingsRow, SETTINGS_ROW_ID)
    if row is None:
        row = NotificationSettingsRow(id=SETTINGS_ROW_ID)
        db.add(row)
        await db.flush()
        await db.refresh(row)
    return row


async def get_settings(db: AsyncSession) -> NotificationSettings:
    row = await _get_or_create_row(db)
    return NotificationSettings.from_row(row)


async def save_settings(db: AsyncSession, data: NotificationSettingsBody) -> NotificationSettings:
    new = NotificationSettings(
        max_defects=data.max_defects,
        max_downtime=data.max_downtime,
        cost_per_defect=data.cost_per_defect,
        cost_per_minute_downtime=data.cost_per_minute_downtime,
        telegram_bot_token=data.telegram_bot_token.strip(),
        telegram_chat_id=data.telegram_chat_id.strip(),
    )
    validate_thresholds(new)
    row = await _get_or_create_row(db)
    row.max_defects = new.max_defects
    row.max_downtime = new.max_downtime
    row.cost_per_defect = new.cost_per_defect
    row.cost_per_minute_downtime = new.cost_per_minute_downtime
    row.telegram_bot_token = new.telegram_bot_token
    row.telegram_chat_id = new.telegram_chat_id
    await db.flush()
    logger.info(
        "Настройки сохранены: брак > %s, простой > %s мин, %s ₽/шт, %s ₽/мин",
        new.max_defects,
        new.max_downtime,
        new.cost_per_defect,
        new.cost_per_minute_downtime,
    )
    return new
