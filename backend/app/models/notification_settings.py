"""Пороги уведомлений, Telegram и стоимость потерь. Одна строка id=1, последняя запись побеждает."""
from datetime import datetime
from decimal import Decimal
from sqlalchemy import String, Integer, Numeric, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base

SETTINGS_ROW_ID = 1


class NotificationSettingsRow(Base):
    __tablename__ = "notification_settings"

    id: Mapped[int] = mapped_column(primary_key=True, default=SETTINGS_ROW_ID)
    max_defects: Mapped[int] = mapped_column(Integer, default=5, nullable=False)
    max_downtime: Mapped[int] = mapped_column(Integer, default=45, nullable=False)
    telegram_bot_token: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    telegram_chat_id: Mapped[str] = mapped_column(String(64), default="", nullable=False)
    cost_per_defect: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("1500"), nullable=False)
    cost_per_minute_downtime: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("5000"), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
