"""Состояние уведомления (прочитано/скрыто) по детерминированному id вида def-<id> / down-<id>.

Само уведомление не хранится: оно каждый раз выводится из журнала смен.
"""
from datetime import datetime
from sqlalchemy import String, Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class NotificationState(Base):
    __tablename__ = "notification_states"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    dismissed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
