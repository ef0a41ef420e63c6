"""Запись журнала смен: выпуск, брак и простой за одну смену. После создания не меняется."""
import datetime as dt
from typing import Optional
from sqlalchemy import String, Integer, Date, DateTime, ForeignKey, Text, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base


class ProductionRecord(Base):
    __tablename__ = "production_logs"
    __table_args__ = (
        CheckConstraint("product_count >= 0", name="ck_production_logs_product_count"),
        CheckConstraint("defect_count >= 0", name="ck_production_logs_defect_count"),
        CheckConstraint("downtime_minutes >= 0", name="ck_production_logs_downtime"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    shift_id: Mapped[str] = mapped_column(ForeignKey("shifts.id"), nullable=False)
    operator_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    # ФИО на момент записи: переименование пользователя не меняет журнал
    operator_name: Mapped[str] = mapped_column(String(255), nullable=False)
    product_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    defect_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    downtime_minutes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    comments: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=dt.datetime.utcnow, nullable=False)

    operator = relationship("User", back_populates="records")
