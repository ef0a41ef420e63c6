from datetime import date
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import ProductionRecord, Shift
from app.schemas.record import RecordCreate
from app.services.derivation import RecordData, iso_day


class UnknownShift(ValueError):
    pass


def to_data(row: ProductionRecord) -> RecordData:
    """Снимок строки ORM для расчётов вне сессии."""
    return RecordData(
        id=row.id,
        date=iso_day(row.date),
        shift_id=row.shift_id,
        operator_id=row.operator_id,
        operator_name=row.operator_name,
        product_count=row.product_count,
        defect_count=row.defect_count,
        downtime_minutes=row.downtime_minutes,
        comments=row.comments,
        created_at=row.created_at,
    )


async def list_shifts(db: AsyncSession) -> List[Shift]:
    result = await db.execute(select(Shift).order_by(Shift.sort_order, Shift.id))
    return list(result.scalars().all())


async def list_records(
    db: AsyncSession,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[RecordData]:
    """Журнал целиком (или за период включительно): новые даты сверху. Пустая база — пустой список."""
    q = select(ProductionRecord)
    if start is not None:
        q = q.where(ProductionRecord.date >= start)
    if end is not None:
        q = q.where(ProductionRecord.date <= end)
    q = q.order_by(ProductionRecord.date.desc(), ProductionRecord.created_at.desc())
    rows = (await db.execute(q)).scalars().all()
    return [to_data(r) for r in rows]


async def create_record(db: AsyncSession, data: RecordCreate, operator_id: int, operator_name: str) -> ProductionRecord:
    shift = await db.get(Shift, data.shift_id)
    if shift is None:
        raise UnknownShift(data.shift_id)
    record = ProductionRecord(
        date=data.date,
        shift_id=data.shift_id,
        operator_id=operator_id,
        operator_name=operator_name,
        product_count=data.product_count,
        defect_count=data.defect_count,
        downtime_minutes=data.downtime_minutes,
        comments=(data.comments or "").strip() or None,
    )
    db.add(record)
    await db.flush()
    await db.refresh(record)
    return record
