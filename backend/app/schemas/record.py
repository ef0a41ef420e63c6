import datetime as dt
from typing import Optional
from pydantic import BaseModel, Field


class RecordCreate(BaseModel):
    """Данные формы «Ввод данных». Оператор берётся из токена."""
    date: dt.date
    shift_id: str = Field(..., min_length=1)
    product_count: int = Field(..., ge=0)
    defect_count: int = Field(0, ge=0)
    downtime_minutes: int = Field(0, ge=0)
    comments: Optional[str] = None


class RecordResponse(BaseModel):
    id: int
    date: str
    shift_id: str
    operator_id: int
    operator_name: str
    product_count: int
    defect_count: int
    downtime_minutes: int
    comments: Optional[str] = None
    created_at: str


class RecordCreateResponse(RecordResponse):
    alert_scheduled: bool = False
