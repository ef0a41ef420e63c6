from decimal import Decimal
from typing import List
from pydantic import BaseModel


class StatsBlock(BaseModel):
    """KPI-карточки дашборда."""

    total_production: int
    total_defects: int
    total_downtime: int
    defect_rate: Decimal
    needs_attention: bool
    efficiency: Decimal  # фиксированное значение, OEE не рассчитывается


class ShiftStatResponse(BaseModel):
    shift_id: str
    name: str
    production: int
    defects: int
    downtime: int


class TrendPointResponse(BaseModel):
    date: str
    date_short: str  # MM-DD
    product_count: int
    defect_count: int
    downtime_minutes: int


class DashboardResponse(BaseModel):
    stats: StatsBlock
    shifts: List[ShiftStatResponse]
    trend: List[TrendPointResponse]
