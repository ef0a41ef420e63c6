from datetime import date
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, model_validator


class FinancialSummaryResponse(BaseModel):
    """Финансовые потери за выбранный период."""

    total_defect_cost: Decimal
    total_downtime_cost: Decimal
    total_losses: Decimal
    cost_per_defect: Decimal
    cost_per_minute_downtime: Decimal
    records_count: int


class PeriodBody(BaseModel):
    """Период анализа; без дат — последние 20 записей."""

    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def _check_order(self):
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("Дата начала позже даты окончания")
        return self


class AiReportResponse(BaseModel):
    available: bool
    analysis: str
    financials: FinancialSummaryResponse
    start_date: Optional[str] = None
    end_date: Optional[str] = None


class ReportExportBody(PeriodBody):
    analysis: str
