from decimal import Decimal
from pydantic import BaseModel, Field


class NotificationSettingsBody(BaseModel):
    """Пороги и стоимость потерь. Отрицательные, нечисловые и не помещающиеся в Numeric(12, 2) значения отклоняются (422)."""
    max_defects: int = Field(..., ge=0)
    max_downtime: int = Field(..., ge=0)
    telegram_bot_token: str = ""
    telegram_chat_id: str = ""
    cost_per_defect: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2, allow_inf_nan=False)
    cost_per_minute_downtime: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2, allow_inf_nan=False)


class NotificationSettingsResponse(NotificationSettingsBody):
    pass
