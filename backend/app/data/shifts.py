# Справочник смен по умолчанию: id → название и границы.
# Короткие подписи используются в данных для AI-аналитики.

from typing import Optional

SHIFTS = [
    {"id": "1", "name": "Дневная смена", "start_time": "08:00", "end_time": "16:00"},
    {"id": "2", "name": "Вечерняя смена", "start_time": "16:00", "end_time": "00:00"},
    {"id": "3", "name": "Ночная смена", "start_time": "00:00", "end_time": "08:00"},
]

SHIFT_SHORT_LABELS = {
    "1": "День",
    "2": "Вечер",
}
NIGHT_LABEL = "Ночь"


def get_short_label(shift_id: Optional[str]) -> str:
    return SHIFT_SHORT_LABELS.get(shift_id or "", NIGHT_LABEL)
