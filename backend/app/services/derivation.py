"""
Вывод уведомлений и расчёт потерь по журналу смен.

Все функции чистые: без I/O и без состояния модуля, настройки передаются явно
в каждый вызов. Записи — любые объекты с атрибутами ProductionRecord
(строки ORM или RecordData), поэтому функции можно вызывать параллельно
из опроса по таймеру и из ручного обновления.
"""
from __future__ import annotations

import json
import math
from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Iterable, Mapping, Optional, Sequence

from app.core.exceptions import InvalidSettings
from app.data.shifts import get_short_label

DEFECT_KIND = "def"
DOWNTIME_KIND = "down"

NOTIFICATIONS_LIMIT = 50
AI_DEFAULT_RECORDS = 20

# Порог «Требует внимания» для уровня брака, %
DEFECT_RATE_ATTENTION = Decimal("5")
# OEE не рассчитывается: на дашборде фиксированное значение
EFFICIENCY_PLACEHOLDER = Decimal("94.2")

_CENT = Decimal("0.01")


@dataclass(frozen=True)
class NotificationSettings:
    max_defects: int = 5
    max_downtime: int = 45
    cost_per_defect: Decimal = Decimal("1500")
    cost_per_minute_downtime: Decimal = Decimal("5000")
    telegram_bot_token: str = ""
    telegram_chat_id: str = ""

    @classmethod
    def from_row(cls, row) -> "NotificationSettings":
        return cls(
            max_defects=row.max_defects,
            max_downtime=row.max_downtime,
            cost_per_defect=Decimal(str(row.cost_per_defect)),
            cost_per_minute_downtime=Decimal(str(row.cost_per_minute_downtime)),
            telegram_bot_token=row.telegram_bot_token or "",
            telegram_chat_id=row.telegram_chat_id or "",
        )


@dataclass(frozen=True)
class RecordData:
    """Снимок записи журнала вне сессии БД."""

    id: int
    date: str
    shift_id: str
    operator_name: str
    product_count: int
    defect_count: int
    downtime_minutes: int
    created_at: datetime
    operator_id: Optional[int] = None
    comments: Optional[str] = None


@dataclass(frozen=True)
class SystemNotification:
    id: str
    title: str
    message: str
    type: str  # info | warning | error
    timestamp: datetime
    comment: Optional[str] = None
    read: bool = False


@dataclass(frozen=True)
class FinancialSummary:
    total_defect_cost: Decimal
    total_downtime_cost: Decimal
    total_losses: Decimal
    cost_per_defect: Decimal
    cost_per_minute_downtime: Decimal


@dataclass(frozen=True)
class ProductionStats:
    total_production: int
    total_defects: int
    total_downtime: int
    defect_rate: Decimal
    needs_attention: bool
    efficiency: Decimal = EFFICIENCY_PLACEHOLDER


@dataclass(frozen=True)
class ShiftStat:
    shift_id: str
    name: str
    production: int
    defects: int
    downtime: int


@dataclass(frozen=True)
class TrendPoint:
    date: str
    date_short: str
    product_count: int
    defect_count: int
    downtime_minutes: int


def iso_day(value) -> str:
    """Дата записи как строка YYYY-MM-DD (сравнение строк корректно только при нулевом дополнении)."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _check_threshold(name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise InvalidSettings(f"{name}: ожидается число, получено {value!r}")
    if isinstance(value, float) and not math.isfinite(value):
        raise InvalidSettings(f"{name}: значение должно быть конечным")
    if isinstance(value, Decimal) and not value.is_finite():
        raise InvalidSettings(f"{name}: значение должно быть конечным")
    if value < 0:
        raise InvalidSettings(f"{name}: значение не может быть отрицательным")


def validate_thresholds(settings: NotificationSettings) -> None:
    _check_threshold("max_defects", settings.max_defects)
    _check_threshold("max_downtime", settings.max_downtime)


def exceeds_defects(record, settings: NotificationSettings) -> bool:
    return record.defect_count > settings.max_defects


def exceeds_downtime(record, settings: NotificationSettings) -> bool:
    return record.downtime_minutes > settings.max_downtime


def notification_id(kind: str, record_id) -> str:
    return f"{kind}-{record_id}"


def derive_notifications(
    records: Iterable,
    settings: NotificationSettings,
    limit: Optional[int] = NOTIFICATIONS_LIMIT,
) -> list[SystemNotification]:
    """
    Уведомления о превышении порогов: брак (error) и простой (warning).
    Запись ровно на пороге не попадает. Сортировка по времени записи (новые сверху),
    затем обрезка до limit; limit=None — без обрезки.
    """
    validate_thresholds(settings)
    result: list[SystemNotification] = []
    for r in records:
        day = iso_day(r.date)
        if exceeds_defects(r, settings):
            result.append(
                SystemNotification(
                    id=notification_id(DEFECT_KIND, r.id),
                    title="Превышен порог брака",
                    message=f"Смена {day}: {r.defect_count} шт. (Норма: {settings.max_defects})",
                    comment=r.comments,
                    type="error",
                    timestamp=r.created_at,
                )
            )
        if exceeds_downtime(r, settings):
            result.append(
                SystemNotification(
                    id=notification_id(DOWNTIME_KIND, r.id),
                    title="Критический простой",
                    message=f"Смена {day}: {r.downtime_minutes} мин. (Норма: {settings.max_downtime})",
                    comment=r.comments,
                    type="warning",
                    timestamp=r.created_at,
                )
            )
    # sorted стабилен и при reverse=True: у одной записи брак остаётся перед простоем
    result = sorted(result, key=lambda n: n.timestamp, reverse=True)
    if limit is not None:
        result = result[:limit]
    return result


def merge_notification_states(
    notifications: Sequence[SystemNotification],
    states: Mapping[str, object],
) -> list[SystemNotification]:
    """Наложить сохранённые read/dismissed по id: скрытые убираются, прочитанные помечаются."""
    merged: list[SystemNotification] = []
    for n in notifications:
        state = states.get(n.id)
        if state is None:
            merged.append(n)
            continue
        if state.dismissed:
            continue
        merged.append(replace(n, read=bool(state.read)))
    return merged


def select_records(
    records: Iterable,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    limit: int = AI_DEFAULT_RECORDS,
) -> list:
    """
    Выборка для отчёта: при заданных обеих границах — записи с датой в [start_date, end_date]
    включительно; иначе — limit последних созданных записей.
    """
    if start_date and end_date:
        start, end = iso_day(start_date), iso_day(end_date)
        return [r for r in records if start <= iso_day(r.date) <= end]
    latest = sorted(records, key=lambda r: r.created_at, reverse=True)
    return latest[:limit]


def _as_decimal(name: str, value) -> Decimal:
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise InvalidSettings(f"{name}: ожидается число, получено {value!r}")


def summarize_losses(records: Iterable, settings: NotificationSettings) -> FinancialSummary:
    """Потери по уже отобранным записям."""
    cost_per_defect = _as_decimal("cost_per_defect", settings.cost_per_defect)
    cost_per_minute = _as_decimal("cost_per_minute_downtime", settings.cost_per_minute_downtime)
    total_defects = 0
    total_downtime = 0
    for r in records:
        total_defects += r.defect_count
        total_downtime += r.downtime_minutes
    defect_cost = total_defects * cost_per_defect
    downtime_cost = total_downtime * cost_per_minute
    return FinancialSummary(
        total_defect_cost=defect_cost,
        total_downtime_cost=downtime_cost,
        total_losses=defect_cost + downtime_cost,
        cost_per_defect=cost_per_defect,
        cost_per_minute_downtime=cost_per_minute,
    )


def compute_financial_summary(
    records: Iterable,
    settings: NotificationSettings,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    limit: int = AI_DEFAULT_RECORDS,
) -> FinancialSummary:
    return summarize_losses(select_records(records, start_date, end_date, limit), settings)


def _json_number(value: Decimal):
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def build_ai_payload(
    records: Iterable,
    settings: NotificationSettings,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    limit: int = AI_DEFAULT_RECORDS,
) -> tuple[str, FinancialSummary]:
    """JSON для генерации отчёта: компактные строки журнала и финансовая сводка."""
    selected = select_records(records, start_date, end_date, limit)
    summary = summarize_losses(selected, settings)
    payload = {
        "productionData": [
            {
                "date": iso_day(r.date),
                "shift": get_short_label(r.shift_id),
                "produced": r.product_count,
                "defects": r.defect_count,
                "downtime": r.downtime_minutes,
                "operator": r.operator_name,
            }
            for r in selected
        ],
        "financialSummary": {
            "costPerDefect": _json_number(summary.cost_per_defect),
            "costPerMinuteDowntime": _json_number(summary.cost_per_minute_downtime),
            "totalDefectCost": _json_number(summary.total_defect_cost),
            "totalDowntimeCost": _json_number(summary.total_downtime_cost),
            "totalLosses": _json_number(summary.total_losses),
        },
    }
    return json.dumps(payload, ensure_ascii=False), summary


def threshold_alert_text(record, settings: NotificationSettings) -> Optional[str]:
    """Текст оповещения в Telegram для только что сохранённой записи; None — пороги не превышены."""
    defects_over = exceeds_defects(record, settings)
    downtime_over = exceeds_downtime(record, settings)
    if not defects_over and not downtime_over:
        return None
    lines = [
        "⚠️ Внимание! Превышение показателей.",
        f"Оператор: {record.operator_name}",
        f"Смена: {iso_day(record.date)}",
    ]
    if defects_over:
        lines.append(f"❌ Брак: {record.defect_count} шт.")
    if downtime_over:
        lines.append(f"⏱️ Простой: {record.downtime_minutes} мин.")
    if record.comments:
        lines.append(f"💬 Коммент: {record.comments}")
    return "\n".join(lines)


def compute_production_stats(records: Iterable) -> ProductionStats:
    total_production = 0
    total_defects = 0
    total_downtime = 0
    for r in records:
        total_production += r.product_count
        total_defects += r.defect_count
        total_downtime += r.downtime_minutes
    if total_production > 0:
        rate = (Decimal(total_defects) / Decimal(total_production) * 100).quantize(_CENT)
    else:
        rate = Decimal("0")
    return ProductionStats(
        total_production=total_production,
        total_defects=total_defects,
        total_downtime=total_downtime,
        defect_rate=rate,
        needs_attention=rate > DEFECT_RATE_ATTENTION,
    )


def shift_breakdown(records: Iterable, shifts: Sequence) -> list[ShiftStat]:
    """Сумма по каждой известной смене; записи с неизвестной сменой не учитываются."""
    totals = {s.id: [0, 0, 0] for s in shifts}
    for r in records:
        acc = totals.get(r.shift_id)
        if acc is None:
            continue
        acc[0] += r.product_count
        acc[1] += r.defect_count
        acc[2] += r.downtime_minutes
    return [
        ShiftStat(
            shift_id=s.id,
            name=s.name,
            production=totals[s.id][0],
            defects=totals[s.id][1],
            downtime=totals[s.id][2],
        )
        for s in shifts
    ]


def production_trend(records: Iterable) -> list[TrendPoint]:
    points = []
    for r in sorted(records, key=lambda r: iso_day(r.date)):
        day = iso_day(r.date)
        points.append(
            TrendPoint(
                date=day,
                date_short=day[5:],
                product_count=r.product_count,
                defect_count=r.defect_count,
                downtime_minutes=r.downtime_minutes,
            )
        )
    return points


def filter_journal(
    records: Iterable,
    search: Optional[str] = None,
    shift_id: Optional[str] = None,
) -> list:
    """Журнал смен: поиск по ФИО оператора или дате, фильтр по смене; новые даты сверху."""
    needle = (search or "").strip().lower()
    result = []
    for r in records:
        if needle and needle not in r.operator_name.lower() and needle not in iso_day(r.date):
            continue
        if shift_id and shift_id != "all" and r.shift_id != shift_id:
            continue
        result.append(r)
    return sorted(result, key=lambda r: iso_day(r.date), reverse=True)
