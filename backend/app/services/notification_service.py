"""
Уведомления: вывод из журнала + сохранённые отметки «прочитано»/«скрыто».

Отметки хранятся в notification_states по тому же детерминированному id,
поэтому переживают обновление страницы; само уведомление всегда выводится заново.
"""
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import NotificationState
from app.services.derivation import (
    NotificationSettings,
    SystemNotification,
    derive_notifications,
    merge_notification_states,
)


# число id в одном IN (...): ниже лимитов параметров SQLite и asyncpg
STATES_CHUNK = 500


async def _load_states(db: AsyncSession, ids: Iterable[str]) -> dict:
    ids = list(ids)
    states = {}
    for i in range(0, len(ids), STATES_CHUNK):
        chunk = ids[i:i + STATES_CHUNK]
        result = await db.execute(select(NotificationState).where(NotificationState.id.in_(chunk)))
        states.update((s.id, s) for s in result.scalars().all())
    return states


async def current_notifications(
    db: AsyncSession,
    records: Iterable,
    settings: NotificationSettings,
    limit: int,
) -> List[SystemNotification]:
    """Последние limit уведомлений без скрытых, с отметкой прочтения."""
    derived = derive_notifications(records, settings, limit=None)
    states = await _load_states(db, (n.id for n in derived))
    return merge_notification_states(derived, states)[:limit]


async def upsert_states(db: AsyncSession, ids: Iterable[str], read: Optional[bool] = None, dismissed: Optional[bool] = None) -> int:
    """Записать отметки для списка id (создать строку, если её ещё нет). Возвращает число id."""
    ids = list(dict.fromkeys(ids))
    existing = await _load_states(db, ids)
    for nid in ids:
        state = existing.get(nid)
        if state is None:
            state = NotificationState(id=nid, read=False, dismissed=False)
            db.add(state)
        if read is not None:
            state.read = read
        if dismissed is not None:
            state.dismissed = dismissed
    await db.flush()
    return len(ids)
