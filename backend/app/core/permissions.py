"""
RBAC: роль × ресурс.
Роль проверяется на границе API (require_roles), а не только при построении меню.
"""
from enum import Enum
from typing import List, Optional

from app.models.user import UserRole


class Resource(str, Enum):
    """Ресурсы для проверки доступа."""
    DASHBOARD = "DASHBOARD"        # KPI и графики
    JOURNAL = "JOURNAL"            # журнал смен
    ENTRY = "ENTRY"                # ввод данных за смену
    NOTIFICATIONS = "NOTIFICATIONS"
    ANALYTICS = "ANALYTICS"        # финансовые потери и AI-отчёт
    SETTINGS = "SETTINGS"          # пороги, Telegram, стоимость потерь
    USERS = "USERS"                # управление пользователями


_ALL = [UserRole.ADMIN, UserRole.OPERATOR]

# Ресурс → роли, которым разрешён доступ
RESOURCE_ROLES = {
    Resource.DASHBOARD: _ALL,
    Resource.JOURNAL: _ALL,
    Resource.ENTRY: _ALL,
    Resource.NOTIFICATIONS: _ALL,
    Resource.ANALYTICS: [UserRole.ADMIN],
    Resource.SETTINGS: [UserRole.ADMIN],
    Resource.USERS: [UserRole.ADMIN],
}

# Пункты меню в порядке отображения
_MENU = [
    (Resource.DASHBOARD, "dashboard", "Дашборд"),
    (Resource.JOURNAL, "journal", "Журнал смен"),
    (Resource.ENTRY, "entry", "Ввод данных"),
    (Resource.ANALYTICS, "analytics", "AI Аналитика"),
    (Resource.SETTINGS, "settings", "Настройки"),
]

ROLE_LABELS = {
    UserRole.ADMIN: "Администратор",
    UserRole.OPERATOR: "Оператор",
}


def _parse_role(role: str) -> Optional[UserRole]:
    try:
        return UserRole(role)
    except ValueError:
        return None


def roles_for(resource: Resource) -> List[UserRole]:
    return list(RESOURCE_ROLES.get(resource, []))


def can_access_resource(role: str, resource: Resource) -> bool:
    """Проверка: есть ли у роли доступ к ресурсу."""
    r = _parse_role(role)
    if r is None:
        return False
    return r in RESOURCE_ROLES.get(resource, [])


def role_label(role: str) -> str:
    r = _parse_role(role)
    return ROLE_LABELS.get(r, "") if r else ""


def get_menu_items(role: str) -> List[dict]:
    """Пункты навигации для роли: id, label, view. Неизвестная роль — пустое меню."""
    if _parse_role(role) is None:
        return []
    return [
        {"id": item_id, "label": label, "view": resource.value}
        for resource, item_id, label in _MENU
        if can_access_resource(role, resource)
    ]
