from app.core.database import Base
from app.models.user import User, UserRole
from app.models.shift import Shift
from app.models.production_record import ProductionRecord
from app.models.notification_settings import NotificationSettingsRow, SETTINGS_ROW_ID
from app.models.notification_state import NotificationState

__all__ = [
    "Base",
    "NotificationSettingsRow",
    "NotificationState",
    "ProductionRecord",
    "SETTINGS_ROW_ID",
    "Shift",
    "User",
    "UserRole",
]
