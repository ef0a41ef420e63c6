"""
Оповещение в Telegram при сохранении записи с превышением порогов.
Использует Telegram Bot API; токен бота и chat_id берутся из настроек уведомлений.
Ошибки только логируются: отправка не должна мешать сохранению записи.
"""
from typing import Optional

import httpx

from app.config import settings as app_settings
from app.core.logging_config import get_logger
from app.services.derivation import NotificationSettings, threshold_alert_text

logger = get_logger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org"
ALERT_HEADER = "🚨 *SSK ZVEZDA ALERT*"


def _format_alert(text: str) -> str:
    return f"{ALERT_HEADER}\n\n{text}"


async def send_alert(
    text: str,
    bot_token: str,
    chat_id: str,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> bool:
    """Отправить сообщение. True — Telegram ответил 200."""
    if not bot_token or not chat_id:
        logger.warning("Telegram: не заданы токен бота или chat_id — оповещение не отправлено")
        return False
    url = f"{TELEGRAM_API_URL}/bot{bot_token}/sendMessage"
    payload = {
        "chat_id": chat_id,
        "text": _format_alert(text),
        "parse_mode": "Markdown",
    }
    try:
        async with httpx.AsyncClient(transport=transport) as client:
            r = await client.post(url, json=payload, timeout=app_settings.telegram_timeout)
        if r.status_code != 200:
            logger.warning("Telegram sendMessage %s: %s", r.status_code, r.text)
            return False
    except Exception as e:
        logger.exception("Ошибка отправки в Telegram chat_id=%s: %s", chat_id, e)
        return False
    logger.info("Оповещение отправлено в Telegram chat_id=%s", chat_id)
    return True


async def notify_threshold_exceeded(record, settings: NotificationSettings) -> bool:
    """Проверить только что сохранённую запись теми же порогами, что и список уведомлений."""
    text = threshold_alert_text(record, settings)
    if text is None:
        return False
    return await send_alert(text, settings.telegram_bot_token, settings.telegram_chat_id)
