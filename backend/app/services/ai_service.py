"""
AI-аналитика: текстовый отчёт по данным журнала через Gemini REST API (generateContent).
Повторов нет: при ошибке поднимается AnalysisUnavailable, API показывает сообщение пользователю.
"""
from typing import Optional

import httpx

from app.config import settings
from app.core.exceptions import AnalysisUnavailable
from app.core.logging_config import get_logger

logger = get_logger(__name__)

GEMINI_API_URL = "https://generativelanguage.googleapis.com/v1beta/models"
UNAVAILABLE_MESSAGE = "Не удалось выполнить анализ. Проверьте подключение."

PROMPT_TEMPLATE = """Ты — аналитик производства судостроительного комплекса «Звезда».
Ниже данные журнала смен (выпуск, брак, простой, оператор) и финансовая сводка потерь в рублях.

Подготовь краткий отчёт на русском языке в формате Markdown:
## Ключевые выводы
## Проблемные смены и операторы
## Финансовые потери
## Рекомендации

Используй списки через "- " и выделение **жирным** для важных цифр. Не выдумывай данные.

Данные:
{payload}
"""


def build_prompt(json_payload: str) -> str:
    return PROMPT_TEMPLATE.format(payload=json_payload)


def _extract_text(body) -> Optional[str]:
    """Текст первого кандидата; None, если ответ не той формы."""
    if not isinstance(body, dict):
        return None
    candidates = body.get("candidates")
    if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
        return None
    content = candidates[0].get("content")
    if not isinstance(content, dict):
        return None
    parts = content.get("parts")
    if not isinstance(parts, list):
        return None
    text = "".join(
        p["text"] for p in parts if isinstance(p, dict) and isinstance(p.get("text"), str)
    )
    return text.strip() or None


async def summarize(json_payload: str, transport: Optional[httpx.AsyncBaseTransport] = None) -> str:
    """Сгенерировать отчёт по JSON из build_ai_payload."""
    if not settings.gemini_api_key:
        logger.warning("GEMINI_API_KEY не задан — анализ недоступен")
        raise AnalysisUnavailable("GEMINI_API_KEY не задан")
    url = f"{GEMINI_API_URL}/{settings.gemini_model}:generateContent"
    body = {"contents": [{"parts": [{"text": build_prompt(json_payload)}]}]}
    try:
        async with httpx.AsyncClient(transport=transport) as client:
            r = await client.post(
                url,
                json=body,
                headers={"x-goog-api-key": settings.gemini_api_key},
                timeout=settings.gemini_timeout,
            )
    except httpx.HTTPError as e:
        logger.warning("Gemini: сетевая ошибка: %s", e)
        raise AnalysisUnavailable(str(e))
    if r.status_code != 200:
        logger.warning("Gemini generateContent %s: %s", r.status_code, r.text[:500])
        raise AnalysisUnavailable(f"HTTP {r.status_code}")
    try:
        text = _extract_text(r.json())
    except ValueError:
        text = None
    if not text:
        logger.warning("Gemini: пустой или некорректный ответ")
        raise AnalysisUnavailable("Пустой ответ модели")
    return text
