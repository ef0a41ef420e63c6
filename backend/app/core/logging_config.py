import logging
import sys

from app.config import settings


def setup_logging() -> None:
    """Базовая настройка логгера для всего приложения."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # httpx логирует каждый запрос на INFO, а в URL Telegram лежит токен бота
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
