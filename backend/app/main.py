from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import func, select

from app.config import settings
from app.core.database import engine, Base, async_session_maker
from app.core.exceptions import InvalidSettings
from app.core.logging_config import setup_logging, get_logger
from app.models import Shift, User, UserRole
from app.data.shifts import SHIFTS as DEFAULT_SHIFTS
from app.api.auth import router as auth_router
from app.api.users import router as users_router
from app.api.shifts import router as shifts_router
from app.api.records import router as records_router
from app.api.dashboard import router as dashboard_router
from app.api.notifications import router as notifications_router
from app.api.settings import router as settings_router
from app.api.analytics import router as analytics_router
from app.services.auth_service import hash_password
from app.services.settings_service import get_settings

setup_logging()
logger = get_logger(__name__)


async def ensure_superuser():
    """Создать администратора из SUPERUSER_* в .env, если такого логина ещё нет."""
    login = settings.superuser_login.strip()
    async with async_session_maker() as session:
        r = await session.execute(select(User).where(func.lower(User.username) == login.lower()))
        if r.scalar_one_or_none() is not None:
            return
        user = User(
            full_name=settings.superuser_name,
            username=login,
            role=UserRole.ADMIN,
            password_hash=hash_password(settings.superuser_password),
            is_active=True,
        )
        session.add(user)
        await session.commit()
        logger.info("Создан администратор: %s", login)


async def seed_shifts():
    """Заполнить справочник смен, если таблица пуста."""
    async with async_session_maker() as session:
        r = await session.execute(select(Shift).limit(1))
        if r.scalar_one_or_none() is not None:
            return
        for i, item in enumerate(DEFAULT_SHIFTS):
            session.add(Shift(sort_order=i, **item))
        await session.commit()
        logger.info("Справочник смен заполнен (%s смен)", len(DEFAULT_SHIFTS))


async def seed_settings():
    """Строка настроек уведомлений со значениями по умолчанию."""
    async with async_session_maker() as session:
        await get_settings(session)
        await session.commit()


@asynccontextmanager
async def lifespan(app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Таблицы БД проверены/созданы")
    try:
        await seed_shifts()
    except Exception as e:
        logger.warning("Справочник смен: %s", e)
    try:
        await seed_settings()
    except Exception as e:
        logger.warning("Настройки уведомлений: %s", e)
    try:
        await ensure_superuser()
    except Exception as e:
        logger.warning("Администратор: %s", e)
    yield
    await engine.dispose()


app = FastAPI(title="ССК Звезда — мониторинг производства", version="1.0.0", lifespan=lifespan)


@app.exception_handler(InvalidSettings)
async def invalid_settings_handler(request: Request, exc: InvalidSettings):
    logger.warning("Некорректные настройки: %s", exc)
    return JSONResponse(status_code=422, content={"detail": f"Некорректные настройки: {exc}"})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Необработанная ошибка: %s", exc)
    detail = "Внутренняя ошибка сервера"
    err_str = str(exc).lower()
    if "duplicate key" in err_str or "unique constraint" in err_str:
        detail = "Конфликт данных (дубликат). Обновите страницу и повторите."
    elif "foreign key" in err_str:
        detail = "Ошибка связи с данными (например, смена или пользователь не найдены)."
    return JSONResponse(
        status_code=500,
        content={"detail": detail},
    )


_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins or ["*"],
    allow_credentials=bool(_origins),
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(auth_router)
app.include_router(users_router)
app.include_router(shifts_router)
app.include_router(records_router)
app.include_router(dashboard_router)
app.include_router(notifications_router)
app.include_router(settings_router)
app.include_router(analytics_router)


@app.get("/health")
def health():
    return {"status": "ok"}
