import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from rental.core.config import settings
from rental.core.logging import setup_logging
from rental.database import create_session_factory, engine as default_engine, init_db
from rental.middleware.request_logger import RequestLoggerMiddleware
from rental.services.calendar_sessions import CalendarSessions
from rental.services.reservation_service import ReservationService
from rental.services.reserved_dates import ReservedDatesFeed
from rental.web.routers import calendar_web, health, reservations_api

logger = logging.getLogger(__name__)


def make_reserved_dates_loader(session_factory: sessionmaker):
    def load(equipment_id: str) -> list[str]:
        with session_factory() as db:
            return ReservationService.get_reserved_dates(db, equipment_id)

    return load


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("FastAPI startup")
    init_db(app.state.engine)

    bot = None
    polling_task = None
    if settings.telegram_bot_token:
        from rental.telegram.bot import create_bot, create_dispatcher

        bot = create_bot(settings.telegram_bot_token)
        dp = create_dispatcher(app.state.calendar_sessions)
        logger.info("Starting Telegram polling")
        polling_task = asyncio.create_task(dp.start_polling(bot, handle_signals=False))

    yield

    logger.info("FastAPI shutdown")
    if polling_task is not None:
        polling_task.cancel()
    if bot is not None:
        await bot.session.close()

    # Release every open calendar before the feed goes away
    app.state.calendar_sessions.close_all()
    app.state.reserved_dates_feed.close()


def create_app(engine: Engine = default_engine) -> FastAPI:
    app = FastAPI(
        title=settings.project_name,
        description="Kalendarz dostępności i rezerwacje sprzętu",
        version="0.1.0",
        lifespan=lifespan,
    )

    session_factory = create_session_factory(engine)
    feed = ReservedDatesFeed(make_reserved_dates_loader(session_factory))

    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.reserved_dates_feed = feed
    app.state.calendar_sessions = CalendarSessions(
        feed,
        allow_single_day=settings.calendar_allow_single_day,
        idle_timeout=settings.calendar_idle_timeout_seconds,
        max_sessions=settings.calendar_max_sessions,
    )

    app.add_middleware(
        RequestLoggerMiddleware,
        threshold_ms=settings.log_slow_request_threshold_ms,
    )

    app.include_router(health.router)
    app.include_router(calendar_web.router)
    app.include_router(reservations_api.router)
    return app


setup_logging()
app = create_app()
