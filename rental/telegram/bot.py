from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode

from rental.services.calendar_sessions import CalendarSessions
from rental.telegram.handlers import calendar


def create_bot(token: str) -> Bot:
    return Bot(
        token=token,
        default=DefaultBotProperties(parse_mode=ParseMode.HTML),
    )


def create_dispatcher(calendar_sessions: CalendarSessions) -> Dispatcher:
    # Handlers receive calendar_sessions from the dispatcher workflow data
    dp = Dispatcher(calendar_sessions=calendar_sessions)
    dp.include_router(calendar.router)
    return dp
