import datetime
import logging

from aiogram import F, Router
from aiogram.filters import Command, CommandObject
from aiogram.types import CallbackQuery, Message

from rental.core.config import settings
from rental.domain.availability import calculate_rental_days, next_available_date
from rental.domain.month_view import build_month_view
from rental.services.calendar_sessions import CalendarSession, CalendarSessions
from rental.telegram.ui.calendar import (
    build_month_keyboard,
    callback_data_fits,
    selection_text,
)

router = Router()
logger = logging.getLogger(__name__)

UNAVAILABLE_TEXT = "Termin niedostępny, wybierz ponownie"


def booking_window(today: datetime.date) -> tuple[datetime.date, datetime.date]:
    return today, today + datetime.timedelta(days=settings.booking_window_days)


def render(session: CalendarSession, year: int, month: int):
    today = datetime.date.today()
    min_date, max_date = booking_window(today)
    view = build_month_view(
        session.calendar,
        year,
        month,
        today=today,
        min_date=min_date,
        max_date=max_date,
    )
    start, end = session.last_selection
    text = selection_text(start, end, calculate_rental_days(start, end))
    return text, build_month_keyboard(view, session.equipment_id)


def parse_month(value: str) -> tuple[int, int]:
    """'2025-6' -> (2025, 6); ValueError for anything else."""
    year, month = map(int, value.split("-"))
    if not 1 <= month <= 12 or not datetime.MINYEAR <= year <= datetime.MAXYEAR:
        raise ValueError(f"month out of range: {value}")
    return year, month


@router.message(Command("calendar"))
async def calendar_command(
    message: Message, command: CommandObject, calendar_sessions: CalendarSessions
):
    """Handler for /calendar <equipment id>"""
    if message.from_user is None:
        return

    equipment_id = (command.args or "").strip()
    if not equipment_id or not callback_data_fits(equipment_id):
        await message.answer("Użycie: /calendar &lt;id sprzętu&gt;")
        return

    user_id = message.from_user.id
    # Every command starts a fresh calendar
    calendar_sessions.close(user_id, equipment_id)
    session = calendar_sessions.open(user_id, equipment_id)

    today = datetime.date.today()
    first_free = next_available_date(
        today - datetime.timedelta(days=1),
        session.calendar.reserved_dates,
        today=today,
        limit=settings.booking_window_days + 1,
    ) or today

    text, keyboard = render(session, first_free.year, first_free.month)
    await message.answer(text, reply_markup=keyboard)


@router.callback_query(F.data == "ignore")
async def ignore_callback(callback: CallbackQuery):
    """Inactive buttons: title, weekdays, padding and disabled days"""
    await callback.answer()


@router.callback_query(F.data.startswith("cal_month:"))
async def change_month(callback: CallbackQuery, calendar_sessions: CalendarSessions):
    if callback.data is None or callback.message is None:
        return

    try:
        _, equipment_id, value = callback.data.split(":")
        year, month = parse_month(value)
    except ValueError:
        logger.warning("Malformed calendar callback: %s", callback.data)
        await callback.answer()
        return

    session = calendar_sessions.open(callback.from_user.id, equipment_id)
    text, keyboard = render(session, year, month)
    await callback.message.edit_text(text, reply_markup=keyboard)
    await callback.answer()


@router.callback_query(F.data.startswith("cal_reset:"))
async def reset_selection(callback: CallbackQuery, calendar_sessions: CalendarSessions):
    if callback.data is None or callback.message is None:
        return

    try:
        _, equipment_id, value = callback.data.split(":")
        year, month = parse_month(value)
    except ValueError:
        logger.warning("Malformed calendar callback: %s", callback.data)
        await callback.answer()
        return

    session = calendar_sessions.open(callback.from_user.id, equipment_id)
    session.calendar.reset()

    text, keyboard = render(session, year, month)
    await callback.message.edit_text(text, reply_markup=keyboard)
    await callback.answer()


@router.callback_query(F.data.startswith("cal:"))
async def select_date(callback: CallbackQuery, calendar_sessions: CalendarSessions):
    """Date click"""
    if callback.data is None or callback.message is None:
        return

    try:
        _, equipment_id, date_str = callback.data.split(":")
        selected = datetime.date.fromisoformat(date_str)
    except ValueError:
        logger.warning("Malformed calendar callback: %s", callback.data)
        await callback.answer()
        return

    session = calendar_sessions.open(callback.from_user.id, equipment_id)
    min_date, max_date = booking_window(datetime.date.today())
    if not session.select(selected, min_date=min_date, max_date=max_date):
        # Day is disabled on the keyboard: stale message or forged callback
        logger.info("Ignored click on %s for %s", selected, equipment_id)
        await callback.answer(UNAVAILABLE_TEXT)
        return

    start, _ = session.last_selection
    if start is None:
        # Second click on the pickup day clears the selection
        await callback.answer("Wybór wyczyszczony")
    else:
        await callback.answer()

    text, keyboard = render(session, selected.year, selected.month)
    await callback.message.edit_text(text, reply_markup=keyboard)
