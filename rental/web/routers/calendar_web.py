import datetime
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from rental.core.config import settings
from rental.domain.availability import calculate_rental_days, next_available_date
from rental.domain.calendar import WEEKDAYS_PL, shift_month
from rental.domain.month_view import build_month_view
from rental.schemas.reservation import DateSelectRequest, MonthViewOut, SelectionOut
from rental.services.calendar_sessions import CalendarSession, CalendarSessions
from rental.web.deps import get_calendar_sessions, get_session_id

logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

router = APIRouter(prefix="/calendar", tags=["calendar"])


def _set_session_cookie(response: Response, session_id: str) -> None:
    response.set_cookie(
        settings.calendar_session_cookie,
        session_id,
        httponly=True,
        samesite="lax",
    )


def _booking_window(today: datetime.date) -> tuple[datetime.date, datetime.date]:
    return today, today + datetime.timedelta(days=settings.booking_window_days)


def _selection_out(session: CalendarSession) -> SelectionOut:
    start, end = session.last_selection
    return SelectionOut(
        start=start,
        end=end,
        phase=session.calendar.phase,
        rental_days=calculate_rental_days(start, end),
    )


def _default_month(session: CalendarSession, today: datetime.date) -> tuple[int, int]:
    """Month of the selection anchor, else of the first free day from today."""
    if session.calendar.anchor is not None:
        return session.calendar.anchor.year, session.calendar.anchor.month
    first_free = next_available_date(
        today - datetime.timedelta(days=1),
        session.calendar.reserved_dates,
        today=today,
        limit=settings.booking_window_days + 1,
    )
    target = first_free or today
    return target.year, target.month


def _month_view_out(
    session: CalendarSession, year: int, month: int, today: datetime.date
) -> MonthViewOut:
    min_date, max_date = _booking_window(today)
    view = build_month_view(
        session.calendar, year, month, today=today, min_date=min_date, max_date=max_date
    )
    return MonthViewOut(
        year=view.year,
        month=view.month,
        title=view.title,
        weeks=[
            [asdict(cell) if cell is not None else None for cell in week]
            for week in view.weeks
        ],
        selection=_selection_out(session),
    )


@router.get("/{equipment_id}", response_class=HTMLResponse)
def calendar_page(
    request: Request,
    equipment_id: str,
    year: Optional[int] = Query(default=None, ge=1970, le=9999),
    month: Optional[int] = Query(default=None, ge=1, le=12),
    session_id: str = Depends(get_session_id),
    sessions: CalendarSessions = Depends(get_calendar_sessions),
):
    """
    Availability calendar page for one piece of equipment.
    """
    today = datetime.date.today()
    session = sessions.open(session_id, equipment_id)

    if year is None or month is None:
        year, month = _default_month(session, today)

    min_date, max_date = _booking_window(today)
    view = build_month_view(
        session.calendar, year, month, today=today, min_date=min_date, max_date=max_date
    )
    prev_year, prev_month = shift_month(year, month, -1)
    next_year, next_month = shift_month(year, month, 1)

    response = templates.TemplateResponse(
        request,
        "calendar/month.html",
        {
            "title": settings.project_name,
            "equipment_id": equipment_id,
            "view": view,
            "weekdays": WEEKDAYS_PL,
            "selection": _selection_out(session),
            "prev": {"year": prev_year, "month": prev_month},
            "next": {"year": next_year, "month": next_month},
        },
    )
    _set_session_cookie(response, session_id)
    return response


@router.get("/{equipment_id}/month", response_model=MonthViewOut)
def calendar_month(
    response: Response,
    equipment_id: str,
    year: int = Query(ge=1970, le=9999),
    month: int = Query(ge=1, le=12),
    session_id: str = Depends(get_session_id),
    sessions: CalendarSessions = Depends(get_calendar_sessions),
):
    session = sessions.open(session_id, equipment_id)
    _set_session_cookie(response, session_id)
    return _month_view_out(session, year, month, datetime.date.today())


@router.post("/{equipment_id}/select", response_model=SelectionOut)
def select_date(
    payload: DateSelectRequest,
    response: Response,
    equipment_id: str,
    session_id: str = Depends(get_session_id),
    sessions: CalendarSessions = Depends(get_calendar_sessions),
):
    session = sessions.open(session_id, equipment_id)
    min_date, max_date = _booking_window(datetime.date.today())
    applied = session.select(payload.day, min_date=min_date, max_date=max_date)
    _set_session_cookie(response, session_id)

    result = _selection_out(session)
    logger.debug(
        "Calendar %s/%s select %s -> %s%s",
        session_id,
        equipment_id,
        payload.day,
        result.phase.value,
        "" if applied else " (ignored)",
    )
    return result


@router.post("/{equipment_id}/reset", response_model=SelectionOut)
def reset_selection(
    response: Response,
    equipment_id: str,
    session_id: str = Depends(get_session_id),
    sessions: CalendarSessions = Depends(get_calendar_sessions),
):
    session = sessions.open(session_id, equipment_id)
    session.calendar.reset()
    _set_session_cookie(response, session_id)
    return _selection_out(session)


@router.post("/{equipment_id}/close")
def close_calendar(
    equipment_id: str,
    session_id: str = Depends(get_session_id),
    sessions: CalendarSessions = Depends(get_calendar_sessions),
):
    closed = sessions.close(session_id, equipment_id)
    return {"ok": True, "closed": closed}
