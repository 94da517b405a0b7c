import uuid

from fastapi import Request

from rental.core.config import settings
from rental.services.calendar_sessions import CalendarSessions
from rental.services.reserved_dates import ReservedDatesFeed


def get_feed(request: Request) -> ReservedDatesFeed:
    return request.app.state.reserved_dates_feed


def get_calendar_sessions(request: Request) -> CalendarSessions:
    return request.app.state.calendar_sessions


def get_session_id(request: Request) -> str:
    """
    Browser calendar session id from the cookie, or a fresh one.
    Routes that create sessions must set the cookie on their response.
    """
    session_id = request.cookies.get(settings.calendar_session_cookie)
    if not session_id:
        session_id = uuid.uuid4().hex
    return session_id


def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
