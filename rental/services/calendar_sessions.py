import datetime
import logging
import threading
import time
from collections import OrderedDict
from typing import Callable, Hashable, Optional

from rental.domain.availability import AvailabilityCalendar, as_day
from rental.services.reserved_dates import ReservedDatesFeed, ReservedDatesSubscription

logger = logging.getLogger(__name__)

Selection = tuple[Optional[datetime.date], Optional[datetime.date]]


class CalendarSession:
    """One open calendar: the selection engine plus its feed subscription."""

    def __init__(
        self,
        feed: ReservedDatesFeed,
        equipment_id: str,
        allow_single_day: bool = False,
    ):
        self.equipment_id = equipment_id
        self.last_selection: Selection = (None, None)
        self.calendar = AvailabilityCalendar(
            on_date_select=self._on_date_select,
            allow_single_day=allow_single_day,
        )
        self.subscription: ReservedDatesSubscription = feed.subscribe(
            equipment_id, self.calendar.update_reserved_dates
        )
        self.last_used = 0.0

    def select(
        self,
        day: datetime.date,
        min_date: Optional[datetime.date] = None,
        max_date: Optional[datetime.date] = None,
    ) -> bool:
        """
        Apply a click coming from a host.

        Only days the month grid offers as clickable reach the engine: days
        outside [min_date, max_date] and unselectable days are ignored and
        the selection stays as it was. Returns True when the click was applied.
        """
        day = as_day(day)
        if min_date is not None and day < min_date:
            return False
        if max_date is not None and day > max_date:
            return False
        if not self.calendar.is_selectable(day):
            return False
        self.calendar.select_date(day)
        return True

    def close(self) -> None:
        self.subscription.close()

    def _on_date_select(
        self, start: Optional[datetime.date], end: Optional[datetime.date]
    ) -> None:
        self.last_selection = (start, end)


class CalendarSessions:
    """
    Open calendars keyed by (owner, equipment id); owner is a cookie or a chat user.

    Sessions idle for longer than ``idle_timeout`` seconds are closed, and
    once ``max_sessions`` are open the least recently used one is closed to
    make room. Both limits are checked whenever a session is opened.
    """

    def __init__(
        self,
        feed: ReservedDatesFeed,
        allow_single_day: bool = False,
        idle_timeout: Optional[float] = None,
        max_sessions: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.feed = feed
        self.allow_single_day = allow_single_day
        self.idle_timeout = idle_timeout
        self.max_sessions = max_sessions
        self._clock = clock
        self._sessions: "OrderedDict[tuple[Hashable, str], CalendarSession]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, owner: Hashable, equipment_id: str) -> CalendarSession | None:
        with self._lock:
            return self._sessions.get((owner, equipment_id))

    def open(self, owner: Hashable, equipment_id: str) -> CalendarSession:
        key = (owner, equipment_id)
        now = self._clock()
        with self._lock:
            session = self._sessions.get(key)
            if session is not None:
                session.last_used = now
                self._sessions.move_to_end(key)
            expired = self._pop_expired(now)
        self._close_evicted(expired)
        if session is not None:
            return session

        session = CalendarSession(
            self.feed, equipment_id, allow_single_day=self.allow_single_day
        )
        session.last_used = now
        with self._lock:
            existing = self._sessions.setdefault(key, session)
            evicted = self._pop_overflow() if existing is session else []
        if existing is not session:
            session.close()
            return existing
        self._close_evicted(evicted)

        logger.debug("Calendar opened for %s / %s", owner, equipment_id)
        return session

    def close(self, owner: Hashable, equipment_id: str) -> bool:
        with self._lock:
            session = self._sessions.pop((owner, equipment_id), None)
        if session is None:
            return False
        session.close()
        logger.debug("Calendar closed for %s / %s", owner, equipment_id)
        return True

    def close_all(self) -> None:
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            session.close()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _pop_expired(self, now: float) -> list[tuple[tuple[Hashable, str], CalendarSession]]:
        if self.idle_timeout is None:
            return []
        expired = [
            (key, session)
            for key, session in self._sessions.items()
            if now - session.last_used > self.idle_timeout
        ]
        for key, _ in expired:
            del self._sessions[key]
        return expired

    def _pop_overflow(self) -> list[tuple[tuple[Hashable, str], CalendarSession]]:
        evicted = []
        if self.max_sessions is None:
            return evicted
        while len(self._sessions) > self.max_sessions:
            evicted.append(self._sessions.popitem(last=False))
        return evicted

    @staticmethod
    def _close_evicted(evicted) -> None:
        for (owner, equipment_id), session in evicted:
            session.close()
            logger.debug("Calendar evicted for %s / %s", owner, equipment_id)
