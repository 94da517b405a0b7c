"""
Reservation date-range availability engine.

The calendar keeps a two-click selection (anchor, then range end) and only
accepts a range when every day in it is free of reservations.
"""
import datetime
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Optional

logger = logging.getLogger(__name__)

DateSelectCallback = Callable[[Optional[datetime.date], Optional[datetime.date]], None]

ONE_DAY = datetime.timedelta(days=1)


class SelectionPhase(str, Enum):
    EMPTY = "empty"
    ANCHORED = "anchored"
    RANGED = "ranged"


@dataclass
class SelectionState:
    anchor: datetime.date | None = None
    range_end: datetime.date | None = None

    @property
    def phase(self) -> SelectionPhase:
        if self.anchor is None:
            return SelectionPhase.EMPTY
        if self.range_end is None:
            return SelectionPhase.ANCHORED
        return SelectionPhase.RANGED


def as_day(value: datetime.date) -> datetime.date:
    """Drop the time of day from a datetime; plain dates pass through."""
    if isinstance(value, datetime.datetime):
        return value.date()
    return value


def normalize_reserved(reserved_dates: Iterable[str]) -> frozenset[str]:
    """ISO strings reduced to their date portion (everything before 'T')."""
    return frozenset(str(item).split("T")[0] for item in reserved_dates)


def iter_days(start: datetime.date, end: datetime.date):
    current = start
    while current <= end:
        yield current
        current += ONE_DAY


class AvailabilityCalendar:
    """
    Selection state machine over a snapshot of reserved dates.

    ``on_date_select(start, end)`` is called synchronously after every
    selection change; invalid clicks reset the selection and report
    ``(None, None)`` instead of raising.
    """

    def __init__(
        self,
        reserved_dates: Iterable[str] = (),
        on_date_select: DateSelectCallback | None = None,
        allow_single_day: bool = False,
    ):
        self._reserved = normalize_reserved(reserved_dates)
        self._on_date_select = on_date_select
        self.allow_single_day = allow_single_day
        self._state = SelectionState()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> SelectionState:
        return SelectionState(self._state.anchor, self._state.range_end)

    @property
    def phase(self) -> SelectionPhase:
        return self._state.phase

    @property
    def anchor(self) -> datetime.date | None:
        return self._state.anchor

    @property
    def range_end(self) -> datetime.date | None:
        return self._state.range_end

    @property
    def reserved_dates(self) -> frozenset[str]:
        return self._reserved

    def update_reserved_dates(self, reserved_dates: Iterable[str]) -> None:
        """Swap in a new snapshot; the current selection is kept as is."""
        self._reserved = normalize_reserved(reserved_dates)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_reserved(self, day: datetime.date) -> bool:
        return as_day(day).isoformat() in self._reserved

    def is_range_free(self, start: datetime.date, end: datetime.date) -> bool:
        reserved = self._reserved
        return all(
            d.isoformat() not in reserved for d in iter_days(as_day(start), as_day(end))
        )

    def is_selectable(self, day: datetime.date) -> bool:
        day = as_day(day)
        if self.is_reserved(day):
            return False

        anchor = self._state.anchor
        if anchor is None:
            return True
        if day < anchor:
            return False

        return self.is_range_free(anchor, day)

    def is_in_range(self, day: datetime.date) -> bool:
        anchor, range_end = self._state.anchor, self._state.range_end
        if anchor is None or range_end is None:
            return False
        return anchor <= as_day(day) <= range_end

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def select_date(self, day: datetime.date) -> SelectionState:
        day = as_day(day)
        anchor = self._state.anchor

        if anchor is None:
            self._state = SelectionState(anchor=day)
            self._notify(day, None)
        elif day > anchor:
            if self.is_range_free(anchor, day):
                self._state = SelectionState(anchor=anchor, range_end=day)
                self._notify(anchor, day)
            else:
                logger.debug("Range %s..%s blocked by a reservation", anchor, day)
                self._clear()
        elif day == anchor and self.allow_single_day and not self.is_reserved(day):
            self._state = SelectionState(anchor=day, range_end=day)
            self._notify(day, day)
        else:
            self._clear()

        return self.state

    def reset(self) -> None:
        self._clear()

    def _clear(self) -> None:
        self._state = SelectionState()
        self._notify(None, None)

    def _notify(
        self, start: datetime.date | None, end: datetime.date | None
    ) -> None:
        logger.debug("Selection changed: %s -> %s", start, end)
        if self._on_date_select is not None:
            self._on_date_select(start, end)


# ----------------------------------------------------------------------
# Day helpers
# ----------------------------------------------------------------------


def is_weekend(day: datetime.date) -> bool:
    return as_day(day).weekday() >= 5


def calculate_rental_days(
    start: datetime.date | None, end: datetime.date | None
) -> int:
    """Number of rental days, counting both the pickup and the return day."""
    if start is None or end is None:
        return 0
    return abs((as_day(end) - as_day(start)).days) + 1


def is_date_available(
    day: datetime.date,
    reserved_dates: Iterable[str],
    today: datetime.date | None = None,
) -> bool:
    day = as_day(day)
    today = today or datetime.date.today()
    if day < today:
        return False
    return day.isoformat() not in normalize_reserved(reserved_dates)


def next_available_date(
    day: datetime.date,
    reserved_dates: Iterable[str],
    today: datetime.date | None = None,
    limit: int = 366,
) -> datetime.date | None:
    """First available day after ``day``; None if nothing is free within ``limit`` days."""
    reserved = normalize_reserved(reserved_dates)
    today = today or datetime.date.today()
    candidate = as_day(day)
    for _ in range(limit):
        candidate += ONE_DAY
        if candidate >= today and candidate.isoformat() not in reserved:
            return candidate
    return None
