import datetime
from dataclasses import dataclass

from rental.domain.availability import AvailabilityCalendar
from rental.domain.calendar import get_month_weeks, month_title


@dataclass(frozen=True)
class DayCell:
    day: datetime.date
    is_today: bool
    is_reserved: bool
    is_selectable: bool
    is_anchor: bool
    is_range_end: bool
    in_range: bool
    disabled: bool


@dataclass(frozen=True)
class MonthView:
    year: int
    month: int
    title: str
    weeks: list[list[DayCell | None]]

    def cells(self) -> list[DayCell]:
        return [cell for week in self.weeks for cell in week if cell is not None]


def build_month_view(
    calendar: AvailabilityCalendar,
    year: int,
    month: int,
    today: datetime.date | None = None,
    min_date: datetime.date | None = None,
    max_date: datetime.date | None = None,
) -> MonthView:
    """
    Render one month of ``calendar`` as a list of weeks.

    Pure: reads the selection and reserved snapshot, never changes them.
    ``min_date``/``max_date`` bound the bookable window; days outside it are
    disabled but keep their reserved flag for display.
    """
    today = today or datetime.date.today()
    anchor, range_end = calendar.anchor, calendar.range_end

    weeks: list[list[DayCell | None]] = []
    for week in get_month_weeks(year, month):
        row: list[DayCell | None] = []
        for day in week:
            if day is None:
                row.append(None)
                continue

            out_of_window = (min_date is not None and day < min_date) or (
                max_date is not None and day > max_date
            )
            selectable = calendar.is_selectable(day)
            row.append(
                DayCell(
                    day=day,
                    is_today=day == today,
                    is_reserved=calendar.is_reserved(day),
                    is_selectable=selectable,
                    is_anchor=anchor is not None and day == anchor,
                    is_range_end=range_end is not None and day == range_end,
                    in_range=calendar.is_in_range(day),
                    disabled=out_of_window or not selectable,
                )
            )
        weeks.append(row)

    return MonthView(
        year=year,
        month=month,
        title=month_title(year, month),
        weeks=weeks,
    )
