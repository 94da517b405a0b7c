import calendar
import datetime

MONTHS_PL = [
    "Styczeń",
    "Luty",
    "Marzec",
    "Kwiecień",
    "Maj",
    "Czerwiec",
    "Lipiec",
    "Sierpień",
    "Wrzesień",
    "Październik",
    "Listopad",
    "Grudzień",
]

WEEKDAYS_PL = ["Pon", "Wt", "Śr", "Czw", "Pt", "Sob", "Nd"]


def month_title(year: int, month: int) -> str:
    return f"{MONTHS_PL[month - 1]} {year}"


def get_month_dates(year: int, month: int) -> list[datetime.date]:
    _, days_in_month = calendar.monthrange(year, month)
    return [
        datetime.date(year, month, day)
        for day in range(1, days_in_month + 1)
    ]


def get_month_weeks(year: int, month: int) -> list[list[datetime.date | None]]:
    """Monday-first rows of seven; cells outside the month are None."""
    dates = get_month_dates(year, month)
    weeks: list[list[datetime.date | None]] = []

    row: list[datetime.date | None] = [None] * dates[0].weekday()
    for date in dates:
        row.append(date)
        if len(row) == 7:
            weeks.append(row)
            row = []

    if row:
        row.extend([None] * (7 - len(row)))
        weeks.append(row)

    return weeks


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1
