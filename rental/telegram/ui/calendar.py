import datetime
from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from rental.domain.calendar import WEEKDAYS_PL, shift_month
from rental.domain.month_view import DayCell, MonthView

IGNORE = "ignore"

# Telegram limit for InlineKeyboardButton.callback_data, in bytes
MAX_CALLBACK_DATA_BYTES = 64


def day_label(cell: DayCell) -> str:
    if cell.is_reserved:
        return "❌"
    if cell.is_anchor or cell.is_range_end:
        return f"[{cell.day.day}]"
    if cell.in_range:
        return f"·{cell.day.day}·"
    if cell.is_today:
        return f"🔹 {cell.day.day}"
    if cell.disabled:
        return " "
    return str(cell.day.day)


def build_month_keyboard(view: MonthView, equipment_id: str) -> InlineKeyboardMarkup:
    keyboard: list[list[InlineKeyboardButton]] = []

    # Title
    keyboard.append([InlineKeyboardButton(text=view.title, callback_data=IGNORE)])

    # Weekdays
    keyboard.append(
        [InlineKeyboardButton(text=day, callback_data=IGNORE) for day in WEEKDAYS_PL]
    )

    # Days; disabled ones are not clickable
    for week in view.weeks:
        row: list[InlineKeyboardButton] = []
        for cell in week:
            if cell is None:
                row.append(InlineKeyboardButton(text=" ", callback_data=IGNORE))
            elif cell.disabled:
                row.append(InlineKeyboardButton(text=day_label(cell), callback_data=IGNORE))
            else:
                row.append(
                    InlineKeyboardButton(
                        text=day_label(cell),
                        callback_data=f"cal:{equipment_id}:{cell.day.isoformat()}",
                    )
                )
        keyboard.append(row)

    # Navigation
    prev_year, prev_month = shift_month(view.year, view.month, -1)
    next_year, next_month = shift_month(view.year, view.month, 1)
    keyboard.append(
        [
            InlineKeyboardButton(
                text="⬅️",
                callback_data=f"cal_month:{equipment_id}:{prev_year}-{prev_month}",
            ),
            InlineKeyboardButton(
                text="➡️",
                callback_data=f"cal_month:{equipment_id}:{next_year}-{next_month}",
            ),
        ]
    )

    # Reset keeps the visible month
    keyboard.append(
        [
            InlineKeyboardButton(
                text="🔄 Wyczyść wybór",
                callback_data=f"cal_reset:{equipment_id}:{view.year}-{view.month}",
            )
        ]
    )

    return InlineKeyboardMarkup(inline_keyboard=keyboard)


def selection_text(
    start: datetime.date | None, end: datetime.date | None, rental_days: int = 0
) -> str:
    if start and end:
        return (
            f"✅ <b>Wybrany termin</b>\n\n"
            f"{start.strftime('%d.%m.%Y')} – {end.strftime('%d.%m.%Y')} "
            f"({rental_days} dni)"
        )
    if start:
        return (
            f"📅 <b>Wybierz datę zwrotu</b>\n\n"
            f"Odbiór: {start.strftime('%d.%m.%Y')}"
        )
    return "📅 <b>Wybierz datę odbioru</b>"


def callback_data_fits(equipment_id: str) -> bool:
    """
    Whether every callback of a keyboard for this equipment stays within
    Telegram's limit. Ids containing ':' would break callback parsing.
    """
    if ":" in equipment_id:
        return False
    longest = f"cal_month:{equipment_id}:9999-12"
    return len(longest.encode("utf-8")) <= MAX_CALLBACK_DATA_BYTES
