"""
Tests for the Telegram calendar keyboard and callback handlers
"""
import asyncio
import pytest
from datetime import date, timedelta
from unittest.mock import AsyncMock, MagicMock

from rental.domain.availability import AvailabilityCalendar
from rental.domain.month_view import build_month_view
from rental.services.calendar_sessions import CalendarSessions
from rental.services.reserved_dates import ReservedDatesFeed
from rental.telegram.handlers import calendar as handlers
from rental.telegram.ui.calendar import build_month_keyboard, selection_text


def make_sessions(reserved=None):
    reserved = reserved or {}
    return CalendarSessions(ReservedDatesFeed(lambda equipment_id: reserved.get(equipment_id, [])))


def make_callback(data, user_id=42):
    callback = MagicMock()
    callback.data = data
    callback.from_user.id = user_id
    callback.answer = AsyncMock()
    callback.message.edit_text = AsyncMock()
    return callback


def callback_data(markup):
    return [button.callback_data for row in markup.inline_keyboard for button in row]


class TestMonthKeyboard:

    def test_layout(self):
        calendar = AvailabilityCalendar(["2025-06-10"])
        view = build_month_view(calendar, 2025, 6, today=date(2025, 6, 1))
        markup = build_month_keyboard(view, "drill-01")
        rows = markup.inline_keyboard

        assert rows[0][0].text == "Czerwiec 2025"
        assert [b.text for b in rows[1]] == ["Pon", "Wt", "Śr", "Czw", "Pt", "Sob", "Nd"]
        assert all(len(row) == 7 for row in rows[2:-2])
        assert rows[-2][0].callback_data == "cal_month:drill-01:2025-5"
        assert rows[-2][1].callback_data == "cal_month:drill-01:2025-7"
        assert rows[-1][0].callback_data == "cal_reset:drill-01:2025-6"

    def test_reserved_day_not_clickable(self):
        calendar = AvailabilityCalendar(["2025-06-10"])
        view = build_month_view(calendar, 2025, 6, today=date(2025, 6, 1))
        data = callback_data(build_month_keyboard(view, "drill-01"))

        assert "cal:drill-01:2025-06-10" not in data
        assert "cal:drill-01:2025-06-09" in data

    def test_selected_range_labels(self):
        calendar = AvailabilityCalendar()
        calendar.select_date(date(2025, 6, 3))
        calendar.select_date(date(2025, 6, 5))
        view = build_month_view(calendar, 2025, 6, today=date(2025, 6, 1))
        texts = [b.text for row in build_month_keyboard(view, "drill-01").inline_keyboard for b in row]

        assert "[3]" in texts
        assert "·4·" in texts
        assert "[5]" in texts

    def test_selection_text(self):
        assert "odbioru" in selection_text(None, None)
        assert "05.06.2025" in selection_text(date(2025, 6, 5), None)
        text = selection_text(date(2025, 6, 5), date(2025, 6, 8), 4)
        assert "05.06.2025 – 08.06.2025" in text
        assert "4 dni" in text


class TestCalendarHandlers:

    def test_command_opens_calendar(self):
        sessions = make_sessions()
        message = MagicMock()
        message.from_user.id = 42
        message.answer = AsyncMock()
        command = MagicMock(args="drill-01")

        asyncio.run(handlers.calendar_command(message, command, sessions))

        message.answer.assert_awaited_once()
        assert sessions.get(42, "drill-01") is not None
        markup = message.answer.await_args.kwargs["reply_markup"]
        assert markup.inline_keyboard[-1][0].callback_data.startswith("cal_reset:drill-01:")

    def test_command_without_equipment(self):
        sessions = make_sessions()
        message = MagicMock()
        message.answer = AsyncMock()

        asyncio.run(handlers.calendar_command(message, MagicMock(args=None), sessions))

        assert "/calendar" in message.answer.await_args.args[0]
        assert len(sessions) == 0

    def test_two_clicks_make_range(self):
        sessions = make_sessions()
        start = date.today() + timedelta(days=1)
        end = start + timedelta(days=2)

        asyncio.run(handlers.select_date(make_callback(f"cal:drill-01:{start.isoformat()}"), sessions))
        callback = make_callback(f"cal:drill-01:{end.isoformat()}")
        asyncio.run(handlers.select_date(callback, sessions))

        assert sessions.get(42, "drill-01").last_selection == (start, end)
        text = callback.message.edit_text.await_args.args[0]
        assert "3 dni" in text

    def test_end_across_reservation_ignored(self):
        start = date.today() + timedelta(days=1)
        blocked = start + timedelta(days=1)
        sessions = make_sessions({"drill-01": [blocked.isoformat()]})

        asyncio.run(handlers.select_date(make_callback(f"cal:drill-01:{start.isoformat()}"), sessions))
        callback = make_callback(f"cal:drill-01:{(start + timedelta(days=3)).isoformat()}")
        asyncio.run(handlers.select_date(callback, sessions))

        assert sessions.get(42, "drill-01").last_selection == (start, None)
        assert "niedostępny" in callback.answer.await_args.args[0]
        callback.message.edit_text.assert_not_awaited()

    def test_reserved_day_click_ignored(self):
        day = date.today() + timedelta(days=1)
        sessions = make_sessions({"drill-01": [day.isoformat()]})
        callback = make_callback(f"cal:drill-01:{day.isoformat()}")

        asyncio.run(handlers.select_date(callback, sessions))

        assert sessions.get(42, "drill-01").calendar.anchor is None
        assert "niedostępny" in callback.answer.await_args.args[0]

    def test_past_day_click_ignored(self):
        sessions = make_sessions()
        start = date.today() + timedelta(days=3)
        asyncio.run(handlers.select_date(make_callback(f"cal:drill-01:{start.isoformat()}"), sessions))

        past = date.today() - timedelta(days=2)
        asyncio.run(handlers.select_date(make_callback(f"cal:drill-01:{past.isoformat()}"), sessions))
        asyncio.run(handlers.select_date(make_callback("cal:drill-01:2020-01-01"), sessions))

        assert sessions.get(42, "drill-01").last_selection == (start, None)

    def test_second_click_on_start_clears(self):
        sessions = make_sessions()
        day = date.today() + timedelta(days=1)
        asyncio.run(handlers.select_date(make_callback(f"cal:drill-01:{day.isoformat()}"), sessions))

        callback = make_callback(f"cal:drill-01:{day.isoformat()}")
        asyncio.run(handlers.select_date(callback, sessions))

        assert sessions.get(42, "drill-01").last_selection == (None, None)
        callback.message.edit_text.assert_awaited_once()

    def test_malformed_callback_ignored(self):
        sessions = make_sessions()
        callback = make_callback("cal:drill-01:not-a-date")

        asyncio.run(handlers.select_date(callback, sessions))

        callback.answer.assert_awaited_once()
        callback.message.edit_text.assert_not_awaited()
        assert len(sessions) == 0

    def test_change_month(self):
        sessions = make_sessions()
        callback = make_callback("cal_month:drill-01:2026-1")

        asyncio.run(handlers.change_month(callback, sessions))

        markup = callback.message.edit_text.await_args.kwargs["reply_markup"]
        assert markup.inline_keyboard[0][0].text == "Styczeń 2026"

    def test_change_month_rejects_bad_month(self):
        sessions = make_sessions()
        for data in ("cal_month:drill-01:2025-13", "cal_month:drill-01:2025-0", "cal_month:drill-01:0-5"):
            callback = make_callback(data)

            asyncio.run(handlers.change_month(callback, sessions))

            callback.answer.assert_awaited_once()
            callback.message.edit_text.assert_not_awaited()
        assert len(sessions) == 0

    def test_reset_keeps_visible_month(self):
        sessions = make_sessions()
        day = date.today() + timedelta(days=1)
        asyncio.run(handlers.select_date(make_callback(f"cal:drill-01:{day.isoformat()}"), sessions))

        callback = make_callback("cal_reset:drill-01:2026-3")
        asyncio.run(handlers.reset_selection(callback, sessions))

        assert sessions.get(42, "drill-01").calendar.anchor is None
        markup = callback.message.edit_text.await_args.kwargs["reply_markup"]
        assert markup.inline_keyboard[0][0].text == "Marzec 2026"
        assert markup.inline_keyboard[-1][0].callback_data == "cal_reset:drill-01:2026-3"

    def test_malformed_reset_ignored(self):
        sessions = make_sessions()
        callback = make_callback("cal_reset:drill-01:2026-14")

        asyncio.run(handlers.reset_selection(callback, sessions))

        callback.answer.assert_awaited_once()
        callback.message.edit_text.assert_not_awaited()

    @pytest.mark.parametrize("equipment_id", [
        "a:b",
        "ż" * 24,
        "x" * 47,
    ])
    def test_command_rejects_unusable_equipment_id(self, equipment_id):
        sessions = make_sessions()
        message = MagicMock()
        message.from_user.id = 42
        message.answer = AsyncMock()

        asyncio.run(handlers.calendar_command(message, MagicMock(args=equipment_id), sessions))

        assert "/calendar" in message.answer.await_args.args[0]
        assert len(sessions) == 0

    def test_command_accepts_longest_fitting_id(self):
        sessions = make_sessions()
        message = MagicMock()
        message.from_user.id = 42
        message.answer = AsyncMock()
        equipment_id = "x" * 46

        asyncio.run(handlers.calendar_command(message, MagicMock(args=equipment_id), sessions))

        markup = message.answer.await_args.kwargs["reply_markup"]
        assert all(
            len(button.callback_data.encode()) <= 64
            for row in markup.inline_keyboard
            for button in row
        )


def test_dispatcher_carries_sessions():
    from rental.telegram.bot import create_dispatcher

    sessions = make_sessions()
    dp = create_dispatcher(sessions)

    assert dp["calendar_sessions"] is sessions
    assert handlers.router in dp.sub_routers
