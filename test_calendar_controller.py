"""
test_calendar_controller.py

Drives the picker state machine directly, without tkinter.
"""

from datetime import date, datetime

import pytest

from calendar_controller import CalendarController, PickerState
from locales import EN, FR

TODAY = date(2024, 3, 10)


# ── Fakes ─────────────────────────────────────────────────────────────────────

class FakeListener:
    """Stands in for the host's outside-pointer subscription."""

    def __init__(self):
        self.handlers = []
        self.acquired = 0
        self.released = 0
        self.peak = 0

    def __call__(self, handler):
        self.handlers.append(handler)
        self.acquired += 1
        self.peak = max(self.peak, len(self.handlers))

        def release():
            self.released += 1
            self.handlers.remove(handler)

        return release

    @property
    def active(self):
        return len(self.handlers)

    def press_outside(self):
        for handler in list(self.handlers):
            handler()


@pytest.fixture
def changes():
    return []


@pytest.fixture
def focus_calls():
    return []


@pytest.fixture
def listener():
    return FakeListener()


@pytest.fixture
def make(changes, focus_calls, listener):
    def _make(**kwargs):
        kwargs.setdefault("on_change", changes.append)
        kwargs.setdefault("focus_field", lambda: focus_calls.append(True))
        kwargs.setdefault("outside_listener", listener)
        kwargs.setdefault("today", lambda: TODAY)
        return CalendarController(**kwargs)
    return _make


@pytest.fixture
def ctl(make):
    return make()


# ── Initial state ─────────────────────────────────────────────────────────────

class TestInitialState:

    def test_starts_closed_on_current_month(self, ctl):
        assert ctl.state is PickerState.CLOSED
        assert ctl.view_month == date(2024, 3, 1)
        assert ctl.selected_date is None

    def test_view_month_follows_initial_value(self, make):
        ctl = make(value=date(2021, 7, 19))
        assert ctl.view_month == date(2021, 7, 1)

    def test_datetime_value_is_reduced_to_date(self, make):
        ctl = make(value=datetime(2021, 7, 19, 13, 45))
        assert ctl.selected_date == date(2021, 7, 19)

    def test_default_locale_is_french(self, ctl):
        assert ctl.profile is FR

    def test_unknown_locale_uses_default(self, make):
        assert make(locale="de").profile is FR


# ── Open / close ──────────────────────────────────────────────────────────────

class TestOpenClose:

    def test_activate_opens_and_acquires_listener(self, ctl, listener):
        assert ctl.activate()
        assert ctl.is_open
        assert listener.active == 1

    def test_activate_twice_is_noop(self, ctl, listener):
        ctl.activate()
        assert not ctl.activate()
        assert listener.acquired == 1

    def test_outside_pointer_closes(self, ctl, listener, changes):
        ctl.activate()
        listener.press_outside()
        assert ctl.state is PickerState.CLOSED
        assert listener.active == 0
        assert changes == []

    def test_repeated_cycles_never_leak_listeners(self, ctl, listener):
        for _ in range(5):
            ctl.activate()
            ctl.close()
        ctl.activate()
        listener.press_outside()
        assert listener.peak == 1
        assert listener.active == 0
        assert listener.acquired == listener.released == 6

    def test_destroy_releases_listener(self, ctl, listener):
        ctl.activate()
        ctl.destroy()
        assert listener.active == 0
        assert not ctl.is_open

    def test_works_without_listener(self, make):
        ctl = make(outside_listener=None)
        assert ctl.activate()
        assert ctl.close()

    def test_disabled_picker_does_not_open(self, make, listener):
        ctl = make(disabled=True)
        assert not ctl.activate()
        assert listener.acquired == 0

    def test_disabling_while_open_closes(self, ctl, listener):
        ctl.activate()
        ctl.set_disabled(True)
        assert not ctl.is_open
        assert listener.active == 0

    def test_accessibility_reflects_state(self, ctl):
        assert ctl.field_accessibility()["aria-expanded"] == "false"
        ctl.activate()
        attrs = ctl.field_accessibility("Birth date")
        assert attrs["aria-expanded"] == "true"
        assert attrs["aria-haspopup"] == "dialog"
        assert attrs["role"] == "combobox"
        assert attrs["aria-label"] == "Birth date"


# ── Selection ─────────────────────────────────────────────────────────────────

class TestSelection:

    def test_click_commits_and_closes(self, ctl, changes, listener):
        ctl.activate()
        assert ctl.select(date(2024, 3, 15))
        assert ctl.state is PickerState.CLOSED
        assert changes == [date(2024, 3, 15)]
        assert ctl.view_month == date(2024, 3, 1)
        assert listener.active == 0

    def test_outside_month_day_reanchors_view(self, make, changes):
        ctl = make(value=date(2024, 5, 2))
        ctl.activate()
        ctl.select(date(2024, 4, 29))
        assert ctl.view_month == date(2024, 4, 1)
        assert changes == [date(2024, 4, 29)]

    def test_select_while_closed_is_noop(self, ctl, changes):
        assert not ctl.select(date(2024, 3, 15))
        assert ctl.selected_date is None
        assert changes == []

    def test_disabled_day_is_noop(self, make, changes):
        ctl = make(min_date=date(2024, 3, 5), max_date=date(2024, 3, 20))
        ctl.activate()
        assert not ctl.select(date(2024, 3, 4))
        assert not ctl.select(date(2024, 3, 21))
        assert ctl.is_open
        assert ctl.selected_date is None
        assert changes == []

    def test_bounds_themselves_are_selectable(self, make, changes):
        ctl = make(min_date=date(2024, 3, 5), max_date=date(2024, 3, 20))
        ctl.activate()
        assert ctl.select(date(2024, 3, 5))
        ctl.activate()
        assert ctl.select(date(2024, 3, 20))
        assert changes == [date(2024, 3, 5), date(2024, 3, 20)]

    def test_works_without_callback(self, make):
        ctl = make(on_change=None)
        ctl.activate()
        assert ctl.select(date(2024, 3, 15))
        assert ctl.selected_date == date(2024, 3, 15)

    def test_clear_reports_none(self, make, changes):
        ctl = make(value=date(2024, 3, 15))
        assert ctl.clear()
        assert ctl.selected_date is None
        assert changes == [None]
        assert not ctl.clear()
        assert changes == [None]


# ── Navigation ────────────────────────────────────────────────────────────────

class TestNavigation:

    def test_three_next_months_cross_year(self, make, changes):
        ctl = make(value=date(2024, 11, 20))
        ctl.activate()
        for _ in range(3):
            ctl.next_month()
        assert ctl.view_month == date(2025, 2, 1)
        assert ctl.is_open
        assert ctl.selected_date == date(2024, 11, 20)
        assert changes == []

    def test_prev_month_from_january(self, make):
        ctl = make(value=date(2024, 1, 31))
        ctl.prev_month()
        assert ctl.view_month == date(2023, 12, 1)

    def test_set_month_keeps_year(self, make):
        ctl = make(value=date(2024, 11, 20))
        ctl.set_month(2)
        assert ctl.view_month == date(2024, 2, 1)

    def test_set_year_keeps_month(self, make):
        ctl = make(value=date(2024, 11, 20))
        ctl.set_year(2030)
        assert ctl.view_month == date(2030, 11, 1)

    def test_invalid_month_raises(self, ctl):
        with pytest.raises(ValueError):
            ctl.set_month(13)

    def test_go_today(self, make):
        ctl = make(value=date(2019, 6, 6))
        ctl.go_today()
        assert ctl.view_month == date(2024, 3, 1)
        assert ctl.selected_date == date(2019, 6, 6)

    def test_year_options_follow_view(self, make):
        ctl = make(value=date(2024, 12, 3), locale="en")
        view = ctl.view()
        assert view.year_options == list(range(2014, 2035))
        assert view.date_range.end == date(2025, 1, 4)


# ── External value ────────────────────────────────────────────────────────────

class TestExternalValue:

    def test_new_value_reanchors_view(self, ctl, changes):
        ctl.set_value(date(2022, 8, 14))
        assert ctl.selected_date == date(2022, 8, 14)
        assert ctl.view_month == date(2022, 8, 1)
        assert changes == []

    def test_none_keeps_view_month(self, make):
        ctl = make(value=date(2022, 8, 14))
        ctl.next_month()
        ctl.set_value(None)
        assert ctl.selected_date is None
        assert ctl.view_month == date(2022, 9, 1)

    def test_state_is_preserved(self, ctl):
        ctl.activate()
        ctl.set_value(date(2022, 8, 14))
        assert ctl.is_open

    def test_out_of_bounds_value_is_kept(self, make):
        ctl = make(min_date=date(2024, 1, 1))
        ctl.set_value(date(2023, 6, 1))
        assert ctl.selected_date == date(2023, 6, 1)


# ── Keyboard ──────────────────────────────────────────────────────────────────

class TestKeyboard:

    @pytest.mark.parametrize("key", ["Return", "KP_Enter", "space", "Enter", " "])
    def test_activation_keys_open(self, ctl, key):
        assert ctl.handle_field_key(key)
        assert ctl.is_open

    def test_activation_key_while_open_is_noop(self, ctl):
        ctl.activate()
        assert not ctl.handle_field_key("Return")
        assert ctl.is_open

    def test_escape_closes_and_refocuses(self, ctl, focus_calls, changes):
        ctl.activate()
        assert ctl.handle_field_key("Escape")
        assert not ctl.is_open
        assert focus_calls == [True]
        assert changes == []

    def test_escape_while_closed(self, ctl, focus_calls):
        assert not ctl.handle_field_key("Escape")
        assert focus_calls == []

    def test_tab_keeps_grid_open(self, ctl):
        ctl.activate()
        assert not ctl.handle_field_key("Tab")
        assert ctl.is_open

    def test_delete_clears(self, make, changes):
        ctl = make(value=date(2024, 3, 15))
        assert ctl.handle_field_key("Delete")
        assert changes == [None]

    def test_day_key_selects_like_click(self, ctl, changes):
        ctl.activate()
        assert ctl.handle_day_key(date(2024, 3, 15), "space")
        assert changes == [date(2024, 3, 15)]
        assert not ctl.is_open

    def test_day_escape_closes(self, ctl, focus_calls):
        ctl.activate()
        assert ctl.handle_day_key(date(2024, 3, 15), "Escape")
        assert not ctl.is_open
        assert focus_calls == [True]

    def test_other_day_keys_ignored(self, ctl):
        ctl.activate()
        assert not ctl.handle_day_key(date(2024, 3, 15), "a")
        assert ctl.is_open


# ── Rendering data ────────────────────────────────────────────────────────────

class TestView:

    def test_display_text_per_locale(self, make):
        assert make(value=date(2024, 3, 15)).display_text() == "15/03/2024"
        assert make(value=date(2024, 3, 15), locale="en").display_text() == "03/15/2024"
        assert make().display_text() == ""

    def test_date_format_override(self, make):
        ctl = make(value=date(2024, 3, 15), date_format="yyyy-MM-dd")
        assert ctl.display_text() == "2024-03-15"

    def test_set_locale_switches_profile(self, make):
        ctl = make(value=date(2024, 3, 15))
        ctl.set_locale("en")
        assert ctl.profile is EN
        assert ctl.view().weekday_headers[0] == "Sun"

    def test_view_marks_today_and_selection(self, make):
        ctl = make(value=date(2024, 3, 15))
        view = ctl.view()
        today = [d.date for d in view.days if d.is_today]
        selected = [d.date for d in view.days if d.is_selected]
        assert today == [TODAY]
        assert selected == [date(2024, 3, 15)]
        assert view.tab_stop == date(2024, 3, 15)
        assert len(view.days) % 7 == 0

    def test_view_after_navigation_has_no_tab_stop(self, make):
        ctl = make(value=date(2024, 3, 15))
        ctl.next_month()
        ctl.next_month()
        assert ctl.view().tab_stop is None

    def test_bounds_change_redisables_days(self, ctl):
        ctl.set_bounds(date(2024, 3, 12), None)
        view = ctl.view()
        assert [d.is_disabled for d in view.days if d.date == date(2024, 3, 11)] == [True]
        assert [d.is_disabled for d in view.days if d.date == date(2024, 3, 12)] == [False]
