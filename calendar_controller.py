"""Open/closed state machine behind the date picker (no UI dependencies)."""

from __future__ import annotations

import enum
import logging
from datetime import date, datetime
from typing import Callable

from calendar_logic import (
    CalendarView,
    build_view,
    disabled_predicate,
    first_of_month,
    next_month,
    prev_month,
)
from locales import format_date, resolve

logger = logging.getLogger(__name__)

DISMISS_KEYS = {"Escape"}
ACTIVATE_KEYS = {"Return", "KP_Enter", "Enter", "space", " "}
CLEAR_KEYS = {"Delete", "BackSpace"}

# subscribe(handler) -> release
OutsideListener = Callable[[Callable[[], None]], Callable[[], None]]


class PickerState(enum.Enum):
    CLOSED = "closed"
    OPEN = "open"


def _to_date(value: date | datetime | None) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    return value


class CalendarController:
    """Owns the view month, the selection and the open/closed state.

    Every public method handles one discrete event synchronously. The host
    supplies *on_change* (called once per committed selection), *focus_field*
    (called when Escape hands focus back to the text field) and
    *outside_listener*, which subscribes a handler for pointer presses outside
    the field and the grid and returns a function that releases it.
    """

    def __init__(
        self,
        value: date | None = None,
        on_change: Callable[[date | None], None] | None = None,
        locale: str | None = None,
        min_date: date | None = None,
        max_date: date | None = None,
        disabled: bool = False,
        date_format: str | None = None,
        outside_listener: OutsideListener | None = None,
        focus_field: Callable[[], None] | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._on_change = on_change
        self._outside_listener = outside_listener
        self._focus_field = focus_field
        self._today = today
        self._release: Callable[[], None] | None = None

        self.profile = resolve(locale)
        self.date_format = date_format
        self.min_date = _to_date(min_date)
        self.max_date = _to_date(max_date)
        self.disabled = disabled

        self.state = PickerState.CLOSED
        self.selected_date: date | None = _to_date(value)
        self.view_month: date = first_of_month(self.selected_date or self._today())
        self._warn_if_out_of_bounds()

    # ------------------------------------------------------------------
    # Derived data
    # ------------------------------------------------------------------
    @property
    def is_open(self) -> bool:
        return self.state is PickerState.OPEN

    @property
    def display_format(self) -> str:
        return self.date_format or self.profile.date_format

    def display_text(self) -> str:
        """Text shown in the field for the committed value."""
        if self.selected_date is None:
            return ""
        return format_date(self.selected_date, self.display_format, self.profile)

    def is_disabled(self, day: date) -> bool:
        return disabled_predicate(self.disabled, self.min_date, self.max_date)(day)

    def view(self) -> CalendarView:
        return build_view(
            self.view_month,
            self.selected_date,
            self._today(),
            self.profile,
            disabled_predicate(self.disabled, self.min_date, self.max_date),
        )

    def field_accessibility(self, label: str | None = None) -> dict[str, str]:
        return {
            "role": "combobox",
            "aria-haspopup": "dialog",
            "aria-expanded": "true" if self.is_open else "false",
            "aria-label": label or self.profile.texts.date_label,
        }

    # ------------------------------------------------------------------
    # Open / close
    # ------------------------------------------------------------------
    def activate(self) -> bool:
        """Field focused or open requested."""
        if self.is_open or self.disabled:
            return False
        self.state = PickerState.OPEN
        if self._outside_listener is not None:
            self._release = self._outside_listener(self._on_outside_pointer)
        logger.debug("Calendar opened on %s", self.view_month.strftime("%Y-%m"))
        return True

    def close(self) -> bool:
        if not self.is_open:
            return False
        self.state = PickerState.CLOSED
        self._release_listener()
        logger.debug("Calendar closed")
        return True

    def _release_listener(self) -> None:
        release, self._release = self._release, None
        if release is not None:
            release()

    def _on_outside_pointer(self) -> None:
        self.close()

    def destroy(self) -> None:
        """Tear down: leave Open and drop any outside-pointer subscription."""
        self.state = PickerState.CLOSED
        self._release_listener()

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------
    def select(self, day: date | datetime) -> bool:
        """Commit *day* if the grid is open and the day is selectable."""
        day = _to_date(day)
        if not self.is_open or self.is_disabled(day):
            logger.debug("Ignored selection of %s", day)
            return False
        self.selected_date = day
        self.view_month = first_of_month(day)
        self.close()
        logger.info("Day selected: %s", day.isoformat())
        if self._on_change is not None:
            self._on_change(day)
        return True

    def clear(self) -> bool:
        """Drop the committed value and report ``None`` to the host."""
        if self.selected_date is None or self.disabled:
            return False
        self.selected_date = None
        logger.info("Selection cleared")
        if self._on_change is not None:
            self._on_change(None)
        return True

    def set_value(self, value: date | datetime | None) -> None:
        """Host pushed a new external value."""
        self.selected_date = _to_date(value)
        if self.selected_date is not None:
            self.view_month = first_of_month(self.selected_date)
        self._warn_if_out_of_bounds()

    def _warn_if_out_of_bounds(self) -> None:
        d = self.selected_date
        if d is None:
            return
        if (self.min_date and d < self.min_date) or (self.max_date and d > self.max_date):
            logger.warning(
                "Value %s lies outside [%s, %s]", d, self.min_date, self.max_date,
            )

    # ------------------------------------------------------------------
    # Host configuration
    # ------------------------------------------------------------------
    def set_locale(self, code: str | None) -> None:
        self.profile = resolve(code)

    def set_bounds(self, min_date: date | None, max_date: date | None) -> None:
        self.min_date = _to_date(min_date)
        self.max_date = _to_date(max_date)
        self._warn_if_out_of_bounds()

    def set_disabled(self, disabled: bool) -> None:
        self.disabled = disabled
        if disabled:
            self.close()

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------
    def prev_month(self) -> None:
        y, m = prev_month(self.view_month.year, self.view_month.month)
        self.view_month = date(y, m, 1)

    def next_month(self) -> None:
        y, m = next_month(self.view_month.year, self.view_month.month)
        self.view_month = date(y, m, 1)

    def set_month(self, month: int) -> None:
        """Month dropdown: 1 = January, year unchanged."""
        self.view_month = date(self.view_month.year, month, 1)

    def set_year(self, year: int) -> None:
        """Year dropdown: month unchanged."""
        self.view_month = date(year, self.view_month.month, 1)

    def go_today(self) -> None:
        self.view_month = first_of_month(self._today())

    # ------------------------------------------------------------------
    # Keyboard
    # ------------------------------------------------------------------
    def handle_field_key(self, key: str) -> bool:
        """Key pressed on the field. Returns True when the key was consumed."""
        if key in DISMISS_KEYS:
            if not self.close():
                return False
            if self._focus_field is not None:
                self._focus_field()
            return True
        if key in ACTIVATE_KEYS:
            return self.activate()
        if key in CLEAR_KEYS:
            return self.clear()
        # Tab and everything else pass through; Tab never closes the grid.
        return False

    def handle_day_key(self, day: date, key: str) -> bool:
        """Key pressed on a day cell: Enter/Space select like a click."""
        if key in ACTIVATE_KEYS:
            return self.select(day)
        if key in DISMISS_KEYS:
            return self.handle_field_key(key)
        return False
