"""Date field with a popup month grid (tkinter host for CalendarController)."""

import logging
import tkinter as tk
from datetime import date
from tkinter import ttk

from PIL import ImageTk

from calendar_controller import CalendarController
from calendar_logic import CalendarView, day_label
from icon_gen import create_icon_image

logger = logging.getLogger(__name__)

# Colours
ACCENT = "#0078D4"
SEL_BG = "#B3D7F2"
OUTSIDE_FG = "#999999"
PLACEHOLDER_FG = "grey"
ERROR_FG = "#CC0000"


TIP_BG = "#FFFFE0"


def bind_handler(widget: tk.Misc, sequence: str, func) -> str:
    """Add *func* next to whatever is already bound to *sequence*."""
    return widget.bind(sequence, func, add="+")


def unbind_handler(widget: tk.Misc, sequence: str, funcid: str) -> None:
    """Remove the single handler *funcid* from *sequence*.

    ``Misc.unbind(sequence, funcid)`` empties the whole binding before
    Python 3.13, taking the host application's handlers with it, so the
    script is rebuilt without the lines that call *funcid*.
    """
    path = str(widget)
    script = str(widget.tk.call("bind", path, sequence))
    prefix = f'if {{"[{funcid} '
    keep = "\n".join(line for line in script.split("\n") if not line.startswith(prefix))
    if not keep.strip():
        keep = ""
    widget.tk.call("bind", path, sequence, keep)
    widget.deletecommand(funcid)


class _LabelTip:
    """A single withdrawn label window, moved under whichever widget asks."""

    def __init__(self, master: tk.Misc) -> None:
        self.window = tk.Toplevel(master)
        self.window.withdraw()
        self.window.wm_overrideredirect(True)
        self.label = tk.Label(self.window, bg=TIP_BG, relief="solid",
                              borderwidth=1, padx=4, pady=2)
        self.label.pack()

    def show(self, widget: tk.Widget, text: str) -> None:
        self.label.configure(text=text)
        self.window.wm_geometry(
            f"+{widget.winfo_rootx()}+{widget.winfo_rooty() + widget.winfo_height() + 2}"
        )
        self.window.deiconify()
        self.window.lift()

    def hide(self) -> None:
        self.window.withdraw()

    @property
    def text(self) -> str:
        return self.label.cget("text")


def _setup_styles(master: tk.Misc) -> None:
    style = ttk.Style(master)
    style.configure("Day.TButton", width=3, padding=1)
    style.configure("Outside.Day.TButton", foreground=OUTSIDE_FG)
    style.configure("Today.Day.TButton", foreground=ACCENT)
    style.configure("Selected.Day.TButton", background=SEL_BG)
    style.configure("Error.TLabel", foreground=ERROR_FG)
    style.configure("Placeholder.TEntry", foreground=PLACEHOLDER_FG)


class _CalendarPopup(tk.Toplevel):
    """Borderless window holding the month header and the day grid."""

    def __init__(self, picker: "DatePicker") -> None:
        super().__init__(picker)
        self.withdraw()  # hide until positioned
        self.wm_overrideredirect(True)
        self.picker = picker
        self._tooltip = _LabelTip(self)

        frm = ttk.Frame(self, padding=6, relief="solid", borderwidth=1)
        frm.pack(fill="both", expand=True)

        # header (prev, month, year, next)
        hdr = ttk.Frame(frm)
        hdr.grid(row=0, column=0, sticky="ew", pady=(0, 6))
        self.prev_btn = ttk.Button(hdr, text="<", width=3, takefocus=0,
                                   command=picker._on_prev)
        self.prev_btn.pack(side="left")
        self.month_box = ttk.Combobox(hdr, state="readonly", width=11, takefocus=0)
        self.month_box.pack(side="left", padx=4)
        self.month_box.bind("<<ComboboxSelected>>", self._on_month_selected)
        self.year_box = ttk.Combobox(hdr, state="readonly", width=5, takefocus=0)
        self.year_box.pack(side="left", padx=4)
        self.year_box.bind("<<ComboboxSelected>>", self._on_year_selected)
        self.next_btn = ttk.Button(hdr, text=">", width=3, takefocus=0,
                                   command=picker._on_next)
        self.next_btn.pack(side="left")
        self.today_btn = ttk.Button(hdr, takefocus=0, command=picker._on_today)
        self.today_btn.pack(side="left", padx=(6, 0))

        # weekday names
        self.weekdays = ttk.Frame(frm)
        self.weekdays.grid(row=1, column=0)

        # days grid frame
        self.days_frame = ttk.Frame(frm)
        self.days_frame.grid(row=2, column=0, pady=(4, 0))

        self._bind_tooltip(self.prev_btn, lambda: self._texts().previous_month)
        self._bind_tooltip(self.next_btn, lambda: self._texts().next_month)

        self.day_buttons: dict[date, ttk.Button] = {}
        self.bind("<Escape>", picker._on_popup_escape)

    def _texts(self):
        return self.picker.controller.profile.texts

    def _on_month_selected(self, _event=None) -> None:
        self.picker._on_month(self.month_box.current() + 1)

    def _on_year_selected(self, _event=None) -> None:
        self.picker._on_year(int(self.year_box.get()))

    def _bind_tooltip(self, widget: tk.Widget, text) -> None:
        def _show(_e) -> None:
            self._tooltip.show(widget, text() if callable(text) else text)

        widget.bind("<Enter>", _show)
        widget.bind("<Leave>", lambda _e: self._tooltip.hide())
        widget.bind("<FocusIn>", _show, add="+")
        widget.bind("<FocusOut>", lambda _e: self._tooltip.hide(), add="+")

    def render(self, view: CalendarView) -> None:
        profile = self.picker.controller.profile
        self._tooltip.hide()
        self.title(profile.texts.calendar_label)
        self.today_btn.configure(text=profile.texts.today.capitalize())

        self.month_box.configure(values=[name for _m, name in view.month_options])
        self.month_box.current(view.view_month.month - 1)
        self.year_box.configure(values=[str(y) for y in view.year_options])
        self.year_box.set(str(view.view_month.year))

        for w in self.weekdays.winfo_children():
            w.destroy()
        for i, name in enumerate(view.weekday_headers):
            ttk.Label(self.weekdays, text=name, width=4, anchor="center").grid(
                row=0, column=i, padx=1,
            )

        # clear previous day buttons
        for w in self.days_frame.winfo_children():
            w.destroy()
        self.day_buttons.clear()

        for r, week in enumerate(view.weeks):
            for c, desc in enumerate(week):
                if desc.is_selected:
                    style = "Selected.Day.TButton"
                elif desc.is_today:
                    style = "Today.Day.TButton"
                elif not desc.in_current_month:
                    style = "Outside.Day.TButton"
                else:
                    style = "Day.TButton"
                btn = ttk.Button(
                    self.days_frame, text=str(desc.date.day), style=style, width=3,
                    takefocus=1 if desc.date == view.tab_stop else 0,
                    command=lambda d=desc.date: self.picker._on_day(d),
                )
                if desc.is_disabled:
                    btn.state(["disabled"])
                btn.grid(row=r, column=c, padx=1, pady=1)
                btn.bind("<KeyPress>", lambda e, d=desc.date: self.picker._on_day_key(d, e))
                self._bind_tooltip(btn, day_label(desc, profile))
                self.day_buttons[desc.date] = btn

    def focus_grid(self, tab_stop: date | None) -> None:
        """Move keyboard focus to the default tab stop, or the first enabled day."""
        target = self.day_buttons.get(tab_stop) if tab_stop else None
        if target is None:
            target = next(
                (b for b in self.day_buttons.values() if not b.instate(["disabled"])),
                None,
            )
        if target is not None:
            target.focus_set()

    def place_below(self, widget: tk.Widget) -> None:
        self.update_idletasks()
        x = widget.winfo_rootx()
        y = widget.winfo_rooty() + widget.winfo_height()
        self.wm_geometry(f"+{x}+{y}")
        self.deiconify()
        self.lift()


class DatePicker(ttk.Frame):
    """Read-only date field that opens a month grid on focus.

    *on_change* receives the chosen date (or None after clearing). All state
    transitions go through the wrapped CalendarController; this class only
    forwards tkinter events and redraws.
    """

    def __init__(self, master=None, value=None, on_change=None, locale="fr",
                 min_date=None, max_date=None, disabled=False, date_format=None,
                 label=None, placeholder=None, error=None, width=14, **kwargs):
        super().__init__(master, **kwargs)
        _setup_styles(self)
        self._label_override = label
        self._placeholder_override = placeholder
        self._popup: _CalendarPopup | None = None
        self._refocusing = False
        self._outside_funcid: str | None = None
        self.accessibility: dict[str, str] = {}

        self.controller = CalendarController(
            value=value,
            on_change=on_change,
            locale=locale,
            min_date=min_date,
            max_date=max_date,
            disabled=disabled,
            date_format=date_format,
            outside_listener=self._listen_outside,
            focus_field=self._return_focus,
        )

        self.label = ttk.Label(self)
        self.label.pack(side="top", anchor="w")

        row = ttk.Frame(self)
        row.pack(side="top", fill="x")
        self._var = tk.StringVar()
        self.entry = ttk.Entry(row, textvariable=self._var, width=width, state="readonly")
        self.entry.pack(side="left", fill="x", expand=True)
        self._icon = ImageTk.PhotoImage(create_icon_image(), master=self)
        self.button = ttk.Button(row, image=self._icon, takefocus=0, command=self._on_trigger)
        self.button.pack(side="left", padx=(3, 0))

        self.error_label = ttk.Label(self, style="Error.TLabel")

        self.entry.bind("<FocusIn>", self._on_focus_in)
        self.entry.bind("<Button-1>", self._on_field_click)
        self.entry.bind("<KeyPress>", self._on_field_key)

        self.set_error(error)
        self._apply_disabled()
        self._sync()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def get_date(self) -> date | None:
        return self.controller.selected_date

    def set_date(self, value) -> None:
        self.controller.set_value(value)
        self._sync()

    def set_locale(self, code) -> None:
        self.controller.set_locale(code)
        self._sync()

    def set_error(self, text) -> None:
        if text:
            self.error_label.configure(text=text)
            self.error_label.pack(side="top", anchor="w")
        else:
            self.error_label.configure(text="")
            self.error_label.pack_forget()

    def set_disabled(self, disabled: bool) -> None:
        self.controller.set_disabled(disabled)
        self._apply_disabled()
        self._sync()

    def destroy(self) -> None:
        self.controller.destroy()
        if self._popup is not None:
            self._popup.destroy()
            self._popup = None
        super().destroy()

    # ------------------------------------------------------------------
    # Redraw
    # ------------------------------------------------------------------
    def _apply_disabled(self) -> None:
        flag = ["disabled"] if self.controller.disabled else ["!disabled", "readonly"]
        self.entry.state(flag)
        self.button.state(["disabled"] if self.controller.disabled else ["!disabled"])

    def _sync(self) -> None:
        ctl = self.controller
        if ctl.is_open:
            if self._popup is None:
                self._popup = _CalendarPopup(self)
                logger.debug("Popup created")
            self._popup.render(ctl.view())
            self._popup.place_below(self.entry)
        elif self._popup is not None:
            self._popup.destroy()
            self._popup = None

        # the trigger stays pressed while the grid is expanded
        self.accessibility = ctl.field_accessibility(self._label_override)
        expanded = self.accessibility["aria-expanded"] == "true"
        self.button.state(["pressed"] if expanded else ["!pressed"])

        texts = ctl.profile.texts
        self.label.configure(text=self._label_override or texts.date_label)
        shown = ctl.display_text()
        if shown:
            self._var.set(shown)
            self.entry.configure(style="TEntry")
        else:
            self._var.set(self._placeholder_override or texts.date_placeholder)
            self.entry.configure(style="Placeholder.TEntry")

    # ------------------------------------------------------------------
    # Outside-pointer subscription (lives only while the grid is open)
    # ------------------------------------------------------------------
    def _contains(self, widget) -> bool:
        path, me = str(widget), str(self)
        return path == me or path.startswith(me + ".")

    def _listen_outside(self, handler):
        top = self.winfo_toplevel()

        def _on_press(event) -> None:
            if not self._contains(event.widget):
                handler()
                self._sync()

        funcid = bind_handler(top, "<ButtonPress>", _on_press)
        self._outside_funcid = funcid

        def release() -> None:
            unbind_handler(top, "<ButtonPress>", funcid)
            if self._outside_funcid == funcid:
                self._outside_funcid = None

        return release

    def _return_focus(self) -> None:
        if self.focus_get() is not self.entry:
            self._refocusing = True
        self.entry.focus_set()

    # ------------------------------------------------------------------
    # Field events
    # ------------------------------------------------------------------
    def _on_focus_in(self, _event) -> None:
        if self._refocusing:
            self._refocusing = False
            return
        if self.controller.activate():
            self._sync()

    def _on_field_click(self, _event) -> None:
        if self.controller.activate():
            self._sync()

    def _on_trigger(self) -> None:
        if self.controller.is_open:
            self.controller.close()
        else:
            self.controller.activate()
        self._sync()

    def _on_field_key(self, event):
        if event.keysym == "Tab":
            if self.controller.is_open and self._popup is not None:
                self._popup.focus_grid(self.controller.view().tab_stop)
                return "break"
            return None
        if self.controller.handle_field_key(event.keysym):
            self._sync()
            return "break"
        return None

    # ------------------------------------------------------------------
    # Popup events
    # ------------------------------------------------------------------
    def _on_popup_escape(self, _event) -> None:
        if self.controller.handle_field_key("Escape"):
            self._sync()

    def _on_day(self, day: date) -> None:
        if self.controller.select(day):
            self._return_focus()
            self._sync()

    def _on_day_key(self, day: date, event):
        if not self.controller.handle_day_key(day, event.keysym):
            return None
        if not self.controller.is_open:
            # back to the field without reopening the grid
            self._return_focus()
        self._sync()
        return "break"

    def _on_today(self) -> None:
        self.controller.go_today()
        self._sync()

    def _on_prev(self) -> None:
        self.controller.prev_month()
        self._sync()

    def _on_next(self) -> None:
        self.controller.next_month()
        self._sync()

    def _on_month(self, month: int) -> None:
        self.controller.set_month(month)
        self._sync()

    def _on_year(self, year: int) -> None:
        self.controller.set_year(year)
        self._sync()
