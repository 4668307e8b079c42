"""Entry point: demo window with French, English and switchable-locale pickers."""

import logging
import tkinter as tk
from tkinter import ttk

from date_picker import DatePicker
from locales import format_date, resolve
from settings import load_settings, parse_iso_date, save_settings

logger = logging.getLogger(__name__)


def remember_locale(settings: dict, code: str) -> bool:
    """Store the chosen locale so the next launch starts with it."""
    if settings.get("locale") == code:
        return False
    settings["locale"] = code
    try:
        save_settings(settings)
    except OSError as exc:
        logger.warning("Could not save settings: %s", exc)
        return False
    logger.info("Locale saved: %s", code)
    return True


def _setup_logging(level: str) -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(asctime)s - %(message)s"))
    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level, logging.INFO))


def main() -> None:
    settings = load_settings()
    _setup_logging(settings["log_level"])

    common = {
        "date_format": settings["date_format"],
        "min_date": parse_iso_date(settings["min_date"]),
        "max_date": parse_iso_date(settings["max_date"]),
    }

    root = tk.Tk()
    root.title("Date picker: localisation")
    outer = ttk.Frame(root, padding=16)
    outer.pack(fill="both", expand=True)

    locale_var = tk.StringVar(value=resolve(settings["locale"]).code)
    radios = ttk.Frame(outer)
    radios.grid(row=0, column=0, columnspan=2, sticky="w", pady=(0, 12))
    ttk.Radiobutton(radios, text="Français", value="fr", variable=locale_var).pack(side="left")
    ttk.Radiobutton(radios, text="English", value="en", variable=locale_var).pack(side="left", padx=8)

    def _column(col: int, title: str, locale: str, label: str, empty: str):
        ttk.Label(outer, text=title, font=("TkDefaultFont", 10, "bold")).grid(
            row=1, column=col, sticky="w", padx=(0, 24),
        )
        status = ttk.Label(outer, text=empty)

        def on_change(value) -> None:
            shown = format_date(value, resolve(locale).date_format, resolve(locale)) if value else empty
            status.configure(text=shown)
            logger.info("%s picker changed to %s", locale, value)

        picker = DatePicker(outer, on_change=on_change, locale=locale, label=label, **common)
        picker.grid(row=2, column=col, sticky="w", padx=(0, 24))
        status.grid(row=3, column=col, sticky="w", pady=(4, 0))
        return picker, on_change

    fr_picker, fr_changed = _column(0, "Locale française", "fr", "Date de naissance", "Aucune")
    en_picker, en_changed = _column(1, "English locale", "en", "Birth Date", "None")

    ttk.Label(outer, text="Locale dynamique", font=("TkDefaultFont", 10, "bold")).grid(
        row=4, column=0, sticky="w", pady=(16, 0),
    )

    def on_dynamic_change(value) -> None:
        if locale_var.get() == "fr":
            fr_picker.set_date(value)
            fr_changed(value)
        else:
            en_picker.set_date(value)
            en_changed(value)

    dynamic = DatePicker(outer, on_change=on_dynamic_change, locale=locale_var.get(), **common)
    dynamic.grid(row=5, column=0, sticky="w")

    def on_locale(*_args) -> None:
        code = locale_var.get()
        dynamic.set_locale(code)
        dynamic.set_date((fr_picker if code == "fr" else en_picker).get_date())

    def on_locale_chosen(*_args) -> None:
        on_locale()
        remember_locale(settings, locale_var.get())

    locale_var.trace_add("write", on_locale_chosen)
    on_locale()

    root.mainloop()


if __name__ == "__main__":
    main()
