"""Static locale profiles for the date picker (month/day names, formats, UI text)."""

from __future__ import annotations

import logging
import re
from datetime import date
from typing import NamedTuple

logger = logging.getLogger(__name__)


class UiTexts(NamedTuple):
    select_month: str
    select_year: str
    previous_month: str
    next_month: str
    today: str
    selected: str
    date_placeholder: str
    date_label: str
    calendar_label: str


class LocaleProfile(NamedTuple):
    """Immutable locale record. Day-name tuples always start on Sunday."""

    code: str
    month_names: tuple[str, ...]
    month_names_short: tuple[str, ...]
    day_names: tuple[str, ...]
    day_names_short: tuple[str, ...]
    day_names_min: tuple[str, ...]
    date_format: str
    first_day_of_week: int
    texts: UiTexts


FR = LocaleProfile(
    code="fr",
    month_names=(
        "janvier", "février", "mars", "avril", "mai", "juin",
        "juillet", "août", "septembre", "octobre", "novembre", "décembre",
    ),
    month_names_short=(
        "jan", "fév", "mar", "avr", "mai", "juin",
        "juil", "août", "sep", "oct", "nov", "déc",
    ),
    day_names=(
        "dimanche", "lundi", "mardi", "mercredi", "jeudi", "vendredi", "samedi",
    ),
    day_names_short=("dim", "lun", "mar", "mer", "jeu", "ven", "sam"),
    day_names_min=("D", "L", "M", "M", "J", "V", "S"),
    date_format="dd/MM/yyyy",
    first_day_of_week=1,  # lundi
    texts=UiTexts(
        select_month="Sélectionner le mois",
        select_year="Sélectionner l'année",
        previous_month="Mois précédent",
        next_month="Mois suivant",
        today="aujourd'hui",
        selected="sélectionné",
        date_placeholder="JJ/MM/AAAA",
        date_label="Sélecteur de date",
        calendar_label="Calendrier de sélection de date",
    ),
)

EN = LocaleProfile(
    code="en",
    month_names=(
        "January", "February", "March", "April", "May", "June",
        "July", "August", "September", "October", "November", "December",
    ),
    month_names_short=(
        "Jan", "Feb", "Mar", "Apr", "May", "Jun",
        "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
    ),
    day_names=(
        "Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday",
    ),
    day_names_short=("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"),
    day_names_min=("S", "M", "T", "W", "T", "F", "S"),
    date_format="MM/dd/yyyy",
    first_day_of_week=0,  # Sunday
    texts=UiTexts(
        select_month="Select month",
        select_year="Select year",
        previous_month="Previous month",
        next_month="Next month",
        today="today",
        selected="selected",
        date_placeholder="MM/DD/YYYY",
        date_label="Date picker",
        calendar_label="Date selection calendar",
    ),
)

DEFAULT_LOCALE = "fr"

_PROFILES: dict[str, LocaleProfile] = {"fr": FR, "en": EN}

SUPPORTED_LOCALES: tuple[str, ...] = tuple(_PROFILES)


def resolve(code: str | None = None) -> LocaleProfile:
    """Return the profile for *code*, falling back to the default profile.

    Matching ignores case and any region subtag, so ``"en-US"`` and
    ``"EN"`` both resolve to English. Never raises.
    """
    if code:
        lang = re.split(r"[-_]", str(code).strip(), maxsplit=1)[0].lower()
        profile = _PROFILES.get(lang)
        if profile is not None:
            return profile
        logger.debug("Unknown locale %r, using %r", code, DEFAULT_LOCALE)
    return _PROFILES[DEFAULT_LOCALE]


# ------------------------------------------------------------------
# Display formatting (date-fns token subset)
# ------------------------------------------------------------------
_TOKEN_RE = re.compile(r"'[^']*'|yyyy|yy|MMMM|MMM|MM|M|dd|d|EEEE|EEE")


def format_date(day: date, pattern: str, profile: LocaleProfile | None = None) -> str:
    """Render *day* with a date-fns style *pattern*, e.g. ``dd/MM/yyyy``.

    Month and weekday names come from *profile* (default profile if omitted).
    Text between single quotes is copied literally.
    """
    profile = profile or resolve(None)
    weekday = (day.weekday() + 1) % 7

    def _sub(match: re.Match) -> str:
        tok = match.group(0)
        if tok.startswith("'"):
            return tok[1:-1]
        if tok == "yyyy":
            return f"{day.year:04d}"
        if tok == "yy":
            return f"{day.year % 100:02d}"
        if tok == "MMMM":
            return profile.month_names[day.month - 1]
        if tok == "MMM":
            return profile.month_names_short[day.month - 1]
        if tok == "MM":
            return f"{day.month:02d}"
        if tok == "M":
            return str(day.month)
        if tok == "dd":
            return f"{day.day:02d}"
        if tok == "d":
            return str(day.day)
        if tok == "EEEE":
            return profile.day_names[weekday]
        return profile.day_names_short[weekday]

    return _TOKEN_RE.sub(_sub, pattern)
