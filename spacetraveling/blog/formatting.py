"""Locale-aware presentation helpers."""

from datetime import datetime
from typing import Optional

from babel.dates import format_date

DATE_PATTERN = "dd MMM yyyy"
DEFAULT_LOCALE = "pt_BR"
DEFAULT_MISSING_DATE = "Não publicado"


def format_publication_date(
    value: Optional[datetime],
    locale: str = DEFAULT_LOCALE,
    missing: str = DEFAULT_MISSING_DATE,
) -> str:
    """Format a publication date as e.g. "25 mar. 2021" (pt_BR).

    Unpublished posts (None) get the `missing` placeholder.
    """
    if value is None:
        return missing
    return format_date(value, format=DATE_PATTERN, locale=locale)


def format_reading_time(minutes: int) -> str:
    return f"{minutes} min"
