"""Types communs des schémas / Shared schema types (ISO dates, HH:MM times)."""

import re
from datetime import date
from typing import Annotated

from pydantic import AfterValidator

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def _check_date(value: str) -> str:
    try:
        date.fromisoformat(value)
    except ValueError:
        raise ValueError("date attendue au format YYYY-MM-DD / expected YYYY-MM-DD date") from None
    if len(value) != 10:
        raise ValueError("date attendue au format YYYY-MM-DD / expected YYYY-MM-DD date")
    return value


def _check_time(value: str) -> str:
    if not _TIME_RE.match(value):
        raise ValueError("heure attendue au format HH:MM / expected HH:MM time")
    return value


DateStr = Annotated[str, AfterValidator(_check_date)]
TimeStr = Annotated[str, AfterValidator(_check_time)]
