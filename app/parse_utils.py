from __future__ import annotations

import re
from datetime import date
from typing import Optional

from dateutil.relativedelta import relativedelta


_INVOICE_DATE_RE = re.compile(r"^([0-9]{2})-([0-9]{2})-([0-9]{2})$")
_WHITESPACE_RE = re.compile(r"\s+")


def invoice_date_value(value: str | None) -> Optional[date]:
    """Calendar date for a DD-MM-YY field, read as 20YY.

    Day and month are not range checked: "32-01-24" lands on 1 Feb 2024 and
    "00-03-24" on the last day of February, the same rollover a calendar
    constructor applies.
    """
    if not value:
        return None

    match = _INVOICE_DATE_RE.match(value.strip())
    if not match:
        return None

    day, month, year = (int(part) for part in match.groups())
    return date(2000 + year, 1, 1) + relativedelta(months=month - 1, days=day - 1)


def format_invoice_date(value: date) -> str:
    return value.strftime("%d-%m-%y")


def two_digit_year(value: date) -> str:
    return f"{value.year % 100:02d}"


def underscore_whitespace(value: str) -> str:
    return _WHITESPACE_RE.sub("_", value.strip())
