"""Billing period labels.

Two operations live here: turning whatever a user typed ("1st quarter 2024",
"2nd half '25") into a canonical label such as ``1st_Q_24``, and working out
the label that follows a previously issued one. Both are total: any input
yields a string, and labels we cannot interpret come back either with
underscores in place of whitespace or wrapped in an explicit
``NEXT_FOR_`` marker.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

from app.parse_utils import two_digit_year, underscore_whitespace


_INPUT_YEAR_RE = re.compile(r"(?:20)?([0-9]{2})$")
_TRAILING_YEAR_RE = re.compile(r"([0-9]{2})$")
_FOUR_DIGIT_YEAR_RE = re.compile(r"([0-9]{4})")
_QUARTER_RE = re.compile(r"([1-4])(?:st|nd|rd|th)_Q")

ORDINAL_SUFFIXES: dict[int, str] = {1: "st", 2: "nd", 3: "rd", 4: "th"}

# Tested in order; first hit wins. Quarters must be tried before halves.
_QUARTER_MARKERS = (
    (("1", "first"), "1st_Q"),
    (("2", "sec"), "2nd_Q"),
    (("3", "third"), "3rd_Q"),
    (("4", "fourth"), "4th_Q"),
)
_HALF_MARKERS = (
    (("1", "first"), "1st_H"),
    (("2", "sec"), "2nd_H"),
)


def _contains_any(text: str, needles: tuple[str, ...]) -> bool:
    return any(needle in text for needle in needles)


def _resolve(core: str, markers, year: str) -> Optional[str]:
    for needles, label in markers:
        if _contains_any(core, needles):
            return f"{label}_{year}"
    return None


def normalize_period(value: str | None) -> str:
    if not value:
        return ""

    text = value.strip().lower()
    year_match = _INPUT_YEAR_RE.search(text)
    if not year_match:
        return underscore_whitespace(value)

    year = year_match.group(1)
    core = (text[: year_match.start()] + text[year_match.end():]).strip()
    core = core.replace("'", "").replace(".", "")

    if _contains_any(core, ("q", "quarter")):
        label = _resolve(core, _QUARTER_MARKERS, year)
        if label:
            return label

    if _contains_any(core, ("h", "half")):
        label = _resolve(core, _HALF_MARKERS, year)
        if label:
            return label

    return underscore_whitespace(value)


# ---------------------------------------------------------------------------
# Advancing to the next period
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class _PeriodContext:
    last: str
    year: Optional[str]
    next_year: str
    current_year: str
    four_digit: Optional[re.Match[str]]


def _combined_first_half(ctx: _PeriodContext) -> Optional[str]:
    if "1st_and_2nd_Q" in ctx.last and ctx.year is not None:
        return f"3rd_and_4th_Q_{ctx.year}"
    return None


def _combined_second_half(ctx: _PeriodContext) -> Optional[str]:
    if "3rd_and_4th_Q" in ctx.last:
        return f"1st_and_2nd_Q_{ctx.next_year}"
    return None


def _first_half(ctx: _PeriodContext) -> Optional[str]:
    if "1st_H" in ctx.last and ctx.year is not None:
        return f"2nd_H_{ctx.year}"
    return None


def _second_half(ctx: _PeriodContext) -> Optional[str]:
    if "2nd_H" in ctx.last:
        return f"1st_H_{ctx.next_year}"
    return None


def _quarter(ctx: _PeriodContext) -> Optional[str]:
    match = _QUARTER_RE.search(ctx.last)
    if not match or ctx.year is None:
        return None
    quarter = int(match.group(1))
    if quarter < 4:
        following = quarter + 1
        return f"{following}{ORDINAL_SUFFIXES[following]}_Q_{ctx.year}"
    return f"1st_Q_{ctx.next_year}"


def _embedded_year(ctx: _PeriodContext) -> Optional[str]:
    match = ctx.four_digit
    if not match:
        return None
    bumped = str(int(match.group(1)) + 1)
    return ctx.last[: match.start()] + bumped + ctx.last[match.end():]


def _no_year(ctx: _PeriodContext) -> Optional[str]:
    if ctx.year is None and ctx.four_digit is None:
        return f"{ctx.last}_{ctx.current_year}"
    return None


PERIOD_RULES: tuple[tuple[str, Callable[[_PeriodContext], Optional[str]]], ...] = (
    ("combined_first_half", _combined_first_half),
    ("combined_second_half", _combined_second_half),
    ("first_half", _first_half),
    ("second_half", _second_half),
    ("quarter", _quarter),
    ("embedded_year", _embedded_year),
    ("no_year", _no_year),
)


def advance_period(last_period: str, today: Optional[date] = None) -> str:
    """Return the period label that follows ``last_period``.

    ``today`` supplies the current year used when a label carries no year of
    its own; it defaults to the real date.
    """
    current_year = two_digit_year(today or date.today())
    year_match = _TRAILING_YEAR_RE.search(last_period)
    year = year_match.group(1) if year_match else None
    ctx = _PeriodContext(
        last=last_period,
        year=year,
        next_year=f"{int(year) + 1:02d}" if year is not None else current_year,
        current_year=current_year,
        four_digit=_FOUR_DIGIT_YEAR_RE.search(last_period),
    )

    for _name, rule in PERIOD_RULES:
        result = rule(ctx)
        if result is not None:
            return result

    return f"NEXT_FOR_{last_period}"
