from __future__ import annotations

import logging
import re
from datetime import date
from typing import Iterable, Optional, Sequence

from app.constants import COMPANIES, INVOICE_PREFIX, ad_hoc_company_name
from app.models import Company, ParsedInvoice
from app.parse_utils import format_invoice_date, invoice_date_value, two_digit_year
from app.periods import advance_period

logger = logging.getLogger(__name__)

INVOICE_RE = re.compile(
    r"^INVOICE_FAB_SAMPERI_([A-Z]{3})([0-9]{3})_([0-9]{2}-[0-9]{2}-[0-9]{2})_\((.+)\)$"
)


def _company_name(acronym: str, companies: Optional[Iterable[Company]]) -> str:
    for company in companies if companies is not None else COMPANIES:
        if company.acronym == acronym:
            return company.name
    return ad_hoc_company_name(acronym)


def parse_invoice_string(
    invoice: str, companies: Optional[Iterable[Company]] = None
) -> Optional[ParsedInvoice]:
    """Split an invoice name into its fields, or return None if it is malformed."""
    cleaned = (invoice or "").strip()
    match = INVOICE_RE.fullmatch(cleaned)
    if not match:
        return None

    acronym, number_str, invoice_date, period = match.groups()
    return ParsedInvoice(
        full_string=cleaned,
        acronym=acronym,
        number=int(number_str),
        date=invoice_date,
        period=period,
        company_name=_company_name(acronym, companies),
    )


def format_invoice_string(acronym: str, number: int, invoice_date: str, period: str) -> str:
    return f"{INVOICE_PREFIX}{acronym}{number:03d}_{invoice_date}_({period})"


def parse_invoices(
    invoices: Iterable[str], companies: Optional[Iterable[Company]] = None
) -> list[ParsedInvoice]:
    registry = list(companies) if companies is not None else None
    parsed: list[ParsedInvoice] = []
    for line in invoices:
        record = parse_invoice_string(line, registry)
        if record is None:
            logger.debug("Skipping unparseable invoice line", extra={"line": line})
            continue
        parsed.append(record)
    return parsed


def _recency_key(invoice: ParsedInvoice) -> tuple[int, int]:
    value = invoice_date_value(invoice.date)
    return (value.toordinal() if value else 0, invoice.number)


def sort_invoices_descending(invoices: Iterable[str]) -> list[str]:
    """Newest first by date then sequence number; unparseable lines go last."""

    def key(line: str) -> tuple[int, ...]:
        parsed = parse_invoice_string(line)
        if parsed is None:
            return (1,)
        ordinal, number = _recency_key(parsed)
        return (0, -ordinal, -number)

    return sorted(invoices, key=key)


def _next_number(parsed: Sequence[ParsedInvoice]) -> int:
    return max((p.number for p in parsed), default=0) + 1


def generate_next_invoice(
    company: Company, invoices: Sequence[str], today: Optional[date] = None
) -> ParsedInvoice:
    """Build the next invoice for ``company``.

    The sequence number is global: one more than the highest number found
    anywhere in ``invoices``, whatever company issued it. The period follows
    on from the company's most recent invoice, or starts at the first half of
    the current year.
    """
    today = today or date.today()
    parsed = parse_invoices(invoices)

    company_invoices = sorted(
        (p for p in parsed if p.acronym == company.acronym),
        key=_recency_key,
        reverse=True,
    )
    last_invoice = company_invoices[0] if company_invoices else None

    if last_invoice:
        next_period = advance_period(last_invoice.period, today=today)
    else:
        next_period = f"1st_H_{two_digit_year(today)}"

    next_number = _next_number(parsed)
    next_date = format_invoice_date(today)

    logger.info(
        "Generated next invoice",
        extra={
            "acronym": company.acronym,
            "number": next_number,
            "last_invoice": last_invoice.full_string if last_invoice else None,
        },
    )

    return ParsedInvoice(
        full_string=format_invoice_string(company.acronym, next_number, next_date, next_period),
        acronym=company.acronym,
        number=next_number,
        date=next_date,
        period=next_period,
        company_name=company.name,
    )


def generate_ad_hoc_invoice(
    acronym: str, period: str, invoices: Sequence[str], today: Optional[date] = None
) -> ParsedInvoice:
    """Invoice for a company outside the registry, using an already normalized period."""
    today = today or date.today()
    next_number = _next_number(parse_invoices(invoices))
    next_date = format_invoice_date(today)

    return ParsedInvoice(
        full_string=format_invoice_string(acronym, next_number, next_date, period),
        acronym=acronym,
        number=next_number,
        date=next_date,
        period=period,
        company_name=ad_hoc_company_name(acronym),
    )


def extract_import_lines(content: str) -> list[str]:
    lines = (line.strip() for line in (content or "").split("\n"))
    return [line for line in lines if line.startswith(INVOICE_PREFIX)]
