#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import sys
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Optional

from app import local_store
from app.local_store import StorageError
from app.invoice_service import (
    extract_import_lines,
    generate_ad_hoc_invoice,
    generate_next_invoice,
    parse_invoice_string,
    sort_invoices_descending,
)
from app.models import Company
from app.periods import advance_period, normalize_period


def _parse_today(value: Optional[str]) -> date:
    if not value:
        return date.today()
    return datetime.strptime(value, "%Y-%m-%d").date()


def _emit(payload: Dict[str, Any]) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def _find_company(acronym: str) -> Optional[Company]:
    return next((c for c in local_store.get_companies() if c.acronym == acronym), None)


def _cmd_next(args: argparse.Namespace) -> int:
    acronym = args.acronym.upper()
    company = _find_company(acronym)
    if company is None:
        print(f"Unknown company: {acronym}", file=sys.stderr)
        return 1

    invoices = local_store.get_invoices()
    invoice = generate_next_invoice(company, invoices, today=_parse_today(args.today))
    if args.save:
        local_store.save_invoices([invoice.full_string, *invoices])
    _emit({"invoice": invoice.model_dump(), "saved": args.save})
    return 0


def _cmd_ad_hoc(args: argparse.Namespace) -> int:
    acronym = args.acronym.upper()
    if len(acronym) != 3 or not acronym.isalpha() or not acronym.isascii():
        print("Acronym must be 3 letters", file=sys.stderr)
        return 1
    if _find_company(acronym) is not None:
        print(f"{acronym} is a managed company; use `next {acronym}` instead", file=sys.stderr)
        return 1
    if not args.period.strip():
        print("Period must not be empty", file=sys.stderr)
        return 1

    invoices = local_store.get_invoices()
    invoice = generate_ad_hoc_invoice(
        acronym,
        normalize_period(args.period),
        invoices,
        today=_parse_today(args.today),
    )
    if args.save:
        local_store.save_invoices([invoice.full_string, *invoices])
    _emit({"invoice": invoice.model_dump(), "saved": args.save})
    return 0


def _cmd_normalize(args: argparse.Namespace) -> int:
    _emit({"input": args.text, "period": normalize_period(args.text)})
    return 0


def _cmd_advance(args: argparse.Namespace) -> int:
    _emit({"period": args.period, "next": advance_period(args.period, today=_parse_today(args.today))})
    return 0


def _cmd_parse(args: argparse.Namespace) -> int:
    parsed = parse_invoice_string(args.line, local_store.get_companies())
    _emit({"parsed": parsed.model_dump() if parsed else None})
    return 0 if parsed else 1


def _cmd_export(args: argparse.Namespace) -> int:
    data = "\n".join(local_store.get_invoices())
    if args.output:
        Path(args.output).write_text(data, encoding="utf-8")
        _emit({"output": args.output})
    else:
        print(data)
    return 0


def _cmd_import(args: argparse.Namespace) -> int:
    try:
        content = Path(args.file).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        print(f"Could not read {args.file}: {exc}", file=sys.stderr)
        return 1
    imported = extract_import_lines(content)
    if not imported:
        print("No valid invoices found in file", file=sys.stderr)
        return 1
    local_store.replace_invoices(sort_invoices_descending(imported))
    _emit({"imported": len(imported)})
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate and manage sequential invoice names.")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("next", help="Next invoice for a registered company")
    p.add_argument("acronym")
    p.add_argument("--today", help="Override today's date (YYYY-MM-DD)")
    p.add_argument("--save", action="store_true")
    p.set_defaults(func=_cmd_next)

    p = sub.add_parser("ad-hoc", help="Invoice for a company outside the registry")
    p.add_argument("acronym")
    p.add_argument("period")
    p.add_argument("--today", help="Override today's date (YYYY-MM-DD)")
    p.add_argument("--save", action="store_true")
    p.set_defaults(func=_cmd_ad_hoc)

    p = sub.add_parser("normalize", help="Normalize a free-text period")
    p.add_argument("text")
    p.set_defaults(func=_cmd_normalize)

    p = sub.add_parser("advance", help="Period following the given one")
    p.add_argument("period")
    p.add_argument("--today", help="Override today's date (YYYY-MM-DD)")
    p.set_defaults(func=_cmd_advance)

    p = sub.add_parser("parse", help="Parse one invoice name")
    p.add_argument("line")
    p.set_defaults(func=_cmd_parse)

    p = sub.add_parser("export", help="Write all invoice names, one per line")
    p.add_argument("--output")
    p.set_defaults(func=_cmd_export)

    p = sub.add_parser("import", help="Replace the history with names read from a file")
    p.add_argument("file")
    p.set_defaults(func=_cmd_import)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except StorageError as exc:
        print(str(exc), file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
