from __future__ import annotations

import base64
import logging
import os
import re
from datetime import date
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import PlainTextResponse

from app import local_store
from app.invoice_service import (
    extract_import_lines,
    generate_ad_hoc_invoice,
    generate_next_invoice,
    parse_invoice_string,
    sort_invoices_descending,
)
from app.local_store import StorageError
from app.models import Company, ParsedInvoice
from app.periods import normalize_period


logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger("invoice-sequencer")

APP_VERSION = os.getenv("APP_VERSION", "0.1.0")

app = FastAPI()

BASIC_USER = os.getenv("BASIC_USER")
BASIC_PASS = os.getenv("BASIC_PASS")

_ACRONYM_RE = re.compile(r"^[A-Z]{3}$")


@app.get("/version")
async def version() -> Dict[str, Any]:
    return {"status": "ok", "app_version": APP_VERSION}


@app.get("/health")
async def health() -> Dict[str, str]:
    return {"status": "ok"}


def _today() -> date:
    return date.today()


def _check_basic_auth(request: Request) -> None:
    if BASIC_USER is None or BASIC_PASS is None:
        return

    auth_header = request.headers.get("authorization")
    if not auth_header or not auth_header.lower().startswith("basic "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Basic"},
        )

    token = auth_header.split(" ", 1)[1].strip()
    try:
        decoded = base64.b64decode(token).decode("utf-8")
    except (ValueError, UnicodeDecodeError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Basic"},
        )

    username, _, password = decoded.partition(":")
    if username != BASIC_USER or password != BASIC_PASS:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Basic"},
        )


async def _read_json_payload(request: Request) -> Dict[str, Any]:
    try:
        payload = await request.json()
    except Exception as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid JSON payload") from exc

    if not isinstance(payload, dict):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="JSON payload must be an object")
    return payload


def _required_text(payload: Dict[str, Any], field: str) -> str:
    value = payload.get(field)
    if not isinstance(value, str) or not value.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Missing {field}")
    return value.strip()


def _save(invoices: list[str]) -> None:
    try:
        local_store.save_invoices(invoices)
    except StorageError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc


def _find_company(acronym: str) -> Optional[Company]:
    for company in local_store.get_companies():
        if company.acronym == acronym:
            return company
    return None


def _invoice_entry(line: str, companies: list[Company]) -> Dict[str, Any]:
    parsed = parse_invoice_string(line, companies)
    return {"invoice": line, "parsed": parsed.model_dump() if parsed else None}


def _preview(invoice: ParsedInvoice) -> Dict[str, Any]:
    return {"status": "ok", "invoice": invoice.model_dump()}


@app.get("/companies")
async def list_companies() -> Dict[str, Any]:
    return {"companies": [company.model_dump() for company in local_store.get_companies()]}


@app.get("/invoices")
async def list_invoices() -> Dict[str, Any]:
    companies = local_store.get_companies()
    invoices = sort_invoices_descending(local_store.get_invoices())
    return {"invoices": [_invoice_entry(line, companies) for line in invoices]}


@app.post("/invoices/next")
async def next_invoice(request: Request) -> Dict[str, Any]:
    payload = await _read_json_payload(request)
    acronym = _required_text(payload, "acronym").upper()

    company = _find_company(acronym)
    if company is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown company: {acronym}")

    return _preview(generate_next_invoice(company, local_store.get_invoices(), today=_today()))


@app.post("/invoices/ad-hoc")
async def ad_hoc_invoice(request: Request) -> Dict[str, Any]:
    payload = await _read_json_payload(request)
    acronym = str(payload.get("acronym") or "").strip().upper()
    if not _ACRONYM_RE.match(acronym):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Acronym must be 3 letters")
    if _find_company(acronym) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A managed company already uses this acronym; pick it from the company list",
        )

    period = str(payload.get("period") or "").strip()
    if not period:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Period must not be empty")

    invoice = generate_ad_hoc_invoice(
        acronym,
        normalize_period(period),
        local_store.get_invoices(),
        today=_today(),
    )
    return _preview(invoice)


@app.post("/invoices")
async def save_invoice(request: Request) -> Dict[str, Any]:
    _check_basic_auth(request)
    payload = await _read_json_payload(request)
    invoice = _required_text(payload, "invoice")

    parsed = parse_invoice_string(invoice)
    if parsed is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invoice name is not well formed")

    invoices = local_store.get_invoices()
    if any(line.strip() == parsed.full_string for line in invoices):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Invoice already exists")

    updated = [parsed.full_string, *invoices]
    _save(updated)
    logger.info("Invoice saved", extra={"invoice": parsed.full_string})
    return {"status": "ok", "invoice": parsed.full_string, "count": len(updated)}


@app.put("/invoices")
async def update_invoice(request: Request) -> Dict[str, Any]:
    _check_basic_auth(request)
    payload = await _read_json_payload(request)
    current = _required_text(payload, "current")
    replacement = str(payload.get("invoice") or "").strip()

    if not replacement or replacement == current:
        return {"status": "unchanged", "invoice": current}

    invoices = local_store.get_invoices()
    if not any(line.strip() == current for line in invoices):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invoice not found")

    if parse_invoice_string(replacement) is None:
        logger.warning("Edited invoice does not match the naming scheme", extra={"invoice": replacement})

    updated = [replacement if line.strip() == current else line for line in invoices]
    _save(updated)
    logger.info("Invoice updated", extra={"previous": current, "invoice": replacement})
    return {"status": "ok", "invoice": replacement}


@app.delete("/invoices")
async def delete_invoice(request: Request, invoice: str) -> Dict[str, Any]:
    _check_basic_auth(request)
    target = invoice.strip()
    invoices = local_store.get_invoices()
    updated = [line for line in invoices if line.strip() != target]
    if len(updated) == len(invoices):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invoice not found")

    _save(updated)
    logger.info("Invoice deleted", extra={"invoice": target})
    return {"status": "ok", "removed": len(invoices) - len(updated)}


@app.get("/invoices/export")
async def export_invoices() -> PlainTextResponse:
    data = "\n".join(local_store.get_invoices())
    filename = f"fatture_backup_{_today().isoformat()}.txt"
    return PlainTextResponse(
        data,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@app.post("/invoices/import")
async def import_invoices(request: Request) -> Dict[str, Any]:
    _check_basic_auth(request)
    body = await request.body()
    try:
        content = body.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="File is empty or unreadable") from exc
    if not content.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="File is empty or unreadable")

    imported = extract_import_lines(content)
    if not imported:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No valid invoices found in file")

    invoices = sort_invoices_descending(imported)
    try:
        local_store.replace_invoices(invoices)
    except StorageError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc

    logger.info("Invoices imported", extra={"count": len(invoices)})
    return {"status": "ok", "count": len(invoices)}
