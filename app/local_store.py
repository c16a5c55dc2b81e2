from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from app.constants import COMPANIES, INITIAL_INVOICES
from app.models import Company

logger = logging.getLogger(__name__)

INVOICES_KEY = "invoice_app_invoices"
COMPANIES_KEY = "invoice_app_companies"


class StorageError(RuntimeError):
    pass


def _get_env(name: str) -> Optional[str]:
    value = os.getenv(name)
    return value.strip() if value else None


def _store_path() -> Path:
    return Path(_get_env("INVOICE_STORE_PATH") or "invoice_store.json")


def _read_store() -> Dict[str, Any]:
    path = _store_path()
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        logger.exception("Failed to read invoice store", extra={"path": str(path)})
        return {}
    return data if isinstance(data, dict) else {}


def _write_key(key: str, value: Any) -> None:
    path = _store_path()
    data = _read_store()
    data[key] = value
    # The store is replaced in one step so a failed write never truncates it.
    tmp_path = path.with_name(f"{path.name}.tmp")
    try:
        tmp_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp_path, path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise


def get_invoices() -> list[str]:
    """Stored invoice names, seeding the store with the initial list on first use."""
    stored = _read_store().get(INVOICES_KEY)
    if isinstance(stored, list) and all(isinstance(item, str) for item in stored):
        return stored
    if stored is not None:
        logger.error("Stored invoices are not a list of strings; reseeding")
    save_invoices(INITIAL_INVOICES)
    return list(INITIAL_INVOICES)


def save_invoices(invoices: list[str]) -> None:
    try:
        _write_key(INVOICES_KEY, list(invoices))
    except OSError as exc:
        logger.exception("Failed to save invoices")
        raise StorageError(
            "Could not save invoices; storage may be full or unavailable."
        ) from exc


def replace_invoices(invoices: list[str]) -> None:
    save_invoices(invoices)


def get_companies() -> list[Company]:
    stored = _read_store().get(COMPANIES_KEY)
    if isinstance(stored, list):
        try:
            return [Company.model_validate(item) for item in stored]
        except ValidationError:
            logger.exception("Stored companies are invalid; reseeding")
    save_companies(COMPANIES)
    return list(COMPANIES)


def save_companies(companies: list[Company]) -> None:
    try:
        _write_key(COMPANIES_KEY, [company.model_dump() for company in companies])
    except OSError:
        # Less critical than invoices: keep serving the in-memory registry.
        logger.exception("Failed to save companies")
