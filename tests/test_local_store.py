"""Tests for the JSON file backing the invoice history and company registry."""

import errno
import json
from pathlib import Path

import pytest

from app import local_store
from app.constants import COMPANIES, INITIAL_INVOICES
from app.local_store import StorageError
from app.models import Company


@pytest.fixture
def store_path(monkeypatch, tmp_path):
    path = tmp_path / "store.json"
    monkeypatch.setenv("INVOICE_STORE_PATH", str(path))
    return path


# ---------------------------------------------------------------------------
# Invoices
# ---------------------------------------------------------------------------

def test_first_read_seeds_initial_invoices(store_path):
    assert local_store.get_invoices() == INITIAL_INVOICES
    stored = json.loads(store_path.read_text(encoding="utf-8"))
    assert stored[local_store.INVOICES_KEY] == INITIAL_INVOICES


def test_seeded_list_is_a_copy(store_path):
    invoices = local_store.get_invoices()
    invoices.append("INVOICE_FAB_SAMPERI_CHN099_01-01-26_(x)")
    assert len(INITIAL_INVOICES) == 16


def test_save_then_read(store_path):
    local_store.save_invoices(["INVOICE_FAB_SAMPERI_CHN001_01-01-26_(1st_H_26)"])
    assert local_store.get_invoices() == ["INVOICE_FAB_SAMPERI_CHN001_01-01-26_(1st_H_26)"]


def test_replace_invoices(store_path):
    local_store.get_invoices()
    local_store.replace_invoices(["INVOICE_FAB_SAMPERI_AGO002_01-01-26_(x)"])
    assert local_store.get_invoices() == ["INVOICE_FAB_SAMPERI_AGO002_01-01-26_(x)"]


def test_empty_list_is_kept(store_path):
    local_store.save_invoices([])
    assert local_store.get_invoices() == []


def test_corrupt_file_is_reseeded(store_path):
    store_path.write_text("{not json", encoding="utf-8")
    assert local_store.get_invoices() == INITIAL_INVOICES


def test_wrong_shape_is_reseeded(store_path):
    store_path.write_text(json.dumps({local_store.INVOICES_KEY: {"a": 1}}), encoding="utf-8")
    assert local_store.get_invoices() == INITIAL_INVOICES


def test_save_failure_raises_storage_error(monkeypatch, tmp_path):
    # A directory cannot be written as a file.
    monkeypatch.setenv("INVOICE_STORE_PATH", str(tmp_path))
    with pytest.raises(StorageError):
        local_store.save_invoices(["x"])


def test_failed_write_keeps_previous_history(store_path, monkeypatch):
    history = ["INVOICE_FAB_SAMPERI_CHN001_01-01-26_(1st_H_26)"]
    local_store.save_invoices(history)

    def disk_full(self, data, encoding=None, errors=None, newline=None):
        with open(self, "w", encoding=encoding) as fh:
            fh.write(data[:10])
        raise OSError(errno.ENOSPC, "No space left on device")

    with monkeypatch.context() as m:
        m.setattr(Path, "write_text", disk_full)
        with pytest.raises(StorageError):
            local_store.save_invoices([*history, "INVOICE_FAB_SAMPERI_CHN002_02-01-26_(2nd_H_26)"])

    assert json.loads(store_path.read_text(encoding="utf-8"))[local_store.INVOICES_KEY] == history
    assert not store_path.with_name("store.json.tmp").exists()


def test_invoices_and_companies_share_one_document(store_path):
    local_store.save_invoices(["INVOICE_FAB_SAMPERI_CHN001_01-01-26_(1st_H_26)"])
    local_store.save_companies([Company(acronym="ABC", name="Alphabet Club")])
    stored = json.loads(store_path.read_text(encoding="utf-8"))
    assert set(stored) == {local_store.INVOICES_KEY, local_store.COMPANIES_KEY}


# ---------------------------------------------------------------------------
# Companies
# ---------------------------------------------------------------------------

def test_first_read_seeds_companies(store_path):
    assert local_store.get_companies() == COMPANIES
    stored = json.loads(store_path.read_text(encoding="utf-8"))
    assert stored[local_store.COMPANIES_KEY][0] == {"acronym": "CHN", "name": "Chin-Chin Records"}


def test_saved_companies_are_read_back(store_path):
    local_store.save_companies([Company(acronym="ABC", name="Alphabet Club")])
    assert local_store.get_companies() == [Company(acronym="ABC", name="Alphabet Club")]


def test_invalid_companies_are_reseeded(store_path):
    store_path.write_text(
        json.dumps({local_store.COMPANIES_KEY: [{"acronym": "ab", "name": "Bad"}]}),
        encoding="utf-8",
    )
    assert local_store.get_companies() == COMPANIES


def test_company_save_failure_is_not_raised(monkeypatch, tmp_path):
    monkeypatch.setenv("INVOICE_STORE_PATH", str(tmp_path))
    local_store.save_companies(COMPANIES)
