"""Tests for period normalization and period advancement."""

from datetime import date

import pytest

from app.periods import advance_period, normalize_period

TODAY = date(2026, 10, 19)


# ---------------------------------------------------------------------------
# normalize_period
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "text, expected",
    [
        ("1st quarter 2024", "1st_Q_24"),
        ("2nd half '25", "2nd_H_25"),
        ("Nuovo IMAIE", "Nuovo_IMAIE"),
        ("Q3 2025", "3rd_Q_25"),
        ("q.2 '24", "2nd_Q_24"),
        ("fourth quarter 24", "4th_Q_24"),
        ("Second quarter 2026", "2nd_Q_26"),
        ("first half 2025", "1st_H_25"),
        ("H1 24", "1st_H_24"),
        ("second half 2024", "2nd_H_24"),
        ("1st_Q_24", "1st_Q_24"),
    ],
)
def test_normalize_period_recognised(text, expected):
    assert normalize_period(text) == expected


def test_normalize_period_empty():
    assert normalize_period("") == ""


def test_normalize_period_none():
    assert normalize_period(None) == ""


def test_normalize_period_whitespace_only():
    assert normalize_period("   ") == ""


def test_normalize_period_fallback_keeps_original_case():
    assert normalize_period("  til May 2024 ") == "til_May_2024"


def test_normalize_period_quarter_without_number_falls_back():
    assert normalize_period("q 24") == "q_24"


def test_normalize_period_h_without_number_falls_back():
    assert normalize_period("Month 2024") == "Month_2024"


def test_normalize_period_quarter_checked_before_half():
    assert normalize_period("third quarter, half 2025") == "3rd_Q_25"


def test_normalize_period_is_deterministic():
    assert normalize_period("2nd half '25") == normalize_period("2nd half '25")


# ---------------------------------------------------------------------------
# advance_period – quarters and halves
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "last, expected",
    [
        ("1st_Q_24", "2nd_Q_24"),
        ("2nd_Q_25", "3rd_Q_25"),
        ("3rd_Q_24", "4th_Q_24"),
        ("4th_Q_24", "1st_Q_25"),
        ("1st_H_24", "2nd_H_24"),
        ("2nd_H_24", "1st_H_25"),
        ("2nd_H_23", "1st_H_24"),
        ("1st_and_2nd_Q_24", "3rd_and_4th_Q_24"),
        ("3rd_and_4th_Q_24", "1st_and_2nd_Q_25"),
    ],
)
def test_advance_period_cycles(last, expected):
    assert advance_period(last, today=TODAY) == expected


def test_advance_period_keeps_two_digit_year_padding():
    assert advance_period("1st_Q_05", today=TODAY) == "2nd_Q_05"
    assert advance_period("4th_Q_09", today=TODAY) == "1st_Q_10"
    assert advance_period("2nd_H_09", today=TODAY) == "1st_H_10"


def test_advance_period_combined_without_year_uses_current_year():
    assert advance_period("3rd_and_4th_Q", today=TODAY) == "1st_and_2nd_Q_26"


def test_advance_period_second_half_without_year_uses_current_year():
    assert advance_period("2nd_H", today=TODAY) == "1st_H_26"


def test_advance_period_first_half_without_year_gets_year_suffix():
    assert advance_period("1st_H", today=TODAY) == "1st_H_26"


def test_advance_period_combined_first_half_without_year_gets_year_suffix():
    assert advance_period("1st_and_2nd_Q", today=TODAY) == "1st_and_2nd_Q_26"


# ---------------------------------------------------------------------------
# advance_period – free text
# ---------------------------------------------------------------------------

def test_advance_period_bumps_embedded_four_digit_year():
    assert advance_period("til_May_2024", today=TODAY) == "til_May_2025"


def test_advance_period_bumps_only_first_four_digit_year():
    assert advance_period("From_2024_to_2025", today=TODAY) == "From_2025_to_2025"


def test_advance_period_appends_current_year_when_no_year():
    assert advance_period("Nuovo_IMAIE", today=TODAY) == "Nuovo_IMAIE_26"


def test_advance_period_unresolved_marker():
    assert advance_period("Nuovo_IMAIE_26", today=TODAY) == "NEXT_FOR_Nuovo_IMAIE_26"


def test_advance_period_unknown_ordinal_is_unresolved():
    assert advance_period("5th_Q_24", today=TODAY) == "NEXT_FOR_5th_Q_24"


def test_advance_period_defaults_to_real_date():
    expected_year = f"{date.today().year % 100:02d}"
    assert advance_period("Nuovo_IMAIE") == f"Nuovo_IMAIE_{expected_year}"
