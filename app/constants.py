from __future__ import annotations

from app.models import Company


INVOICE_PREFIX = "INVOICE_FAB_SAMPERI_"

COMPANIES: list[Company] = [
    Company(acronym="CHN", name="Chin-Chin Records"),
    Company(acronym="AGO", name="Agogo Records"),
    Company(acronym="FRS", name="Freshly Squeezed"),
    Company(acronym="NVI", name="Nuovo IMAIE"),
    Company(acronym="SSM", name="Tape Five"),
]

INITIAL_INVOICES: list[str] = [
    "INVOICE_FAB_SAMPERI_FRS002_04-04-24_(2nd_H_23)",
    "INVOICE_FAB_SAMPERI_CHN003_04-04-24_(1st_Q_24)",
    "INVOICE_FAB_SAMPERI_AGO004_16-04-24_(3rd_and_4th_Q_23)",
    "INVOICE_FAB_SAMPERI_SSM005_16-05-24_(til_May_2024)",
    "INVOICE_FAB_SAMPERI_CHN006_08-07-24_(2nd_Q_24)",
    "INVOICE_FAB_SAMPERI_NVI007_19-09-24_(Nuovo_IMAIE)",
    "INVOICE_FAB_SAMPERI_FRS008_30-09-24_(1st_H_24)",
    "INVOICE_FAB_SAMPERI_CHN009_14-10-24_(3rd_Q_24)",
    "INVOICE_FAB_SAMPERI_AGO010_14-10-24_(1st_and_2nd_Q_24)",
    "INVOICE_FAB_SAMPERI_CHN011_03-01-25_(4th_Q_24)",
    "INVOICE_FAB_SAMPERI_AGO012_16-04-25_(3rd_and_4th_Q_24)",
    "INVOICE_FAB_SAMPERI_CHN013_16-04-25_(1st_Q_25)",
    "INVOICE_FAB_SAMPERI_NVI014_14-07-25_(Nuovo_IMAIE)",
    "INVOICE_FAB_SAMPERI_CHN015_19-07-25_(2nd_Q_25)",
    "INVOICE_FAB_SAMPERI_AGO016_02-10-25_(1st_and_2nd_Q_25)",
    "INVOICE_FAB_SAMPERI_FRS017_17-10-25_(1st_H_25)",
]


def ad_hoc_company_name(acronym: str) -> str:
    return f"Società Ad-Hoc ({acronym})"
