# app/models.py
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Company(BaseModel):
    acronym: str = Field(pattern=r"^[A-Z]{3}$")
    name: str


class ParsedInvoice(BaseModel):
    model_config = ConfigDict(frozen=True)

    full_string: str
    acronym: str
    number: int = Field(ge=0)
    date: str  # DD-MM-YY
    period: str
    company_name: str
