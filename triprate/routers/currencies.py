from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from triprate.models.currency import CURRENCY_CATALOG, find_currency
from triprate.models.rate_input import RateInputMode
from triprate.services import currency_policy

router = APIRouter(prefix="/currencies", tags=["currencies"])


class CurrencyOut(BaseModel):
    code: str
    display_name: str
    large_denomination: bool


class ModePlaceholder(BaseModel):
    mode: RateInputMode
    value1: str
    value2: Optional[str] = None


class CurrencyLimitsOut(BaseModel):
    code: str
    min_amount: float
    max_amount: float
    decimal_places: int
    sample_rate: str
    display_name: str
    placeholders: List[ModePlaceholder]


@router.get("/", response_model=List[CurrencyOut], summary="List supported currencies")
async def list_currencies():
    return [
        CurrencyOut(
            code=c.code,
            display_name=c.display_name,
            large_denomination=currency_policy.is_large_denomination(c.code),
        )
        for c in CURRENCY_CATALOG
    ]


@router.get(
    "/{code}/limits",
    response_model=CurrencyLimitsOut,
    summary="Amount limits and input placeholders for a currency",
)
async def currency_limits(code: str):
    """Numeric policy for ``code``.

    Codes outside the catalog are rejected even though the policy itself
    answers for any code with its default bucket.
    """
    currency = find_currency(code)
    if currency is None:
        raise HTTPException(status_code=404, detail=f"unknown currency {code!r}")
    limits = currency_policy.get_limits(currency.code)
    placeholders = []
    for mode in RateInputMode:
        value1, value2 = currency_policy.placeholder_values(mode, currency.code)
        placeholders.append(ModePlaceholder(mode=mode, value1=value1, value2=value2))
    return CurrencyLimitsOut(
        code=currency.code,
        min_amount=limits.min_amount,
        max_amount=limits.max_amount,
        decimal_places=limits.decimal_places,
        sample_rate=limits.sample_rate,
        display_name=limits.display_name,
        placeholders=placeholders,
    )
