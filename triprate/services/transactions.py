"""Construction of exchange and purchase records from form input.

Records are frozen. An edit is a full rebuild from raw input that goes
through the same validation as a fresh record and keeps the original id.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Tuple, Union
from uuid import UUID

from triprate.models.exchange import ExchangeIn, ExchangeTransaction
from triprate.models.purchase import PurchaseIn, PurchaseTransaction
from triprate.models.rate_input import RateInput, RateInputMode
from triprate.services.rate_normalizer import is_computable, normalize_input
from triprate.services.validation import (
    ValidationResult,
    parse_number,
    validate,
    validate_purchase,
)


@dataclass(frozen=True)
class ExchangePreview:
    canonical_rate: float
    actual_rate: float
    fee_percent: Optional[float]
    is_high_fee: bool


@dataclass(frozen=True)
class PurchasePreview:
    foreign_amount: float
    home_amount: float
    rate: float


def build_exchange(
    mode: Union[RateInputMode, str],
    value1: float,
    value2: Optional[float],
    home_amount: float,
    foreign_amount: float,
    *,
    on: Optional[date] = None,
    exchange_id: Optional[UUID] = None,
) -> ExchangeTransaction:
    """Create a record from already validated numbers.

    The quote goes through `RateInput`, which drops the second value for
    single-value modes; the stored raw values are exactly what was normalized.
    """
    rate_input = RateInput(mode=mode, value1=value1, value2=value2)
    fields = dict(
        home_amount_spent=home_amount,
        foreign_amount_received=foreign_amount,
        canonical_rate=normalize_input(rate_input),
        input_mode=rate_input.mode,
        raw_value1=rate_input.value1,
        raw_value2=rate_input.value2,
    )
    if on is not None:
        fields["date"] = on
    if exchange_id is not None:
        fields["id"] = exchange_id
    return ExchangeTransaction(**fields)


def _number(raw: Optional[str]) -> float:
    value = parse_number(raw)
    if value is None:
        raise ValueError(f"not a number: {raw!r}")
    return value


def _parsed_exchange_numbers(
    payload: ExchangeIn,
) -> Tuple[float, Optional[float], float, float]:
    value2 = _number(payload.value2) if payload.mode.requires_second_value else None
    return (
        _number(payload.value1),
        value2,
        _number(payload.home_amount),
        _number(payload.foreign_amount),
    )


def validate_exchange_input(payload: ExchangeIn, currency_code: str) -> ValidationResult:
    return validate(
        payload.mode,
        payload.value1,
        payload.value2,
        payload.home_amount,
        payload.foreign_amount,
        currency_code,
    )


def exchange_from_input(
    payload: ExchangeIn,
    currency_code: str,
    *,
    exchange_id: Optional[UUID] = None,
) -> Tuple[ValidationResult, Optional[ExchangeTransaction]]:
    """Validate raw form input and build the record when it passes.

    Returns the validation result together with the record (None on
    failure); no partially valid record is ever constructed.
    """
    result = validate_exchange_input(payload, currency_code)
    if not result:
        return result, None
    value1, value2, home, foreign = _parsed_exchange_numbers(payload)
    exchange = build_exchange(
        payload.mode,
        value1,
        value2,
        home,
        foreign,
        on=payload.date,
        exchange_id=exchange_id,
    )
    return result, exchange


def rebuild_exchange(
    existing: ExchangeTransaction, payload: ExchangeIn, currency_code: str
) -> Tuple[ValidationResult, Optional[ExchangeTransaction]]:
    """Replace ``existing`` wholesale; the date is kept when not supplied."""
    if payload.date is None:
        payload = payload.model_copy(update={"date": existing.date})
    return exchange_from_input(payload, currency_code, exchange_id=existing.id)


def exchange_preview(payload: ExchangeIn, currency_code: str) -> Optional[ExchangePreview]:
    """Calculation preview for valid input, None otherwise."""
    result, exchange = exchange_from_input(payload, currency_code)
    if not result or exchange is None:
        return None
    return ExchangePreview(
        canonical_rate=exchange.canonical_rate,
        actual_rate=exchange.actual_rate,
        fee_percent=exchange.fee_percent,
        is_high_fee=exchange.is_high_fee,
    )


def build_purchase(
    foreign_amount: float,
    description: str,
    *,
    on: Optional[date] = None,
    purchase_id: Optional[UUID] = None,
) -> PurchaseTransaction:
    fields = dict(foreign_amount_spent=foreign_amount, description=description.strip())
    if on is not None:
        fields["date"] = on
    if purchase_id is not None:
        fields["id"] = purchase_id
    return PurchaseTransaction(**fields)


def purchase_from_input(
    payload: PurchaseIn,
    currency_code: str,
    *,
    purchase_id: Optional[UUID] = None,
) -> Tuple[ValidationResult, Optional[PurchaseTransaction]]:
    result = validate_purchase(payload.foreign_amount, payload.description, currency_code)
    if not result:
        return result, None
    purchase = build_purchase(
        _number(payload.foreign_amount),
        payload.description or "",
        on=payload.date,
        purchase_id=purchase_id,
    )
    return result, purchase


def rebuild_purchase(
    existing: PurchaseTransaction, payload: PurchaseIn, currency_code: str
) -> Tuple[ValidationResult, Optional[PurchaseTransaction]]:
    if payload.date is None:
        payload = payload.model_copy(update={"date": existing.date})
    return purchase_from_input(payload, currency_code, purchase_id=existing.id)


def purchase_preview(
    payload: PurchaseIn, currency_code: str, rate: float
) -> Optional[PurchasePreview]:
    """Home-currency conversion preview; None when input or rate is unusable."""
    result, purchase = purchase_from_input(payload, currency_code)
    if not result or purchase is None or not is_computable(rate):
        return None
    return PurchasePreview(
        foreign_amount=purchase.foreign_amount_spent,
        home_amount=purchase.home_amount_equivalent(rate),
        rate=rate,
    )


__all__ = [
    "ExchangePreview",
    "PurchasePreview",
    "build_exchange",
    "validate_exchange_input",
    "exchange_from_input",
    "rebuild_exchange",
    "exchange_preview",
    "build_purchase",
    "purchase_from_input",
    "rebuild_purchase",
    "purchase_preview",
]
