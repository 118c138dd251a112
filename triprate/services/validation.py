"""Input validation for exchange, purchase and trip forms.

`validate` is the gate in front of persistence. It runs the checks below in
order and stops at the first failure so the user only ever sees one message:

    1. presence of the amount fields (and of the rate values the mode needs)
    2. numeric parseability
    3. positivity
    4. range: home amount (global bound), foreign amount (currency policy)
    5. exchange-office legs: home leg (office bound), foreign leg (policy)
    6. computability of the normalized rate
    7. plausibility of the normalized rate

`quick_validate` runs only steps 2-3 for live feedback while typing. It must
not be used to decide whether a record can be saved.

Failures are returned as `ValidationResult` values, never raised.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Optional, Union

from triprate.models.constants import (
    MAX_COUNTRY_NAME_LENGTH,
    MAX_EXCHANGE_OFFICE_HOME,
    MAX_HOME_AMOUNT,
    MAX_PURCHASE_DESCRIPTION_LENGTH,
    MAX_RATE,
    MAX_TRIP_NAME_LENGTH,
    MIN_EXCHANGE_OFFICE_HOME,
    MIN_HOME_AMOUNT,
    MIN_RATE,
    ErrorMessages,
)
from triprate.models.rate_input import RateInputMode
from triprate.services.currency_policy import get_limits
from triprate.services.rate_normalizer import is_computable, normalize

RawValue = Union[str, int, float, None]

# Plain decimal or scientific literal; rejects nan/inf and digit separators.
_NUMBER_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    message: Optional[str] = None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def valid(cls) -> "ValidationResult":
        return cls(ok=True)

    @classmethod
    def invalid(cls, message: str) -> "ValidationResult":
        return cls(ok=False, message=message)


class _Rejected(ValueError):
    """Internal short-circuit carrying the first failure message."""


@dataclass(frozen=True)
class _ParsedExchange:
    home_amount: float
    foreign_amount: float
    value1: float
    value2: Optional[float]


def _text(raw: RawValue) -> str:
    if raw is None:
        return ""
    return str(raw).strip()


def parse_number(raw: RawValue) -> Optional[float]:
    """Return the numeric value of ``raw`` or None when it is not a number."""
    text = _text(raw)
    if not _NUMBER_RE.match(text):
        return None
    return float(text)


def _require_present(raw: RawValue, message: str = ErrorMessages.missing_value) -> None:
    if not _text(raw):
        raise _Rejected(message)


def _require_number(raw: RawValue) -> float:
    value = parse_number(raw)
    if value is None:
        raise _Rejected(ErrorMessages.invalid_number)
    return value


def _check_presence(
    mode: RateInputMode,
    value1_raw: RawValue,
    value2_raw: RawValue,
    home_amount_raw: RawValue,
    foreign_amount_raw: RawValue,
) -> None:
    _require_present(home_amount_raw)
    _require_present(foreign_amount_raw)
    _require_present(value1_raw)
    if mode.requires_second_value:
        _require_present(value2_raw, ErrorMessages.both_values_required)


def _parse(
    mode: RateInputMode,
    value1_raw: RawValue,
    value2_raw: RawValue,
    home_amount_raw: RawValue,
    foreign_amount_raw: RawValue,
) -> _ParsedExchange:
    home = _require_number(home_amount_raw)
    foreign = _require_number(foreign_amount_raw)
    value1 = _require_number(value1_raw)
    value2 = _require_number(value2_raw) if mode.requires_second_value else None
    return _ParsedExchange(home, foreign, value1, value2)


def _check_positive(parsed: _ParsedExchange) -> None:
    for amount in (parsed.home_amount, parsed.foreign_amount):
        if amount < 0:
            raise _Rejected(ErrorMessages.negative_amount)
        if amount == 0:
            raise _Rejected(ErrorMessages.zero_amount)
    for value in (parsed.value1, parsed.value2):
        if value is not None and value <= 0:
            raise _Rejected(ErrorMessages.positive_value_required)


def _check_ranges(parsed: _ParsedExchange, currency_code: str) -> None:
    if not (MIN_HOME_AMOUNT <= parsed.home_amount <= MAX_HOME_AMOUNT):
        raise _Rejected(ErrorMessages.invalid_amount)
    limits = get_limits(currency_code)
    if not limits.contains(parsed.foreign_amount):
        raise _Rejected(
            ErrorMessages.invalid_amount_for_currency(
                currency_code.strip().upper(),
                limits.min_amount,
                limits.max_amount,
                limits.decimal_places,
            )
        )


def _check_exchange_office(parsed: _ParsedExchange, currency_code: str) -> None:
    if not (MIN_EXCHANGE_OFFICE_HOME <= parsed.value1 <= MAX_EXCHANGE_OFFICE_HOME):
        raise _Rejected(ErrorMessages.invalid_exchange_office_home)
    limits = get_limits(currency_code)
    if parsed.value2 is None or not limits.contains(parsed.value2):
        raise _Rejected(
            ErrorMessages.invalid_exchange_office_foreign(
                currency_code.strip().upper(),
                limits.min_amount,
                limits.max_amount,
                limits.decimal_places,
            )
        )


def _check_rate(mode: RateInputMode, parsed: _ParsedExchange) -> None:
    rate = normalize(mode, parsed.value1, parsed.value2)
    if not is_computable(rate):
        raise _Rejected(ErrorMessages.cannot_calculate_rate)
    if not (MIN_RATE <= rate <= MAX_RATE):
        raise _Rejected(ErrorMessages.invalid_rate)


def validate(
    mode: Union[RateInputMode, str],
    value1_raw: RawValue,
    value2_raw: RawValue,
    home_amount_raw: RawValue,
    foreign_amount_raw: RawValue,
    currency_code: str,
) -> ValidationResult:
    mode = RateInputMode(mode)
    try:
        _check_presence(mode, value1_raw, value2_raw, home_amount_raw, foreign_amount_raw)
        parsed = _parse(mode, value1_raw, value2_raw, home_amount_raw, foreign_amount_raw)
        _check_positive(parsed)
        _check_ranges(parsed, currency_code)
        if mode is RateInputMode.EXCHANGE_OFFICE:
            _check_exchange_office(parsed, currency_code)
        _check_rate(mode, parsed)
    except _Rejected as rejected:
        return ValidationResult.invalid(str(rejected))
    return ValidationResult.valid()


def quick_validate(
    mode: Union[RateInputMode, str],
    value1_raw: RawValue,
    value2_raw: RawValue,
    home_amount_raw: RawValue,
    foreign_amount_raw: RawValue,
) -> ValidationResult:
    """Parse + positivity only; range and plausibility are skipped."""
    mode = RateInputMode(mode)
    try:
        parsed = _parse(mode, value1_raw, value2_raw, home_amount_raw, foreign_amount_raw)
        _check_positive(parsed)
    except _Rejected as rejected:
        return ValidationResult.invalid(str(rejected))
    return ValidationResult.valid()


def validate_purchase(
    foreign_amount_raw: RawValue, description: Optional[str], currency_code: str
) -> ValidationResult:
    try:
        _require_present(foreign_amount_raw)
        amount = _require_number(foreign_amount_raw)
        if amount <= 0:
            raise _Rejected(ErrorMessages.zero_amount)
        limits = get_limits(currency_code)
        if not limits.contains(amount):
            raise _Rejected(
                ErrorMessages.invalid_amount_for_currency(
                    currency_code.strip().upper(),
                    limits.min_amount,
                    limits.max_amount,
                    limits.decimal_places,
                )
            )
        text = (description or "").strip()
        if not text:
            raise _Rejected(ErrorMessages.empty_purchase_description)
        if len(text) > MAX_PURCHASE_DESCRIPTION_LENGTH:
            raise _Rejected(ErrorMessages.invalid_purchase_description)
    except _Rejected as rejected:
        return ValidationResult.invalid(str(rejected))
    return ValidationResult.valid()


def validate_trip(
    name: Optional[str],
    country: Optional[str],
    start_date: date,
    end_date: date,
) -> ValidationResult:
    trimmed_name = (name or "").strip()
    if not trimmed_name:
        return ValidationResult.invalid(ErrorMessages.empty_trip_name)
    if len(trimmed_name) > MAX_TRIP_NAME_LENGTH:
        return ValidationResult.invalid(ErrorMessages.invalid_trip_name)
    trimmed_country = (country or "").strip()
    if not trimmed_country:
        return ValidationResult.invalid(ErrorMessages.empty_country_name)
    if len(trimmed_country) > MAX_COUNTRY_NAME_LENGTH:
        return ValidationResult.invalid(ErrorMessages.invalid_country_name)
    if start_date > end_date:
        return ValidationResult.invalid(ErrorMessages.invalid_date_range)
    return ValidationResult.valid()


__all__ = [
    "ValidationResult",
    "parse_number",
    "validate",
    "quick_validate",
    "validate_purchase",
    "validate_trip",
]
