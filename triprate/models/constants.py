"""Domain constants for validation and derived metrics.

Home-currency bounds apply to the amount paid at the exchange counter; the
foreign-currency bounds come from the per-currency policy table instead.
"""

from typing import Set

# Home-currency amount bounds (inclusive)
MIN_HOME_AMOUNT: float = 1.0
MAX_HOME_AMOUNT: float = 100_000_000.0

# Exchange-office quote ("100 buys 917"): home leg bounds (inclusive)
MIN_EXCHANGE_OFFICE_HOME: float = 1.0
MAX_EXCHANGE_OFFICE_HOME: float = 100_000.0

# Plausible canonical rate range, home units per one foreign unit
MIN_RATE: float = 0.001
MAX_RATE: float = 10_000.0

# Reserved "cannot compute" rate. Valid data never yields a zero rate.
RATE_NOT_COMPUTABLE: float = 0.0

# Fee strictly above this percentage is flagged as high
HIGH_FEE_THRESHOLD_PCT: float = 3.0

MAX_TRIP_NAME_LENGTH: int = 50
MAX_COUNTRY_NAME_LENGTH: int = 30
MAX_PURCHASE_DESCRIPTION_LENGTH: int = 100

LARGE_DENOMINATION_CURRENCIES: Set[str] = {"KRW", "IDR", "VND"}


def _fmt(value: float, decimals: int = 0) -> str:
    return f"{value:,.{decimals}f}"


class ErrorMessages:
    """User-facing validation messages."""

    missing_value = "Please enter a value"
    invalid_number = "Please enter a valid number"
    both_values_required = "Please enter both values"
    positive_value_required = "Please enter a positive number"
    negative_amount = "Negative values are not allowed"
    zero_amount = "Amount must be greater than 0"
    cannot_calculate_rate = "The rate cannot be calculated"
    invalid_amount = (
        f"Amount must be between {_fmt(MIN_HOME_AMOUNT)} "
        f"and {_fmt(MAX_HOME_AMOUNT)}"
    )
    invalid_rate = (
        f"Rate must be between {MIN_RATE} and {_fmt(MAX_RATE)} "
        "per foreign unit"
    )
    invalid_exchange_office_home = (
        f"Home-currency value must be between {_fmt(MIN_EXCHANGE_OFFICE_HOME)} "
        f"and {_fmt(MAX_EXCHANGE_OFFICE_HOME)}"
    )

    empty_trip_name = "Please enter a trip name"
    invalid_trip_name = (
        f"Trip name must be at most {MAX_TRIP_NAME_LENGTH} characters"
    )
    empty_country_name = "Please enter a country"
    invalid_country_name = (
        f"Country must be at most {MAX_COUNTRY_NAME_LENGTH} characters"
    )
    empty_purchase_description = "Please describe the purchase"
    invalid_purchase_description = (
        f"Description must be at most {MAX_PURCHASE_DESCRIPTION_LENGTH} characters"
    )
    invalid_date_range = "Start date must not be after end date"

    @staticmethod
    def invalid_amount_for_currency(
        code: str, min_amount: float, max_amount: float, decimals: int
    ) -> str:
        return (
            f"{code} amount must be between {_fmt(min_amount, decimals)} "
            f"and {_fmt(max_amount, decimals)}"
        )

    @staticmethod
    def invalid_exchange_office_foreign(
        code: str, min_amount: float, max_amount: float, decimals: int
    ) -> str:
        return (
            f"Foreign-currency value must be between {_fmt(min_amount, decimals)} "
            f"and {_fmt(max_amount, decimals)} {code}"
        )
