"""Trip-level aggregation over exchange and purchase records.

All functions fold over an already materialized collection and are
recomputed on every call; nothing is cached.

Records with non-positive amounts can still reach this layer through
historical data. They are logged and left out of every sum rather than
failing the aggregation.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Sequence

from triprate.models.constants import RATE_NOT_COMPUTABLE
from triprate.models.exchange import ExchangeTransaction
from triprate.models.purchase import PurchaseTransaction

logger = logging.getLogger("triprate.aggregator")


def usable_exchanges(
    exchanges: Iterable[ExchangeTransaction],
) -> List[ExchangeTransaction]:
    kept: List[ExchangeTransaction] = []
    for exchange in exchanges:
        if exchange.has_valid_amounts:
            kept.append(exchange)
        else:
            logger.warning(
                "skipping exchange %s with non-positive amounts (home=%s, foreign=%s)",
                exchange.id,
                exchange.home_amount_spent,
                exchange.foreign_amount_received,
            )
    return kept


def usable_purchases(
    purchases: Iterable[PurchaseTransaction],
) -> List[PurchaseTransaction]:
    kept: List[PurchaseTransaction] = []
    for purchase in purchases:
        if purchase.foreign_amount_spent > 0:
            kept.append(purchase)
        else:
            logger.warning(
                "skipping purchase %s with non-positive amount %s",
                purchase.id,
                purchase.foreign_amount_spent,
            )
    return kept


def weighted_average_rate(exchanges: Sequence[ExchangeTransaction]) -> float:
    """Volume-weighted rate: total home spent / total foreign received.

    Returns ``RATE_NOT_COMPUTABLE`` when there is no usable exchange data.
    """
    valid = usable_exchanges(exchanges)
    if not valid:
        return RATE_NOT_COMPUTABLE
    total_home = sum(e.home_amount_spent for e in valid)
    total_foreign = sum(e.foreign_amount_received for e in valid)
    if total_home <= 0 or total_foreign <= 0:
        return RATE_NOT_COMPUTABLE
    return total_home / total_foreign


def total_home_equivalent(
    purchases: Sequence[PurchaseTransaction], rate: float
) -> float:
    """Home-currency value of all purchases; 0.0 when ``rate`` is not usable."""
    if rate <= 0:
        return 0.0
    return sum(
        (p.home_amount_equivalent(rate) for p in usable_purchases(purchases)), 0.0
    )


def total_exchanged_home(exchanges: Iterable[ExchangeTransaction]) -> float:
    return sum((e.home_amount_spent for e in exchanges if e.home_amount_spent > 0), 0.0)


def total_foreign_obtained(exchanges: Iterable[ExchangeTransaction]) -> float:
    return sum(
        (e.foreign_amount_received for e in exchanges if e.foreign_amount_received > 0),
        0.0,
    )


def total_foreign_spent(purchases: Iterable[PurchaseTransaction]) -> float:
    return sum(
        (p.foreign_amount_spent for p in purchases if p.foreign_amount_spent > 0),
        0.0,
    )


def remaining_foreign(
    exchanges: Iterable[ExchangeTransaction],
    purchases: Iterable[PurchaseTransaction],
) -> float:
    """Foreign currency left over. Negative when spending exceeds exchanges."""
    return total_foreign_obtained(exchanges) - total_foreign_spent(purchases)


__all__ = [
    "usable_exchanges",
    "usable_purchases",
    "weighted_average_rate",
    "total_home_equivalent",
    "total_exchanged_home",
    "total_foreign_obtained",
    "total_foreign_spent",
    "remaining_foreign",
]
