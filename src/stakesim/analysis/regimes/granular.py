"""Granular-step rule for the COMPOUNDING regime."""

import logging

from . import EFFECTIVE_BALANCE_INCREMENT, floor_to_increment

logger = logging.getLogger(__name__)


def step_effective_balance(effective_balance: float, total_balance: float, cap: float) -> float:
    """Raise effective balance one increment at a time while surplus allows.

    Several increments can fall due in one interval under high reward rates,
    hence the loop. Effective balance never decreases, unless a negative
    rate has pulled the total below it; then it is re-floored to the grid
    at or below the total.

    Args:
        effective_balance: Current effective balance (multiple of the increment).
        total_balance: Total balance after this interval's reward.
        cap: Regime ceiling.

    Returns:
        Updated effective balance.
    """
    if total_balance < effective_balance:
        logger.debug(
            "Granular: total %.6f below effective %.2f, re-flooring",
            total_balance, effective_balance,
        )
        return floor_to_increment(total_balance, cap)

    while (
        effective_balance < cap
        and total_balance >= effective_balance + EFFECTIVE_BALANCE_INCREMENT
    ):
        effective_balance += EFFECTIVE_BALANCE_INCREMENT
    return effective_balance
