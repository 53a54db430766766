"""Withdrawal-credential regimes and their effective-balance update rules.

Each regime resolves to a cap and a tagged update rule:
- CAPPED: legacy 0x01 behaviour, 32 ETH ceiling, full resync every interval
- COMPOUNDING: EIP-7251 behaviour, 2048 ETH ceiling, 0.25 ETH granular steps
"""

from enum import Enum
from typing import Callable, NamedTuple

CAP_LEGACY = 32.0
CAP_COMPOUNDING = 2048.0
EFFECTIVE_BALANCE_INCREMENT = 0.25


class CredentialType(str, Enum):
    CAPPED = "capped"
    COMPOUNDING = "compounding"


class BalanceRule(str, Enum):
    RESYNC = "resync"
    GRANULAR_STEP = "granular_step"


# (effective_balance, total_balance, cap) -> new effective_balance
UpdateFn = Callable[[float, float, float], float]


class Regime(NamedTuple):
    credential_type: CredentialType
    cap: float
    rule: BalanceRule


REGIMES = {
    CredentialType.CAPPED: Regime(CredentialType.CAPPED, CAP_LEGACY, BalanceRule.RESYNC),
    CredentialType.COMPOUNDING: Regime(
        CredentialType.COMPOUNDING, CAP_COMPOUNDING, BalanceRule.GRANULAR_STEP
    ),
}


def floor_to_increment(balance: float, cap: float) -> float:
    """Round a balance down to the increment grid and clamp it into [0, cap]."""
    stepped = (balance // EFFECTIVE_BALANCE_INCREMENT) * EFFECTIVE_BALANCE_INCREMENT
    return min(max(stepped, 0.0), cap)


def get_update_fn(rule: BalanceRule) -> UpdateFn:
    from .granular import step_effective_balance
    from .resync import resync_effective_balance

    rules: dict[BalanceRule, UpdateFn] = {
        BalanceRule.RESYNC: resync_effective_balance,
        BalanceRule.GRANULAR_STEP: step_effective_balance,
    }
    return rules[rule]


__all__ = [
    "CAP_LEGACY",
    "CAP_COMPOUNDING",
    "EFFECTIVE_BALANCE_INCREMENT",
    "CredentialType",
    "BalanceRule",
    "Regime",
    "REGIMES",
    "UpdateFn",
    "floor_to_increment",
    "get_update_fn",
]
