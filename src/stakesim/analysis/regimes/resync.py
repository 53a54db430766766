"""Resync rule for the CAPPED regime.

Effective balance follows min(cap, total) after every interval. Rewards above
the cap are treated as swept by automatic partial withdrawals, so they never
compound.
"""


def resync_effective_balance(effective_balance: float, total_balance: float, cap: float) -> float:
    return max(min(cap, total_balance), 0.0)
