"""Single-regime reward projection.

Turns a ProjectionConfig into a sampled time series of (total balance,
effective balance) plus summary statistics. Pure and deterministic: no I/O,
no shared state, so concurrent calls are safe.
"""

import logging
import math
import numbers
from dataclasses import dataclass
from enum import Enum
from typing import TypedDict

import numpy as np

from stakesim.analysis.regimes import (
    EFFECTIVE_BALANCE_INCREMENT,
    REGIMES,
    BalanceRule,
    CredentialType,
    floor_to_increment,
    get_update_fn,
)
from stakesim.exceptions import InvalidInput, OutOfRange

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

EPOCH_SECONDS = 384
YEAR_SECONDS = 31_536_000
EPOCHS_PER_YEAR = YEAR_SECONDS // EPOCH_SECONDS  # 82125, divides exactly
DAYS_PER_YEAR = 365
DAILY_SAMPLE_STEP = EPOCHS_PER_YEAR // DAYS_PER_YEAR  # 225 epochs ~ 1 day
MAX_TOTAL_INTERVALS = 10_000_000


class Cadence(str, Enum):
    EPOCH = "epoch"
    DAILY = "daily"
    MONTHLY = "monthly"
    YEARLY = "yearly"


INTERVALS_PER_YEAR = {
    Cadence.EPOCH: EPOCHS_PER_YEAR,
    Cadence.DAILY: DAYS_PER_YEAR,
    Cadence.MONTHLY: 12,
    Cadence.YEARLY: 1,
}


# ---------------------------------------------------------------------------
# Input / output types
# ---------------------------------------------------------------------------


def _require_real(name: str, value) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidInput(f"{name} must be a number, got {type(value).__name__}")
    value = float(value)
    if not math.isfinite(value):
        raise InvalidInput(f"{name} must be finite, got {value}")
    return value


def _require_enum(name: str, enum_cls, value):
    if isinstance(value, str) and not isinstance(value, Enum):
        value = value.strip().lower()
    try:
        return enum_cls(value)
    except (ValueError, TypeError):
        allowed = ", ".join(m.value for m in enum_cls)
        raise InvalidInput(f"{name} must be one of: {allowed}; got {value!r}") from None


@dataclass(frozen=True)
class ProjectionConfig:
    """Inputs for one projection run.

    Strings are accepted for credential_type and cadence and coerced to their
    enums. Anything mistyped or out of domain raises InvalidInput at
    construction, before any simulation work.
    """

    initial_balance: float
    credential_type: CredentialType
    annual_reward_rate: float
    time_period_years: int
    cadence: Cadence = Cadence.EPOCH

    def __post_init__(self):
        initial_balance = _require_real("initial_balance", self.initial_balance)
        if initial_balance <= 0:
            raise InvalidInput(f"initial_balance must be > 0, got {initial_balance}")

        annual_reward_rate = _require_real("annual_reward_rate", self.annual_reward_rate)
        cadence = _require_enum("cadence", Cadence, self.cadence)
        # per-interval growth factor must stay positive or the total goes negative
        if annual_reward_rate <= -INTERVALS_PER_YEAR[cadence]:
            raise InvalidInput(
                f"annual_reward_rate must be > -{INTERVALS_PER_YEAR[cadence]} "
                f"for {cadence.value} cadence, got {annual_reward_rate}"
            )

        years = self.time_period_years
        if isinstance(years, bool) or not isinstance(years, numbers.Integral):
            raise InvalidInput(
                f"time_period_years must be an integer, got {type(years).__name__}"
            )
        if years < 0:
            raise InvalidInput(f"time_period_years must be >= 0, got {years}")

        object.__setattr__(self, "initial_balance", initial_balance)
        object.__setattr__(self, "annual_reward_rate", annual_reward_rate)
        object.__setattr__(self, "time_period_years", int(years))
        object.__setattr__(
            self,
            "credential_type",
            _require_enum("credential_type", CredentialType, self.credential_type),
        )
        object.__setattr__(self, "cadence", cadence)

    @property
    def intervals_per_year(self) -> int:
        return INTERVALS_PER_YEAR[self.cadence]

    @property
    def total_intervals(self) -> int:
        return round(self.intervals_per_year * self.time_period_years)


class TimeSeries(TypedDict):
    year_fraction: np.ndarray
    total_balance: np.ndarray
    effective_balance: np.ndarray


class Summary(TypedDict):
    final_balance: float
    total_rewards: float
    roi_percent: float
    final_effective_balance: float


class ProjectionResult(TypedDict):
    """Standard return type for a single-regime run."""
    credential_type: str
    cadence: str
    series: TimeSeries
    summary: Summary


def _stable_band(rule: BalanceRule, effective_balance: float, cap: float) -> tuple[float, float]:
    """[low, high) range of total balance over which the rule leaves effective balance as is."""
    if effective_balance >= cap:
        return cap, math.inf
    if rule is BalanceRule.GRANULAR_STEP:
        return effective_balance, effective_balance + EFFECTIVE_BALANCE_INCREMENT
    # resync below the cap follows total every interval
    return math.inf, math.inf


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def project(
    config: ProjectionConfig,
    max_intervals: int = MAX_TOTAL_INTERVALS,
) -> ProjectionResult:
    """Simulate reward accrual for one credential regime.

    Order of operations (per interval):
      1) reward = effective_balance * rate_per_interval, added to total.
      2) effective balance updated by the regime rule (resync or granular step);
         the rule is only consulted once total leaves the range where it
         would be a no-op.
      3) sample recorded: daily for EPOCH cadence, every interval otherwise,
         and always on the last interval.

    Args:
        config: Validated projection inputs.
        max_intervals: Ceiling on the interval count; larger runs raise OutOfRange.

    Returns:
        ProjectionResult with the sampled series and final summary.
    """
    if not isinstance(config, ProjectionConfig):
        raise InvalidInput(f"config must be a ProjectionConfig, got {type(config).__name__}")

    regime = REGIMES[config.credential_type]
    update = get_update_fn(regime.rule)
    cap = regime.cap

    intervals_per_year = config.intervals_per_year
    total_intervals = config.total_intervals
    if total_intervals > max_intervals:
        raise OutOfRange(
            f"{total_intervals} intervals ({config.cadence.value} x "
            f"{config.time_period_years}y) exceeds ceiling of {max_intervals}"
        )

    rate_per_interval = config.annual_reward_rate / intervals_per_year
    sample_step = DAILY_SAMPLE_STEP if config.cadence is Cadence.EPOCH else 1

    logger.debug(
        "Projecting %s: balance=%.6f rate=%.4f years=%d cadence=%s intervals=%d",
        config.credential_type.value,
        config.initial_balance,
        config.annual_reward_rate,
        config.time_period_years,
        config.cadence.value,
        total_intervals,
    )

    total_balance = config.initial_balance
    effective_balance = floor_to_increment(total_balance, cap)

    year_fraction = [0.0]
    totals = [total_balance]
    effectives = [effective_balance]

    low, high = _stable_band(regime.rule, effective_balance, cap)

    i = 0
    while i < total_intervals:
        chunk = min(sample_step, total_intervals - i)

        if high == math.inf and rate_per_interval >= 0:
            # pinned at the cap: every reward in this chunk is the same
            total_balance += chunk * effective_balance * rate_per_interval
        else:
            for _ in range(chunk):
                total_balance += effective_balance * rate_per_interval
                if total_balance < low or total_balance >= high:
                    effective_balance = update(effective_balance, total_balance, cap)
                    low, high = _stable_band(regime.rule, effective_balance, cap)

        i += chunk
        year_fraction.append(i / intervals_per_year)
        totals.append(total_balance)
        effectives.append(effective_balance)

    total_rewards = total_balance - config.initial_balance

    return ProjectionResult(
        credential_type=config.credential_type.value,
        cadence=config.cadence.value,
        series=TimeSeries(
            year_fraction=np.asarray(year_fraction, dtype=float),
            total_balance=np.asarray(totals, dtype=float),
            effective_balance=np.asarray(effectives, dtype=float),
        ),
        summary=Summary(
            final_balance=total_balance,
            total_rewards=total_rewards,
            roi_percent=total_rewards / config.initial_balance * 100,
            final_effective_balance=effective_balance,
        ),
    )
