"""Side-by-side projection of both credential regimes."""

import dataclasses
import logging
from typing import TypedDict

from stakesim.analysis.projection import (
    MAX_TOTAL_INTERVALS,
    ProjectionConfig,
    ProjectionResult,
    project,
)
from stakesim.analysis.regimes import CredentialType
from stakesim.exceptions import InvalidInput

logger = logging.getLogger(__name__)

# Summary field -> delta field
DELTA_FIELDS = {
    "final_balance": "final_balance_delta",
    "total_rewards": "total_rewards_delta",
    "roi_percent": "roi_delta",
    "final_effective_balance": "final_effective_balance_delta",
}


class Deltas(TypedDict):
    final_balance_delta: float
    total_rewards_delta: float
    roi_delta: float
    final_effective_balance_delta: float


class ComparisonResult(TypedDict):
    capped: ProjectionResult
    compounding: ProjectionResult
    deltas: Deltas


def compare(
    config: ProjectionConfig,
    max_intervals: int = MAX_TOTAL_INTERVALS,
) -> ComparisonResult:
    """Run the projection once per regime and diff the summaries.

    credential_type on the incoming config is ignored; every other field is
    shared by both runs. Deltas are compounding minus capped.
    """
    if not isinstance(config, ProjectionConfig):
        raise InvalidInput(f"config must be a ProjectionConfig, got {type(config).__name__}")

    capped = project(
        dataclasses.replace(config, credential_type=CredentialType.CAPPED),
        max_intervals=max_intervals,
    )
    compounding = project(
        dataclasses.replace(config, credential_type=CredentialType.COMPOUNDING),
        max_intervals=max_intervals,
    )

    deltas = {
        delta_key: compounding["summary"][key] - capped["summary"][key]
        for key, delta_key in DELTA_FIELDS.items()
    }
    logger.debug("Comparison deltas: %s", deltas)

    return ComparisonResult(
        capped=capped,
        compounding=compounding,
        deltas=Deltas(**deltas),
    )
