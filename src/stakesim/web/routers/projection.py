"""Projection and regime comparison endpoints."""

from fastapi import APIRouter, Depends

from stakesim.analysis.comparison import compare
from stakesim.analysis.projection import ProjectionConfig, project
from stakesim.config import Settings
from stakesim.web.dependencies import get_settings
from stakesim.web.schemas import (
    ApiResponse,
    ComparisonRequest,
    ComparisonResponse,
    ProjectionRequest,
    ProjectionResponse,
)

router = APIRouter(prefix="/projection", tags=["projection"])


def _build_config(
    body: ProjectionRequest | ComparisonRequest,
    settings: Settings,
    credential_type: str,
) -> ProjectionConfig:
    return ProjectionConfig(
        initial_balance=body.initial_balance,
        credential_type=credential_type,
        annual_reward_rate=(
            body.annual_reward_rate
            if body.annual_reward_rate is not None
            else settings.default_reward_rate
        ),
        time_period_years=(
            body.time_period_years
            if body.time_period_years is not None
            else settings.default_time_period_years
        ),
        cadence=body.cadence if body.cadence is not None else settings.default_cadence,
    )


@router.post("", response_model=ApiResponse[ProjectionResponse])
def run_projection(
    body: ProjectionRequest,
    settings: Settings = Depends(get_settings),
):
    """Project balance growth for a single credential regime."""
    config = _build_config(body, settings, body.credential_type)
    result = project(config, max_intervals=settings.max_intervals)
    return ApiResponse(data=ProjectionResponse.from_result(result))


@router.post("/compare", response_model=ApiResponse[ComparisonResponse])
def run_comparison(
    body: ComparisonRequest,
    settings: Settings = Depends(get_settings),
):
    """Project both regimes side by side and return compounding-minus-capped deltas."""
    # credential_type is overridden per run by compare()
    config = _build_config(body, settings, "compounding")
    result = compare(config, max_intervals=settings.max_intervals)
    return ApiResponse(data=ComparisonResponse.from_result(result))
