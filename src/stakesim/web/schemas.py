"""Pydantic request/response schemas for the stakesim API."""

from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

from stakesim.analysis.comparison import ComparisonResult
from stakesim.analysis.projection import Cadence, ProjectionResult
from stakesim.analysis.regimes import CredentialType
from stakesim.api.beacon_client import ValidatorRecord

T = TypeVar("T")


# --- Base schemas ---


class Meta(BaseModel):
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    cached: bool = False


class ApiResponse(BaseModel, Generic[T]):
    data: T
    meta: Meta = Field(default_factory=Meta)


class ErrorResponse(BaseModel):
    error: dict[str, Any] = Field(
        description="Error details with code and message"
    )


# --- Projection requests ---


class ProjectionRequest(BaseModel):
    initial_balance: float = Field(description="Starting total balance (ETH)")
    credential_type: CredentialType = Field(
        CredentialType.COMPOUNDING, description="capped (0x01) or compounding (EIP-7251)"
    )
    annual_reward_rate: float | None = Field(
        None, description="Fractional APR, e.g. 0.042; defaults to server setting"
    )
    time_period_years: int | None = Field(None, description="Projection horizon in years")
    cadence: Cadence | None = Field(None, description="epoch, daily, monthly or yearly")


class ComparisonRequest(BaseModel):
    initial_balance: float = Field(description="Starting total balance (ETH)")
    annual_reward_rate: float | None = None
    time_period_years: int | None = None
    cadence: Cadence | None = None


# --- Projection responses ---


class SeriesPoint(BaseModel):
    year_fraction: float
    total_balance: float
    effective_balance: float


class ProjectionSummary(BaseModel):
    final_balance: float
    total_rewards: float
    roi_percent: float
    final_effective_balance: float


class ProjectionResponse(BaseModel):
    credential_type: CredentialType
    cadence: Cadence
    series: list[SeriesPoint]
    summary: ProjectionSummary

    @classmethod
    def from_result(cls, result: ProjectionResult) -> "ProjectionResponse":
        series = result["series"]
        points = [
            SeriesPoint(year_fraction=y, total_balance=t, effective_balance=e)
            for y, t, e in zip(
                series["year_fraction"].tolist(),
                series["total_balance"].tolist(),
                series["effective_balance"].tolist(),
            )
        ]
        return cls(
            credential_type=result["credential_type"],
            cadence=result["cadence"],
            series=points,
            summary=ProjectionSummary(**result["summary"]),
        )


class ComparisonDeltas(BaseModel):
    final_balance_delta: float
    total_rewards_delta: float
    roi_delta: float
    final_effective_balance_delta: float


class ComparisonResponse(BaseModel):
    capped: ProjectionResponse
    compounding: ProjectionResponse
    deltas: ComparisonDeltas

    @classmethod
    def from_result(cls, result: ComparisonResult) -> "ComparisonResponse":
        return cls(
            capped=ProjectionResponse.from_result(result["capped"]),
            compounding=ProjectionResponse.from_result(result["compounding"]),
            deltas=ComparisonDeltas(**result["deltas"]),
        )


# --- Validator schemas ---


class ValidatorInfo(BaseModel):
    validator_index: int | None = Field(None, description="Beacon chain validator index")
    pubkey: str | None = None
    status: str
    balance_eth: float = Field(description="Current balance (ETH)")
    effective_balance_eth: float = Field(description="Current effective balance (ETH)")
    credential_prefix: str = Field(description="First byte of withdrawal credentials, e.g. 0x01")
    credential_type: CredentialType

    @classmethod
    def from_record(cls, record: ValidatorRecord) -> "ValidatorInfo":
        return cls(
            validator_index=record.validator_index,
            pubkey=record.pubkey,
            status=record.status,
            balance_eth=record.balance_eth,
            effective_balance_eth=record.effective_balance_eth,
            credential_prefix=record.credential_prefix,
            credential_type=record.credential_type,
        )


# --- System schemas ---


class HealthResponse(BaseModel):
    status: str
    version: str
