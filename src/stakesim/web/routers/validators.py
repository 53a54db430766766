"""Validator lookup endpoints."""

from fastapi import APIRouter, Depends

from stakesim.api.beacon_client import BeaconClient
from stakesim.web.cache import CacheService
from stakesim.web.dependencies import get_beacon_client, get_cache
from stakesim.web.schemas import ApiResponse, Meta, ValidatorInfo

router = APIRouter(prefix="/validators", tags=["validators"])


@router.get("/{validator_id}", response_model=ApiResponse[ValidatorInfo])
def get_validator(
    validator_id: str,
    client: BeaconClient = Depends(get_beacon_client),
    cache: CacheService = Depends(get_cache),
):
    """Get current balance and credential type for a validator."""
    cache_key = f"validator:{validator_id.strip().lower()}"
    cached = cache.get(cache_key)
    if cached:
        return ApiResponse(data=cached, meta=Meta(cached=True))

    record = client.fetch_validator(validator_id)
    result = ValidatorInfo.from_record(record)
    cache.set(cache_key, result.model_dump())
    return ApiResponse(data=result)
