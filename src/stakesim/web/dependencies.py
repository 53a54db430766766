"""FastAPI dependency injection providers."""

from typing import Generator

from fastapi import Request

from stakesim.api.beacon_client import BeaconClient
from stakesim.config import Settings
from stakesim.web.cache import CacheService


def get_settings(request: Request) -> Settings:
    """Get application settings from app state."""
    return request.app.state.settings


def get_cache(request: Request) -> CacheService:
    """Get cache service from app state."""
    return request.app.state.cache


def get_beacon_client(request: Request) -> Generator[BeaconClient, None, None]:
    """Provide a beacon API client for the request lifetime."""
    client = BeaconClient.from_settings(request.app.state.settings)
    try:
        yield client
    finally:
        client.close()
