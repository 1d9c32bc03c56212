"""Health check endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from cao_engine.api.dependencies import get_discovery, get_hook_registry
from cao_engine.discovery.source_discovery import SourceDiscovery
from cao_engine.models.schemas import HealthResponse
from cao_engine.verification.registry import HookRegistry

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(
    registry: HookRegistry = Depends(get_hook_registry),
    discovery: SourceDiscovery | None = Depends(get_discovery),
) -> HealthResponse:
    return HealthResponse(
        status="ok",
        hooks=registry.names(),
        pending_sources=discovery.pending_count() if discovery else 0,
    )


@router.get("/health/hooks", response_model=dict[str, bool])
async def hook_health(registry: HookRegistry = Depends(get_hook_registry)) -> dict[str, bool]:
    return await registry.health_check()
