"""FastAPI dependency injection helpers."""

from __future__ import annotations

from fastapi import Request

from cao_engine.discovery.source_discovery import SourceDiscovery
from cao_engine.pipeline.orchestrator import SearchOrchestrator
from cao_engine.verification.registry import HookRegistry


def get_orchestrator(request: Request) -> SearchOrchestrator:
    return request.app.state.orchestrator


def get_hook_registry(request: Request) -> HookRegistry:
    return request.app.state.hook_registry


def get_discovery(request: Request) -> SourceDiscovery | None:
    return getattr(request.app.state, "discovery", None)
