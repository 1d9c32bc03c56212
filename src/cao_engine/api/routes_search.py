"""Search endpoints."""

from __future__ import annotations

import json

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse

from cao_engine.api.dependencies import get_orchestrator
from cao_engine.exceptions import CAOEngineError
from cao_engine.models.schemas import SearchRequest, SearchResponse
from cao_engine.pipeline.orchestrator import SearchOrchestrator

router = APIRouter()


@router.post("/search", response_model=SearchResponse)
async def search(
    request: SearchRequest,
    orchestrator: SearchOrchestrator = Depends(get_orchestrator),
) -> SearchResponse:
    try:
        return await orchestrator.search(request)
    except CAOEngineError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/search/stream")
async def search_stream(
    request: SearchRequest,
    orchestrator: SearchOrchestrator = Depends(get_orchestrator),
):
    """Stream verified results via Server-Sent Events."""

    async def event_generator():
        try:
            async for event in orchestrator.stream(request):
                yield f"event: {event['event']}\ndata: {event['data']}\n\n"
        except CAOEngineError as e:
            yield f"event: error\ndata: {json.dumps({'message': str(e)})}\n\n"

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
