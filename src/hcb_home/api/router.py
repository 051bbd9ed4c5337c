"""hcb_home REST API — the presentation surface of the sync core.

Handlers never await network fetches: triggers return as soon as the
scheduler has decided, and GET /home always answers from cache.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from src.context import SyncContext
from src.hcb_common.errors import ResourceNotCachedError
from src.hcb_common.response import ApiResponse, success_response
from src.hcb_home.application.schemas import (
    CacheEntryResponse,
    ConnectivityRequest,
    InvalidateRequest,
    InvalidateResponse,
    PinToggleResponse,
    TriggerResponse,
)
from src.hcb_home.application.service import HomeService
from src.hcb_network.infrastructure.connectivity import ConnectivityFeed

router = APIRouter(tags=["home"])


def get_context(request: Request) -> SyncContext:
    return request.app.state.context


def get_home(request: Request) -> HomeService:
    return request.app.state.home


def _respond(request: Request, data: dict, offline: bool = False) -> ApiResponse:
    resp = success_response(data, offline=offline)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/home")
async def get_home_snapshot(
    home: Annotated[HomeService, Depends(get_home)],
    request: Request,
) -> ApiResponse:
    data = home.snapshot()
    return _respond(request, data.model_dump(mode="json"), offline=data.offline)


@router.post("/home/focus")
async def focus(
    home: Annotated[HomeService, Depends(get_home)],
    request: Request,
) -> ApiResponse:
    data = TriggerResponse(trigger="focus", accepted=home.on_focus())
    return _respond(request, data.model_dump())


@router.post("/home/refresh")
async def refresh(
    home: Annotated[HomeService, Depends(get_home)],
    request: Request,
) -> ApiResponse:
    data = TriggerResponse(trigger="refresh", accepted=home.on_refresh())
    return _respond(request, data.model_dump())


@router.post("/home/prefetch")
async def prefetch(
    home: Annotated[HomeService, Depends(get_home)],
    request: Request,
) -> ApiResponse:
    data = TriggerResponse(trigger="prefetch", accepted=home.prefetch())
    return _respond(request, data.model_dump())


@router.post("/home/external-flow-complete")
async def external_flow_complete(
    home: Annotated[HomeService, Depends(get_home)],
    request: Request,
) -> ApiResponse:
    data = InvalidateResponse(invalidated=home.after_external_flow())
    return _respond(request, data.model_dump())


@router.post("/organizations/{org_id}/pin")
async def toggle_pin(
    org_id: str,
    home: Annotated[HomeService, Depends(get_home)],
    ctx: Annotated[SyncContext, Depends(get_context)],
    request: Request,
) -> ApiResponse:
    pinned = await home.toggle_pin(org_id)
    data = PinToggleResponse(
        entity_id=org_id,
        pinned=pinned,
        persisted=not ctx.pins.persistence_degraded,
    )
    return _respond(request, data.model_dump())


@router.post("/cache/invalidate")
async def invalidate(
    body: InvalidateRequest,
    ctx: Annotated[SyncContext, Depends(get_context)],
    request: Request,
) -> ApiResponse:
    data = InvalidateResponse(invalidated=ctx.invalidation.invalidate_by_prefix(body.prefix))
    return _respond(request, data.model_dump())


@router.get("/cache/entries")
async def get_cache_entry(
    key: Annotated[str, Query(min_length=1)],
    ctx: Annotated[SyncContext, Depends(get_context)],
    request: Request,
) -> ApiResponse:
    if key not in ctx.cache.keys():
        raise ResourceNotCachedError(key)
    data = CacheEntryResponse.from_entry(ctx.cache.get(key))
    return _respond(request, data.model_dump(mode="json"), offline=not ctx.monitor.is_online)


@router.put("/connectivity")
async def set_connectivity(
    body: ConnectivityRequest,
    ctx: Annotated[SyncContext, Depends(get_context)],
    request: Request,
) -> ApiResponse:
    feed: ConnectivityFeed = request.app.state.connectivity
    feed.publish(body.online)
    return _respond(request, {"online": ctx.monitor.is_online}, offline=not ctx.monitor.is_online)
