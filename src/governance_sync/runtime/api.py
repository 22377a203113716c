from __future__ import annotations

from argparse import Namespace
from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Request

from governance_sync.commands.get_proposal import get_proposal
from governance_sync.commands.invalidate_cache import invalidate_cache
from governance_sync.commands.list_proposals import list_proposals
from governance_sync.config import AppSettings, get_settings
from governance_sync.errors import GovernanceSyncError, ProposalNotFoundError
from governance_sync.orchestration.filters import ALL
from governance_sync.orchestration.pagination import DEFAULT_PAGE_SIZE
from governance_sync.orchestration.refresh import REASON_COOLDOWN, REASON_IN_FLIGHT
from governance_sync.runtime.services import SyncServices, open_services
from governance_sync.types import CommandResult, CommandStatus

ServicesFactory = Callable[[AppSettings], AbstractAsyncContextManager[SyncServices]]

_HTTP_STATUS_BY_RESULT = {
    CommandStatus.NOT_FOUND: 404,
    CommandStatus.DEGRADED: 503,
    CommandStatus.FAILED: 400,
}


def _unwrap(result: CommandResult) -> dict[str, Any]:
    if result.status == CommandStatus.OK:
        return result.details
    raise HTTPException(status_code=_HTTP_STATUS_BY_RESULT[result.status], detail=result.details)


def build_app(settings: AppSettings, services_factory: ServicesFactory = open_services) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        async with services_factory(settings) as services:
            app.state.services = services
            yield

    app = FastAPI(title="governance-sync", version="0.1.0", lifespan=lifespan)

    def _services(request: Request) -> SyncServices:
        return request.app.state.services

    @app.get("/livez")
    async def livez() -> dict[str, str]:
        return {"status": "ok", "network": settings.network_env}

    @app.get("/readyz")
    async def readyz(request: Request) -> dict[str, str]:
        services = _services(request)
        available = await services.cache.ping()
        return {
            "status": "ok" if available else "degraded",
            "cache_status": "ok" if available else "unavailable",
            "track": services.cache.track.value,
        }

    @app.get("/proposals")
    async def proposals(
        request: Request,
        start_index: int | None = None,
        end_index: int = 0,
        status: str = ALL,
        type: str = ALL,
        start_date: str | None = None,
        end_date: str | None = None,
        only_new: bool = False,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
        search_index: str | None = None,
        search: str | None = None,
    ) -> dict[str, Any]:
        args = Namespace(
            start_index=start_index,
            end_index=end_index,
            status=status,
            type=type,
            start_date=start_date,
            end_date=end_date,
            only_new=only_new,
            page=page,
            page_size=page_size,
            search_index=search_index,
            search=search,
        )
        try:
            result = await list_proposals(_services(request), args)
        except GovernanceSyncError as exc:
            raise HTTPException(status_code=502, detail={"error": str(exc)}) from exc
        return _unwrap(result)

    @app.get("/proposals/{index}")
    async def proposal(request: Request, index: int, refresh: bool = False) -> dict[str, Any]:
        try:
            result = await get_proposal(_services(request), Namespace(index=index, refresh=refresh))
        except ProposalNotFoundError as exc:
            raise HTTPException(status_code=404, detail={"error": str(exc)}) from exc
        except GovernanceSyncError as exc:
            raise HTTPException(status_code=502, detail={"error": str(exc)}) from exc
        if result.details.get("reason") in (REASON_COOLDOWN, REASON_IN_FLIGHT):
            raise HTTPException(status_code=429, detail=result.details)
        return _unwrap(result)

    @app.post("/cache/invalidate")
    async def invalidate(
        request: Request,
        index: int | None = None,
        new_index: int | None = None,
        active: bool = False,
    ) -> dict[str, Any]:
        args = Namespace(index=index, new_index=new_index, active=active)
        return _unwrap(await invalidate_cache(_services(request), args))

    return app


def default_app() -> FastAPI:
    return build_app(get_settings())
