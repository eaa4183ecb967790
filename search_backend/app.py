from __future__ import annotations

import asyncio
import contextlib
import logging
import os
from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from .context import ServiceContext, build_context
from .errors import ValidationError
from .indexing.materializer import rebuild_index, run_periodic_refresh
from .search.engine import search
from .search.intent import extract_intent
from .search.models import SearchRequest, SearchResponse

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

router = APIRouter()


def get_context(request: Request) -> ServiceContext:
    return request.app.state.context


# ── Public endpoints ─────────────────────────────────────────────────────


@router.get("/", response_class=PlainTextResponse)
def root() -> str:
    return "ReserveMe AI Search Backend"


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/ai-search", response_model=SearchResponse)
async def ai_search(
    body: SearchRequest | None = None, ctx: ServiceContext = Depends(get_context)
):
    query = body.query.strip() if body else ""
    if not query:
        raise ValidationError("Query is required")

    logger.info("Search: %r", query.lower())
    async with ctx.search_slots:
        try:
            intent, cached = await extract_intent(query, ctx)
            result = await search(intent, ctx)
        except Exception as exc:
            logger.exception("Search failed for %r", query)
            return JSONResponse(
                status_code=500,
                content={"error": "Server error", "details": str(exc)},
            )

    return SearchResponse(
        cached=cached,
        intent=intent,
        total=result.total,
        restaurants=result.restaurants,
    )


# ── Diagnostic endpoints ─────────────────────────────────────────────────


@router.get("/test-firestore")
async def test_firestore(ctx: ServiceContext = Depends(get_context)):
    try:
        docs = await ctx.store.get("users", limit=5)
    except Exception as exc:
        logger.warning("Store connectivity check failed", exc_info=True)
        return JSONResponse(status_code=500, content={"ok": False, "error": str(exc)})
    return {"ok": True, "count": len(docs), "sample": [doc.fields for doc in docs]}


@router.get("/cache/stats")
def cache_stats(ctx: ServiceContext = Depends(get_context)) -> dict:
    return {
        "intent_cache": ctx.intent_cache.stats(),
        "aggregation_age_seconds": ctx.aggregation_cache.age(),
    }


@router.post("/index/rebuild")
async def rebuild(ctx: ServiceContext = Depends(get_context)) -> dict:
    return {"indexed": await rebuild_index(ctx)}


# ── Application factory ──────────────────────────────────────────────────


def create_app(context: ServiceContext | None = None) -> FastAPI:
    """
    Build the API. Without an explicit ``context`` one is built from the
    environment at startup, which exits when credentials are missing.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        ctx = context or build_context()
        app.state.context = ctx

        try:
            await rebuild_index(ctx)
        except Exception:
            logger.exception("Initial index rebuild failed, serving without a fresh index")

        refresher = asyncio.create_task(run_periodic_refresh(ctx))
        yield
        refresher.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await refresher

    app = FastAPI(title="AI Restaurant Search API", version="1.0.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ValidationError)
    async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": str(exc)})

    app.include_router(router)
    return app


app = create_app()
