import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from .fetcher import FetchExecutor, build_client
from .guardrails import FetchCache, FixedWindowRateLimiter, RateLimitConfig
from .pipeline import FetchPipeline
from .schemas import HealthResponse
from .settings import settings
from .sweeper import PeriodicSweeper
from .web import router as web_router

logger = logging.getLogger(__name__)

app = FastAPI(title="Fetch Proxy", version="2.0.0")
app.include_router(web_router)

rate_limiter = FixedWindowRateLimiter(
    RateLimitConfig(max_requests=settings.rate_limit, window_seconds=settings.rate_window_ms / 1000)
)
fetch_cache = FetchCache(ttl_seconds=settings.cache_ttl_ms / 1000)
executor = FetchExecutor(
    build_client(),
    user_agent=settings.user_agent,
    max_size_bytes=settings.max_size_bytes,
    stream_size_cap=settings.stream_size_cap,
)
pipeline = FetchPipeline(
    rate_limiter,
    fetch_cache,
    executor,
    timeout_ms=settings.fetch_timeout_ms,
    max_size_bytes=settings.max_size_bytes,
)
sweepers = [
    PeriodicSweeper("rate-limit", rate_limiter.sweep, settings.sweep_interval_ms / 1000),
    PeriodicSweeper("cache", fetch_cache.sweep, settings.sweep_interval_ms / 1000),
]


@app.on_event("startup")
async def _startup():
    logging.basicConfig(level=settings.log_level.upper())
    if executor.client.is_closed:
        executor.client = build_client()
    for sweeper in sweepers:
        sweeper.start()


@app.on_event("shutdown")
async def _shutdown():
    for sweeper in sweepers:
        await sweeper.stop()
    await executor.client.aclose()


@app.get("/health", response_model=HealthResponse)
def health():
    return {"ok": True, "rate_limit_entries": len(rate_limiter), "cache_entries": len(fetch_cache)}


def cors_headers() -> dict:
    return {
        "Access-Control-Allow-Origin": settings.cors_allow_origin,
        "Access-Control-Allow-Headers": "Content-Type",
        "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
        "Cache-Control": "no-cache",
    }


def client_identifier(request: Request) -> str:
    forwarded: Optional[str] = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.headers.get("client-ip") or "unknown"


async def fetch_url(request: Request):
    body = await request.body() if request.method == "POST" else None
    result = await pipeline.handle(
        request.method,
        client_identifier(request),
        query_url=request.query_params.get("url"),
        raw_body=body,
    )
    headers = {**cors_headers(), **result.headers}
    if result.body is None:
        return Response(status_code=result.status_code, headers=headers)
    return JSONResponse(result.body, status_code=result.status_code, headers=headers)


class FetchEndpoint:
    """ASGI wrapper around ``fetch_url``.

    Routes built from a plain function only answer GET; an ASGI app is routed for
    every method, so unknown verbs still reach the pipeline and get the JSON 405.
    """
    async def __call__(self, scope, receive, send):
        response = await fetch_url(Request(scope, receive))
        await response(scope, receive, send)


app.add_route("/fetch-url", FetchEndpoint(), include_in_schema=False)
app.add_route("/.netlify/functions/fetch-url", FetchEndpoint(), include_in_schema=False)
