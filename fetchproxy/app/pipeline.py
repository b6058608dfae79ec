import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from pydantic import ValidationError

from .errors import (
    BlockedUrlError,
    InvalidBodyError,
    MalformedUrlError,
    MethodNotAllowedError,
    MissingParameterError,
    PayloadTooLargeError,
    ProxyError,
    RateLimitedError,
    UpstreamHttpError,
    internal_error_body,
)
from .fetcher import FetchExecutor
from .guardrails import FetchCache, FixedWindowRateLimiter, RateDecision
from .schemas import FetchRequest, FetchSuccess
from .url_guard import is_dangerous, parse_target_url

logger = logging.getLogger(__name__)

ALLOWED_METHODS = ("GET", "POST")


@dataclass
class ProxyResult:
    status_code: int
    body: Optional[Dict[str, Any]]
    headers: Dict[str, str] = field(default_factory=dict)


class FetchPipeline:
    """
    Runs one proxied request through the fixed stage order:
    method gate, rate limit, url extraction, validation, guard, cache, fetch,
    size check, cache store. Every outcome, including unexpected failures,
    comes back as a ProxyResult; nothing escapes ``handle``.
    """
    def __init__(
        self,
        limiter: FixedWindowRateLimiter,
        cache: FetchCache,
        executor: FetchExecutor,
        timeout_ms: int,
        max_size_bytes: int,
    ):
        self.limiter = limiter
        self.cache = cache
        self.executor = executor
        self.timeout_ms = timeout_ms
        self.max_size_bytes = max_size_bytes

    async def handle(
        self,
        method: str,
        client_id: str,
        query_url: Optional[str] = None,
        raw_body: Optional[bytes] = None,
    ) -> ProxyResult:
        method = method.upper()
        if method == "OPTIONS":
            return ProxyResult(200, None)

        try:
            if method not in ALLOWED_METHODS:
                raise MethodNotAllowedError(method)

            logger.info("Request from IP: %s", client_id)
            decision = self.limiter.check(client_id)
            if not decision.allowed:
                logger.warning("Rate limit hit for %s, reset in %ss", client_id, decision.reset_in)
                raise RateLimitedError(decision.reset_in)

            target = query_url if method == "GET" else _url_from_body(raw_body)
            return await self._serve(target, decision)
        except ProxyError as e:
            return ProxyResult(e.status_code, e.to_body(), self._error_headers(e))
        except Exception as e:
            logger.exception("Unexpected failure while proxying")
            return ProxyResult(500, internal_error_body(e))

    async def _serve(self, target: Any, decision: RateDecision) -> ProxyResult:
        # arrays and objects count as present, like any non-empty value
        if isinstance(target, (list, dict)):
            raise MalformedUrlError(str(target))
        if not target:
            raise MissingParameterError()
        if not isinstance(target, str):
            raise MalformedUrlError(str(target))

        url = parse_target_url(target)
        if is_dangerous(url):
            logger.warning("Blocked request for %s", url)
            raise BlockedUrlError(url)

        cached = self.cache.lookup(url)
        if cached is not None:
            logger.info("Cache hit for: %s", url)
            return ProxyResult(
                200,
                FetchSuccess(html=cached.body, size=cached.byte_size, cached=True).model_dump(),
                {"X-Cache": "HIT", **self._rate_headers(decision)},
            )

        logger.info("Fetching: %s", url)
        upstream = await self.executor.fetch(url, self.timeout_ms)
        if not upstream.ok:
            raise UpstreamHttpError(upstream.status_code)

        if upstream.size > self.max_size_bytes:
            logger.warning("Body of %s is %s bytes, over the limit", url, upstream.size)
            raise PayloadTooLargeError(upstream.size, self.max_size_bytes)

        self.cache.store(url, upstream.text, upstream.size)
        logger.info("Success: %s (%s bytes)", url, upstream.size)
        return ProxyResult(
            200,
            FetchSuccess(html=upstream.text, size=upstream.size, cached=False).model_dump(),
            {"X-Cache": "MISS", **self._rate_headers(decision)},
        )

    def _rate_headers(self, decision: RateDecision) -> Dict[str, str]:
        return {
            "X-RateLimit-Limit": str(self.limiter.cfg.max_requests),
            "X-RateLimit-Remaining": str(decision.remaining),
        }

    def _error_headers(self, exc: ProxyError) -> Dict[str, str]:
        if isinstance(exc, RateLimitedError):
            return {
                "X-RateLimit-Limit": str(self.limiter.cfg.max_requests),
                "X-RateLimit-Remaining": "0",
                "X-RateLimit-Reset": str(exc.reset_in),
            }
        return {}


def _url_from_body(raw_body: Optional[bytes]) -> Any:
    if not raw_body or not raw_body.strip():
        return None
    try:
        return FetchRequest.model_validate_json(raw_body).url
    except ValidationError:
        raise InvalidBodyError()
