import logging
import time

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from mapchat.core.logger import logs

RATE_LIMIT_MESSAGE = "Too many requests, please try again later."


def build_rate_limiter(max_requests: int, window_seconds: int) -> Limiter:
    """
    Fixed-window limiter keyed by client address, e.g. "100/900 seconds".
    Application limits share one counter per client across every limited route.
    """
    return Limiter(
        key_func=get_remote_address,
        application_limits=[f"{max_requests}/{window_seconds} seconds"],
        headers_enabled=True,
    )


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    client = get_remote_address(request)
    logs.log(logging.WARNING, f"Rate limit exceeded for {client} on {request.url.path} ({exc.detail})")

    response = JSONResponse(status_code=429, content={"error": RATE_LIMIT_MESSAGE})
    # Adds Retry-After and the X-RateLimit-* headers for the limit that was hit
    return request.app.state.limiter._inject_headers(response, request.state.view_rate_limit)


def limit_only_prefix(app: FastAPI, limiter: Limiter, path_prefix: str = "/api/") -> None:
    """Exempt every route outside `path_prefix` (root index, docs) from the limit."""
    for route in app.routes:
        endpoint = getattr(route, "endpoint", None)
        if endpoint is not None and not getattr(route, "path", "").startswith(path_prefix):
            limiter.exempt(endpoint)


async def log_requests(request: Request, call_next):
    """Request/response logging for every call."""
    start_time = time.time()
    logs.log(logging.INFO, f"Request: {request.method} {request.url.path}", extra={"query": str(request.query_params)} if request.query_params else None)

    response = await call_next(request)

    process_time = time.time() - start_time
    logs.log(logging.INFO, f"Response: {response.status_code} - Processed in {process_time:.2f}s ({request.url.path})")
    return response
