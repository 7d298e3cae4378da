"""
Performance Timing

Timing diagnostics for slow calls (the generation request above all) and a
request-level middleware that logs the duration of every API call.
"""

import time
import logging
from contextlib import asynccontextmanager

from fastapi import Request

logger = logging.getLogger(__name__)


def _duration_emoji(duration_ms: float) -> str:
    if duration_ms < 100:
        return "✅"
    if duration_ms < 1000:
        return "⚠️ "
    return "🔴"


@asynccontextmanager
async def async_timing_context(label: str, log_level: int = logging.INFO):
    """Async context manager for timing async code blocks."""
    start_time = time.perf_counter()
    logger.log(log_level, f"⏱️  [TIMING] {label} - START")

    try:
        yield
    except Exception:
        duration = (time.perf_counter() - start_time) * 1000
        logger.log(log_level, f"❌ [TIMING] {label} - FAILED after {duration:.2f}ms")
        raise

    duration = (time.perf_counter() - start_time) * 1000  # Convert to ms
    logger.log(log_level, f"{_duration_emoji(duration)} [TIMING] {label} - COMPLETED in {duration:.2f}ms")


async def log_request_timing(request: Request, call_next):
    """HTTP middleware: log method, path, status and duration of each request."""
    start_time = time.perf_counter()
    response = await call_next(request)
    duration = (time.perf_counter() - start_time) * 1000
    logger.debug(
        f"{_duration_emoji(duration)} [TIMING] {request.method} {request.url.path} "
        f"-> {response.status_code} in {duration:.2f}ms"
    )
    return response
