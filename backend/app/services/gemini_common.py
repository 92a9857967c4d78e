"""
Shared helper for Gemini: run the blocking generate_content in the threadpool so the event loop
is not blocked. One call per request with a timeout; failures go straight back to the caller.
"""
from __future__ import annotations

import asyncio
import logging

from starlette.concurrency import run_in_threadpool

from app.config import settings

logger = logging.getLogger(__name__)


async def run_generate_content(model, contents):
    """Run model.generate_content(contents) in a thread pool, bounded by the configured timeout."""
    timeout = settings.gemini_request_timeout_seconds or 90
    try:
        return await asyncio.wait_for(
            run_in_threadpool(model.generate_content, contents),
            timeout=float(timeout),
        )
    except asyncio.TimeoutError:
        logger.warning("Gemini request timed out after %ss", timeout)
        raise
