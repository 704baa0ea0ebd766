"""Timeout and retry policy shared by the OpenAI-backed providers."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

import openai

from models.errors import ProviderInvalidOutput, translate_openai_error

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

MAX_ATTEMPTS = 2


async def bounded_call(awaitable: Awaitable[T], timeout: float) -> T:
    """Await a provider call, abandoning it after `timeout` seconds.

    OpenAI SDK errors and timeouts are re-raised as provider taxonomy errors.
    """
    try:
        return await asyncio.wait_for(awaitable, timeout)
    except (openai.OpenAIError, asyncio.TimeoutError) as exc:
        raise translate_openai_error(exc) from exc


async def retry_invalid_output(
    call: Callable[[], Awaitable[T]],
    *,
    label: str,
    attempts: int = MAX_ATTEMPTS,
) -> T:
    """Run `call`, repeating it immediately only when the output was unusable.

    Every other provider error propagates on the first failure.
    """
    if attempts < 1:
        raise ValueError("attempts must be at least 1")
    last_error: ProviderInvalidOutput | None = None
    for attempt in range(1, attempts + 1):
        try:
            return await call()
        except ProviderInvalidOutput as exc:
            last_error = exc
            LOGGER.warning("%s returned unusable output (attempt %s/%s): %s", label, attempt, attempts, exc)
    raise last_error
