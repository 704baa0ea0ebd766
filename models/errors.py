"""Error taxonomy shared by the core services and the HTTP layer."""

from __future__ import annotations

import asyncio
from typing import Optional

import openai


class ScreenshotIQError(Exception):
    """Base class for every error raised by the core."""


class ValidationError(ScreenshotIQError):
    """Malformed input to a core operation. Raised before any side effect."""


class NotFound(ScreenshotIQError):
    """Unknown session, image, job, or evidence id."""


class ProviderError(ScreenshotIQError):
    """An external completion provider could not produce a usable result."""

    classification = "云端不可用，已降级本地"

    def __init__(self, message: str = "", *, classification: Optional[str] = None) -> None:
        super().__init__(message or self.classification)
        if classification:
            self.classification = classification


class ProviderUnauthorized(ProviderError):
    classification = "鉴权失败（API Key 无效）"


class ProviderRateLimited(ProviderError):
    classification = "请求过多（限流），已降级本地"


class ProviderServerError(ProviderError):
    classification = "OpenAI 服务异常，已降级本地"


class ProviderTimeout(ProviderError):
    classification = "OpenAI 超时，已降级本地"


class ProviderInvalidOutput(ProviderError):
    classification = "模型输出非JSON，已降级本地"


def translate_openai_error(exc: BaseException) -> ProviderError:
    """Map an OpenAI SDK (or asyncio) exception onto the provider taxonomy."""
    if isinstance(exc, ProviderError):
        return exc
    if isinstance(exc, (asyncio.TimeoutError, openai.APITimeoutError)):
        return ProviderTimeout(str(exc) or "provider call timed out")
    if isinstance(exc, openai.AuthenticationError):
        return ProviderUnauthorized(str(exc))
    if isinstance(exc, openai.PermissionDeniedError):
        return ProviderUnauthorized(str(exc), classification="权限不足（模型/账号不可用）")
    if isinstance(exc, openai.RateLimitError):
        return ProviderRateLimited(str(exc))
    if isinstance(exc, openai.APIStatusError) and exc.status_code >= 500:
        return ProviderServerError(str(exc))
    return ProviderError(str(exc))
