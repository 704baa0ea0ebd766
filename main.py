import inspect
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from openai import AsyncOpenAI

from dal.memory_store import MemoryStore
from routes.analysis_route import router as analysis_router
from routes.chat_route import router as chat_router
from routes.session_route import router as session_router
from services.analysis_service import AnalysisService
from services.chat_service import ChatService
from services.citations import CitationBuilder
from services.image_slices import ImageStripper
from services.openai.reasoning_provider import OpenAIReasoningProvider
from services.openai.vision_extractor import VisionExtractor
from services.reasoning import ReasoningSynthesizer
from services.relevance import build_scorer
from utils.settings import Settings

from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file if present

LOGGER = logging.getLogger(__name__)


def configure_services(app: FastAPI, settings: Settings, openai_client: Optional[AsyncOpenAI]) -> None:
    """
    Build the store and core services and attach them to `app.state`.
    Without a client every provider slot stays empty and the core runs locally.
    """
    store = MemoryStore()
    vision = None
    reasoning = None
    if openai_client is not None:
        stripper = ImageStripper(
            slice_height=settings.slice_height,
            overlap_ratio=settings.slice_overlap_ratio,
            max_strips=settings.max_vision_slices,
        )
        vision = VisionExtractor(
            openai_client,
            model=settings.openai_vision_model,
            timeout=settings.vision_timeout_seconds,
            stripper=stripper,
        )
        reasoning = OpenAIReasoningProvider(
            openai_client,
            model=settings.openai_model,
            timeout=settings.reasoning_timeout_seconds,
        )

    app.state.settings = settings
    app.state.store = store
    app.state.openai_client = openai_client
    app.state.analysis_service = AnalysisService(store, vision)
    app.state.chat_service = ChatService(
        store,
        ReasoningSynthesizer(reasoning),
        scorer=build_scorer(settings.relevance_strategy),
        citations=CitationBuilder(store),
    )


async def _close_client(client) -> None:
    aclose = getattr(client, "aclose", None) or getattr(client, "close", None)
    if aclose is None:
        return
    try:
        if inspect.iscoroutinefunction(aclose):
            await aclose()
        else:
            result = aclose()
            if inspect.isawaitable(result):
                await result
    except Exception:
        # Shutdown errors must not mask the reason the app is stopping.
        LOGGER.warning("Failed to close the OpenAI client cleanly", exc_info=True)


def create_app(settings: Optional[Settings] = None, openai_client: Optional[AsyncOpenAI] = None) -> FastAPI:
    """
    Create and configure the FastAPI application instance.

    `settings` defaults to the process environment. An OpenAI client is created
    at startup only when an API key is configured, unless one is passed in.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        resolved = settings or Settings.from_env()
        logging.getLogger().setLevel(resolved.log_level)

        client = openai_client
        owns_client = False
        if client is None and resolved.provider_enabled:
            try:
                client = AsyncOpenAI(api_key=resolved.openai_api_key, base_url=resolved.openai_base_url)
            except Exception as exc:
                raise RuntimeError("Failed to initialize OpenAI Async client") from exc
            owns_client = True

        configure_services(app, resolved, client)
        LOGGER.info(
            "Service ready: model=%s relevance=%s",
            f"openai:{resolved.openai_model}" if client is not None else "fallback:local",
            resolved.relevance_strategy,
        )
        try:
            yield
        finally:
            if owns_client:
                await _close_client(client)

    app = FastAPI(lifespan=lifespan)

    @app.get("/healthz")
    async def health(request: Request):
        """
        Simple health check that reports whether a cloud provider is configured.
        """
        client = getattr(request.app.state, "openai_client", None)
        return {"ok": True, "openai_available": client is not None}

    # Register application routers
    app.include_router(session_router)
    app.include_router(analysis_router)
    app.include_router(chat_router)

    return app


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app()
