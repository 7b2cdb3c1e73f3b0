"""Application factory for the FastAPI service."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import PROJECT_ROOT, Settings, get_settings
from .logging_handlers import DateStampedFileHandler, cleanup_old_logs
from .logging_settings import apply_group_levels, parse_logging_settings
from .moderation import ModerationOrchestrator
from .openrouter import OpenRouterClient
from .pipeline import RequestPipeline
from .routers.control import router as control_router
from .routers.history import router as history_router
from .routers.queue import router as queue_router
from .routers.settings import router as settings_router
from .routers.text_processing import router as text_processing_router
from .routers.tts_socket import router as tts_socket_router
from .scheduler import QueueScheduler
from .services.events import EventHub
from .services.history import HistoryLog
from .services.settings_store import SettingsStore
from .services.streamerbot import StreamerbotActuator
from .services.synthesis import ElevenLabsSynthesizer

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _resolve_under(base: Path, p: Path) -> Path:
    # Absolute paths are used as-is (tests and external mounts).
    if p.is_absolute():
        return p.resolve()
    return (base / p).resolve()


def _configure_logging(settings: Settings) -> None:
    """Configure console and file logging from the logging settings file."""
    # Load .env file first so LOGGING_SETTINGS_PATH and friends are visible
    load_dotenv()

    logging_settings = parse_logging_settings(
        _resolve_under(PROJECT_ROOT, settings.logging_settings_path)
    )
    formatter = logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT)
    handlers: list[logging.Handler] = []

    log_dir = _resolve_under(PROJECT_ROOT, settings.log_dir)
    file_handler = DateStampedFileHandler(log_dir, prefix="voiceforge", delay=True)
    file_handler.setFormatter(formatter)
    file_handler.setLevel(logging.DEBUG)
    handlers.append(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    if logging_settings.terminal_level is None:
        console_handler.setLevel(logging.CRITICAL + 1)
    else:
        console_handler.setLevel(logging_settings.terminal_level)
    handlers.append(console_handler)

    logging.basicConfig(level=logging.DEBUG, handlers=handlers, force=True)

    app_level = logging_settings.app_level
    logging.getLogger("voiceforge").setLevel(app_level)
    apply_group_levels(logging_settings)
    for warning in logging_settings.warnings:
        logging.getLogger(__name__).warning(f"Logging settings: {warning}")

    logging.getLogger("uvicorn").setLevel(app_level)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    # Request/response bodies only at DEBUG
    if app_level > logging.DEBUG:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)

    cleanup_old_logs(
        [log_dir, _resolve_under(PROJECT_ROOT, settings.history_log_dir)],
        logging_settings.retention_hours,
        logging.getLogger(__name__),
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    _configure_logging(settings)

    settings_store = SettingsStore(_resolve_under(PROJECT_ROOT, settings.app_settings_path))
    app_settings = settings_store.get_settings()

    history = HistoryLog(
        _resolve_under(PROJECT_ROOT, settings.history_log_dir),
        limit=app_settings.history_in_app_limit,
        file_logging_enabled=app_settings.history_file_logging_enabled,
    )

    orchestrator: Optional[ModerationOrchestrator] = None
    if settings.moderation_available:
        orchestrator = ModerationOrchestrator(OpenRouterClient(settings))
    else:
        logging.warning("OPENROUTER_API_KEY not set; content moderation is unavailable")
    pipeline = RequestPipeline(orchestrator, api_key_present=settings.moderation_available)

    event_hub = EventHub()
    streamerbot = StreamerbotActuator(settings, lambda: settings_store.get_settings().streamerbot)
    scheduler = QueueScheduler(
        pipeline=pipeline,
        synthesizer=ElevenLabsSynthesizer(settings),
        overlay=streamerbot,
        refunds=streamerbot,
        history=history,
        events=event_hub,
        settings=settings_store.get_settings,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await asyncio.to_thread(history.load_recent)
        try:
            yield
        finally:
            # Add timeout to prevent hanging during shutdown (especially in tests)
            try:
                await asyncio.wait_for(app.state.scheduler.shutdown(), timeout=10.0)
            except asyncio.TimeoutError:
                logging.warning("Scheduler shutdown timed out after 10s")
            await OpenRouterClient.aclose_shared()
            await ElevenLabsSynthesizer.close_http_client()

    app = FastAPI(
        title="VoiceForge",
        version="0.1.0",
        description="Viewer text-to-speech queue with moderation and voice direction.",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.settings_store = settings_store
    app.state.history = history
    app.state.pipeline = pipeline
    app.state.event_hub = event_hub
    app.state.scheduler = scheduler

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(tts_socket_router)
    app.include_router(control_router)
    app.include_router(queue_router)
    app.include_router(history_router)
    app.include_router(text_processing_router)
    app.include_router(settings_router)

    @app.get("/health")
    async def healthcheck() -> dict[str, object]:
        return {
            "status": "ok",
            "moderation_available": settings.moderation_available,
            "queue": app.state.scheduler.snapshot().model_dump(),
        }

    return app


__all__ = ["create_app"]
