"""TrimSilence API"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from trimsilence.config import Settings
from trimsilence.providers import get_audio_provider
from trimsilence.services import TrimService
from trimsilence.storage import get_artifact_store
from trimsilence.utils.logging_setup import setup_logging
from errors import install_error_handlers
from routes.downloads import router as downloads_router
from routes.health import router as health_router
from routes.trim import router as trim_router

settings = Settings()
setup_logging(settings.logging, log_dir=settings.log_dir)
logger = logging.getLogger("trimsilence.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    store = get_artifact_store(settings)
    store.ensure_dirs()
    provider = get_audio_provider(settings.audio.model_dump())

    app.state.settings = settings
    app.state.store = store
    app.state.trim_service = TrimService(settings, store, provider)

    if settings.cleanup.sweep_on_startup:
        try:
            removed = await store.sweep_stale(settings.cleanup.stale_after_s)
            if removed:
                logger.info("startup sweep removed %d stale artifacts", len(removed))
        except OSError:
            logger.exception("startup sweep failed")

    logger.info(
        "API starting (uploads=%s, output=%s, ffmpeg=%s)",
        settings.uploads_dir,
        settings.output_dir,
        getattr(provider, "ffmpeg_bin", settings.audio.ffmpeg_bin),
    )
    try:
        yield
    finally:
        await store.aclose()
        await provider.close()


app = FastAPI(
    title="TrimSilence API",
    description="Remove silent sections from uploaded audio",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_methods=["*"],
    allow_headers=["*"],
)
install_error_handlers(app)

app.include_router(trim_router)
app.include_router(downloads_router)
app.include_router(health_router)


if __name__ == "__main__":
    import uvicorn

    # log_config=None keeps the handlers installed by setup_logging
    uvicorn.run("main:app", host=settings.host, port=settings.port, log_config=None)
