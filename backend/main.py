"""
SQL Data Extractor
FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import extract, health
from config import settings
from integrations import build_provider_registry

# ── Logging ──────────────────────────────────────────────────────────────────
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)
logger = logging.getLogger("extractor")


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.providers = build_provider_registry()
    logger.info("Extractor starting up (databases: %s)", ", ".join(app.state.providers.supported))
    yield
    logger.info("Extractor shutting down.")


# ── App ───────────────────────────────────────────────────────────────────────
app = FastAPI(
    title="SQL Data Extractor",
    description="Referentially-consistent row extraction and dependency-ordered schema DDL export.",
    version="1.0.0",
    lifespan=lifespan,
)

# ── CORS ──────────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ───────────────────────────────────────────────────────────────────
app.include_router(health.router,  prefix="/api")
app.include_router(extract.router, prefix="/api")


def serve() -> None:
    import uvicorn

    uvicorn.run(app, host=settings.API_HOST, port=settings.API_PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    serve()
