"""Media Director API - decision core over HTTP.

Routes for conversation turns, the generation authorization gate,
preferences, director mode, suggestions, the capability and director
catalogs, and content-filter statistics.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from media_director.api.deps import get_core
from media_director.api.routes import capabilities, content_filter, directors, sessions
from media_director.config import Settings

settings = Settings.from_env()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup: pre-load every registry through the core
    core = get_core()

    logger.info("Loading capability catalog...")
    logger.info(f"Loaded {core.registry.count()} capabilities")

    logger.info("Loading director catalog...")
    logger.info(f"Loaded {core.directors.count()} directors")

    logger.info("Loading suggestions and workflow templates...")
    logger.info(
        f"Loaded {len(core.suggestions.list_all())} suggestions, "
        f"{len(core.orchestrator.template_names())} workflow templates"
    )

    logger.info(f"Advisory service {'enabled' if core.advisory.enabled else 'disabled'}")
    logger.info("Media Director API ready")
    yield
    # Shutdown
    if core.provider is not None and hasattr(core.provider, "aclose"):
        await core.provider.aclose()
    logger.info("Shutting down Media Director API")


app = FastAPI(
    title="Media Director API",
    description="""
## Media generation decision core

Classifies each user turn, picks a generation model, builds the final
provider parameters, and expands multi-step requests into workflows.

### Key Endpoints

- `POST /v1/sessions/{id}/turns` - Process a user turn
- `POST /v1/sessions/{id}/authorize` - Authorize pending generation
- `POST /v1/sessions/{id}/reset` - Drop pending work
- `GET /v1/capabilities` - List generation back-ends
- `GET /v1/directors` - List director styles
""",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(sessions.router, prefix="/v1")
app.include_router(capabilities.router, prefix="/v1")
app.include_router(directors.router, prefix="/v1")
app.include_router(content_filter.router, prefix="/v1")


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "service": "Media Director API",
        "version": "0.1.0",
        "docs": "/docs",
        "endpoints": {
            "sessions": "/v1/sessions",
            "capabilities": "/v1/capabilities",
            "directors": "/v1/directors",
            "content_filter": "/v1/content-filter/stats",
        },
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", **get_core().describe()}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "media_director.api.main:app",
        host="0.0.0.0",
        port=8001,
        reload=True,
    )
