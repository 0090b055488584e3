"""
FastAPI Main Application
Risk analysis API over the data-aggregation and scoring pipeline
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from carefund import __version__
from carefund.config import settings
from carefund.core.logging import get_logger, setup_logging
from carefund.domain.errors import InvalidInput
from carefund.services.factory import build_pipeline

setup_logging(settings.LOG_LEVEL)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager
    Builds the pipeline on startup and releases its resources on shutdown
    """
    # ===================
    # STARTUP
    # ===================
    logger.info("=" * 60)
    logger.info("Starting CareFund risk engine v%s (%s)", __version__, settings.APP_ENV)

    pipeline = getattr(app.state, "pipeline", None)
    if pipeline is None:
        pipeline = build_pipeline(settings)
        app.state.pipeline = pipeline
    pipeline.start()

    logger.info("API Server: http://%s:%s", settings.API_HOST, settings.API_PORT)
    logger.info("=" * 60)

    yield

    # ===================
    # SHUTDOWN
    # ===================
    logger.info("Shutting down CareFund risk engine...")
    await pipeline.close()
    app.state.pipeline = None
    logger.info("Shutdown complete")


app = FastAPI(
    title="CareFund Risk Engine",
    description="Health risk scoring, data aggregation and insurance planning",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(InvalidInput)
async def invalid_input_handler(request: Request, exc: InvalidInput):
    logger.info("Rejected request %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "CareFund Risk Engine",
        "version": __version__,
        "docs": "/docs",
    }


# Import and include routers
from carefund.api.routes import analysis, health, profiles  # noqa: E402

app.include_router(health.router, tags=["Health"])
app.include_router(analysis.router, prefix="/api/v1/analysis", tags=["Analysis"])
app.include_router(profiles.router, prefix="/api/v1/profiles", tags=["Profiles"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("carefund.main:app", host=settings.API_HOST, port=settings.API_PORT, reload=settings.DEBUG)
