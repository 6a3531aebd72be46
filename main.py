"""Main entry point for the DiaperPal API server.

Startup sequence:
1. Initialize DI container and attach it to app state
2. Optionally refresh stale venue details from Google Places
3. Start scheduled background jobs
4. Serve HTTP with FastAPI
"""
import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from diaperpal.config import Settings
from diaperpal.container import Container
from diaperpal.routers import admin_router, venue_router
from diaperpal.middleware import PrometheusMiddleware
from diaperpal.metrics import (
    BACKGROUND_JOB_RUNS_TOTAL,
    BACKGROUND_JOB_DURATION_SECONDS,
    BACKGROUND_JOB_LAST_RUN_TIMESTAMP,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

VENUE_DETAILS_REFRESH_JOB = "venue_details_refresh"


async def run_venue_details_refresh_job(container: Container):
    """Background job: Re-fetch Google Places details for stale venues."""
    job_name = VENUE_DETAILS_REFRESH_JOB
    logger.info("[Scheduler] Running VenueDetailsRefreshJob")
    start_time = time.perf_counter()
    try:
        refreshed = await container.venue_service.refresh_stale_venues()
        duration = time.perf_counter() - start_time
        BACKGROUND_JOB_DURATION_SECONDS.labels(job_name=job_name).observe(duration)
        BACKGROUND_JOB_RUNS_TOTAL.labels(job_name=job_name, status="success").inc()
        BACKGROUND_JOB_LAST_RUN_TIMESTAMP.labels(job_name=job_name).set_to_current_time()
        logger.info(f"[Scheduler] VenueDetailsRefreshJob completed: {refreshed} venues refreshed")
    except Exception as e:
        duration = time.perf_counter() - start_time
        BACKGROUND_JOB_DURATION_SECONDS.labels(job_name=job_name).observe(duration)
        BACKGROUND_JOB_RUNS_TOTAL.labels(job_name=job_name, status="error").inc()
        logger.error(f"[Scheduler] VenueDetailsRefreshJob failed: {e}")


def start_background_jobs(settings: Settings, container: Container) -> AsyncIOScheduler:
    """Start background jobs using APScheduler."""
    scheduler = AsyncIOScheduler(timezone=settings.venue_timezone)

    if settings.venue_details_refresh_enabled:
        scheduler.add_job(
            run_venue_details_refresh_job,
            trigger=CronTrigger.from_crontab(
                settings.venue_details_refresh_cron, timezone=settings.venue_timezone
            ),
            args=[container],
            id=VENUE_DETAILS_REFRESH_JOB,
            name="Venue Details Refresh (Google Places)",
            replace_existing=True,
        )
        logger.info(
            f"[Scheduler] Scheduled venue details refresh with cron: "
            f"{settings.venue_details_refresh_cron}"
        )
    else:
        logger.info("[Scheduler] Venue details refresh disabled (VENUE_DETAILS_REFRESH_ENABLED=false)")

    scheduler.start()
    logger.info("[Scheduler] Background jobs started")
    return scheduler


async def startup_sequence(app: FastAPI, settings: Settings):
    """Build the container and start jobs."""
    logger.info("[Main] Starting startup sequence")

    logging.getLogger().setLevel(settings.log_level.upper())

    logger.info("[Main] Initializing DI container")
    container = Container(settings)
    app.state.container = container

    if settings.refresh_on_startup:
        logger.info("[Main] Refreshing stale venue details (initial load)")
        await run_venue_details_refresh_job(container)
    else:
        logger.info("[Main] Skipping initial refresh (REFRESH_ON_STARTUP=false)")

    logger.info("[Main] Starting periodic jobs")
    app.state.scheduler = start_background_jobs(settings, container)

    logger.info("[Main] Startup sequence completed")


async def shutdown_sequence(app: FastAPI):
    """Clean up resources on shutdown."""
    logger.info("[Main] Starting shutdown sequence")

    scheduler = getattr(app.state, "scheduler", None)
    if scheduler:
        logger.info("[Main] Stopping scheduler")
        scheduler.shutdown(wait=False)
        logger.info("[Main] Scheduler stopped")

    container = getattr(app.state, "container", None)
    if container:
        logger.info("[Main] Shutting down container")
        await container.shutdown()
        app.state.container = None
        logger.info("[Main] Container shut down")

    logger.info("[Main] Shutdown sequence completed")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI lifespan context manager for startup and shutdown."""
    # Startup
    await startup_sequence(app, Settings())
    yield
    # Shutdown
    await shutdown_sequence(app)


def create_app(use_lifespan: bool = True) -> FastAPI:
    """Create the FastAPI app with routes and middleware registered.

    Args:
        use_lifespan: Set False in tests that attach their own container
    """
    app = FastAPI(
        title="DiaperPal API",
        description="Find baby changing stations at venues nearby",
        version="1.0.0",
        lifespan=lifespan if use_lifespan else None,
    )

    # Add Prometheus metrics middleware
    app.add_middleware(PrometheusMiddleware)

    # Register routers at app creation time (before uvicorn starts)
    app.include_router(venue_router)
    app.include_router(admin_router)

    # Health check endpoint
    @app.get("/health")
    def health():
        """Health check endpoint."""
        return {"status": "healthy"}

    # Prometheus metrics endpoint
    @app.get("/metrics", response_class=PlainTextResponse)
    def metrics():
        """Prometheus metrics endpoint for scraping."""
        return PlainTextResponse(
            content=generate_latest(),
            media_type=CONTENT_TYPE_LATEST,
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = Settings()
    logger.info("[Main] Starting DiaperPal server")
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.server_port,
        log_level=settings.log_level.lower(),
    )
