import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from collabmarket import __version__
from collabmarket.config import settings
from collabmarket.database import close_db, engine, init_db
from collabmarket.health import check_database
from collabmarket.routers import creators, jobs, profiles

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("collabmarket")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: create tables on the configured database
    logger.info("Starting Collab Market backend")
    await init_db()
    logger.info("Database tables ready")
    yield
    # Shutdown: Close connections
    logger.info("Shutting down Collab Market backend")
    await close_db()
    logger.info("Database connections closed")

app = FastAPI(
    title=settings.app_name,
    description="Job board connecting content creators with business owners",
    version=__version__,
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_cors_origin],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(jobs.router)
app.include_router(creators.router)
app.include_router(profiles.router)


@app.get("/")
async def root():
    return {"message": "Collab Market API - Ready"}


@app.get("/health")
async def health_check():
    """Report database connectivity."""
    database = await check_database(engine)
    return {
        "status": "healthy" if database.status == "connected" else "degraded",
        "dependencies": {"database": database.status},
        "latency_ms": database.latency_ms,
    }
