import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hireflow.config import settings
from hireflow.database import close_db, engine, init_db
from hireflow.health import ServiceHealth, check_auth, check_database, check_storage
from hireflow.routers import applications, jobs, profiles

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("hireflow")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: create tables on the configured database
    logger.info("Starting Hireflow backend")
    await init_db()
    logger.info("Database tables ready")
    yield
    # Shutdown: close connections
    logger.info("Shutting down Hireflow backend")
    await close_db()

app = FastAPI(
    title=settings.app_name,
    description="Job postings with dynamic application forms",
    version="0.1.0",
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
app.include_router(profiles.router)
app.include_router(jobs.router)
app.include_router(applications.router)


@app.get("/")
async def root():
    return {"message": "Hireflow API - Ready"}


@app.get("/health")
async def health_check():
    """Health check for the database, object store and auth provider."""
    # Run all checks concurrently
    database_health, storage_health, auth_health = await asyncio.gather(
        check_database(engine),
        check_storage(settings.storage_url),
        check_auth(settings.auth_url),
        return_exceptions=True,
    )

    checks = {
        "database": database_health,
        "storage": storage_health,
        "auth": auth_health,
    }
    all_connected = all(
        isinstance(h, ServiceHealth) and h.status == "connected"
        for h in checks.values()
    )

    return {
        "status": "healthy" if all_connected else "degraded",
        "dependencies": {
            name: h.status if isinstance(h, ServiceHealth) else "error"
            for name, h in checks.items()
        },
    }
