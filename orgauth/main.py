# orgauth/main.py

from fastapi import FastAPI
from loguru import logger
import sys

from orgauth.core.database import test_connection, init_db
from orgauth.core.config import settings

# Routers
from orgauth.api.endpoints import (
    employees as employees_router,
    trainings as trainings_router,
    approvals as approvals_router,
)

# ------------------------------------------------------------
# LOGURU CONFIGURATION
# ------------------------------------------------------------
logger.remove()
logger.add(
    sys.stdout,
    level=settings.LOG_LEVEL,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
           "<level>{level}</level> | "
           "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
           "<level>{message}</level>",
    colorize=True,
    backtrace=True,
    diagnose=settings.ENV == "dev",
)

# ------------------------------------------------------------
# FASTAPI APP INIT
# ------------------------------------------------------------
app = FastAPI(
    title="Organizational Authorization Service",
    version="1.0.0",
    description="Scope, eligibility and approver resolution over the HR directory.",
)

# ------------------------------------------------------------
# REGISTER ROUTERS
# ------------------------------------------------------------
app.include_router(employees_router.router)
app.include_router(trainings_router.router)
app.include_router(approvals_router.router)


# ------------------------------------------------------------
# APPLICATION STARTUP EVENTS
# ------------------------------------------------------------
@app.on_event("startup")
async def on_startup():
    logger.info("Starting organizational authorization service...")

    if not settings.INIT_DB_ON_STARTUP:
        logger.info("INIT_DB_ON_STARTUP disabled; skipping database checks.")
        return

    # 1) Database connection test
    try:
        await test_connection()
        logger.success("Database connection established.")
    except Exception:
        logger.exception("Startup aborted: Database connection failed.")
        return

    # 2) Initialize database tables
    await init_db()
    logger.success("Database tables ready.")


# ------------------------------------------------------------
# ROOT HEALTH CHECK
# ------------------------------------------------------------
@app.get("/", tags=["System"])
async def root():
    return {
        "status": "ok",
        "service": "Organizational Authorization Service",
        "version": app.version,
        "environment": settings.ENV,
    }
