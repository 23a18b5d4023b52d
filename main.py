"""
Unified backend entry point.

Architecture:
- One Python process, one asyncio event loop
- Two peer services:
  1. FastAPI (HTTP server for the admin dashboard)
  2. Expiry scheduler (membership reminder emails/SMS, at startup and daily)

FastAPI's lifespan starts and stops the scheduler, so uvicorn's signal
handling shuts both down together.

Run with: python main.py [--no-scheduler] [--port PORT]
          python main.py --run-once   (send reminders once and exit)
"""

import asyncio
import logging
import os
import sys
from contextlib import asynccontextmanager
from pathlib import Path

project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from dotenv import load_dotenv

# Load .env.local first (if exists), then .env as fallback
# .env.local is gitignored and used for local dev overrides
load_dotenv(project_root / ".env.local")  # Local overrides (gitignored)
load_dotenv()  # Fallback to .env

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.config import (
    check_required_env_vars,
    get_allowed_origins,
    is_expiry_scheduler_disabled,
)
from core.database import close_engine, ping_database
from core.notifications.expiry import run_expiry_notifications
from core.notifications.scheduler import start_expiry_scheduler
from web_api.routes.notifications import router as notifications_router
from web_api.routes.settings import router as settings_router

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

if os.environ.get("SENTRY_DSN"):
    sentry_sdk.init(
        dsn=os.environ["SENTRY_DSN"],
        environment=os.getenv("APP_ENV", "development"),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI lifespan context manager.

    Starts the expiry scheduler alongside FastAPI in the same event loop.
    """
    ok, warnings = check_required_env_vars()
    for warning in warnings:
        print(warning)
    if not ok:
        raise RuntimeError("Missing required environment variables")

    app.state.expiry_scheduler = None
    if is_expiry_scheduler_disabled():
        print("Expiry scheduler disabled (--no-scheduler or DISABLE_EXPIRY_SCHEDULER=true)")
    else:
        print("Starting expiry scheduler...")
        app.state.expiry_scheduler = start_expiry_scheduler()

    yield  # FastAPI runs here, scheduler runs alongside it

    print("Shutting down peer services...")
    if app.state.expiry_scheduler:
        app.state.expiry_scheduler.stop()
    await close_engine()  # Close database connections


# Create FastAPI app with lifespan
app = FastAPI(
    title="Library Membership API",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(settings_router)
app.include_router(notifications_router)


@app.get("/api")
async def api_status():
    """API status endpoint."""
    return {"message": "Library Membership API"}


@app.get("/health")
async def health():
    """Health check endpoint with database and scheduler status."""
    scheduler = getattr(app.state, "expiry_scheduler", None)
    return {
        "status": "healthy",
        "database_connected": await ping_database(),
        "scheduler_running": bool(scheduler and scheduler.running),
    }


async def run_once() -> int:
    """Run the expiry job once (CLI mode). Returns the process exit code."""
    try:
        result = await run_expiry_notifications()
    finally:
        await close_engine()

    print(
        f"Expiry run {result.status.value}: matched={result.matched} "
        f"sent={result.sent} failed={result.failed_deliveries}"
    )
    if result.error:
        print(f"  error: {result.error}")
    return 0 if result.ok else 1


if __name__ == "__main__":
    import argparse
    import uvicorn

    parser = argparse.ArgumentParser(description="Library Membership Server")
    parser.add_argument(
        "--no-scheduler",
        action="store_true",
        help="Disable the daily expiry reminder job",
    )
    parser.add_argument(
        "--run-once",
        action="store_true",
        help="Send expiry reminders once and exit (no HTTP server)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.getenv("API_PORT", "8000")),
        help="Port to run the server on (default: 8000)",
    )
    args = parser.parse_args()

    if args.run_once:
        sys.exit(asyncio.run(run_once()))

    # Set env var so it persists across uvicorn reloads
    if args.no_scheduler:
        os.environ["DISABLE_EXPIRY_SCHEDULER"] = "true"

    # Pass app object directly (not string) to avoid module reimport issues
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=args.port,
    )
