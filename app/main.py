"""
app/main.py

Purpose: Application entry point

- Initializes FastAPI app
- Loads configuration and logging
- Wires session store, gateways and dispatcher
- Starts the expiry sweeper and either registers the webhook or starts polling
- No business logic should be written here
"""

import asyncio
import sys
import time
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from app.core.config import settings, validate_settings, Settings
from app.core.errors import add_exception_handlers
from app.core.exceptions import ConfigurationError
from app.core.logging import setup_logging, get_logger
from app.flow.context import FlowContext
from app.flow.dispatcher import FlowDispatcher
from app.models.plan import default_catalog
from app.services.image_service import ImageHostService
from app.services.polling_service import UpdatePoller
from app.services.session_service import SessionStore, run_expiry_sweeper
from app.services.sheet_service import SheetService
from app.services.telegram_service import TelegramService
from app.api import webhook
from utils.constants import HEALTH_MESSAGE

# Initialize logging first
setup_logging()
logger = get_logger(__name__)


def build_context(config: Settings) -> FlowContext:
    """
    Creates the session store and gateways from settings.
    """
    return FlowContext(
        store=SessionStore(),
        catalog=default_catalog(),
        settings=config,
        telegram=TelegramService(),
        image_host=ImageHostService(),
        sheet=SheetService(),
    )


async def stop_task(task: asyncio.Task) -> None:
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    # Startup
    logger.info("🚀 Starting SubSplit bot...")

    try:
        validate_settings()
        logger.info("✅ Configuration validated")
    except ConfigurationError as e:
        logger.critical(e.message)
        raise

    ctx = build_context(settings)
    app.state.ctx = ctx
    app.state.dispatcher = FlowDispatcher(ctx)

    background = [
        asyncio.create_task(run_expiry_sweeper(
            ctx.store,
            interval=timedelta(minutes=settings.SESSION_SWEEP_INTERVAL_MINUTES),
            window=timedelta(minutes=settings.SESSION_TIMEOUT_MINUTES)
        ))
    ]

    if settings.uses_webhook:
        webhook_url = f"{settings.WEBHOOK_URL}/webhook/{settings.WEBHOOK_SECRET}"
        if await ctx.telegram.set_webhook(webhook_url):
            logger.info(f"✅ Webhook set to {settings.WEBHOOK_URL}/webhook/***")
        else:
            logger.error("⚠️ Webhook could not be registered, updates will not arrive until it is")
    else:
        poller = UpdatePoller(ctx.telegram, app.state.dispatcher, poll_timeout=settings.POLLING_TIMEOUT_SECONDS)
        background.append(asyncio.create_task(poller.run()))

    logger.info("🎉 SubSplit bot started successfully!")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Delivery mode: {settings.DELIVERY_MODE}")

    yield  # Application runs here

    # Shutdown
    logger.info("🛑 Shutting down SubSplit bot...")

    for task in background:
        await stop_task(task)

    await ctx.telegram.close()
    await ctx.image_host.close()
    await ctx.sheet.close()

    logger.info(f"👋 Shut down, {len(ctx.store)} session(s) discarded")


# Create FastAPI app with lifespan
app = FastAPI(
    title="SubSplit - Shared Subscription Bot",
    description="Telegram bot that collects shared-subscription payments",
    version="1.0.0",
    lifespan=lifespan,
    debug=settings.DEBUG,
    docs_url="/docs" if settings.is_development else None,  # Disable docs in production
    redoc_url=None,
)

add_exception_handlers(app)


# Request timing middleware
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """Add processing time header to all responses."""
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)

    # Telegram retries webhooks that take too long
    if process_time > 5.0:
        logger.warning(f"Slow request detected: {request.method} {request.url.path} ({process_time:.2f}s)")

    return response


app.include_router(webhook.router, tags=["Webhook"])


@app.get("/", tags=["Health"], response_class=PlainTextResponse)
async def root():
    """Root endpoint - static liveness string."""
    return HEALTH_MESSAGE


@app.get("/health", tags=["Health"])
async def health_check(request: Request):
    """
    Health check with session count and delivery mode.
    """
    ctx = getattr(request.app.state, "ctx", None)

    health_status = {
        "status": "healthy" if ctx is not None else "starting",
        "timestamp": time.time(),
        "environment": settings.ENVIRONMENT,
        "version": "1.0.0",
        "delivery_mode": settings.DELIVERY_MODE,
        "active_sessions": len(ctx.store) if ctx is not None else 0,
    }

    status_code = 200 if ctx is not None else 503
    return JSONResponse(content=health_status, status_code=status_code)


@app.get("/live", tags=["Health"])
async def liveness_check():
    """
    Liveness probe - indicates if app is alive.
    """
    return {"status": "alive"}


if __name__ == "__main__":
    import uvicorn

    try:
        validate_settings()
    except ConfigurationError as e:
        logger.critical(e.message)
        sys.exit(1)

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development,
        log_level=settings.LOG_LEVEL.lower()
    )
