from __future__ import annotations
import uuid
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fitclub.config import settings
from fitclub.deps import build_signed_url_cache
from fitclub.logging_setup import configure_logging
from fitclub.routes.system import router as system_router
from fitclub.routes.dating_cards import router as dating_cards_router
from fitclub.routes.card_applications import router as card_applications_router
from fitclub.routes.cron import router as cron_router
from fitclub.routes.rankings import router as rankings_router
from fitclub.routes.posts import router as posts_router
from fitclub.routes.hall_of_fame import router as hall_of_fame_router
from fitclub.routes.media import router as media_router
import structlog

configure_logging()
log = structlog.get_logger()

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    log.info("startup", env=settings.environment, version=settings.app_version, git_sha=settings.git_sha)
    app.state.signed_urls = build_signed_url_cache()
    yield
    # Shutdown
    log.info("shutdown")

app = FastAPI(
    title=f"{settings.app_display_name} API",
    version=settings.app_version,
    lifespan=lifespan,
    description=f"{settings.app_display_name} API for body-check rankings and open dating cards"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.environment == "dev" else settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(system_router)
app.include_router(dating_cards_router)
app.include_router(card_applications_router)
app.include_router(cron_router)
app.include_router(rankings_router)
app.include_router(posts_router)
app.include_router(hall_of_fame_router)
app.include_router(media_router)

@app.middleware("http")
async def add_request_id(request: Request, call_next):
    rid = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = rid
    structlog.contextvars.bind_contextvars(request_id=rid)
    try:
        response: Response = await call_next(request)
    finally:
        structlog.contextvars.clear_contextvars()
    response.headers["X-Request-ID"] = rid
    return response
