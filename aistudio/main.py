"""
Main application entry point - FastAPI app instance and configuration.
Run with: uvicorn aistudio.main:app --reload
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from aistudio.core.config import settings
from aistudio.core.errors import AppError
from aistudio.routers import (
    ai_chat,
    auth,
    calls,
    dashboard,
    diagnostics,
    google_ai_studio,
    insights,
    integrations,
    logos,
    media,
    nanobanana,
    usage,
    websites,
)
from aistudio.services.job_queue import job_dispatcher


# ---------------------------------------------------------------------------
# LIFESPAN
# ---------------------------------------------------------------------------
# The job worker lives as long as the app; queued log jobs are flushed on
# shutdown.
@asynccontextmanager
async def lifespan(app: FastAPI):
    job_dispatcher.start()
    yield
    await job_dispatcher.stop()


app = FastAPI(
    title=settings.APP_NAME,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# CORS MIDDLEWARE
# ---------------------------------------------------------------------------
# Permissive for now: the dashboard and API are served from the same origin,
# but embedded widgets on tenant websites call the API cross-origin.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# ERROR RENDERING
# ---------------------------------------------------------------------------
@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Every AppError becomes {error, message?, hint?, details?, ...}."""
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """API routes answer malformed bodies with 400; everything else keeps FastAPI's 422."""
    if request.url.path.startswith("/api/"):
        return JSONResponse(
            status_code=400,
            content={"error": "Validation error", "details": jsonable_encoder(exc.errors())},
        )
    return await request_validation_exception_handler(request, exc)


# ---------------------------------------------------------------------------
# REGISTER ROUTERS
# ---------------------------------------------------------------------------
# auth.router: /auth/register, /auth/login, /auth/me
# ai_chat / insights / media / nanobanana / usage / diagnostics: /api/ai/...
# integrations / google_ai_studio: /api/ai/integrations, /api/ai/google-ai-studio
# calls.router: /api/calls (+ unauthenticated /api/calls/webhook)
# logos.router, websites.router: /api/logos, /api/websites
# dashboard.router: /dashboard/... HTML pages
app.include_router(auth.router)
app.include_router(ai_chat.router)
app.include_router(insights.router)
app.include_router(media.router)
app.include_router(nanobanana.router)
app.include_router(usage.router)
app.include_router(diagnostics.router)
app.include_router(integrations.router)
app.include_router(google_ai_studio.router)
app.include_router(calls.router)
app.include_router(logos.router)
app.include_router(websites.router)
app.include_router(dashboard.router)


# ---------------------------------------------------------------------------
# HEALTH CHECK ENDPOINT
# ---------------------------------------------------------------------------
@app.get("/health", tags=["health"])
def health_check():
    """Liveness only; does not touch the database."""
    return {"status": "ok"}
