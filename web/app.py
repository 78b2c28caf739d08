"""FastAPI app for InterviewAce: preparations, AI assists and PDF reports."""

import logging
import time
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from interviewace.errors import InterviewAceError
from report_worker import ThreadJobDispatcher
from web import config
from web.preparation_store import PreparationStore
from web.routes import ai, auth_hooks, pdf, preparations, scrape, upload, users

logger = logging.getLogger(__name__)


def create_app(store: PreparationStore | None = None, dispatcher=None) -> FastAPI:
    """Build the app. Tests pass an in-memory store and a fake dispatcher."""
    app = FastAPI(title="InterviewAce API", version="1.0.0")

    app.state.store = store if store is not None else PreparationStore(config.PREPARATIONS_FILE)
    app.state.dispatcher = dispatcher if dispatcher is not None else ThreadJobDispatcher()
    app.state.started_at = time.time()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(pdf.router, prefix="/api/pdf", tags=["pdf"])
    app.include_router(preparations.router, prefix="/api/preparations", tags=["preparations"])
    app.include_router(users.router, prefix="/api/users", tags=["users"])
    app.include_router(auth_hooks.router, prefix="/api/auth", tags=["auth"])
    app.include_router(ai.router, prefix="/api/ai", tags=["ai"])
    app.include_router(scrape.router, prefix="/api/scrape", tags=["scrape"])
    app.include_router(upload.router, prefix="/api/upload", tags=["upload"])

    @app.get("/health")
    async def health():
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime": round(time.time() - app.state.started_at, 1),
        }

    @app.exception_handler(InterviewAceError)
    async def interviewace_error_handler(request: Request, exc: InterviewAceError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s: %s", request.method, request.url.path, type(exc).__name__, exc)
        else:
            logger.info("%s %s -> %d: %s", request.method, request.url.path, exc.status_code, exc)
        body = {"error": exc.public_message}
        if exc.details:
            body["details"] = exc.details
        return JSONResponse(body, status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def catch_all_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception for %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse({"error": "Internal server error"}, status_code=500)

    @app.on_event("shutdown")
    def shutdown():
        app.state.dispatcher.shutdown(wait=False)

    return app


app = create_app()
