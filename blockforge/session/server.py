"""Preview HTTP app factory."""
from __future__ import annotations

from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from blockforge.common.error_envelope import build_error_envelope
from blockforge.common.errors import BlockforgeError
from blockforge.common.logging_setup import configure_logging
from blockforge.session.routes import router as preview_router
from blockforge.session.routes import set_preview_session
from blockforge.session.service import PreviewSession

# --- Error Handling ---

async def _http_exception_handler(request: Request, exc: HTTPException):
    # Envelopes raised by error_response pass through unchanged.
    detail = exc.detail
    if isinstance(detail, dict) and "error" in detail:
        return JSONResponse(content=detail, status_code=exc.status_code)
    envelope = build_error_envelope(
        code="http.exception",
        message=str(detail) if detail else "HTTP exception",
        status_code=exc.status_code,
    )
    return JSONResponse(content=envelope.model_dump(), status_code=exc.status_code)


async def _blockforge_exception_handler(request: Request, exc: BlockforgeError):
    return JSONResponse(content=exc.to_envelope().model_dump(), status_code=exc.http_status)


async def _validation_exception_handler(request: Request, exc: RequestValidationError):
    envelope = build_error_envelope(
        code="validation.error",
        message="Validation failed",
        status_code=400,
        details={"errors": exc.errors()},
    )
    return JSONResponse(content=envelope.model_dump(mode="json"), status_code=400)


def register_error_handlers(target_app: FastAPI) -> None:
    target_app.add_exception_handler(HTTPException, _http_exception_handler)
    target_app.add_exception_handler(BlockforgeError, _blockforge_exception_handler)
    target_app.add_exception_handler(RequestValidationError, _validation_exception_handler)

# --- App Factory ---

def create_app(session: Optional[PreviewSession] = None) -> FastAPI:
    configure_logging()
    app = FastAPI(title="Blockforge Preview")
    register_error_handlers(app)
    app.include_router(preview_router)
    if session is not None:
        set_preview_session(session)

    @app.get("/health")
    async def health_check():
        return {"service": "blockforge_preview", "version": "0.1.0", "status": "ok"}

    return app
