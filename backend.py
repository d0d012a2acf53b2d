"""Hakeena: Lebanese dialect dictionary backend."""
import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from log import get_logger

logger = get_logger("hakeena.backend")

import gemini
from proxy_routes import router as proxy_router

app = FastAPI(title="Hakeena", summary="Smart Lebanese dialect dictionary")
app.include_router(proxy_router)


@app.exception_handler(StarletteHTTPException)
async def http_error_envelope(request: Request, exc: StarletteHTTPException):
    # Detail is either a message or an already-shaped {"error", "details"} body
    body = exc.detail if isinstance(exc.detail, dict) else {"error": exc.detail}
    return JSONResponse(body, status_code=exc.status_code, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_error_envelope(request: Request, exc: RequestValidationError):
    logger.warning("Rejected request body", extra={"endpoint": request.url.path, "detail": str(exc.errors())})
    return JSONResponse({"error": "Invalid request body"}, status_code=400)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    logger.info(
        "Request handled",
        extra={
            "method": request.method,
            "endpoint": request.url.path,
            "status_code": response.status_code,
            "duration_ms": round((time.perf_counter() - start) * 1000, 1),
        },
    )
    return response


@app.get("/api/health", tags=["System"], summary="Health check")
async def health_check():
    configured = gemini.get_api_key() is not None
    return {
        "status": "ok" if configured else "degraded",
        "credential_configured": configured,
        "models": {"text": gemini.GEMINI_TEXT_MODEL, "speech": gemini.GEMINI_TTS_MODEL},
    }
