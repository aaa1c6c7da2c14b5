from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from datetime import datetime, timezone

from .config import config
from .errors import (
    ConversionError,
    EmptySelection,
    ParseError,
    SessionNotFound,
    UnknownSheet,
    UnsupportedFormat,
)
from .routes import converter
from .middleware.security import SecurityMiddleware
from .utils.audit import audit_logger
from .models.schemas import ErrorResponse

ERROR_STATUS = {
    UnsupportedFormat: 415,
    ParseError: 422,
    EmptySelection: 400,
    UnknownSheet: 400,
    SessionNotFound: 404,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    config.LOG_DIR.mkdir(parents=True, exist_ok=True)
    audit_logger.log_security_event(
        session_id="system",
        action="application_startup",
        ip_address="localhost",
        details={
            "version": config.VERSION,
            "debug_mode": config.DEBUG
        }
    )
    yield
    audit_logger.log_security_event(
        session_id="system",
        action="application_shutdown",
        ip_address="localhost"
    )


# Create FastAPI app
app = FastAPI(
    title=config.PROJECT_NAME,
    version=config.VERSION,
    docs_url=f"{config.API_V1_PREFIX}/docs" if config.DEBUG else None,
    redoc_url=f"{config.API_V1_PREFIX}/redoc" if config.DEBUG else None,
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)

# Add security middleware
app.add_middleware(SecurityMiddleware)

# Include routers
app.include_router(converter.router)


def _error_json(status_code: int, error_response: ErrorResponse) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_response.model_dump(mode="json", exclude_none=True)
    )


# Exception handlers
@app.exception_handler(ConversionError)
async def conversion_exception_handler(request: Request, exc: ConversionError):
    """Report extraction, selection and session errors as one notification."""
    status_code = ERROR_STATUS.get(type(exc), 400)
    cause = exc.__cause__

    audit_logger.log_error(
        session_id=request.path_params.get("session_id", "anonymous"),
        action=request.url.path,
        error=exc,
        details={
            "status_code": status_code,
            "cause": repr(cause) if cause else None
        }
    )

    return _error_json(status_code, ErrorResponse(
        title=exc.title,
        message=exc.detail,
        error_code=type(exc).__name__,
        timestamp=datetime.now(timezone.utc),
        details=repr(cause) if cause and config.SHOW_ERROR_DETAILS else None
    ))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions."""
    audit_logger.log_error(
        session_id="anonymous",
        action="http_error",
        error=exc,
        details={
            "status_code": exc.status_code,
            "path": request.url.path
        }
    )

    return _error_json(exc.status_code, ErrorResponse(
        title="Request Failed",
        message=str(exc.detail),
        error_code=f"HTTP_{exc.status_code}",
        timestamp=datetime.now(timezone.utc),
        details=str(exc) if config.SHOW_ERROR_DETAILS else None
    ))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors."""
    audit_logger.log_error(
        session_id="anonymous",
        action="validation_error",
        error=exc,
        details={
            "path": request.url.path,
            "error_details": str(exc.errors()) if config.SHOW_ERROR_DETAILS else "hidden"
        }
    )

    return _error_json(422, ErrorResponse(
        title="Invalid Request",
        message="Invalid request parameters" if not config.SHOW_ERROR_DETAILS else str(exc.errors()),
        error_code="VALIDATION_ERROR",
        timestamp=datetime.now(timezone.utc),
        details=str(exc.errors()) if config.SHOW_ERROR_DETAILS else None
    ))


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle all other exceptions."""
    audit_logger.log_error(
        session_id="anonymous",
        action="internal_error",
        error=exc,
        details={"path": request.url.path}
    )

    return _error_json(500, ErrorResponse(
        title="Conversion Error",
        message="An error occurred during conversion. Please try again.",
        error_code="INTERNAL_ERROR",
        timestamp=datetime.now(timezone.utc),
        details=str(exc) if config.SHOW_ERROR_DETAILS else None
    ))


@app.get("/")
def read_root():
    return {"message": "Backend is running"}
