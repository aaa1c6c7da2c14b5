from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from datetime import datetime, timezone

from ..config import config
from ..models.schemas import ErrorResponse
from ..utils.audit import audit_logger


class SecurityMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, allowed_origins=None, max_upload_size=None):
        super().__init__(app)
        self.allowed_origins = allowed_origins or config.ALLOWED_ORIGINS
        self.max_upload_size = max_upload_size or config.max_upload_bytes

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            # CORS validation
            origin = request.headers.get("origin")
            if origin and origin not in self.allowed_origins:
                raise HTTPException(status_code=403, detail="Origin not allowed")

            # Content-Type validation
            content_type = request.headers.get("content-type", "")
            if request.method == "POST" and content_type and not self._is_valid_content_type(content_type):
                raise HTTPException(status_code=415, detail="Unsupported media type")

            # File size validation for uploads
            if "multipart/form-data" in content_type:
                content_length = request.headers.get("content-length")
                try:
                    declared_size = int(content_length) if content_length else 0
                except ValueError:
                    raise HTTPException(status_code=400, detail="Invalid Content-Length header")
                if declared_size > self.max_upload_size:
                    raise HTTPException(
                        status_code=413,
                        detail=f"File size exceeds {config.MAX_UPLOAD_SIZE_MB}MB limit"
                    )

        except HTTPException as exc:
            # Log security violations
            audit_logger.log_security_event(
                session_id="anonymous",
                action="security_violation",
                ip_address=self._get_client_ip(request),
                status="error",
                details={
                    "error_code": exc.status_code,
                    "error_detail": exc.detail,
                    "path": request.url.path
                }
            )
            error_response = ErrorResponse(
                title="Request Rejected",
                message=str(exc.detail),
                error_code=f"HTTP_{exc.status_code}",
                timestamp=datetime.now(timezone.utc)
            )
            return JSONResponse(
                status_code=exc.status_code,
                content=error_response.model_dump(mode="json", exclude_none=True)
            )

        response = await call_next(request)

        # Add security headers
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        response.headers["Content-Security-Policy"] = self._get_csp_header()

        return response

    def _is_valid_content_type(self, content_type: str) -> bool:
        """Validate allowed content types."""
        allowed_types = [
            "application/json",
            "multipart/form-data",
            "application/x-www-form-urlencoded"
        ]
        return any(allowed in content_type.lower() for allowed in allowed_types)

    def _get_client_ip(self, request: Request) -> str:
        """Get client IP address from request headers."""
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()
        return request.client.host if request.client else "unknown"

    def _get_csp_header(self) -> str:
        """Generate Content Security Policy header."""
        return (
            "default-src 'self'; "
            "script-src 'self'; "
            "style-src 'self' 'unsafe-inline'; "
            "img-src 'self' data:; "
            "connect-src 'self';"
        )
