"""
AutoApply - JSON error responses.

The browser UI reads `error` (and optionally `details`) from failed requests,
so errors are returned in that shape instead of FastAPI's `detail`.
"""
from fastapi.responses import JSONResponse
from typing import Optional

from .schemas import ErrorResponse


def error_response(status_code: int, error: str, details: Optional[str] = None) -> JSONResponse:
    body = ErrorResponse(error=error, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))
