"""
Error taxonomy shared by every service.

Services raise these instead of returning error values; the handlers at the
bottom of this module turn them into a uniform JSON body:

    {"error": "<message>", "kind": "<stable kind>", "details": [...]}
"""

from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class WeShareError(Exception):
    """Base class for all domain errors"""

    kind = "error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[List[Any]] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details or []
        self.code = code

    def to_dict(self) -> Dict[str, Any]:
        body = {"error": self.message, "kind": self.kind, "details": self.details}
        if self.code:
            body["code"] = self.code
        return body


class Unauthorized(WeShareError):
    kind = "unauthorized"
    status_code = status.HTTP_401_UNAUTHORIZED


class Forbidden(WeShareError):
    kind = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN


class NotFound(WeShareError):
    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class ValidationError(WeShareError):
    kind = "validation_error"
    status_code = status.HTTP_400_BAD_REQUEST


class Conflict(WeShareError):
    kind = "conflict"
    status_code = status.HTTP_409_CONFLICT


class PolicyViolation(WeShareError):
    kind = "policy_violation"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class NotImplementedYet(WeShareError):
    kind = "not_implemented"
    status_code = status.HTTP_501_NOT_IMPLEMENTED


def _weshare_error_handler(request: Request, exc: WeShareError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthorized) else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        details.append({"field": field, "message": error.get("msg")})
    message = details[0]["message"] if details else "Invalid request"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": message, "kind": ValidationError.kind, "details": details},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(WeShareError, _weshare_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
