from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from works_gateway.shared.logging import get_logger

logger = get_logger("errors")


# ───────────────────────── Base & Domain Exceptions ─────────────────────────
class DomainError(Exception):
    """Base class for gateway errors. Services raise these, never HTTPException."""
    code: str = "domain_error"
    status_code: int = status.HTTP_400_BAD_REQUEST
    message: str
    details: Optional[Dict[str, Any]]

    def __init__(
        self,
        message: str = "",
        *,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message or self.__class__.__name__)
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        self.message = message or self.__class__.__name__
        self.details = details


class ConfigurationError(DomainError):
    code = "configuration_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class ValidationError(DomainError):
    code = "validation_error"
    status_code = status.HTTP_400_BAD_REQUEST


class AuthError(DomainError):
    code = "auth_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class TransferError(DomainError):
    code = "transfer_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class UpstreamError(DomainError):
    code = "upstream_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class NotFoundError(DomainError):
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


# ───────────────────────────── Helpers ──────────────────────────────────────

def _problem(
    code: str,
    message: str,
    details: Optional[Dict[str, Any]],
    correlation_id: Optional[str],
) -> Dict[str, Any]:
    body: Dict[str, Any] = {"code": code, "message": message}
    if details:
        body["details"] = details
    if correlation_id:
        body["correlation_id"] = correlation_id
    return body


def _extract_correlation_id(req: Request) -> Optional[str]:
    return getattr(getattr(req, "state", None), "request_id", None)


# ─────────────────────────── Registration ───────────────────────────

def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainError)
    async def handle_domain_error(req: Request, exc: DomainError):
        log = logger.warning if exc.status_code < 500 else logger.error
        log("domain_error", code=exc.code, message=exc.message, status=exc.status_code)
        return JSONResponse(
            status_code=exc.status_code,
            content=_problem(exc.code, exc.message, exc.details, _extract_correlation_id(req)),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(req: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_problem(
                "validation_error",
                "Validation failed for one or more fields.",
                {"errors": jsonable_encoder(exc.errors())},
                _extract_correlation_id(req),
            ),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(req: Request, exc: Exception):
        logger.exception("unhandled_exception", exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_problem("internal_error", "Internal error", None, _extract_correlation_id(req)),
        )
