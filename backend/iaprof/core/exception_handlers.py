# backend/iaprof/core/exception_handlers.py

import logging
from datetime import datetime, timezone

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from .exceptions import (
    AIProcessingError,
    BusinessLogicError,
    InvalidTransitionError,
    MentorAIException,
    SessionNotFoundError,
    ValidationError as DomainValidationError,
)

logger = logging.getLogger(__name__)

# ordem importa: a primeira classe compatível define o status
STATUS_BY_EXCEPTION = (
    (DomainValidationError, 400),
    (SessionNotFoundError, 404),
    (InvalidTransitionError, 409),  # ação incompatível com o modo atual da sessão
    (BusinessLogicError, 422),
    (AIProcessingError, 503),
)

FRIENDLY_VALIDATION_MESSAGES = {
    "string_too_short": "Tamanho de texto inválido",
    "string_too_long": "Tamanho de texto inválido",
    "missing": "Campo obrigatório ausente",
    "value_error.missing": "Campo obrigatório ausente",
    "int_parsing": "Número inteiro inválido",
    "int_type": "Número inteiro inválido",
    "greater_than_equal": "Valor fora do intervalo permitido",
    "less_than_equal": "Valor fora do intervalo permitido",
    "greater_than": "Valor fora do intervalo permitido",
    "less_than": "Valor fora do intervalo permitido",
    "enum": "Opção inválida",
    "literal_error": "Opção inválida",
}


def error_response(status_code: int, code: str, message: str, details: dict, path: str) -> JSONResponse:
    """Envelope único de erro consumido pelo frontend."""
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code,
                "message": message,
                "details": details,
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "path": path,
            }
        },
    )


def get_status_code_for_exception(exc: MentorAIException) -> int:
    for exc_type, status_code in STATUS_BY_EXCEPTION:
        if isinstance(exc, exc_type):
            return status_code
    return 500


async def mentor_ai_exception_handler(request: Request, exc: MentorAIException):
    logger.error(
        "Mentor exception %s on %s %s",
        exc.error_code,
        request.method,
        request.url.path,
        extra={
            "error_code": exc.error_code,
            "error_message": exc.message,
            "details": exc.details,
            "user_agent": request.headers.get("user-agent"),
        },
    )
    return error_response(
        get_status_code_for_exception(exc), exc.error_code, exc.message, exc.details, str(request.url.path)
    )


def get_user_friendly_validation_message(error: dict) -> str:
    """Traduz o tipo de erro do Pydantic para uma mensagem curta em português."""
    return FRIENDLY_VALIDATION_MESSAGES.get(error.get("type", ""), error.get("msg", "Valor inválido"))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    logger.warning(
        "Request validation failed on %s %s",
        request.method,
        request.url.path,
        extra={"errors": errors},
    )
    field_errors = [
        {
            "field": " > ".join(str(loc) for loc in error["loc"]),
            "message": get_user_friendly_validation_message(error),
        }
        for error in errors
    ]
    return error_response(
        422, "VALIDATION_ERROR", "Dados enviados contêm erros", {"field_errors": field_errors}, str(request.url.path)
    )


async def rate_limit_exception_handler(request: Request, exc: RateLimitExceeded):
    logger.warning("Rate limit exceeded on %s", request.url.path, extra={"limit": str(exc.detail)})
    return error_response(
        429,
        "RATE_LIMIT_EXCEEDED",
        "Muitas requisições. Aguarde alguns instantes e tente novamente",
        {"limit": str(exc.detail)},
        str(request.url.path),
    )
