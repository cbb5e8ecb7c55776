"""
Logging estruturado com structlog sobre o logging da stdlib.

Cada evento recebe o request_id da requisição HTTP e, quando a rota é de
uma sessão, o session_id do aluno. Assim dá para seguir uma jornada inteira
(meta, questões, fixação, relatório) filtrando por um único campo.
"""

import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Optional

import structlog

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
session_id_var: ContextVar[Optional[str]] = ContextVar("session_id", default=None)

# qualquer chave que contenha um destes trechos é mascarada
SENSITIVE_FIELDS = ("api_key", "token", "secret", "password", "image_base64")
REDACTED = "[REDACTED]"

SEVERITY = {
    "debug": "DEBUG",
    "info": "INFO",
    "warning": "WARNING",
    "error": "ERROR",
    "critical": "CRITICAL",
}

NOISY_LOGGERS = {
    "uvicorn.access": logging.WARNING,
    "httpx": logging.WARNING,
    "langchain": logging.INFO,
    "google_genai": logging.WARNING,
}


def set_request_context(request_id: str, session_id: Optional[str] = None) -> None:
    request_id_var.set(request_id)
    session_id_var.set(session_id)


def clear_request_context() -> None:
    set_request_context(None, None)


def generate_request_id() -> str:
    return "req_" + uuid.uuid4().hex[:8]


def add_request_context(logger, method_name, event_dict):
    """Anexa request_id e session_id do contexto; um session_id explícito no evento prevalece."""
    if not isinstance(event_dict, dict):
        return event_dict
    if request_id_var.get():
        event_dict["request_id"] = request_id_var.get()
    if session_id_var.get():
        event_dict.setdefault("session_id", session_id_var.get())
    return event_dict


def add_severity_level(logger, method_name, event_dict):
    # campo "severity" é o que o Cloud Logging usa para colorir e filtrar
    if isinstance(event_dict, dict) and event_dict.get("level"):
        level = event_dict["level"]
        event_dict["severity"] = SEVERITY.get(level.lower(), level.upper())
    return event_dict


def _redact(value):
    if isinstance(value, dict):
        return {
            key: REDACTED if any(field in str(key).lower() for field in SENSITIVE_FIELDS) else _redact(item)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [_redact(item) for item in value]
    return value


def filter_sensitive_data(logger, method_name, event_dict):
    """Mascara chaves de API e imagens em base64 antes de renderizar."""
    return _redact(event_dict) if isinstance(event_dict, dict) else event_dict


def setup_logging(log_level: str = "INFO", is_development: bool = True) -> None:
    """Configura structlog: saída colorida em desenvolvimento, JSON por linha em produção."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO),
    )

    shared = [
        add_request_context,
        structlog.stdlib.add_log_level,
        add_severity_level,
        filter_sensitive_data,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
    ]
    if is_development:
        renderers = [structlog.processors.StackInfoRenderer(), structlog.dev.ConsoleRenderer(colors=True)]
    else:
        renderers = [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]

    structlog.configure(
        processors=shared + renderers,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    for name, level in NOISY_LOGGERS.items():
        logging.getLogger(name).setLevel(level)


def get_logger(name: str = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


class LogContext:
    """Logger com campos fixos durante um bloco, ex.: `with LogContext(phase="start_study") as log:`."""

    def __init__(self, **context):
        self.context = context

    def __enter__(self):
        return get_logger().bind(**self.context)

    def __exit__(self, exc_type, exc_val, exc_tb):
        return False
