from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded

from iaprof.core.exception_handlers import (
    mentor_ai_exception_handler,
    rate_limit_exception_handler,
    validation_exception_handler,
)
from iaprof.core.exceptions import MentorAIException
from iaprof.core.logging import get_logger, setup_logging
from iaprof.core.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from iaprof.core.rate_limiting import limiter
from iaprof.core.settings import settings
from iaprof.mentor.router import router as mentor_router

setup_logging(log_level=settings.LOG_LEVEL, is_development=settings.ENVIRONMENT == "development")
logger = get_logger("main")

app = FastAPI(
    title="IAprof mentor API",
    description="Mentor de estudos 80/20 para ENEM e concursos: questões, fixação, OCR e redação.",
    version="0.1.0",
)
app.state.limiter = limiter

# a última registrada é a mais externa: headers de segurança valem até para erros do CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(SecurityHeadersMiddleware)

app.add_exception_handler(MentorAIException, mentor_ai_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(RateLimitExceeded, rate_limit_exception_handler)

app.include_router(mentor_router, prefix="/api/v1/mentor", tags=["Mentor"])


@app.get("/health")
def health_check():
    return {"status": "ok"}


logger.info(
    "IAprof mentor API ready",
    environment=settings.ENVIRONMENT,
    cors_origins=settings.CORS_ORIGINS,
    rate_limiting_enabled=limiter.enabled,
    flash_model=settings.GEMINI_FLASH_MODEL,
    pro_model=settings.GEMINI_PRO_MODEL,
)
