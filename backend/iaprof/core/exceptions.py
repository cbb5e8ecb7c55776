# backend/iaprof/core/exceptions.py

class MentorAIException(Exception):
    """Base exception para todas as exceções customizadas do projeto"""
    def __init__(self, message: str, error_code: str = None, details: dict = None):
        self.message = message
        self.error_code = error_code or "GENERIC_ERROR"
        self.details = details or {}
        super().__init__(self.message)

# === EXCEÇÕES DE VALIDAÇÃO ===
class ValidationError(MentorAIException):
    """Erros de validação de dados de entrada"""
    pass

class InvalidImageError(ValidationError):
    def __init__(self, reason: str, max_size_mb: int):
        super().__init__(
            message=f"Imagem inválida: {reason}. Apenas JPEG ou PNG de até {max_size_mb}MB são permitidos",
            error_code="INVALID_IMAGE",
            details={"reason": reason, "max_size_mb": max_size_mb}
        )

class InvalidAnswerError(ValidationError):
    def __init__(self, answer: int, options_count: int):
        super().__init__(
            message=f"Alternativa {answer} não existe. A questão possui {options_count} alternativas",
            error_code="INVALID_ANSWER",
            details={"answer": answer, "options_count": options_count}
        )

class UnknownSubjectError(ValidationError):
    def __init__(self, subject: str, available: list[str]):
        super().__init__(
            message=f"A disciplina '{subject}' não está disponível para este concurso",
            error_code="UNKNOWN_SUBJECT",
            details={"subject": subject, "available_subjects": available}
        )

class EmptyEssayError(ValidationError):
    def __init__(self):
        super().__init__(
            message="Envie o texto da redação para ser corrigido",
            error_code="EMPTY_ESSAY"
        )

# === EXCEÇÕES DE SESSÃO ===
class SessionError(MentorAIException):
    """Erros relacionados ao ciclo de vida da sessão de estudo"""
    pass

class SessionNotFoundError(SessionError):
    def __init__(self, session_id: str):
        super().__init__(
            message="Sessão de estudo não encontrada ou expirada",
            error_code="SESSION_NOT_FOUND",
            details={"session_id": session_id}
        )

class InvalidTransitionError(SessionError):
    def __init__(self, action: str, current_mode: str):
        super().__init__(
            message=f"Ação '{action}' não é permitida no modo {current_mode}",
            error_code="INVALID_TRANSITION",
            details={"action": action, "current_mode": current_mode}
        )

# === EXCEÇÕES DE IA ===
class AIProcessingError(MentorAIException):
    """Erros relacionados ao processamento com IA"""
    pass

class GeminiAPIError(AIProcessingError):
    def __init__(self, api_error: str, operation: str = None):
        super().__init__(
            message="Erro temporário no processamento com a IA. Tente novamente.",
            error_code="GEMINI_API_ERROR",
            details={"api_error": api_error, "operation": operation}
        )

class SessionStartError(AIProcessingError):
    def __init__(self, api_error: str):
        super().__init__(
            message="Erro ao iniciar sessão. Verifique sua conexão ou chave de API.",
            error_code="SESSION_START_FAILED",
            details={"api_error": api_error}
        )

class EssayAnalysisError(AIProcessingError):
    def __init__(self, api_error: str, handwritten: bool = False):
        super().__init__(
            message="Erro no OCR/Análise do manuscrito." if handwritten else "Erro na análise da redação.",
            error_code="ESSAY_ANALYSIS_FAILED",
            details={"api_error": api_error, "handwritten": handwritten}
        )

# === EXCEÇÕES DE BUSINESS LOGIC ===
class BusinessLogicError(MentorAIException):
    """Erros de regras de negócio"""
    pass

class SessionNotReadyError(BusinessLogicError):
    def __init__(self, missing: list[str]):
        super().__init__(
            message="Selecione o concurso e defina seu objetivo antes de iniciar",
            error_code="SESSION_NOT_READY",
            details={"missing_fields": missing}
        )

class NoActiveQuestionError(BusinessLogicError):
    def __init__(self):
        super().__init__(
            message="Não há questão ativa para responder",
            error_code="NO_ACTIVE_QUESTION"
        )

class QuestionAlreadyAnsweredError(BusinessLogicError):
    def __init__(self, question_id: str):
        super().__init__(
            message="Esta questão já foi respondida. Avance para a próxima",
            error_code="QUESTION_ALREADY_ANSWERED",
            details={"question_id": question_id}
        )

class PendingFixationError(BusinessLogicError):
    def __init__(self):
        super().__init__(
            message="Conclua o conteúdo de fixação antes de avançar",
            error_code="PENDING_FIXATION"
        )

class AIValidationError(AIProcessingError):
    def __init__(self, validation_errors: list[str]):
        super().__init__(
            message="A IA gerou uma resposta inválida. Tente novamente.",
            error_code="AI_VALIDATION_ERROR",
            details={"validation_errors": validation_errors}
        )
