# backend/iaprof/core/constants.py

"""
Constantes centralizadas para eliminar magic numbers e textos fixos no projeto.
"""


class AIConstants:
    """Constantes para configuração da IA"""
    TEMPERATURE_CREATIVE = 1.0  # Geração de questões inéditas
    TEMPERATURE_BALANCED = 0.5  # Plano de estudos e feedback de mentoria
    TEMPERATURE_PRECISE = 0.2   # Correção de redação e OCR

    SUBJECTS_COUNT = 8          # Disciplinas listadas por concurso
    STUDY_PLAN_TOPICS = 10      # Tópicos 80/20 por plano
    FIXATION_QUESTIONS = 3      # Questões de fixação após um erro

    IMAGE_MIME_TYPE = "image/jpeg"

    FALLBACK_SUBJECTS = [
        "Português",
        "Matemática",
        "Direito Constitucional",
        "Direito Administrativo",
        "Informática",
    ]
    FALLBACK_MENTOR_FEEDBACK = "Continue focado em seus estudos!"


class SessionConstants:
    """Catálogo de concursos e bancas oferecidos na definição de meta"""
    COURSES = ["ENEM", "PRF", "PF", "OAB", "Concursos Militares", "Magistratura", "Receita Federal"]
    BOARDS = ["Cebraspe", "FGV", "FCC", "Vunesp", "IDECAN", "FGV OAB"]

    ENEM = "ENEM"


class ValidationConstants:
    """Constantes para validação de dados"""
    MAX_IMAGE_SIZE_MB = 10
    MAX_GOAL_LENGTH = 300
    MAX_ESSAY_LENGTH = 10000
    MIN_ESSAY_LENGTH = 1
    MAX_NAME_LENGTH = 120


class RateLimitConstants:
    """Limites padrão aplicados por IP"""
    SESSION_RATE_LIMIT = "30/minute"
    AI_RATE_LIMIT = "20/minute"
    IMAGE_RATE_LIMIT = "5/minute"


class LoggingConstants:
    """Constantes para configuração de logs"""
    SLOW_REQUEST_THRESHOLD_MS = 5000  # Requisições lentas viram warning
    PERFORMANCE_THRESHOLD_MS = 1000   # Chamadas de IA acima disso são destacadas
