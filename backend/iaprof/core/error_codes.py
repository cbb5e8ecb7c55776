# backend/iaprof/core/error_codes.py

"""
Catálogo de códigos de erro para integração com frontend.
Este arquivo documenta todos os error_code disponíveis no sistema.
"""

ERROR_CODES = {
    # Genéricos
    "GENERIC_ERROR": "Erro genérico",

    # Validação
    "INVALID_IMAGE": "Imagem inválida",
    "INVALID_ANSWER": "Alternativa inexistente",
    "UNKNOWN_SUBJECT": "Disciplina indisponível",
    "EMPTY_ESSAY": "Redação sem texto",
    "VALIDATION_ERROR": "Erros de validação de dados",

    # Sessão
    "SESSION_NOT_FOUND": "Sessão inexistente ou expirada",
    "INVALID_TRANSITION": "Ação não permitida no modo atual",

    # IA e Processamento
    "GEMINI_API_ERROR": "Erro temporário no provedor de IA",
    "SESSION_START_FAILED": "Falha ao iniciar a sessão de estudo",
    "ESSAY_ANALYSIS_FAILED": "Falha na correção da redação",
    "AI_VALIDATION_ERROR": "Resposta inválida da IA",

    # Regras de Negócio
    "SESSION_NOT_READY": "Concurso ou objetivo não definidos",
    "NO_ACTIVE_QUESTION": "Sem questão ativa",
    "QUESTION_ALREADY_ANSWERED": "Questão já respondida",
    "PENDING_FIXATION": "Fixação pendente",
    "RATE_LIMIT_EXCEEDED": "Limite de requisições excedido",
}
