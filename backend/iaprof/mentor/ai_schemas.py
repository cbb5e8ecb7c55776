# Em backend/iaprof/mentor/ai_schemas.py
from pydantic import BaseModel, Field
from typing import List, Optional

# Schemas de SAÍDA das chamadas ao Gemini (structured output).
# Listas soltas são embrulhadas em objetos porque o structured output exige um objeto na raiz.


class AISubjectList(BaseModel):
    subjects: List[str] = Field(description="Nomes das disciplinas mais importantes e recorrentes.")


class AIQuestion(BaseModel):
    id: str = Field(description="Identificador curto e único da questão.")
    text: str = Field(description="Enunciado completo da questão.")
    options: List[str] = Field(description="Alternativas de resposta, na ordem em que serão exibidas.")
    correct_answer: int = Field(description="Índice (começando em 0) da alternativa correta dentro de 'options'.")
    subject: str = Field(description="Disciplina ou assunto cobrado.")
    difficulty: str = Field(description="Fácil, Médio ou Difícil.")
    explanation: Optional[str] = Field(default=None, description="Breve justificativa da alternativa correta.")


class AISyllabusTopic(BaseModel):
    id: str
    name: str
    weight: float = Field(description="Importância de 1 a 100 baseada na recorrência histórica")
    status: str = Field(default="Pendente", description="Sempre 'Pendente'.")


class AIStudyPlanResponse(BaseModel):
    topics: List[AISyllabusTopic]


class AIFixationResponse(BaseModel):
    step_by_step: str = Field(description="Passo a passo estratégico para não repetir o erro.")
    main_topic: str = Field(description="Conceito chave que o aluno precisa dominar.")
    fixation_questions: List[AIQuestion] = Field(description="Questões de fixação no estilo da banca.")


class OCRSolution(BaseModel):
    question: str = Field(description="Questão transcrita da imagem.")
    answer: str = Field(description="Resposta correta.")
    explanation: str = Field(description="Resolução comentada com foco no método 80/20.")


class CompetencyScore(BaseModel):
    score: float
    feedback: str


class EssayCompetencies(BaseModel):
    c1: CompetencyScore = Field(description="Domínio da norma culta.")
    c2: CompetencyScore = Field(description="Compreensão da proposta e repertório.")
    c3: CompetencyScore = Field(description="Seleção e organização de argumentos.")
    c4: CompetencyScore = Field(description="Mecanismos linguísticos de coesão.")
    c5: CompetencyScore = Field(description="Proposta de intervenção.")


class EssayAnalysis(BaseModel):
    score: float = Field(description="Nota total de 0 a 1000.")
    competencies: EssayCompetencies
    general_feedback: str
    suggestions: List[str]
