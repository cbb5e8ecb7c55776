# Em backend/iaprof/mentor/schemas.py
import enum
import uuid
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from iaprof.core.constants import ValidationConstants
from .ai_schemas import AIQuestion, AISyllabusTopic, EssayAnalysis, OCRSolution


class Difficulty(str, enum.Enum):
    EASY = "Fácil"
    MEDIUM = "Médio"
    HARD = "Difícil"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Difficulty":
        # o modelo às vezes responde "medio", "DIFÍCIL" ou em inglês
        normalized = (value or "").strip().lower()
        aliases = {
            "fácil": cls.EASY, "facil": cls.EASY, "easy": cls.EASY,
            "médio": cls.MEDIUM, "medio": cls.MEDIUM, "medium": cls.MEDIUM,
            "difícil": cls.HARD, "dificil": cls.HARD, "hard": cls.HARD,
        }
        return aliases.get(normalized, cls.MEDIUM)


class TopicStatus(str, enum.Enum):
    PENDING = "Pendente"
    IN_PROGRESS = "Em Progresso"
    MASTERED = "Dominado"


class QuestionMode(str, enum.Enum):
    AI_GENERATED = "AI_GENERATED"
    OCR = "OCR"


class AppMode(str, enum.Enum):
    WELCOME = "WELCOME"
    GOAL_SETTING = "GOAL_SETTING"
    STUDY_FLOW = "STUDY_FLOW"
    OCR_SOLVER = "OCR_SOLVER"
    ESSAY_ANALYSIS = "ESSAY_ANALYSIS"
    REPORT = "REPORT"


# ======== Domain Schemas ========

class Question(BaseModel):
    id: str
    text: str
    options: List[str]
    correct_answer: int
    subject: str
    explanation: Optional[str] = None
    difficulty: Difficulty = Difficulty.MEDIUM

    @classmethod
    def from_ai(cls, ai_question: AIQuestion) -> "Question":
        return cls(
            id=ai_question.id or uuid.uuid4().hex[:8],
            text=ai_question.text,
            options=ai_question.options,
            correct_answer=ai_question.correct_answer,
            subject=ai_question.subject,
            explanation=ai_question.explanation,
            difficulty=Difficulty.parse(ai_question.difficulty),
        )

    def is_answerable(self) -> bool:
        return bool(self.options) and 0 <= self.correct_answer < len(self.options)


class SyllabusTopic(BaseModel):
    id: str
    name: str
    weight: float = Field(ge=0, le=100)
    status: TopicStatus = TopicStatus.PENDING

    @classmethod
    def from_ai(cls, ai_topic: AISyllabusTopic) -> "SyllabusTopic":
        # todo tópico novo começa pendente, independente do que o modelo disser
        return cls(
            id=ai_topic.id or uuid.uuid4().hex[:8],
            name=ai_topic.name,
            weight=min(max(ai_topic.weight, 0), 100),
            status=TopicStatus.PENDING,
        )


class FixationData(BaseModel):
    step_by_step: str
    main_topic: str
    fixation_questions: List[Question]


class SessionResult(BaseModel):
    question: Question
    user_answer: Optional[int] = None
    is_correct: bool
    timestamp: datetime
    mode: QuestionMode = QuestionMode.AI_GENERATED


class ScoreSummary(BaseModel):
    correct_count: int
    total_count: int
    percent: int


# ======== API Schemas ========

class CatalogResponse(BaseModel):
    courses: List[str]
    boards: List[str]


class SelectCourseRequest(BaseModel):
    course: str = Field(min_length=1, max_length=ValidationConstants.MAX_NAME_LENGTH)


class SelectBoardRequest(BaseModel):
    board: str = Field(min_length=1, max_length=ValidationConstants.MAX_NAME_LENGTH)


class SelectSubjectRequest(BaseModel):
    # vazio = "Todas as matérias" (foco 80/20 geral)
    subject: str = Field(default="", max_length=ValidationConstants.MAX_NAME_LENGTH)


class GoalRequest(BaseModel):
    goal: str = Field(min_length=1, max_length=ValidationConstants.MAX_GOAL_LENGTH)


class AnswerRequest(BaseModel):
    answer_index: int = Field(ge=0)


class ImageRequest(BaseModel):
    image_base64: str = Field(min_length=1)


class EssayTextRequest(BaseModel):
    text: str = Field(min_length=ValidationConstants.MIN_ESSAY_LENGTH, max_length=ValidationConstants.MAX_ESSAY_LENGTH)


class QuestionView(BaseModel):
    """Questão como exibida durante a prática: sem o gabarito."""
    id: str
    text: str
    options: List[str]
    subject: str
    difficulty: Difficulty

    @classmethod
    def from_question(cls, question: Question) -> "QuestionView":
        return cls(
            id=question.id,
            text=question.text,
            options=question.options,
            subject=question.subject,
            difficulty=question.difficulty,
        )


class SessionStateResponse(BaseModel):
    session_id: str
    mode: AppMode
    course: str
    board: str
    subject: str
    goal: str
    available_subjects: List[str]
    syllabus: List[SyllabusTopic]
    mastery_percent: int
    current_question: Optional[QuestionView] = None
    fixation: Optional[FixationData] = None
    answered_count: int
    # questão atual já respondida; a próxima vem por /fixation/continue
    awaiting_next_question: bool = False
    ocr_result: Optional[OCRSolution] = None
    essay_result: Optional[EssayAnalysis] = None


class AnswerOutcome(BaseModel):
    result: SessionResult
    fixation: Optional[FixationData] = None
    next_question: Optional[QuestionView] = None
    mastery_percent: int


class ReportResponse(BaseModel):
    course: str
    board: str
    score: ScoreSummary
    mastery_percent: int
    mentor_feedback: str
    results: List[SessionResult]
