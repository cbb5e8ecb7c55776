import pytest
from fastapi.testclient import TestClient

from iaprof.core.exceptions import GeminiAPIError
from iaprof.core.rate_limiting import limiter
from iaprof.mentor.ai_schemas import CompetencyScore, EssayAnalysis, EssayCompetencies, OCRSolution
from iaprof.mentor.schemas import FixationData, Question, SyllabusTopic
from iaprof.mentor.store import SessionStore, get_session_store


def make_question(qid: str = "q1", subject: str = "Matemática", correct_answer: int = 1) -> Question:
    return Question(
        id=qid,
        text=f"Enunciado da questão {qid}",
        options=["A", "B", "C", "D"],
        correct_answer=correct_answer,
        subject=subject,
        difficulty="Médio",
    )


def make_essay_analysis(score: float = 880) -> EssayAnalysis:
    competency = CompetencyScore(score=score / 5, feedback="Bom")
    return EssayAnalysis(
        score=score,
        competencies=EssayCompetencies(c1=competency, c2=competency, c3=competency, c4=competency, c5=competency),
        general_feedback="Texto consistente",
        suggestions=["Detalhe a proposta de intervenção"],
    )


class FakeMentorAI:
    """Substitui o MentorAIService: respostas fixas, falhas sob demanda."""

    def __init__(self):
        self.subjects = ["Matemática", "Linguagens", "Ciências da Natureza"]
        self.plan = [
            SyllabusTopic(id="t1", name="Matemática", weight=90),
            SyllabusTopic(id="t2", name="Língua Portuguesa", weight=70),
        ]
        self.question_subject = "Matemática"
        self.feedback = "Você está no caminho da aprovação!"
        self.failing = set()
        self.calls = []
        self._counter = 0

    def _record(self, name, *args):
        self.calls.append((name, args))
        if name in self.failing:
            raise GeminiAPIError(f"{name} indisponível", operation=name)

    def get_course_subjects(self, course, board):
        self._record("get_course_subjects", course, board)
        return list(self.subjects)

    def generate_question(self, course, board, goal, subject=None):
        self._record("generate_question", course, board, goal, subject)
        self._counter += 1
        return make_question(qid=f"q{self._counter}", subject=self.question_subject)

    def get_study_plan(self, course, board, subject=None):
        self._record("get_study_plan", course, board, subject)
        return [topic.model_copy() for topic in self.plan]

    def get_fixation_content(self, wrong_question, goal, board):
        self._record("get_fixation_content", wrong_question.id, goal, board)
        return FixationData(
            step_by_step="1. Releia o enunciado",
            main_topic=wrong_question.subject,
            fixation_questions=[make_question(qid="f1", subject=wrong_question.subject)],
        )

    def generate_mentor_final_feedback(self, results, goal):
        self._record("generate_mentor_final_feedback", len(results), goal)
        return self.feedback

    def solve_from_image(self, image_b64):
        self._record("solve_from_image", image_b64)
        return OCRSolution(question="Quanto é 2+2?", answer="4", explanation="Soma simples")

    def analyze_essay(self, text, is_image=False):
        self._record("analyze_essay_image" if is_image else "analyze_essay_text", text)
        return make_essay_analysis()


@pytest.fixture
def fake_ai():
    return FakeMentorAI()


@pytest.fixture
def store(fake_ai):
    return SessionStore(ai=fake_ai, max_sessions=10)


@pytest.fixture
def client(store):
    from iaprof.main import app

    previous = limiter.enabled
    limiter.enabled = False
    app.dependency_overrides[get_session_store] = lambda: store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    limiter.enabled = previous


# imagens mínimas: só os bytes mágicos importam para a validação
JPEG_B64 = "/9j/4AAQSkZJRgABAQAAAQABAAD/2wBD"
PNG_B64 = "iVBORw0KGgoAAAANSUhEUgAAAAEAAAAB"


@pytest.fixture
def jpeg_b64():
    return JPEG_B64


@pytest.fixture
def png_b64():
    return PNG_B64


@pytest.fixture
def question_factory():
    return make_question
