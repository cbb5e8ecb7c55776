import pytest
from pydantic import ValidationError

from iaprof.mentor.ai_schemas import AIQuestion, AISyllabusTopic
from iaprof.mentor.schemas import (
    AnswerRequest,
    Difficulty,
    GoalRequest,
    Question,
    QuestionView,
    SyllabusTopic,
    TopicStatus,
)


@pytest.mark.parametrize("raw,expected", [
    ("Fácil", Difficulty.EASY),
    ("medio", Difficulty.MEDIUM),
    ("DIFÍCIL", Difficulty.HARD),
    ("hard", Difficulty.HARD),
    ("impossível", Difficulty.MEDIUM),
    (None, Difficulty.MEDIUM),
])
def test_difficulty_parse(raw, expected):
    assert Difficulty.parse(raw) == expected


def test_question_from_ai_normalizes_fields():
    ai_question = AIQuestion(
        id="",
        text="Quanto é 2+2?",
        options=["3", "4", "5", "6"],
        correct_answer=1,
        subject="Matemática",
        difficulty="facil",
    )
    question = Question.from_ai(ai_question)
    assert question.id
    assert question.difficulty == Difficulty.EASY
    assert question.is_answerable()


def test_question_with_out_of_range_answer_is_not_answerable(question_factory):
    assert not question_factory(correct_answer=4).is_answerable()
    assert not Question(id="x", text="t", options=[], correct_answer=0, subject="s").is_answerable()


def test_syllabus_topic_from_ai_forces_pending_and_clamps_weight():
    topic = SyllabusTopic.from_ai(AISyllabusTopic(id="t1", name="Crase", weight=140, status="Dominado"))
    assert topic.status == TopicStatus.PENDING
    assert topic.weight == 100


def test_question_view_hides_answer_key(question_factory):
    view = QuestionView.from_question(question_factory())
    dumped = view.model_dump()
    assert "correct_answer" not in dumped
    assert "explanation" not in dumped
    assert dumped["options"] == ["A", "B", "C", "D"]


def test_request_validation():
    with pytest.raises(ValidationError):
        AnswerRequest(answer_index=-1)
    with pytest.raises(ValidationError):
        GoalRequest(goal="")
