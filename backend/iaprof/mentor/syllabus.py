# backend/iaprof/mentor/syllabus.py

"""
Modelo de domínio do Edital 80/20.

O status de cada tópico é atualizado a partir do resultado das respostas:
um tópico "casa" com a questão quando o nome de um contém o do outro
(sem diferenciar maiúsculas). A última resposta sempre vence, então um
tópico dominado volta para "Em Progresso" após um erro.
"""

import math
from typing import List, Sequence

from .schemas import Question, ScoreSummary, SessionResult, SyllabusTopic, TopicStatus


def round_half_up(value: float) -> int:
    """Arredonda .5 para cima, como a porcentagem exibida no relatório."""
    return int(math.floor(value + 0.5))


def topic_matches_subject(topic_name: str, subject: str) -> bool:
    name = topic_name.lower()
    subj = subject.lower()
    return subj in name or name in subj


def update_syllabus_progress(
    syllabus: Sequence[SyllabusTopic], question: Question, correct: bool
) -> List[SyllabusTopic]:
    new_status = TopicStatus.MASTERED if correct else TopicStatus.IN_PROGRESS
    return [
        topic.model_copy(update={"status": new_status})
        if topic_matches_subject(topic.name, question.subject)
        else topic
        for topic in syllabus
    ]


def mastery_percent(syllabus: Sequence[SyllabusTopic]) -> int:
    if not syllabus:
        return 0
    mastered = sum(1 for topic in syllabus if topic.status == TopicStatus.MASTERED)
    return round_half_up(mastered / len(syllabus) * 100)


def score_summary(results: Sequence[SessionResult]) -> ScoreSummary:
    total = len(results)
    correct = sum(1 for result in results if result.is_correct)
    percent = round_half_up(correct / total * 100) if total else 0
    return ScoreSummary(correct_count=correct, total_count=total, percent=percent)
