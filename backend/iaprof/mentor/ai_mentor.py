# backend/iaprof/mentor/ai_mentor.py

"""
MentorAIService: fachada única para todas as chamadas ao Gemini.

Cada método monta o prompt, escolhe o modelo adequado (flash, pro ou imagem)
e converte a resposta estruturada em objetos de domínio. Falhas do provedor
chegam ao chamador como GeminiAPIError.
"""

import time
from typing import Callable, Dict, List, Optional, Sequence, Tuple, TypeVar

from langchain_core.exceptions import OutputParserException
from pydantic import ValidationError as PydanticValidationError

from iaprof.core.ai_service import LangChainService
from iaprof.core.constants import AIConstants, LoggingConstants, SessionConstants
from iaprof.core.exceptions import AIValidationError, GeminiAPIError, MentorAIException
from iaprof.core.logging import get_logger
from iaprof.core.security import InputValidator
from iaprof.core.settings import settings
from . import prompts
from .ai_schemas import (
    AIFixationResponse,
    AIQuestion,
    AIStudyPlanResponse,
    AISubjectList,
    EssayAnalysis,
    OCRSolution,
)
from .schemas import FixationData, Question, SessionResult, SyllabusTopic

T = TypeVar("T")

# erros de formato da resposta: o modelo respondeu, mas fora do schema
PARSE_ERRORS = (OutputParserException, PydanticValidationError, ValueError)


def is_enem(course: str) -> bool:
    return (course or "").strip().upper() == SessionConstants.ENEM


def board_context(course: str, board: str) -> str:
    return "perfil do ENEM" if is_enem(course) else f"perfil da banca {board}"


class MentorAIService:
    def __init__(self, api_key: Optional[str] = None, service_factory: Callable[..., LangChainService] = None):
        self.api_key = api_key if api_key is not None else settings.GEMINI_API_KEY
        self.service_factory = service_factory or LangChainService
        self.logger = get_logger("mentor.ai")
        self._services: Dict[Tuple[str, float], LangChainService] = {}

    def _service(self, model_name: str, temperature: float) -> LangChainService:
        # um cliente por (modelo, temperatura), criado na primeira chamada
        key = (model_name, temperature)
        if key not in self._services:
            try:
                self._services[key] = self.service_factory(
                    provider="google",
                    api_key=self.api_key,
                    model_name=model_name,
                    temperature=temperature,
                )
            except Exception as e:
                # chave ausente ou inválida é detectada já na criação do cliente
                self.logger.error("Could not create AI client", model=model_name, error=str(e))
                raise GeminiAPIError(str(e), operation="client_setup") from e
        return self._services[key]

    def _call(self, operation: str, fn: Callable[[], T]) -> T:
        start = time.time()
        try:
            result = fn()
        except MentorAIException:
            raise
        except Exception as e:
            self.logger.error(
                "Mentor AI operation failed",
                operation=operation,
                duration_ms=round((time.time() - start) * 1000, 2),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise GeminiAPIError(str(e), operation=operation) from e
        duration_ms = round((time.time() - start) * 1000, 2)
        log = self.logger.warning if duration_ms > LoggingConstants.PERFORMANCE_THRESHOLD_MS else self.logger.info
        log("Mentor AI operation completed", operation=operation, duration_ms=duration_ms)
        return result

    # ------------------------------------------------------------------
    # Goal setting
    # ------------------------------------------------------------------

    def get_course_subjects(self, course: str, board: str) -> List[str]:
        service = self._service(settings.GEMINI_FLASH_MODEL, AIConstants.TEMPERATURE_BALANCED)
        prompt_input = {
            "subjects_count": AIConstants.SUBJECTS_COUNT,
            "course": course,
            "board_clause": f" da banca {board}" if board else "",
        }

        def run():
            try:
                response = service.generate_structured_output(
                    prompt_template=prompts.course_subjects_prompt,
                    prompt_input=prompt_input,
                    response_schema=AISubjectList,
                    system_instruction=prompts.mentor_system_instruction,
                )
            except PARSE_ERRORS as e:
                self.logger.warning("Unparseable subject list, using fallback", course=course, error=str(e))
                return list(AIConstants.FALLBACK_SUBJECTS)
            subjects = [s.strip() for s in response.subjects if s and s.strip()]
            return subjects or list(AIConstants.FALLBACK_SUBJECTS)

        return self._call("get_course_subjects", run)

    # ------------------------------------------------------------------
    # Study flow
    # ------------------------------------------------------------------

    def generate_question(self, course: str, board: str, goal: str, subject: Optional[str] = None) -> Question:
        service = self._service(settings.GEMINI_FLASH_MODEL, AIConstants.TEMPERATURE_CREATIVE)
        prompt_input = {
            "course": course,
            "board_context": board_context(course, board),
            "goal": goal,
            "subject": subject or "Foco em temas 80/20 de todas as matérias",
        }

        def run():
            ai_question = service.generate_structured_output(
                prompt_template=prompts.question_generation_prompt,
                prompt_input=prompt_input,
                response_schema=AIQuestion,
                system_instruction=prompts.mentor_system_instruction,
            )
            question = Question.from_ai(ai_question)
            if not question.is_answerable():
                raise AIValidationError([
                    f"Gabarito {question.correct_answer} fora das {len(question.options)} alternativas"
                ])
            return question

        return self._call("generate_question", run)

    def get_study_plan(self, course: str, board: str, subject: Optional[str] = None) -> List[SyllabusTopic]:
        service = self._service(settings.GEMINI_FLASH_MODEL, AIConstants.TEMPERATURE_BALANCED)
        prompt_input = {
            "topics_count": AIConstants.STUDY_PLAN_TOPICS,
            "course": course,
            "board": board or SessionConstants.ENEM,
            "subject_clause": f"na disciplina de {subject}" if subject else "considerando as matérias mais importantes",
        }

        def run():
            response = service.generate_structured_output(
                prompt_template=prompts.study_plan_prompt,
                prompt_input=prompt_input,
                response_schema=AIStudyPlanResponse,
                system_instruction=prompts.mentor_system_instruction,
            )
            return [SyllabusTopic.from_ai(topic) for topic in response.topics]

        return self._call("get_study_plan", run)

    def get_fixation_content(self, wrong_question: Question, goal: str, board: str) -> FixationData:
        service = self._service(settings.GEMINI_PRO_MODEL, AIConstants.TEMPERATURE_BALANCED)
        prompt_input = {
            "subject": wrong_question.subject,
            "board": board or SessionConstants.ENEM,
            "goal": goal,
            "question_text": wrong_question.text,
            "fixation_count": AIConstants.FIXATION_QUESTIONS,
        }

        def run():
            response = service.generate_structured_output(
                prompt_template=prompts.fixation_prompt,
                prompt_input=prompt_input,
                response_schema=AIFixationResponse,
                system_instruction=prompts.mentor_system_instruction,
            )
            questions = [Question.from_ai(q) for q in response.fixation_questions]
            answerable = [q for q in questions if q.is_answerable()]
            if len(answerable) < len(questions):
                self.logger.warning(
                    "Discarded fixation questions with invalid answer key",
                    discarded=len(questions) - len(answerable),
                )
            return FixationData(
                step_by_step=response.step_by_step,
                main_topic=response.main_topic,
                fixation_questions=answerable,
            )

        return self._call("get_fixation_content", run)

    def generate_mentor_final_feedback(self, results: Sequence[SessionResult], goal: str) -> str:
        service = self._service(settings.GEMINI_FLASH_MODEL, AIConstants.TEMPERATURE_BALANCED)
        prompt_input = {
            "goal": goal,
            "correct_count": sum(1 for r in results if r.is_correct),
            "total_count": len(results),
        }

        def run():
            text = service.generate_text(
                prompt_template=prompts.mentor_feedback_prompt,
                prompt_input=prompt_input,
                system_instruction=prompts.mentor_system_instruction,
            )
            return text or AIConstants.FALLBACK_MENTOR_FEEDBACK

        return self._call("generate_mentor_final_feedback", run)

    # ------------------------------------------------------------------
    # OCR e redação
    # ------------------------------------------------------------------

    def solve_from_image(self, image_b64: str) -> OCRSolution:
        service = self._service(settings.GEMINI_IMAGE_MODEL, AIConstants.TEMPERATURE_PRECISE)
        content_parts = [
            image_part(image_b64),
            {"type": "text", "text": prompts.ocr_solver_prompt},
        ]
        return self._call(
            "solve_from_image",
            lambda: service.generate_structured_output_from_content(
                content_parts=content_parts,
                response_schema=OCRSolution,
                system_instruction=prompts.mentor_system_instruction,
            ),
        )

    def analyze_essay(self, text: str, is_image: bool = False) -> EssayAnalysis:
        service = self._service(settings.GEMINI_PRO_MODEL, AIConstants.TEMPERATURE_PRECISE)
        if is_image:
            return self._call(
                "analyze_essay_image",
                lambda: service.generate_structured_output_from_content(
                    content_parts=[image_part(text), {"type": "text", "text": prompts.essay_image_prompt}],
                    response_schema=EssayAnalysis,
                    system_instruction=prompts.mentor_system_instruction,
                ),
            )
        return self._call(
            "analyze_essay_text",
            lambda: service.generate_structured_output(
                prompt_template=prompts.essay_text_prompt,
                prompt_input={"essay_text": text},
                response_schema=EssayAnalysis,
                system_instruction=prompts.mentor_system_instruction,
            ),
        )


def image_part(image_b64: str) -> dict:
    return {
        "type": "image",
        "source_type": "base64",
        "data": image_b64,
        "mime_type": InputValidator.detect_image_mime(image_b64),
    }
