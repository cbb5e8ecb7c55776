# backend/iaprof/mentor/session.py

"""
MentorSession: máquina de estados da jornada de estudo de um aluno.

Fluxo principal:
    WELCOME -> GOAL_SETTING -> STUDY_FLOW (questões / fixação) -> REPORT
Fluxos laterais a partir de WELCOME:
    OCR_SOLVER (resolver questão por foto) e ESSAY_ANALYSIS (corrigir redação)

Toda chamada de IA passa pelo MentorAIService; a sessão só guarda estado
e aplica as regras de transição.
"""

from datetime import datetime, timezone
from typing import List, Optional

from langchain_core.runnables import RunnableLambda, RunnableParallel

from iaprof.core.constants import AIConstants, SessionConstants, ValidationConstants
from iaprof.core.exceptions import (
    AIProcessingError,
    EmptyEssayError,
    EssayAnalysisError,
    InvalidAnswerError,
    InvalidImageError,
    InvalidTransitionError,
    NoActiveQuestionError,
    PendingFixationError,
    QuestionAlreadyAnsweredError,
    SessionNotReadyError,
    SessionStartError,
    UnknownSubjectError,
)
from iaprof.core.logging import LogContext, get_logger
from iaprof.core.security import InputValidator
from .ai_mentor import MentorAIService, is_enem
from .ai_schemas import EssayAnalysis, OCRSolution
from .schemas import (
    AppMode,
    FixationData,
    Question,
    QuestionMode,
    ReportResponse,
    SessionResult,
    SyllabusTopic,
)
from .syllabus import mastery_percent, score_summary, update_syllabus_progress


class MentorSession:
    def __init__(self, session_id: str, ai: MentorAIService):
        self.session_id = session_id
        self.ai = ai
        self.logger = get_logger("mentor.session").bind(session_id=session_id)
        self.created_at = datetime.now(timezone.utc)

        self.mode = AppMode.WELCOME
        self.course = ""
        self.board = ""
        self.subject = ""
        self.goal = ""
        self.available_subjects: List[str] = []
        self.syllabus: List[SyllabusTopic] = []
        self.current_question: Optional[Question] = None
        # a questão atual já tem resultado registrado e espera a próxima
        self.question_answered = False
        self.results: List[SessionResult] = []
        self.fixation: Optional[FixationData] = None
        self.mentor_feedback = ""
        self.ocr_result: Optional[OCRSolution] = None
        self.essay_result: Optional[EssayAnalysis] = None

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    def _require_mode(self, action: str, *modes: AppMode) -> None:
        if self.mode not in modes:
            raise InvalidTransitionError(action, self.mode.value)

    def _set_mode(self, mode: AppMode) -> None:
        if mode != self.mode:
            self.logger.info("Mode transition", from_mode=self.mode.value, to_mode=mode.value)
        self.mode = mode

    @property
    def mastery_percent(self) -> int:
        return mastery_percent(self.syllabus)

    # ------------------------------------------------------------------
    # WELCOME / navegação
    # ------------------------------------------------------------------

    def go_home(self) -> None:
        if self.mode == AppMode.GOAL_SETTING:
            self.course = ""
            self.board = ""
            self.subject = ""
            self.available_subjects = []
        self._set_mode(AppMode.WELCOME)

    def open_goal_setting(self) -> None:
        self._require_mode("open_goal_setting", AppMode.WELCOME)
        self._set_mode(AppMode.GOAL_SETTING)

    def open_ocr_solver(self) -> None:
        self._require_mode("open_ocr_solver", AppMode.WELCOME)
        self.ocr_result = None
        self._set_mode(AppMode.OCR_SOLVER)

    def open_essay_analysis(self) -> None:
        self._require_mode("open_essay_analysis", AppMode.WELCOME)
        self._set_mode(AppMode.ESSAY_ANALYSIS)

    # ------------------------------------------------------------------
    # GOAL_SETTING
    # ------------------------------------------------------------------

    def _load_subjects(self) -> None:
        try:
            self.available_subjects = self.ai.get_course_subjects(self.course, self.board)
        except AIProcessingError as e:
            # a lista de disciplinas é opcional; sem ela o aluno estuda "todas"
            self.logger.warning("Could not load course subjects", course=self.course, error=e.message)
            self.available_subjects = []

    def select_course(self, course: str) -> None:
        self._require_mode("select_course", AppMode.GOAL_SETTING)
        self.course = course
        self.board = ""
        self.subject = ""
        self.available_subjects = []
        if is_enem(course):
            self._load_subjects()

    def select_board(self, board: str) -> None:
        self._require_mode("select_board", AppMode.GOAL_SETTING)
        self.board = board
        self.subject = ""
        if self.course:
            self._load_subjects()

    def select_subject(self, subject: str) -> None:
        self._require_mode("select_subject", AppMode.GOAL_SETTING)
        if subject and self.available_subjects and subject not in self.available_subjects:
            raise UnknownSubjectError(subject, self.available_subjects)
        self.subject = subject

    def set_goal(self, goal: str) -> None:
        self._require_mode("set_goal", AppMode.GOAL_SETTING)
        self.goal = goal.strip()

    def start_study(self) -> None:
        self._require_mode("start_study", AppMode.GOAL_SETTING)
        missing = [name for name, value in (("course", self.course), ("goal", self.goal)) if not value]
        if missing:
            raise SessionNotReadyError(missing)

        with LogContext(phase="start_study", session_id=self.session_id) as log:
            log.info("Starting study journey", course=self.course, board=self.board, subject=self.subject or None)

            # plano e primeira questão em paralelo
            bootstrap = RunnableParallel(
                plan=RunnableLambda(lambda _: self.ai.get_study_plan(self.course, self.board, self.subject)),
                question=RunnableLambda(
                    lambda _: self.ai.generate_question(self.course, self.board, self.goal, self.subject)
                ),
            )
            try:
                out = bootstrap.invoke(None)
            except Exception as e:
                log.error("Study journey could not start", error=str(e), error_type=type(e).__name__)
                raise SessionStartError(str(e)) from e

            # a jornada anterior só é descartada depois que a nova carregou
            self.syllabus = out["plan"]
            self.current_question = out["question"]
            self.question_answered = False
            self.results = []
            self.fixation = None
            self.mentor_feedback = ""
            self._set_mode(AppMode.STUDY_FLOW)
            log.info("Study journey started", syllabus_topics=len(self.syllabus))

    # ------------------------------------------------------------------
    # STUDY_FLOW
    # ------------------------------------------------------------------

    def answer(self, index: int) -> SessionResult:
        self._require_mode("answer", AppMode.STUDY_FLOW)
        if self.fixation is not None:
            raise PendingFixationError()
        question = self.current_question
        if question is None:
            raise NoActiveQuestionError()
        if self.question_answered:
            raise QuestionAlreadyAnsweredError(question.id)
        if not 0 <= index < len(question.options):
            raise InvalidAnswerError(index, len(question.options))

        is_correct = index == question.correct_answer
        result = SessionResult(
            question=question,
            user_answer=index,
            is_correct=is_correct,
            timestamp=datetime.now(timezone.utc),
            mode=QuestionMode.AI_GENERATED,
        )
        self.results.append(result)
        self.question_answered = True
        self.syllabus = update_syllabus_progress(self.syllabus, question, is_correct)

        self.logger.info(
            "Answer recorded",
            question_id=question.id,
            subject=question.subject,
            is_correct=is_correct,
            mastery_percent=self.mastery_percent,
        )

        # a resposta já está registrada; falhas daqui em diante só são logadas
        if not is_correct:
            try:
                self.fixation = self.ai.get_fixation_content(question, self.goal, self.board)
            except AIProcessingError as e:
                self.logger.error("Fixation content unavailable", question_id=question.id, error=e.message)
        else:
            try:
                self._load_next_question()
            except AIProcessingError as e:
                self.logger.error("Next question unavailable", error=e.message)

        return result

    def _load_next_question(self) -> Question:
        self.current_question = self.ai.generate_question(self.course, self.board, self.goal, self.subject)
        self.question_answered = False
        return self.current_question

    def continue_after_fixation(self) -> Question:
        """Busca a próxima questão depois de um erro (ou de uma falha ao buscar a seguinte).

        Vale com fixação pendente ou quando a questão atual já foi respondida;
        o edital e o histórico são mantidos.
        """
        self._require_mode("continue_after_fixation", AppMode.STUDY_FLOW)
        if self.fixation is None and not self.question_answered:
            raise InvalidTransitionError("continue_after_fixation", self.mode.value)
        question = self._load_next_question()
        self.fixation = None
        return question

    def finalize(self) -> str:
        self._require_mode("finalize", AppMode.STUDY_FLOW)
        self._set_mode(AppMode.REPORT)
        self.fixation = None
        try:
            self.mentor_feedback = self.ai.generate_mentor_final_feedback(self.results, self.goal)
        except AIProcessingError as e:
            self.logger.error("Mentor feedback unavailable", error=e.message)
            self.mentor_feedback = AIConstants.FALLBACK_MENTOR_FEEDBACK
        return self.mentor_feedback

    def report(self) -> ReportResponse:
        self._require_mode("report", AppMode.REPORT)
        return ReportResponse(
            course=self.course,
            board=self.board or SessionConstants.ENEM,
            score=score_summary(self.results),
            mastery_percent=self.mastery_percent,
            mentor_feedback=self.mentor_feedback,
            results=list(self.results),
        )

    # ------------------------------------------------------------------
    # OCR_SOLVER
    # ------------------------------------------------------------------

    def _validated_image(self, image_b64: str) -> str:
        ok, reason = InputValidator.validate_image_base64(image_b64)
        if not ok:
            raise InvalidImageError(reason, ValidationConstants.MAX_IMAGE_SIZE_MB)
        return InputValidator.strip_data_url(image_b64)

    def solve_from_image(self, image_b64: str) -> OCRSolution:
        self._require_mode("solve_from_image", AppMode.OCR_SOLVER)
        payload = self._validated_image(image_b64)
        self.ocr_result = self.ai.solve_from_image(payload)
        return self.ocr_result

    def reset_ocr(self) -> None:
        self._require_mode("reset_ocr", AppMode.OCR_SOLVER)
        self.ocr_result = None

    # ------------------------------------------------------------------
    # ESSAY_ANALYSIS
    # ------------------------------------------------------------------

    def analyze_essay_text(self, text: str) -> EssayAnalysis:
        self._require_mode("analyze_essay_text", AppMode.ESSAY_ANALYSIS)
        if not (text or "").strip():
            raise EmptyEssayError()
        try:
            self.essay_result = self.ai.analyze_essay(text, is_image=False)
        except AIProcessingError as e:
            raise EssayAnalysisError(e.details.get("api_error", e.message), handwritten=False) from e
        return self.essay_result

    def analyze_essay_image(self, image_b64: str) -> EssayAnalysis:
        self._require_mode("analyze_essay_image", AppMode.ESSAY_ANALYSIS)
        payload = self._validated_image(image_b64)
        try:
            self.essay_result = self.ai.analyze_essay(payload, is_image=True)
        except AIProcessingError as e:
            raise EssayAnalysisError(e.details.get("api_error", e.message), handwritten=True) from e
        return self.essay_result
