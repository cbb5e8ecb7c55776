# backend/tests/unit/test_mentor/test_session.py

import pytest

from iaprof.core.exceptions import (
    EssayAnalysisError,
    InvalidAnswerError,
    InvalidImageError,
    InvalidTransitionError,
    NoActiveQuestionError,
    PendingFixationError,
    EmptyEssayError,
    QuestionAlreadyAnsweredError,
    SessionNotReadyError,
    SessionStartError,
    UnknownSubjectError,
)
from iaprof.mentor.schemas import AppMode, TopicStatus


@pytest.fixture
def session(store):
    return store.create()


@pytest.fixture
def studying(session):
    """Sessão já em STUDY_FLOW para o ENEM, com a questão q1 ativa."""
    session.open_goal_setting()
    session.select_course("ENEM")
    session.set_goal("Medicina na USP")
    session.start_study()
    return session


class TestNavigation:
    def test_new_session_starts_on_welcome(self, session):
        assert session.mode == AppMode.WELCOME
        assert session.syllabus == []
        assert session.mastery_percent == 0

    @pytest.mark.parametrize("action,mode", [
        ("open_goal_setting", AppMode.GOAL_SETTING),
        ("open_ocr_solver", AppMode.OCR_SOLVER),
        ("open_essay_analysis", AppMode.ESSAY_ANALYSIS),
    ])
    def test_side_flows_open_from_welcome(self, session, action, mode):
        getattr(session, action)()
        assert session.mode == mode
        session.go_home()
        assert session.mode == AppMode.WELCOME

    def test_side_flows_require_welcome(self, session):
        session.open_goal_setting()
        with pytest.raises(InvalidTransitionError):
            session.open_ocr_solver()

    def test_home_from_goal_setting_clears_selection(self, session):
        session.open_goal_setting()
        session.select_course("ENEM")
        session.select_board("Cebraspe")
        session.go_home()
        assert (session.course, session.board, session.subject) == ("", "", "")
        assert session.available_subjects == []


class TestGoalSetting:
    def test_enem_loads_subjects_on_course_selection(self, session, fake_ai):
        session.open_goal_setting()
        session.select_course("ENEM")
        assert session.available_subjects == fake_ai.subjects
        assert fake_ai.calls[-1] == ("get_course_subjects", ("ENEM", ""))

    def test_other_courses_load_subjects_only_after_board(self, session, fake_ai):
        session.open_goal_setting()
        session.select_course("PRF")
        assert session.available_subjects == []
        assert fake_ai.calls == []

        session.select_board("Cebraspe")
        assert session.available_subjects == fake_ai.subjects
        assert fake_ai.calls[-1] == ("get_course_subjects", ("PRF", "Cebraspe"))

    def test_changing_course_resets_board_and_subject(self, session):
        session.open_goal_setting()
        session.select_course("PF")
        session.select_board("Cebraspe")
        session.select_subject("Matemática")
        session.select_course("OAB")
        assert (session.board, session.subject) == ("", "")

    def test_subject_list_failure_is_tolerated(self, session, fake_ai):
        fake_ai.failing.add("get_course_subjects")
        session.open_goal_setting()
        session.select_course("ENEM")
        assert session.available_subjects == []
        # sem lista, qualquer disciplina é aceita
        session.select_subject("Redação")
        assert session.subject == "Redação"

    def test_subject_with_special_characters_accepted(self, session, fake_ai):
        fake_ai.subjects = ["Ética & Legislação", "Matemática"]
        session.open_goal_setting()
        session.select_course("ENEM")
        session.select_subject("Ética & Legislação")
        assert session.subject == "Ética & Legislação"

    def test_unknown_subject_rejected(self, session):
        session.open_goal_setting()
        session.select_course("ENEM")
        with pytest.raises(UnknownSubjectError):
            session.select_subject("Astrologia")
        session.select_subject("")
        assert session.subject == ""

    def test_start_requires_course_and_goal(self, session):
        session.open_goal_setting()
        with pytest.raises(SessionNotReadyError) as exc_info:
            session.start_study()
        assert exc_info.value.details["missing_fields"] == ["course", "goal"]
        assert session.mode == AppMode.GOAL_SETTING

    def test_start_loads_plan_and_first_question(self, studying, fake_ai):
        assert studying.mode == AppMode.STUDY_FLOW
        assert [t.id for t in studying.syllabus] == ["t1", "t2"]
        assert studying.current_question.id == "q1"
        called = {name for name, _ in fake_ai.calls}
        assert {"get_study_plan", "generate_question"} <= called

    def test_start_failure_returns_to_goal_setting(self, session, fake_ai):
        fake_ai.failing.add("get_study_plan")
        session.open_goal_setting()
        session.select_course("ENEM")
        session.set_goal("Aprovação")
        with pytest.raises(SessionStartError) as exc_info:
            session.start_study()
        assert session.mode == AppMode.GOAL_SETTING
        assert exc_info.value.message == "Erro ao iniciar sessão. Verifique sua conexão ou chave de API."


class TestStudyFlow:
    def test_correct_answer_masters_topic_and_loads_next_question(self, studying):
        result = studying.answer(1)
        assert result.is_correct
        assert result.user_answer == 1
        assert studying.syllabus[0].status == TopicStatus.MASTERED
        assert studying.syllabus[1].status == TopicStatus.PENDING
        assert studying.mastery_percent == 50
        assert studying.current_question.id == "q2"
        assert studying.fixation is None

    def test_wrong_answer_opens_fixation(self, studying, fake_ai):
        result = studying.answer(0)
        assert not result.is_correct
        assert studying.syllabus[0].status == TopicStatus.IN_PROGRESS
        assert studying.fixation.main_topic == "Matemática"
        assert fake_ai.calls[-1][0] == "get_fixation_content"
        # a questão errada continua ativa até o aluno seguir
        assert studying.current_question.id == "q1"

    def test_pending_fixation_blocks_new_answers(self, studying):
        studying.answer(0)
        with pytest.raises(PendingFixationError):
            studying.answer(1)

    def test_continue_after_fixation_keeps_progress(self, studying):
        studying.answer(1)
        studying.answer(0)
        syllabus_before = list(studying.syllabus)

        question = studying.continue_after_fixation()

        assert studying.fixation is None
        assert question.id == "q3"
        assert studying.syllabus == syllabus_before
        assert len(studying.results) == 2

    def test_continue_without_fixation_is_invalid(self, studying):
        with pytest.raises(InvalidTransitionError):
            studying.continue_after_fixation()

    def test_out_of_range_answer_rejected(self, studying):
        with pytest.raises(InvalidAnswerError):
            studying.answer(4)
        assert studying.results == []

    def test_answer_without_question(self, studying):
        studying.current_question = None
        with pytest.raises(NoActiveQuestionError):
            studying.answer(0)

    def test_answer_outside_study_flow(self, session):
        with pytest.raises(InvalidTransitionError):
            session.answer(0)

    def test_next_question_failure_keeps_result(self, studying, fake_ai):
        fake_ai.failing.add("generate_question")
        result = studying.answer(1)
        assert result.is_correct
        assert len(studying.results) == 1
        assert studying.current_question.id == "q1"

    def test_fixation_failure_keeps_result(self, studying, fake_ai):
        fake_ai.failing.add("get_fixation_content")
        studying.answer(2)
        assert len(studying.results) == 1
        assert studying.fixation is None

    def test_continue_after_fixation_failure_loads_new_question(self, studying, fake_ai):
        fake_ai.failing.add("get_fixation_content")
        studying.answer(2)
        assert studying.question_answered

        fake_ai.failing.clear()
        question = studying.continue_after_fixation()

        assert question.id == "q2"
        assert not studying.question_answered
        assert len(studying.results) == 1

    def test_answered_question_cannot_be_answered_again(self, studying, fake_ai):
        fake_ai.failing.add("generate_question")
        studying.answer(1)
        with pytest.raises(QuestionAlreadyAnsweredError):
            studying.answer(1)
        assert len(studying.results) == 1

        fake_ai.failing.clear()
        assert studying.continue_after_fixation().id == "q2"
        studying.answer(1)
        assert len(studying.results) == 2


class TestReport:
    def test_finalize_builds_report(self, studying, fake_ai):
        studying.answer(1)
        studying.answer(0)
        feedback = studying.finalize()

        assert feedback == fake_ai.feedback
        assert studying.mode == AppMode.REPORT
        report = studying.report()
        assert report.course == "ENEM"
        assert report.board == "ENEM"
        assert (report.score.correct_count, report.score.total_count, report.score.percent) == (1, 2, 50)
        assert report.mastery_percent == 0
        assert len(report.results) == 2

    def test_finalize_uses_fallback_feedback(self, studying, fake_ai):
        fake_ai.failing.add("generate_mentor_final_feedback")
        assert studying.finalize() == "Continue focado em seus estudos!"

    def test_failed_restart_keeps_previous_journey(self, studying, fake_ai):
        studying.answer(1)
        studying.finalize()
        syllabus_before = list(studying.syllabus)

        studying.go_home()
        studying.open_goal_setting()
        studying.select_course("ENEM")
        studying.set_goal("Direito na UFMG")
        fake_ai.failing.add("get_study_plan")
        with pytest.raises(SessionStartError):
            studying.start_study()

        assert studying.mode == AppMode.GOAL_SETTING
        assert studying.syllabus == syllabus_before
        assert len(studying.results) == 1
        assert studying.mentor_feedback == fake_ai.feedback

    def test_report_requires_report_mode(self, studying):
        with pytest.raises(InvalidTransitionError):
            studying.report()

    def test_new_journey_after_report_starts_clean(self, studying):
        studying.answer(1)
        studying.finalize()
        studying.go_home()
        studying.open_goal_setting()
        studying.select_course("ENEM")
        studying.set_goal("Direito na UFMG")
        studying.start_study()
        assert studying.results == []
        assert studying.mastery_percent == 0


class TestOCRSolver:
    def test_solve_from_image(self, session, fake_ai, jpeg_b64):
        session.open_ocr_solver()
        solution = session.solve_from_image(f"data:image/jpeg;base64,{jpeg_b64}")
        assert solution.answer == "4"
        assert session.ocr_result is solution
        # o prefixo data: não chega ao modelo
        assert fake_ai.calls[-1] == ("solve_from_image", (jpeg_b64,))

        session.reset_ocr()
        assert session.ocr_result is None

    def test_invalid_image_rejected_before_ai(self, session, fake_ai):
        session.open_ocr_solver()
        with pytest.raises(InvalidImageError):
            session.solve_from_image("bm90IGFuIGltYWdl")
        assert fake_ai.calls == []

    def test_reopening_clears_previous_result(self, session, jpeg_b64):
        session.open_ocr_solver()
        session.solve_from_image(jpeg_b64)
        session.go_home()
        session.open_ocr_solver()
        assert session.ocr_result is None


class TestEssayAnalysis:
    def test_analyze_text(self, session, fake_ai):
        session.open_essay_analysis()
        analysis = session.analyze_essay_text("Minha redação sobre mobilidade urbana.")
        assert analysis.score == 880
        assert session.essay_result is analysis
        assert fake_ai.calls[-1][0] == "analyze_essay_text"

    def test_empty_text_rejected(self, session):
        session.open_essay_analysis()
        with pytest.raises(EmptyEssayError) as exc_info:
            session.analyze_essay_text("   ")
        assert exc_info.value.error_code == "EMPTY_ESSAY"

    def test_analyze_image(self, session, fake_ai, png_b64):
        session.open_essay_analysis()
        session.analyze_essay_image(png_b64)
        assert fake_ai.calls[-1] == ("analyze_essay_image", (png_b64,))

    @pytest.mark.parametrize("operation,handwritten,message", [
        ("analyze_essay_text", False, "Erro na análise da redação."),
        ("analyze_essay_image", True, "Erro no OCR/Análise do manuscrito."),
    ])
    def test_ai_failure_is_reported_as_essay_error(self, session, fake_ai, jpeg_b64, operation, handwritten, message):
        fake_ai.failing.add(operation)
        session.open_essay_analysis()
        with pytest.raises(EssayAnalysisError) as exc_info:
            if handwritten:
                session.analyze_essay_image(jpeg_b64)
            else:
                session.analyze_essay_text("Texto")
        assert exc_info.value.message == message
        assert exc_info.value.details["api_error"] == f"{operation} indisponível"
