from fastapi import APIRouter, Depends, Request, Response, status

from iaprof.core.constants import SessionConstants, ValidationConstants
from iaprof.core.rate_limiting import limiter
from iaprof.core.security import InputValidator
from iaprof.core.settings import settings
from . import schemas
from .ai_schemas import EssayAnalysis, OCRSolution
from .session import MentorSession
from .store import SessionStore, get_session_store

router = APIRouter()


def _state(session: MentorSession) -> schemas.SessionStateResponse:
    question = session.current_question
    return schemas.SessionStateResponse(
        session_id=session.session_id,
        mode=session.mode,
        course=session.course,
        board=session.board,
        subject=session.subject,
        goal=session.goal,
        available_subjects=session.available_subjects,
        syllabus=session.syllabus,
        mastery_percent=session.mastery_percent,
        current_question=schemas.QuestionView.from_question(question) if question else None,
        fixation=session.fixation,
        answered_count=len(session.results),
        awaiting_next_question=session.question_answered,
        ocr_result=session.ocr_result,
        essay_result=session.essay_result,
    )


def _clean(text: str) -> str:
    return InputValidator.sanitize_text_input(text, max_len=ValidationConstants.MAX_NAME_LENGTH)


@router.get("/catalog", response_model=schemas.CatalogResponse, summary="List supported exams and boards")
def get_catalog():
    return schemas.CatalogResponse(courses=SessionConstants.COURSES, boards=SessionConstants.BOARDS)


# ======== Ciclo de vida da sessão ========

@router.post("/sessions", response_model=schemas.SessionStateResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.SESSION_RATE_LIMIT)
def create_session(request: Request, store: SessionStore = Depends(get_session_store)):
    return _state(store.create())


@router.get("/sessions/{session_id}", response_model=schemas.SessionStateResponse)
def get_session(session_id: str, store: SessionStore = Depends(get_session_store)):
    return _state(store.get(session_id))


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_session(session_id: str, store: SessionStore = Depends(get_session_store)):
    store.delete(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/sessions/{session_id}/home", response_model=schemas.SessionStateResponse)
def go_home(session_id: str, store: SessionStore = Depends(get_session_store)):
    session = store.get(session_id)
    session.go_home()
    return _state(session)


# ======== Definição de meta ========

@router.post("/sessions/{session_id}/goal-setting", response_model=schemas.SessionStateResponse)
def open_goal_setting(session_id: str, store: SessionStore = Depends(get_session_store)):
    session = store.get(session_id)
    session.open_goal_setting()
    return _state(session)


@router.post("/sessions/{session_id}/course", response_model=schemas.SessionStateResponse)
@limiter.limit(settings.AI_RATE_LIMIT)
def select_course(
    request: Request,
    session_id: str,
    payload: schemas.SelectCourseRequest,
    store: SessionStore = Depends(get_session_store),
):
    session = store.get(session_id)
    session.select_course(_clean(payload.course))
    return _state(session)


@router.post("/sessions/{session_id}/board", response_model=schemas.SessionStateResponse)
@limiter.limit(settings.AI_RATE_LIMIT)
def select_board(
    request: Request,
    session_id: str,
    payload: schemas.SelectBoardRequest,
    store: SessionStore = Depends(get_session_store),
):
    session = store.get(session_id)
    session.select_board(_clean(payload.board))
    return _state(session)


@router.post("/sessions/{session_id}/subject", response_model=schemas.SessionStateResponse)
def select_subject(
    session_id: str,
    payload: schemas.SelectSubjectRequest,
    store: SessionStore = Depends(get_session_store),
):
    session = store.get(session_id)
    session.select_subject(_clean(payload.subject))
    return _state(session)


@router.post("/sessions/{session_id}/goal", response_model=schemas.SessionStateResponse)
def set_goal(session_id: str, payload: schemas.GoalRequest, store: SessionStore = Depends(get_session_store)):
    session = store.get(session_id)
    session.set_goal(InputValidator.sanitize_text_input(payload.goal, max_len=ValidationConstants.MAX_GOAL_LENGTH))
    return _state(session)


# ======== Prática de questões ========

@router.post("/sessions/{session_id}/start", response_model=schemas.SessionStateResponse)
@limiter.limit(settings.AI_RATE_LIMIT)
def start_study(request: Request, session_id: str, store: SessionStore = Depends(get_session_store)):
    session = store.get(session_id)
    session.start_study()
    return _state(session)


@router.post("/sessions/{session_id}/answer", response_model=schemas.AnswerOutcome)
@limiter.limit(settings.AI_RATE_LIMIT)
def answer_question(
    request: Request,
    session_id: str,
    payload: schemas.AnswerRequest,
    store: SessionStore = Depends(get_session_store),
):
    session = store.get(session_id)
    result = session.answer(payload.answer_index)
    next_question = None
    if result.is_correct and not session.question_answered:
        next_question = schemas.QuestionView.from_question(session.current_question)
    return schemas.AnswerOutcome(
        result=result,
        fixation=session.fixation,
        next_question=next_question,
        mastery_percent=session.mastery_percent,
    )


@router.post("/sessions/{session_id}/fixation/continue", response_model=schemas.SessionStateResponse)
@limiter.limit(settings.AI_RATE_LIMIT)
def continue_after_fixation(request: Request, session_id: str, store: SessionStore = Depends(get_session_store)):
    session = store.get(session_id)
    session.continue_after_fixation()
    return _state(session)


@router.post("/sessions/{session_id}/finalize", response_model=schemas.ReportResponse)
@limiter.limit(settings.AI_RATE_LIMIT)
def finalize_session(request: Request, session_id: str, store: SessionStore = Depends(get_session_store)):
    session = store.get(session_id)
    session.finalize()
    return session.report()


@router.get("/sessions/{session_id}/report", response_model=schemas.ReportResponse)
def get_report(session_id: str, store: SessionStore = Depends(get_session_store)):
    return store.get(session_id).report()


# ======== Scanner de questões (OCR) ========

@router.post("/sessions/{session_id}/ocr", response_model=schemas.SessionStateResponse)
def open_ocr_solver(session_id: str, store: SessionStore = Depends(get_session_store)):
    session = store.get(session_id)
    session.open_ocr_solver()
    return _state(session)


@router.post("/sessions/{session_id}/ocr/solve", response_model=OCRSolution)
@limiter.limit(settings.IMAGE_RATE_LIMIT)
def solve_from_image(
    request: Request,
    session_id: str,
    payload: schemas.ImageRequest,
    store: SessionStore = Depends(get_session_store),
):
    return store.get(session_id).solve_from_image(payload.image_base64)


@router.post("/sessions/{session_id}/ocr/reset", response_model=schemas.SessionStateResponse)
def reset_ocr(session_id: str, store: SessionStore = Depends(get_session_store)):
    session = store.get(session_id)
    session.reset_ocr()
    return _state(session)


# ======== Correção de redação ========

@router.post("/sessions/{session_id}/essay", response_model=schemas.SessionStateResponse)
def open_essay_analysis(session_id: str, store: SessionStore = Depends(get_session_store)):
    session = store.get(session_id)
    session.open_essay_analysis()
    return _state(session)


@router.post("/sessions/{session_id}/essay/text", response_model=EssayAnalysis)
@limiter.limit(settings.AI_RATE_LIMIT)
def analyze_essay_text(
    request: Request,
    session_id: str,
    payload: schemas.EssayTextRequest,
    store: SessionStore = Depends(get_session_store),
):
    return store.get(session_id).analyze_essay_text(payload.text.strip())


@router.post("/sessions/{session_id}/essay/image", response_model=EssayAnalysis)
@limiter.limit(settings.IMAGE_RATE_LIMIT)
def analyze_essay_image(
    request: Request,
    session_id: str,
    payload: schemas.ImageRequest,
    store: SessionStore = Depends(get_session_store),
):
    return store.get(session_id).analyze_essay_image(payload.image_base64)
