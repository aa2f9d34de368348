from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from degreeplan.core.config import settings
from degreeplan.core.database import get_db
from degreeplan.schemas.gpa import GpaRequest, GpaResponse, SemesterGpa
from degreeplan.schemas.program import ProgramResponse, ProgramSummary
from degreeplan.schemas.requirement import (
    CompletionRequest,
    EvaluateResponse,
    InlineEvaluateRequest,
    ProgressResponse,
    RecommendationOut,
)
from degreeplan.services.evaluator import Diagnostics, credits_summary, program_progress
from degreeplan.services.export import progress_to_csv
from degreeplan.services.gpa import GradedCourse, cumulative_gpa, gpa_by_semester
from degreeplan.services.programs import (
    get_program_row,
    list_programs,
    load_catalog,
    load_prerequisites,
    load_program,
)
from degreeplan.services.progress import build_evaluation, build_progress
from degreeplan.services.recommendations import recommend_courses
from degreeplan.services.requirement_tree import (
    CompletionState,
    RequirementCycleError,
    parse_program,
)

router = APIRouter(prefix="/api")


def _state(payload: CompletionRequest) -> CompletionState:
    return CompletionState.of(payload.completed_courses, payload.planned_courses)


def _cycle_error(exc: RequirementCycleError) -> HTTPException:
    return HTTPException(status_code=422, detail=f"Invalid requirement tree: {exc}")


# ── Programs ──────────────────────────────────────────────────────────────────

@router.get("/programs", response_model=list[ProgramSummary])
def list_programs_endpoint(
    program_type: str | None = Query(None, description="degree | minor"),
    db: Session = Depends(get_db),
):
    return list_programs(db, program_type)


@router.get("/programs/{program_id}", response_model=ProgramResponse)
def get_program_endpoint(program_id: int, db: Session = Depends(get_db)):
    return get_program_row(db, program_id)


# ── Progress ──────────────────────────────────────────────────────────────────

@router.post("/programs/{program_id}/progress/export", response_class=PlainTextResponse)
def export_progress_endpoint(
    program_id: int,
    payload: CompletionRequest,
    db: Session = Depends(get_db),
):
    program = load_program(db, program_id)
    state = _state(payload)
    try:
        progress = program_progress(program, state, Diagnostics())
        credits = credits_summary(program, state)
    except RequirementCycleError as exc:
        raise _cycle_error(exc)
    return PlainTextResponse(
        progress_to_csv(progress, credits),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="program-{program_id}-progress.csv"'},
    )


@router.post("/programs/{program_id}/progress", response_model=ProgressResponse)
def program_progress_endpoint(
    program_id: int,
    payload: CompletionRequest,
    db: Session = Depends(get_db),
):
    program = load_program(db, program_id)
    try:
        return build_progress(program, _state(payload))
    except RequirementCycleError as exc:
        raise _cycle_error(exc)


@router.post("/programs/{program_id}/evaluate", response_model=EvaluateResponse)
def evaluate_program_endpoint(
    program_id: int,
    payload: CompletionRequest,
    db: Session = Depends(get_db),
):
    program = load_program(db, program_id)
    try:
        return build_evaluation(program, _state(payload))
    except RequirementCycleError as exc:
        raise _cycle_error(exc)


@router.post("/programs/{program_id}/recommendations", response_model=list[RecommendationOut])
def recommendations_endpoint(
    program_id: int,
    payload: CompletionRequest,
    limit: int | None = Query(None, ge=1, le=50),
    db: Session = Depends(get_db),
):
    program = load_program(db, program_id)
    try:
        return recommend_courses(
            program,
            _state(payload),
            prereqs=load_prerequisites(db),
            catalog=load_catalog(db),
            limit=limit or settings.recommendation_limit,
        )
    except RequirementCycleError as exc:
        raise _cycle_error(exc)


@router.post("/requirements/evaluate", response_model=ProgressResponse)
def evaluate_inline_endpoint(payload: InlineEvaluateRequest):
    program = parse_program(
        name=payload.program.name,
        requirements=payload.program.requirements,
        total_credits=payload.program.total_credits,
        footnotes=payload.program.footnotes,
        program_type=payload.program.program_type,
    )
    try:
        return build_progress(program, _state(payload))
    except RequirementCycleError as exc:
        raise _cycle_error(exc)


# ── GPA ───────────────────────────────────────────────────────────────────────

@router.post("/gpa", response_model=GpaResponse)
def gpa_endpoint(payload: GpaRequest):
    courses = [GradedCourse(**course.model_dump()) for course in payload.courses]
    gpa, credits = cumulative_gpa(courses)
    return GpaResponse(
        gpa=gpa,
        credits=credits,
        semesters=[
            SemesterGpa(semester=semester, gpa=semester_value, credits=semester_credits)
            for semester, semester_value, semester_credits in gpa_by_semester(courses)
        ],
    )
