from degreeplan.schemas.requirement import (
    AnomalyOut,
    CategoryEvaluation,
    CategoryProgressOut,
    CreditsSummaryOut,
    EvaluateResponse,
    NodeResultOut,
    ProgramProgressOut,
    ProgressResponse,
)
from degreeplan.services.evaluator import (
    Diagnostics,
    ProgramProgress,
    credits_summary,
    evaluate_node,
    program_progress,
    satisfied_group_ids,
)
from degreeplan.services.requirement_tree import CompletionState, Program


def _progress_out(progress: ProgramProgress) -> ProgramProgressOut:
    return ProgramProgressOut(
        complete_category_count=progress.complete_category_count,
        total_category_count=progress.total_category_count,
        overall_percentage=progress.overall_percentage,
        categories=[
            CategoryProgressOut(
                name=c.name,
                completed_units=c.completed_units,
                total_units=c.total_units,
                percentage=c.percentage,
                completed_credits=c.completed_credits,
                min_credits=c.min_credits,
                is_complete=c.is_complete,
            )
            for c in progress.categories
        ],
    )


def build_progress(program: Program, state: CompletionState) -> ProgressResponse:
    diagnostics = Diagnostics()
    projected_state = state.projected()
    current = program_progress(program, state, diagnostics)
    projected = program_progress(program, projected_state, diagnostics)
    return ProgressResponse(
        program_name=program.name,
        program_type=program.program_type,
        progress=_progress_out(current),
        projected=_progress_out(projected),
        credits=CreditsSummaryOut.model_validate(credits_summary(program, state)),
        projected_credits=CreditsSummaryOut.model_validate(
            credits_summary(program, projected_state)
        ),
        anomalies=[AnomalyOut.model_validate(a) for a in diagnostics.anomalies],
    )


def build_evaluation(program: Program, state: CompletionState) -> EvaluateResponse:
    diagnostics = Diagnostics()
    diagnostics.record_load_issues(program)
    categories = []
    for category in program.categories:
        categories.append(
            CategoryEvaluation(
                name=category.name,
                satisfied_group_ids=sorted(satisfied_group_ids(category, state, diagnostics)),
                nodes=[
                    NodeResultOut.model_validate(evaluate_node(node, state, diagnostics))
                    for node in category.courses
                ],
            )
        )
    return EvaluateResponse(
        program_name=program.name,
        categories=categories,
        anomalies=[AnomalyOut.model_validate(a) for a in diagnostics.anomalies],
    )
