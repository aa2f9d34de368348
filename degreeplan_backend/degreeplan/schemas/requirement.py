from typing import Any

from pydantic import BaseModel, Field


class CompletionRequest(BaseModel):
    completed_courses: list[str] = []
    planned_courses: list[str] = []


class ProgramPayload(BaseModel):
    name: str = Field(..., min_length=1)
    total_credits: int = Field(120, ge=0)
    program_type: str = "degree"
    requirements: list[Any] | dict[str, Any] = []
    footnotes: Any = None


class InlineEvaluateRequest(CompletionRequest):
    program: ProgramPayload


class AnomalyOut(BaseModel):
    kind: str
    message: str
    code: str | None = None
    group_id: str | None = None

    model_config = {"from_attributes": True}


class NodeResultOut(BaseModel):
    kind: str
    key: str | None = None
    title: str | None = None
    satisfied: bool
    planned: bool
    credits: int | None = None
    satisfied_count: int | None = None
    required_count: int | None = None
    group_id: str | None = None
    footnote_refs: list[int] = []
    children: list["NodeResultOut"] = []
    anomaly: str | None = None

    model_config = {"from_attributes": True}


class CategoryProgressOut(BaseModel):
    name: str
    completed_units: int
    total_units: int
    percentage: int
    completed_credits: int
    min_credits: int | None = None
    is_complete: bool

    model_config = {"from_attributes": True}


class ProgramProgressOut(BaseModel):
    complete_category_count: int
    total_category_count: int
    overall_percentage: int
    categories: list[CategoryProgressOut] = []

    model_config = {"from_attributes": True}


class CreditsSummaryOut(BaseModel):
    completed_credits: int
    total_credits: int

    model_config = {"from_attributes": True}


class ProgressResponse(BaseModel):
    program_name: str
    program_type: str
    progress: ProgramProgressOut
    projected: ProgramProgressOut
    credits: CreditsSummaryOut
    projected_credits: CreditsSummaryOut
    anomalies: list[AnomalyOut] = []


class CategoryEvaluation(BaseModel):
    name: str
    satisfied_group_ids: list[str] = []
    nodes: list[NodeResultOut] = []


class EvaluateResponse(BaseModel):
    program_name: str
    categories: list[CategoryEvaluation] = []
    anomalies: list[AnomalyOut] = []


class RecommendationOut(BaseModel):
    course_code: str
    course_title: str | None = None
    credits: int
    category: str
    reason: str

    model_config = {"from_attributes": True}
