from pydantic import BaseModel, Field


class GpaCourse(BaseModel):
    code: str | None = None
    credits: int | None = Field(None, ge=0)
    grade: str | None = None
    semester: str | None = None


class GpaRequest(BaseModel):
    courses: list[GpaCourse] = []


class SemesterGpa(BaseModel):
    semester: str
    gpa: float | None = None
    credits: int = 0


class GpaResponse(BaseModel):
    gpa: float | None = None
    credits: int = 0
    semesters: list[SemesterGpa] = []
