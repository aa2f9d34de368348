from typing import Any

from pydantic import BaseModel


class ProgramSummary(BaseModel):
    id: int
    name: str
    degree_type: str | None = None
    program_type: str = "degree"
    total_credits: int | None = None

    model_config = {
        "from_attributes": True,
    }


class ProgramResponse(ProgramSummary):
    # Stored JSON, returned as-is; rows may predate either column.
    requirements: Any = None
    footnotes: Any = None
