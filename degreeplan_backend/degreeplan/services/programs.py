from fastapi import HTTPException
from sqlalchemy.orm import Session

from degreeplan.core.config import settings
from degreeplan.models.course import Course
from degreeplan.models.prerequisite import Prerequisite
from degreeplan.models.program import DegreeProgram
from degreeplan.services.recommendations import CatalogEntry
from degreeplan.services.requirement_tree import Program, parse_program


def list_programs(db: Session, program_type: str | None = None) -> list[DegreeProgram]:
    query = db.query(DegreeProgram).filter(DegreeProgram.is_active.is_(True))
    if program_type:
        query = query.filter(DegreeProgram.program_type == program_type)
    return query.order_by(DegreeProgram.name).all()


def get_program_row(db: Session, program_id: int) -> DegreeProgram:
    row = db.get(DegreeProgram, program_id)
    if row is None or not row.is_active:
        raise HTTPException(status_code=404, detail="Degree program not found.")
    return row


def to_program(row: DegreeProgram) -> Program:
    total = row.total_credits if row.total_credits is not None else settings.default_total_credits
    return parse_program(
        name=row.name,
        requirements=row.requirements,
        total_credits=total,
        footnotes=row.footnotes,
        program_type=row.program_type or "degree",
    )


def load_program(db: Session, program_id: int) -> Program:
    return to_program(get_program_row(db, program_id))


def load_prerequisites(db: Session) -> dict[str, list[set[str]]]:
    """Required prerequisites per course, as groups of alternative codes."""
    prereq_map: dict[str, list[set[str]]] = {}
    or_groups: dict[tuple[str, str], set[str]] = {}
    for row in db.query(Prerequisite).filter(Prerequisite.relation == "required").all():
        if not row.or_group:
            prereq_map.setdefault(row.course_code, []).append({row.prereq_code})
            continue
        key = (row.course_code, row.or_group)
        if key not in or_groups:
            or_groups[key] = set()
            prereq_map.setdefault(row.course_code, []).append(or_groups[key])
        or_groups[key].add(row.prereq_code)
    return prereq_map


def load_catalog(db: Session) -> dict[str, CatalogEntry]:
    return {
        course.code: CatalogEntry(code=course.code, title=course.title, credits=course.credits)
        for course in db.query(Course).all()
    }
