from collections import OrderedDict
from dataclasses import dataclass


@dataclass
class GradedCourse:
    code: str | None
    credits: int | None
    grade: str | None
    semester: str | None = None


def grade_points(grade: str | None) -> float | None:
    if not grade:
        return None
    normalized = grade.strip().upper()
    scale = {
        "A+": 4.0,
        "A": 4.0,
        "A-": 3.7,
        "B+": 3.3,
        "B": 3.0,
        "B-": 2.7,
        "C+": 2.3,
        "C": 2.0,
        "C-": 1.7,
        "D+": 1.3,
        "D": 1.0,
        "D-": 0.7,
        "F": 0.0,
    }
    return scale.get(normalized)


def cumulative_gpa(courses: list[GradedCourse]) -> tuple[float | None, int]:
    """Credit-weighted GPA and the credits that counted towards it.

    Courses without credits or with a grade outside the letter scale
    (P, W, in-progress) are skipped.
    """
    total_points = 0.0
    total_credits = 0
    for course in courses:
        if not course.credits or course.credits <= 0:
            continue
        points = grade_points(course.grade)
        if points is None:
            continue
        total_points += points * course.credits
        total_credits += course.credits

    if total_credits == 0:
        return None, 0
    return round(total_points / total_credits, 2), total_credits


def gpa_by_semester(courses: list[GradedCourse]) -> list[tuple[str, float | None, int]]:
    """(semester, gpa, credits) in the order semesters first appear."""
    grouped: OrderedDict[str, list[GradedCourse]] = OrderedDict()
    for course in courses:
        grouped.setdefault(course.semester or "Unassigned", []).append(course)
    out = []
    for semester, items in grouped.items():
        gpa, credits = cumulative_gpa(items)
        out.append((semester, gpa, credits))
    return out
