from degreeplan.models.course import Course
from degreeplan.models.prerequisite import Prerequisite
from degreeplan.models.program import DegreeProgram

__all__ = ["Course", "DegreeProgram", "Prerequisite"]
