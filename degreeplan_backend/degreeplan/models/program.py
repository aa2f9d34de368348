from sqlalchemy import JSON, Boolean, Column, Integer, String

from degreeplan.models.base import Base


class DegreeProgram(Base):
    __tablename__ = "degree_programs"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    degree_type = Column(String, nullable=True)  # e.g. "Bachelor of Science"
    program_type = Column(String, nullable=False, default="degree")  # degree/minor
    total_credits = Column(Integer, nullable=True)
    requirements = Column(JSON, nullable=True)  # list of categories
    footnotes = Column(JSON, nullable=True)  # [{"number": 1, "text": "..."}]
    is_active = Column(Boolean, default=True)
