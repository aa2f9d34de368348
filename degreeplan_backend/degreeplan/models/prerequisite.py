from sqlalchemy import Column, Integer, String

from degreeplan.models.base import Base


class Prerequisite(Base):
    __tablename__ = "prerequisites"

    id = Column(Integer, primary_key=True, index=True)
    course_code = Column(String, nullable=False, index=True)
    prereq_code = Column(String, nullable=False, index=True)
    # Only "required" rows gate recommendations; coreq/optional are informational.
    relation = Column(String, default="required")
    # Rows of one course sharing a group are alternatives: any one satisfies it.
    or_group = Column(String, nullable=True)
