from sqlalchemy import Column, Integer, String

from degreeplan.models.base import Base


class Course(Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String, nullable=False, index=True)
    title = Column(String, nullable=True)
    credits = Column(Integer, nullable=True)
