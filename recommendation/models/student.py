from sqlalchemy import Column, Float, String

from .base import Base


class StudentTrain(Base):
    """Historical grades and ratings used to generate recommendations."""
    __tablename__ = "student_train"

    student_id = Column(String, primary_key=True)
    competency_code = Column(String, primary_key=True)
    overall_rating = Column("Overall_rating", Float)
    grade = Column("Grade", Float)


class StudentTest(Base):
    """Held-out competencies each student actually took next."""
    __tablename__ = "student_test"

    student_id = Column(String, primary_key=True)
    competency_code = Column(String, primary_key=True)
