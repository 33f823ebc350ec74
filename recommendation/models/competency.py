from sqlalchemy import Column, Float, Integer, String, Text

from .base import Base


class CompetencyData(Base):
    __tablename__ = "competency_data"

    competency_code = Column(String, primary_key=True)
    title = Column(Text)
    # 0/1, true/false depending on the export
    required = Column(Integer)
    credits = Column(Integer)


class CompetencySimilarity(Base):
    __tablename__ = "Competency_similarity"

    competency_code_1 = Column(String, primary_key=True)
    competency_code_2 = Column(String, primary_key=True)
    similarity_score_from_content_base = Column(Float)
    similarity_score_from_topic_modeling = Column(Float)


class CompetencyPrerequisite(Base):
    __tablename__ = "Competency_prerequisites"

    competency_code = Column(String, primary_key=True)
    prerequisite_code = Column(String, primary_key=True)
