# Export all offline dataset models for easy imports
from .base import Base
from .competency import CompetencyData, CompetencySimilarity, CompetencyPrerequisite
from .student import StudentTrain, StudentTest

__all__ = [
    "Base",
    "CompetencyData",
    "CompetencySimilarity",
    "CompetencyPrerequisite",
    "StudentTrain",
    "StudentTest",
]
