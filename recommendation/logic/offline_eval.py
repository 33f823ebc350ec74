"""
Offline Evaluation

Replays a historical dataset: recommends from each student's training
rows using competency similarity, then measures how many of the held-out
competencies the recommendation recovered.

Independent of the live pipeline; reads the dataset through the ORM
models in recommendation.models.
"""

import csv
import logging
from collections import defaultdict
from typing import Dict, List, Mapping, Optional, Sequence, Set

from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from recommendation.models import (
    CompetencyData,
    CompetencyPrerequisite,
    CompetencySimilarity,
    StudentTest,
    StudentTrain,
)

from .constants import MAX_GRADE, TARGET_CREDIT_CAP

logger = logging.getLogger(__name__)

GRADE_WEIGHT = 0.5
RATING_WEIGHT = 0.3
REQUIRED_WEIGHT = 0.2
MAX_RATING = 5.0
TOP_SCORE_THRESHOLD = 0.8
NEIGHBORS_PER_TOP = 3


class CompetencyMeta(BaseModel):
    title: str = ""
    required: bool = False
    credits: int = 0

    class Config:
        frozen = True


class TrainRow(BaseModel):
    student_id: str
    competency_code: str
    overall_rating: float = 0.0
    grade: float = 0.0

    class Config:
        frozen = True


class HistoricalDataset(BaseModel):
    """Everything one offline run needs, loaded up front."""
    competencies: Dict[str, CompetencyMeta] = Field(default_factory=dict)
    # code -> {other code -> similarity}
    similarity: Dict[str, Dict[str, float]] = Field(default_factory=dict)
    prerequisites: Dict[str, List[str]] = Field(default_factory=dict)
    train_rows: List[TrainRow] = Field(default_factory=list)
    # student -> held-out competency codes
    truth: Dict[str, List[str]] = Field(default_factory=dict)

    def rows_by_student(self) -> Dict[str, List[TrainRow]]:
        grouped: Dict[str, List[TrainRow]] = defaultdict(list)
        for row in self.train_rows:
            grouped[row.student_id].append(row)
        return dict(grouped)


# =============================================================================
# RECOMMENDATION
# =============================================================================

def row_score(row: TrainRow, required: bool) -> float:
    return (
        (row.grade / MAX_GRADE) * GRADE_WEIGHT
        + (row.overall_rating / MAX_RATING) * RATING_WEIGHT
        + (REQUIRED_WEIGHT if required else 0.0)
    )


def nearest_neighbors(
    similarity: Mapping[str, Mapping[str, float]],
    code: str,
    top_n: int = NEIGHBORS_PER_TOP,
) -> List[str]:
    """Most similar codes first; ties broken by code."""
    row = similarity.get(code, {})
    ranked = sorted(
        ((other, score) for other, score in row.items() if other != code),
        key=lambda pair: (-pair[1], pair[0]),
    )
    return [other for other, _ in ranked[:top_n]]


def recommend_for_student(rows: Sequence[TrainRow], dataset: HistoricalDataset) -> List[str]:
    """
    Recommend competencies for one student from their training rows.

    Args:
        rows: The student's training rows
        dataset: Competency metadata, similarity and prerequisites

    Returns:
        Selected competency codes, at most 60 credits in total
    """
    top: Set[str] = set()
    for row in rows:
        meta = dataset.competencies.get(row.competency_code, CompetencyMeta())
        if row_score(row, meta.required) >= TOP_SCORE_THRESHOLD:
            top.add(row.competency_code)

    if not top:
        return []

    suggested: Set[str] = set()
    for code in sorted(top):
        suggested.update(nearest_neighbors(dataset.similarity, code))

    taken = {row.competency_code for row in rows}
    candidates = [
        code for code in suggested
        if code not in taken
        and all(pre in top for pre in dataset.prerequisites.get(code, []))
    ]

    def sort_key(code: str):
        meta = dataset.competencies.get(code, CompetencyMeta())
        return (not meta.required, meta.credits, code)

    selected: List[str] = []
    credits = 0
    for code in sorted(candidates, key=sort_key):
        meta = dataset.competencies.get(code, CompetencyMeta())
        if credits + meta.credits <= TARGET_CREDIT_CAP:
            selected.append(code)
            credits += meta.credits

    return selected


# =============================================================================
# EVALUATION
# =============================================================================

def accuracy(truth: Sequence[str], recommended: Sequence[str]) -> float:
    truth_set = {c.strip() for c in truth}
    if not truth_set:
        return 0.0
    hits = truth_set & {c.strip() for c in recommended}
    return len(hits) / len(truth_set)


def recommend_all(dataset: HistoricalDataset) -> Dict[str, List[str]]:
    recommendations = {}
    for student_id, rows in sorted(dataset.rows_by_student().items()):
        recommendations[student_id] = recommend_for_student(rows, dataset)
        if not recommendations[student_id]:
            logger.info("Student %s: no recommendations", student_id)
    return recommendations


def evaluate_historical(
    dataset: HistoricalDataset,
    recommendations: Optional[Dict[str, List[str]]] = None,
) -> Dict[str, float]:
    """
    Per-student accuracy against the held-out truth.

    Returns:
        student_id -> |truth ∩ recommended| / |truth|
    """
    recommendations = recommendations if recommendations is not None else recommend_all(dataset)
    results = {}
    for student_id, truth in sorted(dataset.truth.items()):
        recommended = recommendations.get(student_id, [])
        results[student_id] = accuracy(truth, recommended)
        logger.info(
            "Student %s: true=%d, recommended=%d, acc=%.2f",
            student_id, len(set(truth)), len(recommended), results[student_id],
        )
    return results


def average_accuracy(results: Mapping[str, float]) -> float:
    if not results:
        return 0.0
    return sum(results.values()) / len(results)


# =============================================================================
# DATASET LOADING
# =============================================================================

def _as_required(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1")
    return bool(value)


def _as_credits(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def load_dataset(session: Session) -> HistoricalDataset:
    """
    Load the five dataset tables.

    Missing similarity or prerequisite tables degrade to empty data with a
    warning; the competency and student tables are required.
    """
    dataset = HistoricalDataset()

    for item in session.query(CompetencyData).all():
        if not item.competency_code:
            continue
        dataset.competencies[item.competency_code] = CompetencyMeta(
            title=item.title or "",
            required=_as_required(item.required),
            credits=_as_credits(item.credits),
        )

    try:
        for item in session.query(CompetencySimilarity).all():
            score = item.similarity_score_from_content_base
            if score is None:
                score = item.similarity_score_from_topic_modeling
            if item.competency_code_1 and item.competency_code_2 and score is not None:
                dataset.similarity.setdefault(item.competency_code_1, {})[item.competency_code_2] = score
    except SQLAlchemyError as e:
        session.rollback()
        logger.warning("Cannot load similarity matrix, nearest neighbors empty: %s", e)
        dataset.similarity = {}

    try:
        for item in session.query(CompetencyPrerequisite).all():
            if item.competency_code and item.prerequisite_code:
                dataset.prerequisites.setdefault(item.competency_code, []).append(item.prerequisite_code)
    except SQLAlchemyError as e:
        session.rollback()
        logger.warning("Cannot load prerequisites, skipped: %s", e)
        dataset.prerequisites = {}

    for item in session.query(StudentTrain).all():
        if item.student_id and item.competency_code:
            dataset.train_rows.append(TrainRow(
                student_id=item.student_id,
                competency_code=item.competency_code,
                overall_rating=item.overall_rating or 0.0,
                grade=item.grade or 0.0,
            ))

    for item in session.query(StudentTest).all():
        if item.student_id and item.competency_code:
            dataset.truth.setdefault(item.student_id, []).append(item.competency_code)

    logger.info(
        "Loaded dataset: %d competencies, %d training rows, %d test students",
        len(dataset.competencies), len(dataset.train_rows), len(dataset.truth),
    )
    return dataset


def write_recommendations_csv(path: str, recommendations: Mapping[str, Sequence[str]]) -> None:
    with open(path, "w", newline="", encoding="utf-8") as fh:
        writer = csv.writer(fh)
        writer.writerow(["student_id", "Competency"])
        for student_id in sorted(recommendations):
            for code in sorted(recommendations[student_id]):
                writer.writerow([student_id, code])


def run_offline_evaluation(session: Session, output_csv: Optional[str] = None) -> float:
    """
    Full offline run: load, recommend, optionally export, score.

    Returns:
        Average accuracy over students with held-out data
    """
    dataset = load_dataset(session)
    if not dataset.train_rows:
        raise ValueError("no data in student_train")

    recommendations = recommend_all(dataset)
    if output_csv:
        write_recommendations_csv(output_csv, recommendations)
        logger.info("Wrote recommendations to %s", output_csv)

    average = average_accuracy(evaluate_historical(dataset, recommendations))
    logger.info("Average Recommendation Accuracy: %.2f%%", average * 100)
    return average


if __name__ == "__main__":
    from db import get_db

    logging.basicConfig(level=logging.INFO)
    with get_db() as db:
        result = run_offline_evaluation(db, output_csv="student_recommendations.csv")
    print(f"Average Recommendation Accuracy: {result * 100:.2f}%")
