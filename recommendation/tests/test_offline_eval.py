"""
Tests for the offline evaluation over a historical SQLite dataset.
"""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from recommendation.logic.offline_eval import (
    CompetencyMeta,
    HistoricalDataset,
    TrainRow,
    accuracy,
    average_accuracy,
    evaluate_historical,
    load_dataset,
    recommend_for_student,
    run_offline_evaluation,
    write_recommendations_csv,
)
from recommendation.models import (
    Base,
    CompetencyData,
    CompetencyPrerequisite,
    CompetencySimilarity,
    StudentTest,
    StudentTrain,
)


def _session(tables=None):
    engine = create_engine("sqlite://")
    Base.metadata.create_all(engine, tables=tables)
    return sessionmaker(bind=engine)()


def _seed(session, with_links=True):
    session.add_all([
        CompetencyData(competency_code="A", title="Algorithms", required=1, credits=6),
        CompetencyData(competency_code="B", title="Basics", required=0, credits=3),
        CompetencyData(competency_code="C", title="Compilers", required=1, credits=12),
        CompetencyData(competency_code="D", title="Databases", required=0, credits=3),
        CompetencyData(competency_code="E", title="Ethics", required=0, credits=60),
        StudentTrain(student_id="S1", competency_code="A", overall_rating=5.0, grade=4.0),
        StudentTrain(student_id="S1", competency_code="B", overall_rating=2.0, grade=2.0),
        StudentTrain(student_id="S2", competency_code="D", overall_rating=1.0, grade=1.0),
        StudentTest(student_id="S1", competency_code="C"),
        StudentTest(student_id="S1", competency_code="E"),
        StudentTest(student_id="S2", competency_code="A"),
    ])
    if with_links:
        session.add_all([
            CompetencySimilarity(competency_code_1="A", competency_code_2="C",
                                 similarity_score_from_content_base=0.9),
            CompetencySimilarity(competency_code_1="A", competency_code_2="D",
                                 similarity_score_from_content_base=0.8),
            CompetencySimilarity(competency_code_1="A", competency_code_2="B",
                                 similarity_score_from_content_base=0.7),
            CompetencySimilarity(competency_code_1="A", competency_code_2="E",
                                 similarity_score_from_topic_modeling=0.6),
            CompetencyPrerequisite(competency_code="D", prerequisite_code="P"),
        ])
    session.commit()


def test_load_dataset():
    session = _session()
    _seed(session)
    dataset = load_dataset(session)

    assert dataset.competencies["A"] == CompetencyMeta(title="Algorithms", required=True, credits=6)
    assert dataset.similarity["A"]["E"] == pytest.approx(0.6)
    assert dataset.prerequisites == {"D": ["P"]}
    assert len(dataset.train_rows) == 3
    assert sorted(dataset.truth["S1"]) == ["C", "E"]


def test_evaluate_historical():
    session = _session()
    _seed(session)
    results = evaluate_historical(load_dataset(session))

    # S1: neighbors C, D, B -> B taken, D lacks prerequisite -> [C]
    assert results == {"S1": 0.5, "S2": 0.0}
    assert average_accuracy(results) == pytest.approx(0.25)


def test_missing_link_tables_degrade(caplog):
    session = _session(tables=[
        CompetencyData.__table__,
        StudentTrain.__table__,
        StudentTest.__table__,
    ])
    _seed(session, with_links=False)
    dataset = load_dataset(session)

    assert dataset.similarity == {}
    assert dataset.prerequisites == {}
    assert "similarity" in caplog.text
    assert evaluate_historical(dataset) == {"S1": 0.0, "S2": 0.0}


def test_recommend_orders_required_then_credits():
    dataset = HistoricalDataset(
        competencies={
            "A": CompetencyMeta(required=True, credits=6),
            "X1": CompetencyMeta(credits=30),
            "X2": CompetencyMeta(required=True, credits=40),
            "X3": CompetencyMeta(credits=20),
        },
        similarity={"A": {"X1": 0.9, "X2": 0.8, "X3": 0.7, "A": 1.0}},
    )
    rows = [TrainRow(student_id="S", competency_code="A", overall_rating=5.0, grade=4.0)]
    assert recommend_for_student(rows, dataset) == ["X2", "X3"]


def test_accuracy_edge_cases():
    assert accuracy([], ["A"]) == 0.0
    assert accuracy(["A", "B"], ["B ", "Z"]) == 0.5
    assert average_accuracy({}) == 0.0


def test_run_offline_evaluation_writes_csv(tmp_path):
    session = _session()
    _seed(session)
    out = tmp_path / "recs.csv"

    assert run_offline_evaluation(session, output_csv=str(out)) == pytest.approx(0.25)
    assert out.read_text(encoding="utf-8").splitlines() == ["student_id,Competency", "S1,C"]


def test_write_recommendations_csv_sorted(tmp_path):
    out = tmp_path / "r.csv"
    write_recommendations_csv(str(out), {"S2": ["B", "A"], "S1": []})
    assert out.read_text(encoding="utf-8").splitlines() == ["student_id,Competency", "S2,A", "S2,B"]
