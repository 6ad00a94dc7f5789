#!/usr/bin/env python3
"""
Demo scenario for the Scoresight engine.

Walks through the engine step by step on a small hand-made cohort, then on
generated program data.
"""

from scoresight.config import AnalyticsConfig, configure_logging
from scoresight.core.entities import ClassGroup, Student, Subject, SubTopic, members_of_class
from scoresight.core.exceptions import InvalidInputError
from scoresight.demo_data import build_demo_dataset
from scoresight.services import (
    AnalyticsService, cohort_stats, gap_report, radar_series, rank, score_for_subject, subject_averages,
)


def run_demo():
    """Run a walkthrough of the engine."""
    print("=" * 60)
    print("SCORESIGHT SCORE ANALYTICS - DEMO")
    print("=" * 60)

    configure_logging("WARNING")

    try:
        print("\n1. Scoring a single subject...")
        demonstrate_scoring()

        print("\n2. Cohort statistics...")
        demonstrate_statistics()

        print("\n3. Ranking within a class...")
        demonstrate_ranking()

        print("\n4. Gap analysis on a generated program...")
        demonstrate_gap_analysis()

        print("\n5. Rejecting malformed input...")
        demonstrate_validation()

        print("\n" + "=" * 60)
        print("DEMO COMPLETED SUCCESSFULLY!")
        print("=" * 60)

    except InvalidInputError as e:
        print(f"\nDemo failed with error: {e}")
        raise


def physics() -> Subject:
    return Subject("physics", "Physics", "PHY", (
        SubTopic("m", "Mechanics", 25),
        SubTopic("w", "Waves & Optics", 20),
    ))


def demonstrate_scoring():
    """A missing sub-topic score counts as zero but keeps its max score."""
    student = Student.from_scores("S001", "Alice", "m6-1", {"m": 20})
    result = score_for_subject(student, physics())
    print(f"  {student.name}: {result.score:g}/{result.max_score:g} = {result.percentage:.2f}%")


def demonstrate_statistics():
    for values in ([10, 20, 30, 40, 50, 60, 70, 80], [10, 20, 30, 40, 50], [10, 50, 52, 54, 56, 58]):
        stats = cohort_stats(values)
        q = stats.quartiles
        print(f"  {values}: q1={q.q1:g} median={q.median:g} q3={q.q3:g} "
              f"whiskers=[{stats.min:g}, {stats.max:g}] outliers={list(stats.outliers)}")


def demonstrate_ranking():
    subjects = [physics()]
    cohort = [
        Student.from_scores("S001", "Alice", "m6-1", {"m": 25, "w": 20}),
        Student.from_scores("S002", "Bob", "m6-1", {"m": 20, "w": 11.5}),
        Student.from_scores("S003", "Carol", "m6-1", {"m": 11.5, "w": 20}),
        Student.from_scores("S004", "David", "m6-1", {"m": 10, "w": 8}),
    ]
    for student in cohort:
        result = rank(student, cohort, subjects)
        print(f"  {student.name:6} rank {result.rank} percentile {result.percentile:.2f}")


def demonstrate_gap_analysis():
    dataset = build_demo_dataset(per_class=5, seed=7)
    subjects = dataset.program.subjects
    students = list(dataset.students)

    for gap in gap_report(subjects, students)[:5]:
        print(f"  [{gap.priority.value:8}] {gap.subject_code} {gap.name}: {gap.average_percentage:.1f}%")

    first_class: ClassGroup = dataset.classes[0]
    class_cohort = members_of_class(students, first_class.id)
    for point in radar_series(subject_averages(class_cohort, subjects), subject_averages(students, subjects)):
        print(f"  {point.subject_code}: {first_class.name} {point.series_a:.1f}% vs school {point.series_b:.1f}%")

    service = AnalyticsService(subjects, AnalyticsConfig(top_fraction=0.2))
    summary = service.dashboard_summary(students)
    print(f"  Top 20%: {[entry.student.id for entry in summary.top_students]}")
    print(f"  Needing attention: {summary.needing_attention}")


def demonstrate_validation():
    service = AnalyticsService([physics()])
    stray = Student.from_scores("S999", "Mallory", "m6-1", {"chem-organic": 12})
    try:
        service.gap_report([stray])
    except InvalidInputError as e:
        print(f"  Rejected: {e.message} [{e.error_code}]")


if __name__ == "__main__":
    run_demo()
