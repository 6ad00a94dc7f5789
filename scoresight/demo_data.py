"""
Demo data for the Scoresight engine.

Nothing here runs at import time: callers ask for a program and a roster
explicitly, and pass a seed when they need reproducible scores.
"""

import random
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .core.entities import ClassGroup, ExamProgram, ScoreEntry, Student, Subject, SubTopic


STUDENT_NAMES = [
    "Somchai Prasert",
    "Nattapong Wongsa",
    "Pimchanok Siriwat",
    "Thanakorn Jitman",
    "Kanokwan Thongchai",
    "Worawit Suksawat",
    "Rattana Phongsri",
    "Pakorn Nitirat",
    "Siriporn Chaiyaphum",
    "Kritsada Bunmee",
    "Naree Wattana",
    "Surasak Kongphan",
    "Manee Rattanapong",
    "Wichai Somboon",
    "Duangjai Phonphat",
]


@dataclass(frozen=True)
class DemoDataset:
    program: ExamProgram
    classes: Tuple[ClassGroup, ...]
    students: Tuple[Student, ...]


def _subject(subject_id: str, name: str, code: str, topics: Sequence[Tuple[str, str, float]]) -> Subject:
    return Subject(
        id=subject_id,
        name=name,
        code=code,
        sub_topics=tuple(SubTopic(topic_id, topic_name, max_score) for topic_id, topic_name, max_score in topics),
    )


def pre_a_level_program() -> ExamProgram:
    """The seven-subject Pre-A-Level program."""
    return ExamProgram(
        id="pre-a-level",
        name="Pre-A-Level",
        subjects=(
            _subject("physics", "Physics", "PHY", [
                ("phy-mechanics", "Mechanics", 25),
                ("phy-waves", "Waves & Optics", 20),
                ("phy-electricity", "Electricity", 25),
                ("phy-nuclear", "Nuclear Physics", 15),
                ("phy-thermo", "Thermodynamics", 15),
            ]),
            _subject("chemistry", "Chemistry", "CHE", [
                ("che-organic", "Organic Chemistry", 30),
                ("che-inorganic", "Inorganic Chemistry", 25),
                ("che-physical", "Physical Chemistry", 25),
                ("che-analytical", "Analytical Chemistry", 20),
            ]),
            _subject("biology", "Biology", "BIO", [
                ("bio-cell", "Cell Biology", 20),
                ("bio-genetics", "Genetics", 25),
                ("bio-ecology", "Ecology", 20),
                ("bio-human", "Human Physiology", 20),
                ("bio-evolution", "Evolution", 15),
            ]),
            _subject("math", "Mathematics", "MAT", [
                ("mat-algebra", "Algebra", 25),
                ("mat-calculus", "Calculus", 30),
                ("mat-statistics", "Statistics", 20),
                ("mat-geometry", "Geometry", 25),
            ]),
            _subject("english", "English", "ENG", [
                ("eng-reading", "Reading Comprehension", 30),
                ("eng-writing", "Writing", 30),
                ("eng-grammar", "Grammar & Usage", 20),
                ("eng-vocabulary", "Vocabulary", 20),
            ]),
            _subject("thai", "Thai Language", "THA", [
                ("tha-reading", "Reading", 30),
                ("tha-writing", "Writing", 35),
                ("tha-literature", "Literature", 35),
            ]),
            _subject("social", "Social Studies", "SOC", [
                ("soc-history", "History", 25),
                ("soc-geography", "Geography", 25),
                ("soc-civics", "Civics", 25),
                ("soc-economics", "Economics", 25),
            ]),
        ),
    )


def default_classes(program_id: str = "pre-a-level") -> Tuple[ClassGroup, ...]:
    return (
        ClassGroup("m6-1", "M.6/1", program_id),
        ClassGroup("m6-2", "M.6/2", program_id),
        ClassGroup("m6-3", "M.6/3", program_id),
    )


def generate_scores(subjects: Sequence[Subject], rng: random.Random) -> Tuple[ScoreEntry, ...]:
    """Somewhat realistic scores: a 40-80% base with +/-15% variation, rounded."""
    scores = []
    for subject in subjects:
        for sub_topic in subject.sub_topics:
            base = rng.random() * 0.4 + 0.4
            variation = (rng.random() - 0.5) * 0.3
            fraction = min(1.0, max(0.0, base + variation))
            scores.append(ScoreEntry(sub_topic.id, float(round(sub_topic.max_score * fraction))))
    return tuple(scores)


def generate_students(program: ExamProgram, classes: Sequence[ClassGroup], per_class: int = 5,
                      seed: Optional[int] = None) -> List[Student]:
    """Generate a roster with ids STU0001, STU0002, ... in class order."""
    rng = random.Random(seed)
    students = []
    index = 0
    for class_group in classes:
        for _ in range(per_class):
            students.append(Student(
                id=f"STU{index + 1:04d}",
                name=STUDENT_NAMES[index % len(STUDENT_NAMES)],
                class_id=class_group.id,
                scores=generate_scores(program.subjects, rng),
            ))
            index += 1
    return students


def build_demo_dataset(per_class: int = 5, seed: Optional[int] = None) -> DemoDataset:
    program = pre_a_level_program()
    classes = default_classes(program.id)
    students = generate_students(program, classes, per_class, seed)
    return DemoDataset(program=program, classes=classes, students=tuple(students))
