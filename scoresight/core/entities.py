"""
Core entities for the Scoresight engine.

All entities are immutable value objects. The engine receives them already
filtered by academic year, program, class and assessment; it never fetches
or stores anything itself.
"""

import math
from dataclasses import dataclass, field, fields, is_dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple

from .exceptions import InvalidInputError


def _require_finite(value: float, what: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidInputError(f"{what} must be a number, got {value!r}", error_code="not_a_number")
    if math.isnan(number) or math.isinf(number):
        raise InvalidInputError(f"{what} must be finite, got {value!r}", error_code="not_finite")
    return number


@dataclass(frozen=True)
class SubTopic:
    """Smallest gradable unit of a subject."""
    id: str
    name: str
    max_score: float

    def __post_init__(self):
        max_score = _require_finite(self.max_score, f"max_score of sub-topic {self.id!r}")
        if max_score < 0:
            raise InvalidInputError(
                f"Sub-topic {self.id!r} has negative max_score {max_score}",
                error_code="negative_max_score",
                details={"sub_topic_id": self.id, "max_score": max_score},
            )
        object.__setattr__(self, "max_score", max_score)


@dataclass(frozen=True)
class Subject:
    """A course: an ordered collection of sub-topics."""
    id: str
    name: str
    code: str
    sub_topics: Tuple[SubTopic, ...] = ()

    def __post_init__(self):
        sub_topics = tuple(self.sub_topics)
        seen = set()
        for sub_topic in sub_topics:
            if sub_topic.id in seen:
                raise InvalidInputError(
                    f"Subject {self.code!r} lists sub-topic {sub_topic.id!r} twice",
                    error_code="duplicate_sub_topic",
                    details={"subject_id": self.id, "sub_topic_id": sub_topic.id},
                )
            seen.add(sub_topic.id)
        object.__setattr__(self, "sub_topics", sub_topics)

    @property
    def max_score(self) -> float:
        """Sum of the sub-topics' maximum scores; 0 without sub-topics."""
        return math.fsum(sub_topic.max_score for sub_topic in self.sub_topics)

    @property
    def sub_topic_ids(self) -> Tuple[str, ...]:
        return tuple(sub_topic.id for sub_topic in self.sub_topics)

    def get_sub_topic(self, sub_topic_id: str) -> Optional[SubTopic]:
        for sub_topic in self.sub_topics:
            if sub_topic.id == sub_topic_id:
                return sub_topic
        return None


@dataclass(frozen=True)
class ScoreEntry:
    """A student's recorded score for one sub-topic."""
    sub_topic_id: str
    score: float

    def __post_init__(self):
        object.__setattr__(self, "score", _require_finite(self.score, f"score for {self.sub_topic_id!r}"))


@dataclass(frozen=True)
class Student:
    """A student together with the score entries selected by the caller."""
    id: str
    name: str
    class_id: str
    scores: Tuple[ScoreEntry, ...] = ()
    _by_sub_topic: Dict[str, float] = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self):
        scores = tuple(self.scores)
        by_sub_topic: Dict[str, float] = {}
        for entry in scores:
            if entry.sub_topic_id in by_sub_topic:
                raise InvalidInputError(
                    f"Student {self.id!r} has more than one score for sub-topic {entry.sub_topic_id!r}",
                    error_code="duplicate_score_entry",
                    details={"student_id": self.id, "sub_topic_id": entry.sub_topic_id},
                )
            by_sub_topic[entry.sub_topic_id] = entry.score
        object.__setattr__(self, "scores", scores)
        object.__setattr__(self, "_by_sub_topic", by_sub_topic)

    def score_for(self, sub_topic_id: str) -> Optional[float]:
        """Get the recorded score for a sub-topic, or None when absent."""
        return self._by_sub_topic.get(sub_topic_id)

    @property
    def sub_topic_ids(self) -> Tuple[str, ...]:
        return tuple(entry.sub_topic_id for entry in self.scores)

    @classmethod
    def from_scores(cls, id: str, name: str, class_id: str, scores: Dict[str, float]) -> "Student":
        """Build a student from a ``{sub_topic_id: score}`` mapping."""
        return cls(
            id=id,
            name=name,
            class_id=class_id,
            scores=tuple(ScoreEntry(sub_topic_id, score) for sub_topic_id, score in scores.items()),
        )


@dataclass(frozen=True)
class ClassGroup:
    """A class of students within an exam program."""
    id: str
    name: str
    program: str = ""


@dataclass(frozen=True)
class ExamProgram:
    """A curriculum: the subjects that make up a student's total score."""
    id: str
    name: str
    subjects: Tuple[Subject, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "subjects", tuple(self.subjects))

    def get_subject(self, subject_id: str) -> Optional[Subject]:
        for subject in self.subjects:
            if subject.id == subject_id:
                return subject
        return None


def members_of_class(students: Iterable[Student], class_id: str) -> Tuple[Student, ...]:
    """Select the cohort of one class, keeping input order."""
    return tuple(student for student in students if student.class_id == class_id)


def to_dict(entity: Any) -> Dict[str, Any]:
    """Convert a core entity or engine result into plain JSON-ready data."""
    if is_dataclass(entity) and not isinstance(entity, type):
        return {
            f.name: _plain(getattr(entity, f.name))
            for f in fields(entity)
            if not f.name.startswith("_")
        }
    raise TypeError(f"Cannot convert {type(entity).__name__} to dict")


def _plain(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return to_dict(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return value
