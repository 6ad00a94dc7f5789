import pytest

from scoresight.core.entities import ClassGroup, Student, Subject, SubTopic


@pytest.fixture
def physics():
    return Subject("physics", "Physics", "PHY", (
        SubTopic("m", "Mechanics", 25),
        SubTopic("w", "Waves", 20),
    ))


@pytest.fixture
def chemistry():
    return Subject("chemistry", "Chemistry", "CHE", (
        SubTopic("org", "Organic", 30),
        SubTopic("inorg", "Inorganic", 20),
    ))


@pytest.fixture
def subjects(physics, chemistry):
    return [physics, chemistry]


@pytest.fixture
def single_topic():
    """A one-topic subject out of 100, so scores read directly as percentages."""
    return Subject("exam", "Exam", "EXM", (SubTopic("x", "Paper", 100),))


def by_percentage(percentages, class_id="c1", prefix="S"):
    """Build a cohort on the single-topic subject from a list of percentages."""
    return [
        Student.from_scores(f"{prefix}{index + 1}", f"Student {index + 1}", class_id, {"x": value})
        for index, value in enumerate(percentages)
    ]


@pytest.fixture
def ranked_cohort():
    return by_percentage([90, 70, 70, 40])


@pytest.fixture
def classes():
    return [ClassGroup("c1", "M.6/1", "pre-a-level"), ClassGroup("c2", "M.6/2", "pre-a-level")]


@pytest.fixture
def make_cohort():
    return by_percentage
