import random

import pytest

from quiz_trainer.db import KeyValueStore, init_db
from quiz_trainer.models import Option, Question, Subject
from quiz_trainer.progress import ProgressStore
from quiz_trainer.quiz import QuizController
from quiz_trainer.variants import clear_variant_cache


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_progress.db")
    return db_path


@pytest.fixture(autouse=True)
def _fresh_variant_cache():
    clear_variant_cache()
    yield
    clear_variant_cache()


def make_question(n, correct="a", variant=None, option_count=4):
    options = tuple(
        Option(letter=letter, text=f"Q{n} option {letter}")
        for letter in "abcde"[:option_count]
    )
    return Question(id=str(n), question=f"Question {n}?", options=options,
                    correct_answer=correct, variant=variant)


def make_subject(count, subject_id="demo", per_variant=40, has_variants=False, questions=None):
    data = questions if questions is not None else [make_question(i) for i in range(1, count + 1)]
    return Subject(id=subject_id, name=subject_id.title(), short_name=subject_id,
                   data=tuple(data), has_variants=has_variants,
                   questions_per_variant=per_variant)


class FakeClock:
    def __init__(self, start=1_000_000):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms


@pytest.fixture
def progress(tmp_db):
    init_db(tmp_db)
    return ProgressStore(KeyValueStore(tmp_db))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def controller(progress, clock):
    return QuizController(progress, clock=clock, rng=random.Random(7))
