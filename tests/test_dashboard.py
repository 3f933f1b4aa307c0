from conftest import make_question, make_subject
from quiz_trainer.dashboard import (
    average_percent, format_elapsed, format_study_time, get_question_counts,
    get_result_color, get_result_label, get_subject_progress,
)
from quiz_trainer.models import CompletionRecord


def test_result_label():
    assert get_result_label(100) == "PERFECT"
    assert get_result_label(85) == "EXCELLENT"
    assert get_result_label(80) == "EXCELLENT"
    assert get_result_label(60) == "GOOD"
    assert get_result_label(59) == "NEEDS PRACTICE"


def test_result_color():
    assert get_result_color(100) == "bright_green"
    assert get_result_color(10) == "red"


def test_format_elapsed():
    assert format_elapsed(0) == "0:00"
    assert format_elapsed(65_000) == "1:05"
    assert format_elapsed(3_599_999) == "59:59"


def test_format_study_time():
    assert format_study_time(0) == "0m"
    assert format_study_time(59_000) == "0m"
    assert format_study_time(45 * 60_000) == "45m"
    assert format_study_time(125 * 60_000) == "2h 5m"


def test_average_percent():
    assert average_percent(0, 0) == 0
    assert average_percent(1, 3) == 33
    assert average_percent(1, 8) == 13


def test_question_counts_cap_at_variant_size():
    subject = make_subject(90, per_variant=40)
    assert get_question_counts(subject) == {1: 40, 2: 40, "marathon": 90}


def test_question_counts_tagged():
    data = [make_question(i, variant=1 + i % 2) for i in range(5)]
    subject = make_subject(0, has_variants=True, per_variant=40, questions=data)
    assert get_question_counts(subject) == {1: 3, 2: 2, "marathon": 5}


def test_subject_progress_empty(progress):
    summary = get_subject_progress(progress, make_subject(105, per_variant=40))
    assert summary == {
        "total_variants": 3, "completed_count": 0, "completion_percent": 0,
        "average_percent": 0, "total_questions": 105, "wrong_count": 0,
    }


def test_subject_progress_with_data(progress):
    subject = make_subject(105, per_variant=40)
    progress.record_completion("demo", "variant_1", CompletionRecord(30, 40, 75, 1))
    progress.record_completion("demo", "marathon", CompletionRecord(90, 105, 86, 2))
    progress.add_stats("demo", questions=40, correct=30, time_ms=1)
    progress.add_wrong_answers("demo", ["Question 1?", "Question 2?"])
    summary = get_subject_progress(progress, subject)
    assert summary["completed_count"] == 1
    assert summary["completion_percent"] == 33
    assert summary["average_percent"] == 75
    assert summary["wrong_count"] == 2
