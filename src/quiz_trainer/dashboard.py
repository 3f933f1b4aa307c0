"""Progress summaries, result grading and time formatting for the front end."""
from quiz_trainer.models import Subject
from quiz_trainer.progress import ProgressStore
from quiz_trainer.quiz import round_half_up
from quiz_trainer.variants import get_variant_set


def get_result_label(percentage: int) -> str:
    if percentage == 100:
        return "PERFECT"
    elif percentage >= 80:
        return "EXCELLENT"
    elif percentage >= 60:
        return "GOOD"
    return "NEEDS PRACTICE"


def get_result_color(percentage: int) -> str:
    if percentage == 100:
        return "bright_green"
    elif percentage >= 80:
        return "green"
    elif percentage >= 60:
        return "yellow"
    return "red"


def format_elapsed(ms: int) -> str:
    """m:ss, as shown on the question and result screens."""
    minutes = ms // 60000
    seconds = (ms % 60000) // 1000
    return f"{minutes}:{seconds:02d}"


def format_study_time(ms: int) -> str:
    if not ms:
        return "0m"
    total_minutes = ms // 60000
    if total_minutes < 60:
        return f"{total_minutes}m"
    return f"{total_minutes // 60}h {total_minutes % 60}m"


def average_percent(total_correct: int, total_questions: int) -> int:
    if total_questions <= 0:
        return 0
    return round_half_up(total_correct / total_questions * 100)


def get_question_counts(subject: Subject) -> dict:
    """Questions shown per variant button, plus the marathon total."""
    variant_set = get_variant_set(subject)
    counts = {
        n: min(len(variant_set.questions_by_variant.get(n, [])), subject.questions_per_variant)
        for n in variant_set.variant_numbers
    }
    counts["marathon"] = variant_set.total_questions
    return counts


def get_subject_progress(progress: ProgressStore, subject: Subject) -> dict:
    variant_set = get_variant_set(subject)
    completed = progress.get_completed_variants(subject.id)
    stats = progress.get_stats(subject.id)

    total_variants = len(variant_set.variant_numbers)
    completed_count = len([k for k in completed if k not in ("marathon", "errors")])
    completion = round_half_up(completed_count / total_variants * 100) if total_variants else 0
    return {
        "total_variants": total_variants,
        "completed_count": completed_count,
        "completion_percent": completion,
        "average_percent": average_percent(stats.total_correct, stats.total_questions),
        "total_questions": variant_set.total_questions,
        "wrong_count": len(progress.get_wrong_answers(subject.id)),
    }
