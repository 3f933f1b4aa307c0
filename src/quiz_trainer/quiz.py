"""Quiz session engine: one attempt from variant selection to a scored result."""
import enum
import logging
import math
import random
import time
from dataclasses import dataclass
from typing import Callable, Optional

from quiz_trainer.models import CompletionRecord, Question, QuizSession, SessionResult, Subject
from quiz_trainer.progress import ProgressStore
from quiz_trainer.shuffle import shuffle_options, shuffle_questions
from quiz_trainer.variants import get_variant_set, variant_key

logger = logging.getLogger(__name__)

# Delay the reference UI waits after an answer before advancing.
ANSWER_DELAY_SECONDS = 1.5


class QuizState(enum.Enum):
    SELECTING_VARIANT = "selecting_variant"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


@dataclass(frozen=True)
class QuizSnapshot:
    state: QuizState
    subject_id: Optional[str]
    variant_key: Optional[str]
    question: Optional[Question]
    current_index: int
    total_questions: int
    progress: float
    score: int
    elapsed_ms: int
    is_error_review: bool
    answered: bool
    last_answer_correct: Optional[bool]
    result: Optional[SessionResult]


def _now_ms() -> int:
    return int(time.time() * 1000)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class QuizController:
    """Owns the single active QuizSession and drives its transitions.

    Invalid input (answering twice, skipping an answered question, advancing
    with nothing loaded) is ignored rather than raised.
    """

    def __init__(self, progress: ProgressStore, clock: Callable[[], int] | None = None,
                 rng: random.Random | None = None):
        self.progress = progress
        self.clock = clock or _now_ms
        self.rng = rng
        self.state = QuizState.SELECTING_VARIANT
        self.subject: Optional[Subject] = None
        self.session: Optional[QuizSession] = None
        self.result: Optional[SessionResult] = None
        self._generation = 0
        self._listeners: list = []

    # --- observers ---

    def subscribe(self, listener: Callable[[QuizSnapshot], None]) -> Callable[[], None]:
        """Call listener with a fresh snapshot after every transition. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def _notify(self) -> None:
        snap = self.snapshot()
        for listener in list(self._listeners):
            listener(snap)

    def _bump(self) -> None:
        self._generation += 1

    def advance_token(self) -> int:
        """Token for a scheduled advance; stale once the question or session changes."""
        return self._generation

    # --- lifecycle ---

    def select_subject(self, subject: Subject) -> None:
        self.subject = subject
        self.exit_to_menu()

    def _begin(self, subject: Subject, selector, questions, is_error_review: bool) -> None:
        ordered = shuffle_questions(questions, self.rng)
        ordered = [shuffle_options(q, self.rng) for q in ordered]
        self.subject = subject
        self.session = QuizSession(
            subject_id=subject.id,
            variant_selector=selector,
            questions=ordered,
            start_time=self.clock(),
            is_error_review=is_error_review,
        )
        self.result = None
        self.state = QuizState.IN_PROGRESS
        self._bump()
        logger.debug("Started %s session for %s with %d questions",
                     variant_key(selector), subject.id, len(ordered))
        self._notify()

    def start_quiz(self, subject: Subject, selector) -> None:
        """Start a variant (int) or the marathon ("marathon") for subject."""
        if selector == "marathon":
            questions = subject.data
        else:
            variant_key(selector)  # rejects unknown selector strings
            questions = get_variant_set(subject).questions_by_variant.get(int(selector), [])
        self._begin(subject, selector, questions, is_error_review=False)

    def start_error_review(self, subject: Subject) -> bool:
        """Start a session over previously missed questions. Returns False if there are none."""
        wrong = set(self.progress.get_wrong_answers(subject.id))
        pool = [q for q in subject.data if q.question in wrong]
        if not pool:
            return False
        self._begin(subject, "errors", pool, is_error_review=True)
        return True

    def restart(self) -> bool:
        if self.session is None or self.subject is None:
            return False
        if self.session.is_error_review:
            return self.start_error_review(self.subject)
        self.start_quiz(self.subject, self.session.variant_selector)
        return True

    def exit_to_menu(self) -> None:
        """Drop the active session; nothing beyond already-persisted progress is kept."""
        self.session = None
        self.result = None
        self.state = QuizState.SELECTING_VARIANT
        self._bump()
        self._notify()

    # --- per-question transitions ---

    def _active(self) -> Optional[QuizSession]:
        if self.state is not QuizState.IN_PROGRESS or self.session is None:
            return None
        if self.session.current_question is None:
            return None
        return self.session

    def answer(self, letter: str) -> Optional[bool]:
        """Record an answer for the current question. Returns correctness, or None if ignored."""
        session = self._active()
        if session is None or session.answered:
            return None
        question = session.current_question
        correct = letter == question.correct_answer
        session.answered = True
        session.last_answer_correct = correct
        if correct:
            session.score += 1
            if session.is_error_review:
                self.progress.remove_wrong_answer(session.subject_id, question.question)
        else:
            session.session_wrong.append(question.question)
        self._notify()
        return correct

    def answer_index(self, index: int) -> Optional[bool]:
        session = self._active()
        if session is None:
            return None
        options = session.current_question.options
        if not 0 <= index < len(options):
            raise IndexError(f"Option index {index} out of range")
        return self.answer(options[index].letter)

    def skip(self) -> bool:
        """Move the current question to the end of the queue without advancing."""
        session = self._active()
        if session is None or session.answered:
            return False
        question = session.questions.pop(session.current_index)
        session.questions.append(question)
        self._bump()
        self._notify()
        return True

    def next(self, token: Optional[int] = None) -> None:
        """Advance to the next question, or finalize after the last one.

        When token is given and no longer matches advance_token(), the call
        is stale and does nothing.
        """
        if token is not None and token != self._generation:
            return
        session = self._active()
        if session is None:
            return
        if session.current_index + 1 < len(session.questions):
            session.current_index += 1
            session.answered = False
            session.last_answer_correct = None
            self._bump()
            self._notify()
            return
        self._finalize(session)

    def _finalize(self, session: QuizSession) -> None:
        session.end_time = self.clock()
        total = len(session.questions)
        wrong_count = len(session.session_wrong)
        final_score = total - wrong_count
        percentage = round_half_up(final_score / total * 100)
        elapsed = session.end_time - session.start_time
        key = variant_key(session.variant_selector)

        if not session.is_error_review:
            if wrong_count > 0:
                self.progress.add_wrong_answers(session.subject_id, session.session_wrong)
            self.progress.record_completion(
                session.subject_id, key,
                CompletionRecord(score=final_score, total=total,
                                 percentage=percentage, completed_at=session.end_time),
            )
        self.progress.add_stats(session.subject_id, total, final_score, elapsed)

        self.result = SessionResult(
            subject_id=session.subject_id,
            variant_key=key,
            score=final_score,
            total=total,
            percentage=percentage,
            elapsed_ms=elapsed,
            is_error_review=session.is_error_review,
        )
        self.state = QuizState.COMPLETED
        self._bump()
        logger.info("Finished %s for %s: %d/%d (%d%%)",
                    key, session.subject_id, final_score, total, percentage)
        self._notify()

    # --- reads ---

    def elapsed_ms(self) -> int:
        if self.session is None or self.session.start_time is None:
            return 0
        end = self.session.end_time if self.session.end_time is not None else self.clock()
        return end - self.session.start_time

    def snapshot(self) -> QuizSnapshot:
        session = self.session
        if session is None:
            return QuizSnapshot(
                state=self.state,
                subject_id=self.subject.id if self.subject else None,
                variant_key=None, question=None, current_index=0, total_questions=0,
                progress=0.0, score=0, elapsed_ms=0, is_error_review=False,
                answered=False, last_answer_correct=None, result=self.result,
            )
        total = len(session.questions)
        if self.state is QuizState.COMPLETED:
            progress = 1.0
        elif total == 0:
            progress = 0.0
        else:
            done = session.current_index + (1 if session.answered else 0)
            progress = done / total
        return QuizSnapshot(
            state=self.state,
            subject_id=session.subject_id,
            variant_key=variant_key(session.variant_selector),
            question=session.current_question,
            current_index=session.current_index,
            total_questions=total,
            progress=progress,
            score=session.score,
            elapsed_ms=self.elapsed_ms(),
            is_error_review=session.is_error_review,
            answered=session.answered,
            last_answer_correct=session.last_answer_correct,
            result=self.result,
        )
