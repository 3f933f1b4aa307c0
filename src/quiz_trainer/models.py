"""Data classes for the quiz domain model."""
from dataclasses import dataclass, field
from typing import Optional

OPTION_LETTERS = ("a", "b", "c", "d", "e")


@dataclass(frozen=True)
class Option:
    letter: str
    text: str


@dataclass(frozen=True)
class Question:
    id: str
    question: str
    options: tuple
    correct_answer: str
    variant: Optional[int] = None

    @classmethod
    def from_dict(cls, data: dict) -> "Question":
        """Build a Question from a bank entry (camelCase keys as stored on disk)."""
        options = tuple(Option(letter=o["letter"], text=o["text"]) for o in data["options"])
        if not 2 <= len(options) <= len(OPTION_LETTERS):
            raise ValueError(f"expected 2 to {len(OPTION_LETTERS)} options, got {len(options)}")
        variant = data.get("variant")
        return cls(
            id=str(data.get("id", "")),
            question=data["question"],
            options=options,
            correct_answer=data["correctAnswer"],
            variant=int(variant) if variant is not None else None,
        )

    def correct_option(self) -> Optional[Option]:
        for option in self.options:
            if option.letter == self.correct_answer:
                return option
        return None


@dataclass(frozen=True)
class Subject:
    id: str
    name: str
    short_name: str
    data: tuple
    has_variants: bool = False
    questions_per_variant: int = 40
    color: str = ""


@dataclass
class VariantSet:
    variant_numbers: list
    questions_by_variant: dict
    total_questions: int


@dataclass
class CompletionRecord:
    score: int
    total: int
    percentage: int
    completed_at: int

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "total": self.total,
            "percentage": self.percentage,
            "completedAt": self.completed_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CompletionRecord":
        return cls(
            score=int(data["score"]),
            total=int(data["total"]),
            percentage=int(data["percentage"]),
            completed_at=int(data["completedAt"]),
        )


@dataclass
class SubjectStats:
    total_attempts: int = 0
    total_questions: int = 0
    total_correct: int = 0
    total_time_ms: int = 0

    def to_dict(self) -> dict:
        return {
            "totalAttempts": self.total_attempts,
            "totalQuestions": self.total_questions,
            "totalCorrect": self.total_correct,
            "totalTimeMs": self.total_time_ms,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SubjectStats":
        return cls(
            total_attempts=int(data["totalAttempts"]),
            total_questions=int(data["totalQuestions"]),
            total_correct=int(data["totalCorrect"]),
            total_time_ms=int(data["totalTimeMs"]),
        )


@dataclass
class QuizSession:
    subject_id: str
    variant_selector: object  # int, "marathon" or "errors"
    questions: list
    current_index: int = 0
    score: int = 0
    start_time: Optional[int] = None
    end_time: Optional[int] = None
    is_error_review: bool = False
    session_wrong: list = field(default_factory=list)
    answered: bool = False
    last_answer_correct: Optional[bool] = None

    @property
    def current_question(self) -> Optional[Question]:
        if 0 <= self.current_index < len(self.questions):
            return self.questions[self.current_index]
        return None

    @property
    def total_questions(self) -> int:
        return len(self.questions)


@dataclass
class SessionResult:
    subject_id: str
    variant_key: str
    score: int
    total: int
    percentage: int
    elapsed_ms: int
    is_error_review: bool = False
