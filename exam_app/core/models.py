"""Domain models for the exam portal."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto

from exam_app.constants.session_constants import OPTION_LABELS


@dataclass(frozen=True, slots=True)
class Question:
    """Multiple-choice question with exactly four options labelled A-D."""

    id: str
    test_id: str
    question_text: str
    options: tuple[str, str, str, str]
    correct_option: str

    def option_for(self, label: str) -> str:
        return self.options[OPTION_LABELS.index(label)]


@dataclass(frozen=True, slots=True)
class Test:
    """Objective test definition as published for a class."""

    __test__ = False

    id: str
    class_name: str
    subject: str
    title: str
    description: str = ""
    duration_minutes: int = 1


@dataclass(frozen=True, slots=True)
class AttemptRecord:
    """Scored result of one finished session."""

    user_id: str
    test_id: str
    score: int
    total_questions: int
    session_started_at: datetime | None
    submitted_at: datetime | None

    def elapsed_seconds(self) -> float | None:
        """Seconds between start and submission, or None when unknown."""
        if self.session_started_at is None or self.submitted_at is None:
            return None
        try:
            return (self.submitted_at - self.session_started_at).total_seconds()
        except TypeError:
            # naive and aware timestamps cannot be compared
            return None


@dataclass(frozen=True, slots=True)
class Profile:
    """Subset of a student profile used for display joins."""

    user_id: str
    display_name: str | None = None
    class_name: str | None = None
    avatar_url: str | None = None


@dataclass(frozen=True, slots=True)
class LeaderboardEntry:
    """Immutable leaderboard row returned to consumers."""

    rank: int
    user_id: str
    display_name: str
    class_name: str
    avatar_url: str
    score: int
    total_questions: int
    test_title: str
    elapsed_seconds: float
    submitted_at: datetime


@dataclass(frozen=True, slots=True)
class ResultRow:
    """One line of a student's own results history."""

    test_id: str
    test_title: str
    subject: str
    score: int
    total_questions: int
    submitted_at: datetime | None
    elapsed_seconds: float | None


class SessionPhase(Enum):
    NOT_STARTED = auto()
    RUNNING = auto()
    FINISHED = auto()


class FinishReason(Enum):
    COMPLETED = "completed"
    EXPIRED = "expired"


class SubmissionStatus(Enum):
    NOT_SUBMITTED = "not_submitted"
    PENDING = "pending"
    SAVED = "saved"
    FAILED = "failed"


@dataclass(slots=True)
class SessionState:
    """In-memory state of one attempt. Never persisted."""

    session_id: str
    test: Test
    questions: list[Question]
    session_started_at: datetime
    remaining_seconds: int
    current_index: int = 0
    answers: dict[str, str] = field(default_factory=dict)
    score: int = 0
    started: bool = False
    finished: bool = False
    result_dialog_visible: bool = False
    finish_reason: FinishReason | None = None
    submission_status: SubmissionStatus = SubmissionStatus.NOT_SUBMITTED
    record: AttemptRecord | None = None

    @property
    def phase(self) -> SessionPhase:
        if self.finished:
            return SessionPhase.FINISHED
        if self.started:
            return SessionPhase.RUNNING
        return SessionPhase.NOT_STARTED

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def current_question(self) -> Question:
        return self.questions[self.current_index]

    @property
    def is_last_question(self) -> bool:
        return self.current_index >= len(self.questions) - 1

    def selected_option(self) -> str | None:
        return self.answers.get(self.current_question.id)

    def can_advance(self) -> bool:
        """Next is enabled once answered; Submit on the last question always is."""
        if self.phase is not SessionPhase.RUNNING:
            return False
        return self.is_last_question or self.selected_option() is not None

    def progress_percent(self) -> float:
        if not self.questions:
            return 0.0
        done = self.current_index + (1 if self.finished else 0)
        return done / len(self.questions) * 100

    def format_remaining(self) -> str:
        minutes, seconds = divmod(max(0, self.remaining_seconds), 60)
        return f"{minutes:02d}:{seconds:02d}"


class NoticeLevel(Enum):
    SUCCESS = "success"
    INFO = "info"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class Notice:
    """Non-blocking, user-visible message raised by the core."""

    level: NoticeLevel
    title: str
    message: str = ""
