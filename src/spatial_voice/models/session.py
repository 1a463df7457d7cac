"""Practice session state and history models."""

import threading
import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from spatial_voice.models.report import DIMENSIONS, ScoreReport

DEFAULT_SCENARIO = "Class Presentation"
PENDING_LABEL = "Updating"

# Report dimension -> suffix of the score_* / feedback_* fields on SessionState.
_FIELD_SUFFIXES: dict[str, str] = dict(zip(
    DIMENSIONS,
    (
        "verbal_content",
        "visual_aids",
        "time_management",
        "audience_engagement",
        "vocal_delivery",
        "nonverbal",
    ),
))


class SessionStateError(ValueError):
    """Raised for a mutation the session lifecycle does not allow."""


def format_score(value: float | None) -> str:
    """Format a 0-10 score with one decimal, or "--" when unset."""
    if value is None:
        return "--"
    return f"{value:.1f}"


class PracticeRecord(BaseModel):
    """Immutable snapshot of one completed analysis."""

    model_config = ConfigDict(frozen=True)

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    date: datetime = Field(default_factory=datetime.now)
    scenario_title: str = DEFAULT_SCENARIO

    verbal_score: float = 0.0
    visual_score: float = 0.0
    time_score: float = 0.0
    audience_score: float = 0.0
    vocal_score: float = 0.0
    nonverbal_score: float = 0.0

    overall: float = 0.0
    overall_comment: str = ""

    @property
    def formatted_date(self) -> str:
        """Day/month/year with a 12-hour clock, e.g. "12/5/2026 11:30 AM"."""
        return f"{self.date.day}/{self.date.month}/{self.date.year} {self.date:%I:%M %p}"

    @property
    def vocal_label(self) -> str:
        return format_score(self.vocal_score)

    @property
    def nonverbal_label(self) -> str:
        return format_score(self.nonverbal_score)


class HistoryLedger(BaseModel):
    """Practice records, most recent first. Append-only."""

    records: list[PracticeRecord] = Field(default_factory=list)

    def prepend(self, record: PracticeRecord) -> None:
        self.records.insert(0, record)

    @property
    def latest(self) -> PracticeRecord | None:
        return self.records[0] if self.records else None

    def __len__(self) -> int:
        return len(self.records)

    def __getitem__(self, index: int) -> PracticeRecord:
        return self.records[index]


class SessionState(BaseModel):
    """Mutable aggregate for one practice session.

    Holds the uploaded document text, timing configuration, the latest
    scoring results and the practice history. Scores are 0-10 floats where
    None means "not computed yet"; feedback strings are empty until filled.
    """

    model_config = ConfigDict(validate_assignment=True)

    session_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    scenario_title: str = DEFAULT_SCENARIO
    created_at: datetime = Field(default_factory=datetime.now)

    # Extracted document text
    script_text: str = ""
    slides_text: str = ""
    marking_text: str = ""

    # Timing
    duration_minutes: int = Field(default=5, ge=1)
    actual_used_seconds: int = Field(default=0, ge=0)
    timer_started_at: datetime | None = None
    ended_at: datetime | None = None

    is_analyzing: bool = False

    score_verbal_content: float | None = None
    score_visual_aids: float | None = None
    score_time_management: float | None = None
    score_audience_engagement: float | None = None
    score_vocal_delivery: float | None = None
    score_nonverbal: float | None = None

    overall_score: float | None = None
    overall_comment: str | None = None

    feedback_verbal_content: str = ""
    feedback_visual_aids: str = ""
    feedback_time_management: str = ""
    feedback_audience_engagement: str = ""
    feedback_vocal_delivery: str = ""
    feedback_nonverbal: str = ""

    history: HistoryLedger = Field(default_factory=HistoryLedger)

    _busy_lock: threading.Lock = PrivateAttr(default_factory=threading.Lock)

    @property
    def practice_records(self) -> list[PracticeRecord]:
        return self.history.records

    # -- timing --------------------------------------------------------

    def set_duration_minutes(self, minutes: int) -> None:
        """Change the target duration. Locked once the timer has started."""
        if self.timer_started_at is not None:
            raise SessionStateError("Duration cannot change after the timer has started")
        self.duration_minutes = minutes

    def start_timer(self) -> None:
        if self.timer_started_at is None:
            self.timer_started_at = datetime.now()

    def end_practice(
        self,
        actual_used_seconds: int | None = None,
        remaining_seconds: int | None = None,
    ) -> int:
        """Record how long the user actually spoke. Allowed exactly once.

        Either pass the measured seconds directly, or the countdown's
        remaining seconds, in which case the used time is derived from the
        target duration (never negative).

        Returns:
            The recorded number of seconds.
        """
        if self.ended_at is not None:
            raise SessionStateError("Practice session has already ended")
        if actual_used_seconds is None:
            if remaining_seconds is None:
                raise SessionStateError("Either used or remaining seconds is required")
            total = max(1, self.duration_minutes) * 60
            actual_used_seconds = max(0, total - remaining_seconds)

        self.actual_used_seconds = actual_used_seconds
        self.ended_at = datetime.now()
        return actual_used_seconds

    @property
    def formatted_used_time(self) -> str:
        minutes, seconds = divmod(self.actual_used_seconds, 60)
        return f"{minutes:02d}:{seconds:02d}"

    # -- analysis guard ------------------------------------------------

    def try_begin_analysis(self) -> bool:
        """Atomically claim the session for an analysis run.

        Returns:
            False if another analysis already holds the session.
        """
        with self._busy_lock:
            if self.is_analyzing:
                return False
            self.is_analyzing = True
            return True

    def finish_analysis(self) -> None:
        with self._busy_lock:
            self.is_analyzing = False

    # -- results -------------------------------------------------------

    def score_for(self, dimension: str) -> float | None:
        return getattr(self, f"score_{_FIELD_SUFFIXES[dimension]}")

    def feedback_for(self, dimension: str) -> str:
        return getattr(self, f"feedback_{_FIELD_SUFFIXES[dimension]}")

    @property
    def vocal_delivery_label(self) -> str:
        if self.score_vocal_delivery is None:
            return PENDING_LABEL
        return format_score(self.score_vocal_delivery)

    @property
    def nonverbal_label(self) -> str:
        if self.score_nonverbal is None:
            return PENDING_LABEL
        return format_score(self.score_nonverbal)

    def reset_results(self) -> None:
        """Clear scores, feedback and overall fields. History is kept."""
        for suffix in _FIELD_SUFFIXES.values():
            setattr(self, f"score_{suffix}", None)
            setattr(self, f"feedback_{suffix}", "")
        self.overall_score = None
        self.overall_comment = None

    def apply_report(self, report: ScoreReport) -> None:
        """Copy a parsed score report onto the session."""
        for dimension, suffix in _FIELD_SUFFIXES.items():
            setattr(self, f"score_{suffix}", getattr(report.scores, dimension))
            setattr(self, f"feedback_{suffix}", getattr(report.feedback, dimension) or "")
        self.overall_score = report.scores.overall
        self.overall_comment = report.scores.overall_comment

    def add_practice_record_from_current_scores(
        self, scenario_title: str | None = None
    ) -> PracticeRecord:
        """Snapshot the current scores into a new history record.

        Unset scores are recorded as 0.0 and an unset comment as "".
        """
        record = PracticeRecord(
            scenario_title=scenario_title or self.scenario_title,
            verbal_score=self.score_verbal_content or 0.0,
            visual_score=self.score_visual_aids or 0.0,
            time_score=self.score_time_management or 0.0,
            audience_score=self.score_audience_engagement or 0.0,
            vocal_score=self.score_vocal_delivery or 0.0,
            nonverbal_score=self.score_nonverbal or 0.0,
            overall=self.overall_score or 0.0,
            overall_comment=self.overall_comment or "",
        )
        self.history.prepend(record)
        return record
