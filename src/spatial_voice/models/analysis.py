"""Analysis outcome models."""

from enum import StrEnum

from pydantic import BaseModel

from spatial_voice.models.session import PracticeRecord


class AnalysisStatus(StrEnum):
    """Terminal states of one analysis run."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"
    REJECTED = "rejected"


class AnalysisOutcome(BaseModel):
    """Result of `ScoringOrchestrator.analyze`."""

    status: AnalysisStatus
    error_kind: str | None = None
    error_message: str | None = None
    status_code: int | None = None
    record: PracticeRecord | None = None

    @property
    def ok(self) -> bool:
        return self.status == AnalysisStatus.SUCCEEDED
