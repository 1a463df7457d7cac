"""Presentation analysis coordinator: prompt, score, parse, record."""

from pathlib import Path

import structlog

from spatial_voice.models.analysis import AnalysisOutcome, AnalysisStatus
from spatial_voice.models.session import PracticeRecord, SessionState
from spatial_voice.scoring.client import ScoringClient
from spatial_voice.scoring.errors import AnalysisInProgressError, ScoringError, ServiceError
from spatial_voice.scoring.parser import parse_score_report
from spatial_voice.scoring.prompt import build_prompt, has_document_text
from spatial_voice.storage.practice_history import append_practice_record

logger = structlog.get_logger()

NO_INPUT_MESSAGE = "No data for analysis."


class ScoringOrchestrator:
    """Runs one scoring pass over a practice session.

    Entry claims the session (`is_analyzing`) and clears previous results.
    A run then either skips (no document text), succeeds (results applied
    and a history record prepended) or fails (results stay cleared). The
    session is always released on exit. A second call while a run is in
    flight is rejected without touching the session.

    Args:
        client: Scoring service client.
        scenario_title: Label stored on new history records.
        history_dir: If set, new records are also persisted there.
    """

    def __init__(
        self,
        client: ScoringClient,
        scenario_title: str | None = None,
        history_dir: Path | None = None,
    ):
        self.client = client
        self.scenario_title = scenario_title
        self.history_dir = history_dir

    async def analyze(self, session: SessionState) -> AnalysisOutcome:
        """Score the session's documents and timing.

        Args:
            session: Session to analyze; mutated in place.

        Returns:
            Structured outcome. Failures are reported here, never raised.
        """
        log = logger.bind(session_id=session.session_id)

        if not session.try_begin_analysis():
            error = AnalysisInProgressError("Analysis already in progress for this session")
            log.warning("analysis_rejected_in_progress")
            return AnalysisOutcome(
                status=AnalysisStatus.REJECTED,
                error_kind=error.kind,
                error_message=str(error),
            )

        try:
            session.reset_results()

            if not has_document_text(
                session.script_text, session.slides_text, session.marking_text
            ):
                session.overall_comment = NO_INPUT_MESSAGE
                log.info("analysis_skipped_no_input")
                return AnalysisOutcome(status=AnalysisStatus.SKIPPED)

            prompt = build_prompt(
                script_text=session.script_text,
                slides_text=session.slides_text,
                marking_text=session.marking_text,
                duration_minutes=session.duration_minutes,
                actual_used_seconds=session.actual_used_seconds,
            )
            raw = await self.client.complete(prompt)
            report = parse_score_report(raw)

            session.apply_report(report)
            record = session.add_practice_record_from_current_scores(self.scenario_title)
            log.info(
                "analysis_complete",
                overall=session.overall_score,
                comment=session.overall_comment,
            )
            self._persist(record, log)
            return AnalysisOutcome(status=AnalysisStatus.SUCCEEDED, record=record)

        except ServiceError as e:
            log.error("scoring_failed", kind=e.kind, status_code=e.status_code, body=e.body)
            return AnalysisOutcome(
                status=AnalysisStatus.FAILED,
                error_kind=e.kind,
                error_message=str(e),
                status_code=e.status_code,
            )
        except ScoringError as e:
            log.error("scoring_failed", kind=e.kind, error=str(e))
            return AnalysisOutcome(
                status=AnalysisStatus.FAILED,
                error_kind=e.kind,
                error_message=str(e),
            )
        except Exception as e:
            log.exception("scoring_failed_unexpected")
            return AnalysisOutcome(
                status=AnalysisStatus.FAILED,
                error_kind="unexpected",
                error_message=str(e),
            )
        finally:
            session.finish_analysis()

    def _persist(self, record: PracticeRecord, log: structlog.BoundLogger) -> None:
        if self.history_dir is None:
            return
        try:
            append_practice_record(self.history_dir, record)
        except (OSError, ValueError):
            log.exception("practice_history_write_failed", record_id=str(record.id))
