"""Parse scoring service content into a ScoreReport."""

import json

import structlog
from pydantic import ValidationError

from spatial_voice.models.report import ScoreReport
from spatial_voice.scoring.errors import ParseError

logger = structlog.get_logger()


def parse_score_report(raw: str) -> ScoreReport:
    """Parse the assistant message content.

    Individual scores and feedback strings may be null or missing. Scores
    outside 0-10 are kept as returned and only logged.

    Args:
        raw: JSON text produced by the scoring model.

    Returns:
        Parsed ScoreReport.

    Raises:
        ParseError: Content is not JSON, or lacks the `scores` / `feedback`
            objects, or a field has the wrong type.
    """
    try:
        data = json.loads(raw)
    except (TypeError, json.JSONDecodeError) as e:
        raise ParseError(f"Response content is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ParseError(f"Expected a JSON object, got {type(data).__name__}")

    try:
        report = ScoreReport.model_validate(data)
    except ValidationError as e:
        raise ParseError(f"Response does not match the score report shape: {e}") from e

    out_of_range = report.scores.out_of_range()
    if out_of_range:
        logger.warning("score_out_of_range", scores=out_of_range)

    return report
