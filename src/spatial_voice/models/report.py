"""Score report models parsed from the scoring service response."""

from pydantic import BaseModel, ConfigDict

# Wire names of the six scored dimensions, in display order.
DIMENSIONS: tuple[str, ...] = (
    "verbal_content",
    "visual_aids_slides",
    "time_management",
    "audience_engagement",
    "vocal_delivery",
    "nonverbal_body_language",
)

SCORE_MIN = 0.0
SCORE_MAX = 10.0


class DimensionScores(BaseModel):
    """Per-dimension scores (0-10) plus overall. Every field may be null."""

    model_config = ConfigDict(frozen=True)

    verbal_content: float | None = None
    visual_aids_slides: float | None = None
    time_management: float | None = None
    audience_engagement: float | None = None
    vocal_delivery: float | None = None
    nonverbal_body_language: float | None = None
    overall: float | None = None
    overall_comment: str | None = None

    def out_of_range(self) -> dict[str, float]:
        """Return the numeric fields that fall outside 0-10."""
        values = {key: getattr(self, key) for key in (*DIMENSIONS, "overall")}
        return {
            key: value
            for key, value in values.items()
            if value is not None and not SCORE_MIN <= value <= SCORE_MAX
        }


class DimensionFeedback(BaseModel):
    """Roughly 20 words of feedback per dimension."""

    model_config = ConfigDict(frozen=True)

    verbal_content: str | None = None
    visual_aids_slides: str | None = None
    time_management: str | None = None
    audience_engagement: str | None = None
    vocal_delivery: str | None = None
    nonverbal_body_language: str | None = None


class ScoreReport(BaseModel):
    """Structured analysis returned by the scoring service."""

    model_config = ConfigDict(frozen=True)

    scores: DimensionScores
    feedback: DimensionFeedback
