"""Prompt construction for presentation scoring."""

MAX_DOCUMENT_CHARS = 8000

SCORING_INSTRUCTIONS = """\
You are an experienced public speaking coach.

You will receive the student's speech script, slides text and marking scheme, plus timing data.

Evaluate the presentation on six aspects, each scored from 0 to 10:

1) verbal_content, 2) visual_aids_slides, 3) time_management, 4) audience_engagement, \
5) vocal_delivery, 6) nonverbal_body_language.

Also compute an overall score (0-10) and a short overall_comment (at most two words, \
like 'Well Done').

Then give about 20 English words of feedback for EACH of the six aspects.

Return ONLY a single JSON object with this structure:

{
  "scores": {
    "verbal_content": 0-10 number,
    "visual_aids_slides": 0-10 number,
    "time_management": 0-10 number,
    "audience_engagement": 0-10 number,
    "vocal_delivery": 0-10 number,
    "nonverbal_body_language": 0-10 number,
    "overall": 0-10 number,
    "overall_comment": "short phrase"
  },
  "feedback": {
    "verbal_content": "about 20 English words of feedback",
    "visual_aids_slides": "about 20 English words of feedback",
    "time_management": "about 20 English words of feedback",
    "audience_engagement": "about 20 English words of feedback",
    "vocal_delivery": "about 20 English words of feedback",
    "nonverbal_body_language": "about 20 English words of feedback"
  }
}"""

SCRIPT_HEADING = "Speech script text:"
SLIDES_HEADING = "Slides text or OCR content:"
MARKING_HEADING = "Marking scheme text:"


def _truncate(text: str) -> str:
    return text[:MAX_DOCUMENT_CHARS]


def has_document_text(script_text: str, slides_text: str, marking_text: str) -> bool:
    """True if at least one document has non-whitespace content."""
    return any(t.strip() for t in (script_text, slides_text, marking_text))


def build_prompt(
    script_text: str,
    slides_text: str,
    marking_text: str,
    duration_minutes: int,
    actual_used_seconds: int,
) -> str:
    """Build the scoring instruction for one practice session.

    Each document is cut to MAX_DOCUMENT_CHARS before embedding, and
    sections whose text is blank are left out entirely.

    Args:
        script_text: Speech script extracted from the uploaded document.
        slides_text: Slide text (or OCR output) of the deck.
        marking_text: Marking scheme / rubric text.
        duration_minutes: Target practice length.
        actual_used_seconds: Measured speaking time.

    Returns:
        Prompt string for the user message.
    """
    parts = [
        SCORING_INSTRUCTIONS,
        "Timing data:",
        f"Target duration (minutes): {duration_minutes}",
        f"Actual used seconds: {actual_used_seconds}",
    ]

    sections = (
        (SCRIPT_HEADING, script_text),
        (SLIDES_HEADING, slides_text),
        (MARKING_HEADING, marking_text),
    )
    for heading, text in sections:
        text = _truncate(text)
        if text.strip():
            parts.append(f"{heading}\n{text}")

    return "\n\n".join(parts)
