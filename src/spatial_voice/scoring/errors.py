"""Failure taxonomy for the presentation-scoring pipeline."""


class ScoringError(Exception):
    """Base class for scoring failures. `kind` identifies the failure class."""

    kind = "scoring"


class ConfigurationError(ScoringError):
    """Missing credential or malformed endpoint. No request is attempted."""

    kind = "configuration"


class ServiceError(ScoringError):
    """Scoring service answered with a non-success HTTP status.

    Args:
        status_code: HTTP status returned by the service.
        body: Raw response body, kept for diagnostics.
    """

    kind = "service"

    def __init__(self, status_code: int, body: str = ""):
        super().__init__(f"HTTP {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class ProtocolError(ScoringError):
    """Completion response carried no extractable message content."""

    kind = "protocol"


class ParseError(ScoringError):
    """Message content is not a valid score report."""

    kind = "parse"


class TransportError(ScoringError):
    """Network-level failure (timeout, connection reset, DNS)."""

    kind = "transport"


class AnalysisInProgressError(ScoringError):
    """An analysis is already running for this session."""

    kind = "in_progress"
