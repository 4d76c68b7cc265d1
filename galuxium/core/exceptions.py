class GaluxiumError(Exception):
    """Base exception for the Galuxium backend."""

    pass


class ProviderError(GaluxiumError):
    """Raised when the completion service is unreachable, times out, or returns no content."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class JsonExtractionError(GaluxiumError):
    """Raised when a JSON object cannot be recovered from model output."""

    def __init__(self, message: str, raw: str = ""):
        self.raw = raw
        super().__init__(message)


class NoJsonFound(JsonExtractionError):
    """Raised when model output contains no parseable JSON span."""

    pass


class InvalidJson(JsonExtractionError):
    """Raised when a JSON span is found but is malformed or not an object."""

    pass


class StoreError(GaluxiumError):
    """Raised when an artifact store read or write fails."""

    pass


class IdeaNotFound(StoreError):
    """Raised when an idea id does not resolve to a stored idea."""

    def __init__(self, idea_id: str):
        self.idea_id = idea_id
        super().__init__(f"Idea not found: {idea_id}")


class IdeaConflict(StoreError):
    """Raised when an idea with the same (owner, content hash) already exists."""

    pass


class AgentError(GaluxiumError):
    """Raised when one generation agent fails. Never fatal to the pipeline.

    Attributes:
        kind: Agent kind ("validation", "branding", "technical", "launch")
        reason: Wrapped failure category ("not_found", "provider", "parse", "store")
    """

    def __init__(self, kind: str, reason: str, message: str):
        self.kind = kind
        self.reason = reason
        self.message = message
        super().__init__(message)


class PipelineAborted(GaluxiumError):
    """Raised when a pipeline-fatal stage (classification, idea resolution) fails."""

    def __init__(self, stage: str, message: str):
        self.stage = stage
        self.message = message
        super().__init__(f"Pipeline aborted during {stage}: {message}")
