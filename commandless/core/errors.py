"""Exception types raised inside the intent resolution engine.

Only TemplateStoreError escapes to callers; the matcher errors are caught
by the resolution policy and turned into a fallback.
"""


class IntentEngineError(Exception):
    """Base class for engine errors."""


class MatcherUnavailable(IntentEngineError):
    """Raised when the generative model call fails or times out."""

    def __init__(self, message: str, matcher: str = "llm"):
        super().__init__(message)
        self.matcher = matcher


class MalformedModelResponse(IntentEngineError):
    """Raised when model output has no usable JSON payload."""

    def __init__(self, message: str, raw: str = ""):
        super().__init__(message)
        self.raw = raw


class TemplateStoreError(IntentEngineError):
    """Raised when the template store fails or exceeds its timeout."""
