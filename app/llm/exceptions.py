class LlmError(Exception):
    """Raised when a model call returns an unusable response."""


class LlmNetworkError(LlmError):
    """Raised when the model provider call fails due to network/infrastructure issues."""
