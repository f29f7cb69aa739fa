"""Error hierarchy for the conversation core.

Every component raises one of these kinds so the turn boundary can decide
whether a failure aborts the turn, degrades it, or is the caller's fault.
"""

from typing import Any


class AtelierError(Exception):
    """Base exception for all atelier errors."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class ValidationError(AtelierError):
    """Raised on a bad or missing external identifier.

    This is the caller's fault and is never converted into a reply.
    """

    pass


class RepositoryError(AtelierError):
    """Raised when the persistent store is unavailable or misbehaves."""

    pass


class NotFoundError(RepositoryError):
    """Raised when a specific entity lookup fails.

    Not raised for empty search results.
    """

    pass


class ConflictError(RepositoryError):
    """Raised when a write would break a store invariant.

    For example a second OPEN conversation for the same user.
    """

    pass


class UpstreamError(AtelierError):
    """Raised when the model provider or media store cannot be reached."""

    pass


class OutputFormatError(AtelierError):
    """Raised when a model payload cannot be parsed as JSON."""

    def __init__(
        self,
        message: str,
        raw_text: str = "",
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message, cause)
        self.raw_text = raw_text


class OutputValidationError(AtelierError):
    """Raised when a parsed payload violates its result schema."""

    def __init__(
        self,
        message: str,
        errors: list[dict[str, Any]] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message, cause)
        self.errors = errors or []


class PromptNotFoundError(AtelierError):
    """Raised when a prompt template is missing.

    Prompts ship with the service, so a missing one is a deployment defect.
    """

    def __init__(self, key: str) -> None:
        super().__init__(f"Prompt not found: {key}")
        self.key = key


#: Failures that abort a turn with a generic failure reply.
TURN_FAILURES: tuple[type[AtelierError], ...] = (
    RepositoryError,
    UpstreamError,
    OutputFormatError,
    OutputValidationError,
)
