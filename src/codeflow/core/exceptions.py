"""Exceptions raised by the CodeFlow persistence and editor core."""


class CodeFlowError(Exception):
    """Base class for all CodeFlow errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class UnauthenticatedError(CodeFlowError):
    """Raised when an operation requires a signed-in user and there is none."""

    def __init__(self, message: str = "User not authenticated") -> None:
        super().__init__(message)


class ValidationError(CodeFlowError):
    """Base class for input validation failures.

    Validation errors are always raised before any store call is made.
    """


class InvalidTitleError(ValidationError):
    pass


class PayloadTooLargeError(ValidationError):
    def __init__(self, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(
            f"Code size ({size / 1024:.2f}KB) exceeds maximum allowed size ({limit / 1024:.2f}KB)"
        )


class InvalidLanguageError(ValidationError):
    pass


class InvalidTagsError(ValidationError):
    pass


class InvalidFolderPathError(ValidationError):
    pass


class EmptyCodeError(ValidationError):
    def __init__(self, message: str = "Cannot execute empty code") -> None:
        super().__init__(message)


class NotFoundError(CodeFlowError):
    """Raised when a referenced document does not exist."""

    def __init__(self, collection: str, doc_id: str) -> None:
        self.collection = collection
        self.doc_id = doc_id
        super().__init__(f"{collection[:-1].capitalize()} '{doc_id}' not found")


class ForbiddenError(CodeFlowError):
    """Raised when the acting user does not own the referenced document."""

    def __init__(self, collection: str, doc_id: str, message: str | None = None) -> None:
        self.collection = collection
        self.doc_id = doc_id
        super().__init__(message or f"Not allowed to modify {collection[:-1]} '{doc_id}'")


class QuotaExceededError(CodeFlowError):
    pass


class RateLimitExceededError(CodeFlowError):
    pass


class StoreUnavailableError(CodeFlowError):
    """Raised when the underlying document store fails.

    The original driver exception is available as ``__cause__``.
    """


class QueryNotSupportedError(CodeFlowError):
    """Raised when the store cannot satisfy a query's ordering."""


class ExecutionUnavailableError(CodeFlowError):
    def __init__(self, message: str = "No code executor is configured") -> None:
        super().__init__(message)
