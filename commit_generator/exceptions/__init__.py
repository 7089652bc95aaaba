"""
Commit Generator exceptions module.

This module defines custom exceptions for the commit generator.
"""


class CommitGeneratorError(Exception):
    """Base exception for all commit generator errors."""
    pass


class ConfigurationError(CommitGeneratorError):
    """Raised when there are configuration-related issues."""
    pass


class GitOperationError(CommitGeneratorError):
    """Raised when repository operations fail."""
    pass


class NotARepositoryError(GitOperationError):
    """Raised when no git repository is found in the directory or its parents."""

    def __init__(self, path: str):
        super().__init__(f"not a git repository (or any of the parent directories): {path}")
        self.path = path


class RepositoryIOError(GitOperationError):
    """Raised when the repository or its object store cannot be read."""
    pass


class MissingIdentityError(GitOperationError):
    """Raised when the author identity needed for a commit is not configured."""

    def __init__(self, key: str, example: str):
        """
        Initialize MissingIdentityError for a missing config key.

        Args:
            key: The missing configuration key (``user.name`` or ``user.email``)
            example: Example value used in the suggested fix
        """
        label = "name" if key == "user.name" else "email"
        super().__init__(
            f"git user {label} is not configured. "
            f"Please set it with: git config {key} \"{example}\""
        )
        self.key = key


class CommitFailureError(GitOperationError):
    """Raised when writing the commit object fails."""
    pass


class APIError(CommitGeneratorError):
    """Raised when calls to the text-generation service fail."""
    pass


class RateLimitExceededError(APIError):
    """Raised when the service keeps rate limiting after all retries."""
    pass


class RequestFailedError(APIError):
    """Raised when the service answers with a non-retryable failure."""
    pass


class EmptyResponseError(APIError):
    """Raised when the service returns no usable text."""
    pass


class SecurityError(CommitGeneratorError):
    """Raised when security-related operations fail."""
    pass


class ValidationError(CommitGeneratorError):
    """Raised when input validation fails."""
    pass
