"""
Error taxonomy for gitscope.

Layout and diff computation never raise for malformed input; everything
here is about hunk actions and the repository service boundary.
"""


class GitScopeError(Exception):
    """Base class for all gitscope errors."""


class NotARepository(GitScopeError, ValueError):
    """No git repository at or above the given path."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Not in a git repository: {path}")
        self.path = path


class StaleHunkIndex(GitScopeError):
    """A hunk index was used against a diff snapshot that is no longer current.

    Retryable: re-fetch the diff and compute the index again.
    """

    retryable = True

    def __init__(self, file_path: str | None, hunk_index: int) -> None:
        super().__init__(
            f"Hunk {hunk_index} of {file_path or '<unknown>'} belongs to an outdated diff; "
            "re-fetch the diff and try again"
        )
        self.file_path = file_path
        self.hunk_index = hunk_index


class ConcurrentHunkAction(GitScopeError):
    """Another action is already in flight on this file's hunks."""

    def __init__(self, file_path: str | None, hunk_index: int, state: str) -> None:
        super().__init__(f"Hunk {hunk_index} of {file_path or '<unknown>'} is busy ({state})")
        self.file_path = file_path
        self.hunk_index = hunk_index
        self.state = state


class InvalidHunkTransition(GitScopeError):
    """The requested action is not allowed from the hunk's current state."""

    def __init__(self, hunk_index: int, state: str, action: str) -> None:
        super().__init__(f"Cannot {action} hunk {hunk_index} while it is {state}")
        self.hunk_index = hunk_index
        self.state = state
        self.action = action


class UnknownHunkIndex(GitScopeError, IndexError):
    """Hunk index out of range for the current snapshot."""

    def __init__(self, hunk_index: int, hunk_count: int) -> None:
        super().__init__(f"Hunk index {hunk_index} out of range (file has {hunk_count} hunks)")
        self.hunk_index = hunk_index
        self.hunk_count = hunk_count


class RepositoryServiceFailure(GitScopeError):
    """A call to the repository service failed.

    The failing operation and, where relevant, the file and hunk it was
    about are preserved so the caller can offer a retry.
    """

    retryable = True

    def __init__(
        self,
        operation: str,
        message: str,
        file_path: str | None = None,
        hunk_index: int | None = None,
    ) -> None:
        context = operation
        if file_path is not None:
            context += f" {file_path}"
        if hunk_index is not None:
            context += f" (hunk {hunk_index})"
        super().__init__(f"{context}: {message}")
        self.operation = operation
        self.message = message
        self.file_path = file_path
        self.hunk_index = hunk_index
