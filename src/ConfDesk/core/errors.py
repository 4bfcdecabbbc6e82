"""Error taxonomy shared by services, renderers and the CLI boundary."""

from __future__ import annotations


class ConfDeskError(Exception):
    """Base class for errors that are reported to the user."""


class ValidationError(ConfDeskError):
    """Input rejected before any backend call.

    Attributes:
        field: Name of the offending form field.
        message: Human readable reason.
    """

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class BackendError(ConfDeskError):
    """A backend query, mutation, RPC or storage call was rejected.

    Authorization denials arrive here as well; the client does not tell
    them apart from other failures.

    Attributes:
        operation: Short operation label (e.g. ``articles.insert``).
        code: Backend error code when one was returned.
    """

    def __init__(self, operation: str, message: str, code: str | None = None) -> None:
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation
        self.code = code


class TemplateNotFoundError(FileNotFoundError):
    """Raised when a template file cannot be found."""


class TemplateError(ConfDeskError):
    """Raised when a template cannot be loaded."""


class OutputError(ConfDeskError):
    """Raised when a generated document cannot be written."""
