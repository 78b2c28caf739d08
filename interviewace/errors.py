"""Error taxonomy shared by the report pipeline and the HTTP layer.

Every error carries the HTTP status it maps to and a public message that is
safe to show to the caller. Internal detail goes to the logs, not to
``public_message``.
"""

from __future__ import annotations


class InterviewAceError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500
    public_message = "Internal server error"

    def __init__(self, message: str = "", details=None):
        super().__init__(message or self.public_message)
        self.details = details


class ValidationError(InterviewAceError):
    """Malformed or missing input at the API boundary.

    ``details`` is a list of ``{"field": ..., "message": ...}`` dicts.
    """

    status_code = 400
    public_message = "Validation failed"

    def __init__(self, message: str = "", details: list | None = None):
        super().__init__(message, details=details or [])

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(f"{field}: {message}", details=[{"field": field, "message": message}])


class AuthError(InterviewAceError):
    status_code = 401
    public_message = "Access token required"

    def __init__(self, message: str = "", status_code: int = 401, public_message: str = ""):
        super().__init__(message)
        self.status_code = status_code
        if public_message:
            self.public_message = public_message


class NotFound(InterviewAceError):
    status_code = 404
    public_message = "Preparation not found"


class Forbidden(NotFound):
    """The record exists but belongs to someone else.

    Answers exactly like ``NotFound`` so callers cannot probe for other
    users' data; only the logs tell the two apart.
    """


class JobNotFound(InterviewAceError):
    status_code = 404
    public_message = "Job not found"


class TemplateUnavailable(InterviewAceError):
    public_message = "Report template unavailable"


class PdfEngineError(InterviewAceError):
    """Browser failure while printing. ``details`` is a short public reason."""

    public_message = "Failed to generate PDF"
    public_details = "The PDF engine failed while printing the report"

    def __init__(self, message: str = "", details=None):
        super().__init__(message, details=details or self.public_details)


class EngineUnavailable(PdfEngineError):
    """The headless browser could not be started."""

    public_details = "PDF engine unavailable"


class RenderTimeout(PdfEngineError):
    """The page did not settle before the render deadline."""

    public_details = "PDF rendering timed out"


class GenerationFailed(InterviewAceError):
    """The LLM failed or returned output of the wrong shape."""

    status_code = 502
    public_message = "AI generation failed"

    def __init__(self, message: str = "", details=None, status_code: int | None = None):
        super().__init__(message, details=details)
        if status_code is not None:
            self.status_code = status_code
