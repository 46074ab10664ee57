"""Custom exception hierarchy."""

from typing import Optional


class AppError(Exception):
    """Base exception for application errors."""
    def __init__(self, message: str, original_error: Exception = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class DatabaseError(AppError):
    """Raised when a database operation fails."""
    pass


class ValidationError(AppError):
    """Raised when input validation fails."""
    pass


class ConfigurationError(AppError):
    """Raised when configuration is invalid or missing."""
    pass


class DocumentNotFoundError(AppError):
    """Raised when a document is not found."""
    pass


class PipelineError(AppError):
    """Base exception for gazette pipeline errors."""
    pass


class AdapterError(PipelineError):
    """An external extraction program did not produce a usable payload."""

    def __init__(self, adapter: str, message: str, original_error: Exception = None):
        super().__init__(f"{adapter}: {message}", original_error=original_error)
        self.adapter = adapter
        self.reason = message


class AdapterTimeoutError(AdapterError):
    """The extraction program exceeded its per-call time budget."""

    def __init__(self, adapter: str, timeout: float):
        super().__init__(adapter, f"timed out after {timeout:g} seconds")
        self.timeout = timeout


class AdapterProcessError(AdapterError):
    """The extraction program could not be launched or exited non-zero."""

    def __init__(self, adapter: str, exit_code: Optional[int], stderr_excerpt: str = ""):
        if exit_code is None:
            message = f"could not be started: {stderr_excerpt}"
        else:
            message = f"failed with exit code {exit_code}: {stderr_excerpt}"
        super().__init__(adapter, message)
        self.exit_code = exit_code
        self.stderr_excerpt = stderr_excerpt


class AdapterEmptyOutputError(AdapterError):
    """The extraction program wrote nothing to stdout."""

    def __init__(self, adapter: str):
        super().__init__(adapter, "returned empty output")


class AdapterMalformedJSONError(AdapterError):
    """Stdout was not valid JSON."""

    def __init__(self, adapter: str, detail: str, original_error: Exception = None):
        super().__init__(adapter, f"invalid JSON output - {detail}", original_error=original_error)
        self.detail = detail


class AdapterContractViolationError(AdapterError):
    """Stdout was JSON but did not match the expected payload shape."""

    def __init__(self, adapter: str, detail: str, original_error: Exception = None):
        super().__init__(adapter, f"unexpected output structure - {detail}", original_error=original_error)
        self.detail = detail


class AttachmentUploadError(PipelineError):
    """A section file could not be read or stored."""
    pass


class OuterTimeoutError(PipelineError):
    """The whole gazette job exceeded its time budget."""
    pass
