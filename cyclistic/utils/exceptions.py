# cyclistic/utils/exceptions.py
"""
Custom exceptions for the Cyclistic trip cleaning pipeline
"""

from typing import Optional, Dict, Any


class PipelineError(Exception):
    """
    Base exception for all pipeline errors

    Carries structured context (stage, file, column, offending values)
    so fatal errors can be reported without re-parsing the message
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        """
        Initialize pipeline error

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code for categorization
            context: Additional context information (stage, source, column...)
            cause: Original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.context = context or {}
        self.cause = cause

    @property
    def stage(self) -> Optional[str]:
        """Pipeline stage the error was raised in, if known"""
        return self.context.get('stage')

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization"""
        return {
            'error_type': self.__class__.__name__,
            'error_code': self.error_code,
            'stage': self.stage,
            'message': self.message,
            'context': self.context,
            'cause': str(self.cause) if self.cause else None
        }

    def __str__(self) -> str:
        """String representation of the error"""
        base_msg = f"{self.error_code}: {self.message}"
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" (Context: {context_str})"
        if self.cause:
            base_msg += f" (Caused by: {self.cause})"
        return base_msg


class ConfigurationError(PipelineError):
    """
    Raised when there are configuration issues

    Examples:
    - No trip sources configured
    - Unknown schema variant or time zone policy
    - Inconsistent ride length bounds
    """
    pass


class ExtractionError(PipelineError):
    """
    Raised when a source file cannot be read

    Examples:
    - File not found
    - Permission denied
    - Malformed or empty delimited file
    """
    pass


class SchemaError(PipelineError):
    """
    Raised when a table does not carry the columns its variant promises

    Examples:
    - Variant A file without a `usertype` column
    - Table handed to the merger with extra or missing canonical columns
    """
    pass


class VocabularyError(PipelineError):
    """
    Raised when a user-category value is outside the variant's vocabulary

    The offending values are listed in the error context; no mapping is
    guessed for them.
    """
    pass


class LoaderError(PipelineError):
    """
    Raised while persisting or reloading the cleaned table

    Examples:
    - Output directory not writable
    - Disk full during CSV write
    - Corrupted Parquet snapshot
    """
    pass


class ProcessingError(PipelineError):
    """Raised for unexpected failures inside a transform stage"""
    pass


def handle_pipeline_exception(
    stage: str,
    exception: Exception,
    context: Optional[Dict[str, Any]] = None
) -> PipelineError:
    """
    Convert generic exceptions to pipeline-specific exceptions

    Args:
        stage: Name of the pipeline stage where the error occurred
        exception: Original exception
        context: Additional context information

    Returns:
        Appropriate PipelineError subclass
    """
    if isinstance(exception, PipelineError):
        exception.context.setdefault('stage', stage)
        return exception

    error_context = {
        'stage': stage,
        **(context or {})
    }

    if isinstance(exception, FileNotFoundError):
        return ExtractionError(
            f"File not found in {stage}: {str(exception)}",
            error_code="FILE_NOT_FOUND",
            context=error_context,
            cause=exception
        )

    elif isinstance(exception, PermissionError):
        return LoaderError(
            f"Permission denied in {stage}: {str(exception)}",
            error_code="PERMISSION_DENIED",
            context=error_context,
            cause=exception
        )

    elif isinstance(exception, KeyError):
        return SchemaError(
            f"Missing column in {stage}: {str(exception)}",
            error_code="MISSING_COLUMN",
            context=error_context,
            cause=exception
        )

    elif isinstance(exception, ValueError):
        return ProcessingError(
            f"Invalid data in {stage}: {str(exception)}",
            error_code="VALUE_ERROR",
            context=error_context,
            cause=exception
        )

    elif isinstance(exception, MemoryError):
        return ProcessingError(
            f"Memory error in {stage}: {str(exception)}",
            error_code="MEMORY_ERROR",
            context=error_context,
            cause=exception
        )

    else:
        return PipelineError(
            f"Unexpected error in {stage}: {str(exception)}",
            error_code="UNKNOWN_ERROR",
            context=error_context,
            cause=exception
        )
