"""
Error types for the word-vector hash index.

Lookup misses are never raised; they come back as ``LookupResult`` objects
with ``found`` set to False. Everything here signals a condition that stops
the current build or read.
"""

from typing import Optional, Any, Dict


class WordVectorIndexError(Exception):
    """
    Base exception for all index-related errors.

    Provides common functionality for error tracking and reporting.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize index error.

        Args:
            message: Error message
            details: Optional detailed error context
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(WordVectorIndexError):
    """
    Raised when a source cannot be read or its detected shape is unusable.

    Also raised for invalid configuration values.
    """

    def __init__(self, message: str,
                 source: Optional[str] = None,
                 vector_size: Optional[int] = None,
                 record_count: Optional[int] = None,
                 details: Optional[Dict[str, Any]] = None):
        """
        Initialize configuration error.

        Args:
            message: Error message
            source: Dataset or config path involved
            vector_size: Detected vector size, if any
            record_count: Detected record count, if any
            details: Additional error context
        """
        super().__init__(message, details)
        self.source = source
        self.vector_size = vector_size
        self.record_count = record_count

        self.details.update({
            'source': source,
            'vector_size': vector_size,
            'record_count': record_count
        })


class InvalidIndexError(ConfigurationError):
    """Raised when an operation is attempted on an index whose shape is invalid."""


class MalformedRecordError(WordVectorIndexError):
    """
    Raised when a dataset line cannot be turned into a record.

    Covers a wrong field count, a non-numeric field, and keys that cannot be
    written to a persisted index (keys containing a comma).
    """

    def __init__(self, message: str,
                 file_path: Optional[str] = None,
                 line_number: Optional[int] = None,
                 details: Optional[Dict[str, Any]] = None):
        """
        Initialize malformed record error.

        Args:
            message: Error message
            file_path: Dataset the line came from
            line_number: 1-based line number of the offending line
            details: Additional error context
        """
        if line_number is not None:
            message = f"{message} (line {line_number})"
        super().__init__(message, details)
        self.file_path = file_path
        self.line_number = line_number

        self.details.update({
            'file_path': file_path,
            'line_number': line_number
        })


class IndexFormatError(WordVectorIndexError):
    """Raised when a persisted index file does not follow the bucket-line format."""

    def __init__(self, message: str,
                 file_path: Optional[str] = None,
                 line_number: Optional[int] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.file_path = file_path
        self.line_number = line_number

        self.details.update({
            'file_path': file_path,
            'line_number': line_number
        })


class OutputExistsError(WordVectorIndexError):
    """Raised when the builder would overwrite an existing index file."""

    def __init__(self, output_path: str):
        super().__init__(
            f"Refusing to overwrite existing file: {output_path}",
            {'output_path': output_path}
        )
        self.output_path = output_path


def is_lookup_refused(error: Exception) -> bool:
    """Check if error means the index itself is unusable."""
    return isinstance(error, InvalidIndexError)


def is_malformed_input(error: Exception) -> bool:
    """Check if error was caused by the input data rather than the environment."""
    return isinstance(error, (MalformedRecordError, IndexFormatError))
