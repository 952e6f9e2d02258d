"""Custom exceptions for hookaudit.

This module defines exception types for audit failures:
- ParseError: Raised when bashlex fails to parse a hook script
- ConfigurationError: Raised when a YAML configuration file is invalid
- ArchiveError: Raised when an install hook cannot be read from a package archive

Classification of commands and redirects never raises; only the inputs
(script text, configuration, archives) can make an audit fail.
"""

from typing import Optional


class HookAuditError(Exception):
    """Base class for every error raised by hookaudit."""


class ParseError(HookAuditError):
    """Raised when a shell script cannot be parsed.

    Preserves the original bashlex error for debugging. An unparseable
    script must never be reported as "no findings", so callers either
    propagate this error or turn it into a failed audit.

    Args:
        message: Error description
        original_error: Original bashlex exception (optional)

    Example:
        >>> raise ParseError("Failed to parse shell script", original_error=err)
    """

    def __init__(
        self,
        message: str,
        original_error: Optional[Exception] = None,
        line: Optional[int] = None,
    ):
        """Initialize ParseError with message and optional original error.

        Args:
            message: Human-readable error description
            original_error: Original bashlex exception (preserved for debugging)
            line: Script line the parser stopped at, if known
        """
        self.message = message
        self.original_error = original_error
        self.line = line
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return string representation with location and original error if available."""
        text = self.message
        if self.line:
            text = f"{text} at line {self.line}"
        if self.original_error:
            text = f"{text} (original: {self.original_error})"
        return text


class ConfigurationError(HookAuditError):
    """Raised when configuration is invalid.

    Used for:
    - Invalid YAML syntax in a config file
    - Unknown trust level names
    - Values of the wrong type (e.g. a string where a list is expected)
    - An explicitly requested config file that does not exist

    Args:
        message: Error description
        file_path: Path to problematic config file (optional)
        line_number: Line number where error occurred (optional)

    Example:
        >>> raise ConfigurationError(
        ...     "Unknown trust level 'paranoid'",
        ...     file_path="config.yaml",
        ...     line_number=1
        ... )
    """

    def __init__(
        self,
        message: str,
        file_path: Optional[str] = None,
        line_number: Optional[int] = None,
    ):
        self.message = message
        self.file_path = file_path
        self.line_number = line_number
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with file/line context if available."""
        parts = [self.message]
        if self.file_path:
            parts.append(f"in file: {self.file_path}")
        if self.line_number:
            parts.append(f"at line: {self.line_number}")
        return " ".join(parts)

    def __str__(self) -> str:
        return self._format_message()


class ArchiveError(HookAuditError):
    """Raised when a package archive cannot be opened or has no install hook.

    Args:
        message: Error description
        archive_path: Path to the archive (optional)
    """

    def __init__(self, message: str, archive_path: Optional[str] = None):
        self.message = message
        self.archive_path = archive_path
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.archive_path:
            return f"{self.message}: {self.archive_path}"
        return self.message
