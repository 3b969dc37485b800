"""
Exception classes for radiotag.

Parsing problems never surface as exceptions: an absent tag or a malformed
frame degrades to "no data" inside the parser. The classes below cover the
failures that do cross module boundaries.

Exception Hierarchy:
    RadioTagError (base)
        ConfigError - Configuration file or value issues
        MetadataError - A decoded metadata record is unusable
        CatalogError - Station/upcoming-song catalog issues
"""

from typing import Any, Dict, Optional


class RadioTagError(Exception):
    """
    Base exception for all radiotag errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (segment, URL, ...).

    Example:
        try:
            # some operation
        except RadioTagError as e:
            logger.error(f"Operation failed: {e.message}")
            if e.details:
                logger.debug(f"Details: {e.details}")
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error description that will be shown to the user.
            details: Optional dictionary containing additional context about the error.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigError(RadioTagError):
    """
    Raised when a configuration value cannot be used.

    This is a CRITICAL error for the CLI, which reports it and exits.

    Example:
        raise ConfigError(
            "Missing station id",
            details={'hint': 'pass STATION_ID or set RADIOTAG_STATION_ID'}
        )
    """
    pass


class MetadataError(RadioTagError):
    """
    Raised when the frames of one tag burst do not form a usable record.

    This is a NON-CRITICAL error: the scheduler discards the record and keeps
    the songs that are already queued.

    Common causes:
        - TIME or TXXX frame does not hold a JSON object
        - TLEN is not a number
        - Mandatory frames (TIME, TXXX) missing from the burst
    """
    pass


class CatalogError(RadioTagError):
    """
    Raised when the station catalog cannot be reached or answers garbage.

    NON-CRITICAL for the scheduler: the upcoming list is left as it is and
    the refill is retried on the next low-water trigger.

    Attributes:
        is_response_error: True when the server answered but the payload was
                           unusable, False for transport/status failures.
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        is_response_error: bool = False
    ) -> None:
        super().__init__(message, details)
        self.is_response_error = is_response_error
