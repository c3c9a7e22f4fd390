"""Error hierarchy shared by every mirror_me package.

Each error carries a human-readable message plus keyword context (entry
name, provider, path, ...) that log calls attach as structured fields.
"""

from typing import Any, Dict


class MirrorMeError(Exception):
    """Root of all mirror_me errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = context

    def log_fields(self) -> Dict[str, Any]:
        """Structured log fields describing this error."""
        return {"error_type": type(self).__name__, **self.context}


class ConfigurationError(MirrorMeError):
    """Settings are missing, unreadable, or fail validation."""


class ParseError(MirrorMeError):
    """Text could not be parsed into structured content."""
