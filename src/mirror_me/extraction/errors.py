"""Extraction-specific errors."""

from mirror_me.common import MirrorMeError, ConfigurationError, ParseError


class ArchiveError(MirrorMeError):
    """Archive processing failed."""
    pass


class InvalidArchiveFormat(ArchiveError):
    """Supplied bytes cannot be opened as a valid archive."""
    pass


class EntryDecodeError(ArchiveError):
    """An archive entry could not be read from the archive."""
    pass


class EntryParseError(ParseError):
    """An archive entry holds malformed structured text."""
    pass


class UnknownProviderError(ConfigurationError):
    """No rule set is registered for the requested provider."""
    pass


class StorageError(MirrorMeError):
    """Saving output locally failed."""
    pass
