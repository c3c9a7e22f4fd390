"""Path utilities for archive entry names."""

import unicodedata
from pathlib import PurePosixPath


def normalize_entry_path(path: str) -> str:
    """
    Normalize an archive entry path for consistent comparison.
    
    Applies:
    - Unicode NFC normalization (canonical composition)
    - Forward slash conversion (some archivers store backslash separators)
    
    Args:
        path: Entry path as stored in the archive
        
    Returns:
        Normalized path string with forward slashes and NFC Unicode normalization
        
    Examples:
        >>> normalize_entry_path("account\\\\comments.csv")
        'account/comments.csv'
    """
    normalized = unicodedata.normalize('NFC', path)
    return normalized.replace('\\', '/')


def entry_basename(path: str) -> str:
    """Return the last path segment of an entry, discarding any directory prefix."""
    # Backslash counts as a separator too, so Windows-built archives match rules
    return normalize_entry_path(path).rsplit('/', 1)[-1]


def entry_extension(path: str) -> str:
    """Return the lowercased extension of an entry's basename ('' when it has none)."""
    return PurePosixPath(entry_basename(path)).suffix.lower()
