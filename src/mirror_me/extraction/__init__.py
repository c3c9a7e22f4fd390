"""Extraction of normalized records from data-export archives."""

from .archive import ArchiveEntry, DecodedEntry, read_archive
from .config import MirrorMeConfig, ExtractionConfig, ProvidersConfig, RedditFiles, InstagramFiles
from .errors import (
    ArchiveError, InvalidArchiveFormat, EntryDecodeError, EntryParseError,
    UnknownProviderError, StorageError,
)
from .orchestrator import extract, extract_file
from .providers import Provider, get_rule_set
from .records import RedditRecord, InstagramRecord, record_to_dict
from .summary import summarize

__all__ = [
    'ArchiveEntry',
    'DecodedEntry',
    'read_archive',
    'MirrorMeConfig',
    'ExtractionConfig',
    'ProvidersConfig',
    'RedditFiles',
    'InstagramFiles',
    'ArchiveError',
    'InvalidArchiveFormat',
    'EntryDecodeError',
    'EntryParseError',
    'UnknownProviderError',
    'StorageError',
    'extract',
    'extract_file',
    'Provider',
    'get_rule_set',
    'RedditRecord',
    'InstagramRecord',
    'record_to_dict',
    'summarize',
]
