"""Common utilities for mirror_me packages."""

from .config import ConfigLoader
from .config_utils import expand_path_variables
from .logging import setup_logging, get_logger, LogContext
from .logging_config import LoggingConfig
from .errors import MirrorMeError, ConfigurationError, ParseError
from .path_utils import normalize_entry_path, entry_basename, entry_extension

__all__ = [
    'ConfigLoader',
    'LoggingConfig',
    'expand_path_variables',
    'setup_logging',
    'get_logger',
    'LogContext',
    'MirrorMeError',
    'ConfigurationError',
    'ParseError',
    'normalize_entry_path',
    'entry_basename',
    'entry_extension',
]
