"""Path variable expansion for configuration values."""

import os
import tempfile
from pathlib import Path
from typing import Dict, Optional

import platformdirs


def path_variables(app_name: Optional[str] = None) -> Dict[str, str]:
    """Named directories available as ``${NAME}`` in configured paths.

    The platform directories are scoped to ``app_name`` when one is given.
    """
    return {
        "USER_HOME": str(Path.home()),
        "USER_DATA": platformdirs.user_data_dir(app_name, appauthor=False),
        "USER_CONFIG": platformdirs.user_config_dir(app_name, appauthor=False),
        "USER_CACHE": platformdirs.user_cache_dir(app_name, appauthor=False),
        "USER_LOGS": platformdirs.user_log_dir(app_name, appauthor=False),
        "TEMP": tempfile.gettempdir(),
    }


def expand_path_variables(path: str, app_name: Optional[str] = None) -> str:
    """Expand ``${NAME}`` references in a configured path.

    Named directories from :func:`path_variables` are substituted first; any
    remaining ``${VAR}`` is looked up in the environment and left untouched
    when the variable is unset.

    >>> expand_path_variables("${TEMP}/exports") == f"{tempfile.gettempdir()}/exports"
    True
    """
    if not isinstance(path, str):
        return path

    for name, value in path_variables(app_name).items():
        path = path.replace(f"${{{name}}}", value)
    return os.path.expandvars(path)
