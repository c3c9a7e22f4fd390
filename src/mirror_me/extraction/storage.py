"""Save text output under the configured data directory."""

import logging
from pathlib import Path

import aiofiles

from .errors import StorageError

logger = logging.getLogger(__name__)


async def save_text_to_file(name: str, content: str, data_dir: Path) -> Path:
    """
    Write text to ``data_dir/name``, creating the directory as needed.

    Args:
        name: Bare filename (no directory components)
        content: Text to write (UTF-8)
        data_dir: Target directory

    Returns:
        Path of the written file

    Raises:
        StorageError: If the name is not a bare filename or writing fails
    """
    if not name or name in ('.', '..') or Path(name).name != name or '\\' in name:
        raise StorageError(f"Not a bare filename: {name!r}", name=name)

    data_dir = Path(data_dir)
    target = data_dir / name
    try:
        data_dir.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(target, 'w', encoding='utf-8') as f:
            await f.write(content)
    except OSError as e:
        raise StorageError(f"Failed to save {target}: {e}", path=str(target)) from e

    logger.info(f"Saved {len(content)} characters to {target}")
    return target
