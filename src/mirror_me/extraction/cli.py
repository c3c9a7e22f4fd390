"""CLI command for extracting normalized records from export archives."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from mirror_me.common import ConfigLoader, ConfigurationError, MirrorMeError, setup_logging

from .config import APP_NAME, MirrorMeConfig
from .errors import InvalidArchiveFormat
from .orchestrator import extract_file
from .providers import Provider, get_rule_set
from .records import record_to_dict
from .storage import save_text_to_file
from .summary import summarize


async def _run(
    config: MirrorMeConfig,
    provider: Provider,
    archive: Path,
    include_summary: bool,
    save_name: Optional[str],
    skip_malformed_entries: bool,
) -> str:
    rule_set = get_rule_set(provider, config.providers)
    record = await extract_file(
        archive,
        rule_set,
        supported_extensions=config.extraction.supported_extensions,
        skip_malformed_entries=skip_malformed_entries,
    )

    output: Dict[str, Any] = {'provider': provider.value, 'record': record_to_dict(record)}
    if include_summary:
        output['summary'] = summarize(record)
    text = json.dumps(output, indent=2, ensure_ascii=False)

    if save_name:
        await save_text_to_file(save_name, text, Path(config.extraction.data_dir))
    return text


def extract_command(
    config: MirrorMeConfig,
    provider: Provider,
    archives: List[Path],
    include_summary: bool = False,
    save_name: Optional[str] = None,
    skip_malformed_override: Optional[bool] = None,
) -> int:
    """Extract a normalized record and print it as JSON.
    
    Args:
        config: Configuration object
        provider: Export provider
        archives: Archive paths; only the first one is used
        include_summary: Add summary statistics to the output
        save_name: Also save the output under this name in the data directory
        skip_malformed_override: Optional override for malformed entry handling
    
    Returns:
        Exit code (0 for success)
    """
    # Use __package__ to avoid __main__ when run as module
    logger_name = __package__ or __name__
    logger = logging.getLogger(logger_name)

    skip_malformed = (
        skip_malformed_override
        if skip_malformed_override is not None
        else config.extraction.skip_malformed_entries
    )

    archive = archives[0]
    if len(archives) > 1:
        logger.warning(f"Using {archive}, ignoring {len(archives) - 1} additional archive(s)")

    try:
        if not archive.is_file():
            logger.error(f"Archive does not exist: {archive}")
            return 1

        logger.info(f"Extracting {provider.value} data from {archive}")
        text = asyncio.run(_run(config, provider, archive, include_summary, save_name, skip_malformed))
        sys.stdout.write(text + "\n")
        return 0

    except InvalidArchiveFormat as e:
        logger.error(
            f"Invalid format: {archive} is not a valid archive ({e.message})",
            extra={"extra_fields": e.log_fields()},
        )
        return 1
    except MirrorMeError as e:
        logger.error(f"Extraction failed: {e.message}", extra={"extra_fields": e.log_fields()})
        return 1
    except Exception as e:
        logger.exception(f"Extraction failed: {e}")
        return 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for extract command."""
    parser = argparse.ArgumentParser(
        description="Extract normalized facts from a social-media data export archive"
    )
    parser.add_argument(
        "provider",
        choices=[p.value for p in Provider],
        help="Provider the archive was exported from"
    )
    parser.add_argument(
        "archives",
        type=Path,
        nargs="+",
        help="Export archive (only the first one is used)"
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config file (defaults.toml)"
    )
    parser.add_argument(
        "--summary",
        action="store_true",
        help="Include summary statistics in the output"
    )
    parser.add_argument(
        "--save",
        metavar="NAME",
        help="Also save the output as NAME in the data directory"
    )
    parser.add_argument(
        "--skip-malformed",
        action="store_true",
        help="Skip entries with malformed content instead of failing (overrides config)"
    )

    args = parser.parse_args(argv)

    loader = ConfigLoader(
        app_name=APP_NAME,
        config_class=MirrorMeConfig
    )

    try:
        config = loader.load(defaults_path=args.config)
    except ConfigurationError as e:
        setup_logging()
        logging.getLogger(__package__ or __name__).error(e.message)
        return 1

    setup_logging(**config.logging.setup_kwargs(app_name=APP_NAME))

    return extract_command(
        config=config,
        provider=Provider(args.provider),
        archives=args.archives,
        include_summary=args.summary,
        save_name=args.save,
        skip_malformed_override=True if args.skip_malformed else None,
    )


if __name__ == "__main__":
    sys.exit(main())
