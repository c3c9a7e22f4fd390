"""``mirror-me-server``: serve the ingestion API with uvicorn."""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from .common import ConfigLoader, ConfigurationError, get_logger, setup_logging
from .extraction.config import APP_NAME, APIConfig, MirrorMeConfig


def load_server_config(args: argparse.Namespace) -> MirrorMeConfig:
    """Load configuration and apply command line host/port overrides.

    Raises:
        ConfigurationError: If configuration cannot be loaded or the
            overrides are invalid
    """
    config = ConfigLoader(app_name=APP_NAME, config_class=MirrorMeConfig).load(defaults_path=args.config)
    overrides = {key: value for key, value in (("host", args.host), ("port", args.port)) if value is not None}
    if not overrides:
        return config
    try:
        api = APIConfig.model_validate({**config.api.model_dump(), **overrides})
    except ValidationError as e:
        raise ConfigurationError(f"Invalid server option: {e}", **overrides) from e
    return config.model_copy(update={"api": api})


def main(argv: Optional[List[str]] = None) -> int:
    """Run the API server until interrupted."""
    parser = argparse.ArgumentParser(description="Serve the mirror-me archive ingestion API")
    parser.add_argument("--config", type=Path, help="Path to config file (defaults.toml)")
    parser.add_argument("--host", help="Bind address (overrides api.host)")
    parser.add_argument("--port", type=int, help="Port (overrides api.port)")
    args = parser.parse_args(argv)

    try:
        config = load_server_config(args)
    except ConfigurationError as e:
        setup_logging()
        get_logger(__name__).error(e.message)
        return 1

    setup_logging(**config.logging.setup_kwargs(app_name=APP_NAME))
    logger = get_logger(__name__)

    from .api.server import create_app
    import uvicorn

    logger.info(
        f"Serving on http://{config.api.host}:{config.api.port}/api",
        extra={"extra_fields": {"host": config.api.host, "port": config.api.port}},
    )
    try:
        # log_config=None keeps the handlers installed by setup_logging
        uvicorn.run(create_app(config), host=config.api.host, port=config.api.port, log_config=None)
    except KeyboardInterrupt:
        logger.info("Server interrupted")
    except Exception:
        logger.exception("Server failed")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
