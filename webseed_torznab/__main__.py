# webseed_torznab/__main__.py

import argparse
from typing import Optional, Sequence

import uvicorn

from .app import create_app
from .config import DEFAULT_CONFIG_PATH, get_configuration, logger


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="webseed-torznab",
        description="Serve local .torrent files through a JSON API and a Torznab feed",
    )
    parser.add_argument(
        "directory",
        nargs="?",
        default=None,
        help="Directory containing .torrent files (overrides config and TORRENTS_DIR)",
    )
    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG_PATH,
        help="Path to the INI configuration file",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    """
    Main function to load the configuration and run the HTTP server.
    """
    args = parse_args(argv)
    logger.info("Starting WebSeed2Torznab...")

    config = get_configuration(args.config, args.directory)
    app = create_app(config)

    logger.info(f"Starting server on {config.host}:{config.port}")
    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
