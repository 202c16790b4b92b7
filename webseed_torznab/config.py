# webseed_torznab/config.py

import configparser
import logging
import os
import sys
from dataclasses import dataclass
from typing import Mapping

# --- Constants ---
TORRENT_EXTENSION = ".torrent"
TORRENT_MIME_TYPE = "application/x-bittorrent"
DEFAULT_CONFIG_PATH = "config.ini"
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080
DEFAULT_TORRENTS_DIR = "./torrents"
DEFAULT_TITLE = "WebSeed2Torznab"
DEFAULT_DESCRIPTION = "Local torrent files with web seeds"
DEFAULT_MAX_RESULTS = 100
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")

# Setup basic logging
logging.basicConfig(
    level=logging.INFO,
    format="[%(asctime)s] [%(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


@dataclass(frozen=True)
class ServerConfig:
    """Resolved runtime settings for the HTTP service.

    Attributes:
        torrents_dir: Directory scanned for ``.torrent`` files.
        host: Interface the HTTP server binds to.
        port: TCP port the HTTP server listens on.
        base_url: Public URL prefix used when building download links.
        title: Channel/server title shown in Torznab responses.
        description: Channel description shown in Torznab responses.
        max_results: Upper bound for the Torznab ``limit`` parameter.
        log_level: Name of the root logging level.
    """

    torrents_dir: str = DEFAULT_TORRENTS_DIR
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    base_url: str = f"http://localhost:{DEFAULT_PORT}"
    title: str = DEFAULT_TITLE
    description: str = DEFAULT_DESCRIPTION
    max_results: int = DEFAULT_MAX_RESULTS
    log_level: str = "INFO"


def load_configuration(
    config_path: str = DEFAULT_CONFIG_PATH,
    torrents_dir: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> ServerConfig:
    """
    Builds a ServerConfig from the INI file, the environment and the CLI.

    Precedence, lowest to highest: built-in defaults, ``config_path``,
    environment variables (PORT, BASE_URL, TORRENTS_DIR, LOG_LEVEL) and
    finally the explicit ``torrents_dir`` argument. A missing INI file is
    not an error. Invalid values raise ValueError.
    """
    env = os.environ if environ is None else environ

    parser = configparser.ConfigParser()
    if os.path.exists(config_path):
        with open(config_path, encoding="utf-8") as f:
            parser.read_file(f)
        logger.info(f"[CONFIG] Loaded configuration file '{config_path}'.")
    else:
        logger.info(
            f"[CONFIG] Configuration file '{config_path}' not found. Using defaults."
        )

    host = parser.get("server", "host", fallback=DEFAULT_HOST).strip()
    port = _parse_int(
        env.get("PORT") or parser.get("server", "port", fallback=str(DEFAULT_PORT)),
        "port",
    )
    if not 0 < port < 65536:
        raise ValueError(f"'port' must be between 1 and 65535, got {port}.")

    base_url = env.get("BASE_URL") or parser.get("server", "base_url", fallback="")
    base_url = base_url.strip().rstrip("/") or f"http://localhost:{port}"

    directory = (
        torrents_dir
        or env.get("TORRENTS_DIR")
        or parser.get("torrents", "directory", fallback=DEFAULT_TORRENTS_DIR)
    )
    directory = os.path.expanduser(directory.strip())

    max_results = _parse_int(
        parser.get("torznab", "max_results", fallback=str(DEFAULT_MAX_RESULTS)),
        "max_results",
    )
    if max_results < 1:
        raise ValueError(f"'max_results' must be positive, got {max_results}.")

    log_level = (
        env.get("LOG_LEVEL") or parser.get("logging", "level", fallback="INFO")
    ).strip().upper()
    if log_level not in LOG_LEVELS:
        raise ValueError(
            f"Unknown log level '{log_level}'. Expected one of {', '.join(LOG_LEVELS)}."
        )

    config = ServerConfig(
        torrents_dir=directory,
        host=host,
        port=port,
        base_url=base_url,
        title=parser.get("torznab", "title", fallback=DEFAULT_TITLE).strip(),
        description=parser.get(
            "torznab", "description", fallback=DEFAULT_DESCRIPTION
        ).strip(),
        max_results=max_results,
        log_level=log_level,
    )
    logger.info(f"[CONFIG] Resolved torrents directory: {config.torrents_dir}")
    logger.info(f"[CONFIG] Resolved base URL: {config.base_url}")
    return config


def get_configuration(
    config_path: str = DEFAULT_CONFIG_PATH, torrents_dir: str | None = None
) -> ServerConfig:
    """
    Loads the configuration for the service entry point, exiting with a
    critical log message when the configuration is invalid.
    """
    try:
        config = load_configuration(config_path, torrents_dir)
    except (ValueError, configparser.Error) as e:
        logger.critical(f"Invalid configuration in '{config_path}': {e}")
        sys.exit(1)

    logging.getLogger().setLevel(config.log_level)
    return config


def _parse_int(raw: str, key: str) -> int:
    """Helper to convert a configuration value to int with a readable error."""
    try:
        return int(str(raw).strip())
    except ValueError:
        raise ValueError(f"'{key}' must be an integer, got '{raw}'.")
