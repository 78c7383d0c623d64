"""Client configuration: defaults, environment overrides, command line."""

import argparse
import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_SERVER_URL = "localhost:22"
DEFAULT_REMOTE_ROOT = "/"
DEFAULT_CONNECT_TIMEOUT = 15.0  # seconds
DEFAULT_LOG_LEVEL = "INFO"
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]

ENV_PREFIX = "DUALPANE_"


def _default_local_root() -> str:
    return str(Path.home())


@dataclass
class ClientConfig:
    """Settings for one client run."""

    server_url: str = DEFAULT_SERVER_URL
    local_root: str = field(default_factory=_default_local_root)
    remote_root: str = DEFAULT_REMOTE_ROOT
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    log_level: str = DEFAULT_LOG_LEVEL
    auto_connect: bool = False

    @classmethod
    def from_env(cls, environ=None) -> "ClientConfig":
        """Build a config from ``DUALPANE_*`` environment variables."""
        env = os.environ if environ is None else environ
        config = cls()
        config.server_url = env.get(ENV_PREFIX + "SERVER_URL", config.server_url)
        config.local_root = env.get(ENV_PREFIX + "LOCAL_ROOT", config.local_root)
        config.remote_root = env.get(ENV_PREFIX + "REMOTE_ROOT", config.remote_root)
        config.log_level = env.get(ENV_PREFIX + "LOG_LEVEL", config.log_level).upper()
        if config.log_level not in LOG_LEVELS:
            raise ValueError(
                f"{ENV_PREFIX}LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}: {config.log_level!r}"
            )
        timeout = env.get(ENV_PREFIX + "CONNECT_TIMEOUT")
        if timeout:
            try:
                config.connect_timeout = float(timeout)
            except ValueError:
                raise ValueError(f"{ENV_PREFIX}CONNECT_TIMEOUT is not a number: {timeout!r}")
        return config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dualpane",
        description="Browse local and remote files side by side and upload them.",
    )
    parser.add_argument("--server", dest="server_url", help="server address, e.g. user@host:22")
    parser.add_argument("--local-root", help="directory shown as / in the local pane")
    parser.add_argument("--remote-root", help="server directory shown as / in the remote pane")
    parser.add_argument("--timeout", dest="connect_timeout", type=float, help="connect timeout in seconds")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        help="logging verbosity",
    )
    parser.add_argument(
        "--connect", dest="auto_connect", action="store_true", help="connect on startup"
    )
    return parser


def parse_args(argv=None, environ=None) -> ClientConfig:
    """Environment values first, then command-line flags on top."""
    config = ClientConfig.from_env(environ)
    args = build_parser().parse_args(argv)
    for name, value in vars(args).items():
        if value is not None and value is not False:
            setattr(config, name, value)
    return config
