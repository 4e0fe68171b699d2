"""Main application entry point for the Klipper Prometheus exporter."""

import argparse
import logging
import sys
from typing import List, Optional

import uvicorn

from .config.loader import ConfigLoader
from .config.models import ExporterConfig
from .config.settings import Settings
from .server import create_app
from .utils.logger import TRACE, setup_logger


class ExporterApp:
    """
    Exporter application.

    Loads configuration, sets up logging and serves the probe endpoint.
    Any configuration error exits the process.
    """

    def __init__(self, args: argparse.Namespace):
        """
        Initialize exporter application.

        Args:
            args: Parsed command-line arguments
        """
        self.args = args
        self.config = self._load_config()
        self.logger = self._setup_logging()
        self.app = create_app(self.config, self.logger)

    def _load_config(self) -> ExporterConfig:
        """
        Load and validate configuration.

        Returns:
            ExporterConfig: Loaded configuration

        Raises:
            SystemExit: If configuration is invalid
        """
        overrides = {
            "logging_level": self.args.logging_level,
            "api_key": self.args.api_key,
            "listen_address": self.args.listen_address,
            "upstream_timeout": self.args.timeout,
            "debug": self.args.debug or None,
            "verbose": self.args.verbose or None,
        }
        try:
            return ConfigLoader.load(self.args.config_file, overrides)

        except FileNotFoundError:
            logging.error(f"Configuration file not found: {self.args.config_file}")
            sys.exit(1)

        except Exception as e:
            logging.error(f"Failed to load configuration: {e}")
            sys.exit(1)

    def _setup_logging(self) -> logging.Logger:
        """Apply the configured level, honouring the deprecated -debug and -verbose flags."""
        logger = setup_logger("klipper_exporter", self.config.logging_level)

        # TODO remove with the -debug and -verbose options
        if self.config.debug:
            logger.warning("-debug option is deprecated, change to using '-logging.level debug'")
            logger.setLevel(logging.DEBUG)
        if self.config.verbose:
            logger.warning("-verbose option is deprecated, change to using '-logging.level trace'")
            logger.setLevel(TRACE)

        return logger

    def serve(self) -> None:
        """Serve until interrupted. A bind failure exits the process."""
        self.logger.info(f"Beginning to serve on port {self.config.listen_address}")
        uvicorn.run(
            self.app,
            host=self.config.host,
            port=self.config.port,
            log_level=logging.getLevelName(self.logger.level).lower()
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="klipper-exporter",
        description="Prometheus exporter for Klipper printers via the Moonraker API"
    )

    # Defaults live in ExporterConfig so a config file can supply them
    parser.add_argument(
        '--logging.level', '-logging.level',
        dest='logging_level',
        default=None,
        help='Logging output level. Set to one of Trace, Debug, Info, Warning, '
             'Error, Fatal, or Panic (default: Info or LOG_LEVEL env var)'
    )
    parser.add_argument(
        '--moonraker.apikey', '-moonraker.apikey',
        dest='api_key',
        default=None,
        help='API Key to authenticate with the Klipper APIs.'
    )
    parser.add_argument(
        '--moonraker.timeout', '-moonraker.timeout',
        dest='timeout',
        type=float,
        default=None,
        help='Timeout in seconds for Moonraker requests (default: none)'
    )
    parser.add_argument(
        '--web.listen-address', '-web.listen-address',
        dest='listen_address',
        default=None,
        help='Address on which to expose metrics and web interface (default: :9101).'
    )
    parser.add_argument(
        '--config.file', '-config.file',
        dest='config_file',
        default=None,
        help='Optional YAML configuration file'
    )
    parser.add_argument(
        '--debug', '-debug',
        action='store_true',
        help='(Deprecated) Enable debug logging. Use --logging.level instead.'
    )
    parser.add_argument(
        '--verbose', '-verbose',
        action='store_true',
        help='(Deprecated) Enable verbose trace level logging. Use --logging.level instead.'
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """
    CLI entry point.

    Parses command-line arguments and starts the exporter.
    """
    args = build_parser().parse_args(argv)
    if args.logging_level is None:
        args.logging_level = Settings().LOG_LEVEL or None

    ExporterApp(args).serve()


if __name__ == '__main__':
    main()
