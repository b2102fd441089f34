"""
Logging for proxybid.

Every logger belongs to one of the package subsystems:

    config      configuration loading
    assets      native bank and token ledger transfers (assets.native, assets.token)
    auction     auction operations and event delivery (auction.events)
    directory   auction creation and lookup
    cli         command line runs

Each subsystem can get its own level, e.g. "assets=DEBUG,auction=WARNING"
to trace transfers while keeping auction chatter down. Console output is
colored; an optional plain-text file receives the same records.
"""

import logging
import sys
from pathlib import Path
from typing import Dict, Optional

import colorlog

ROOT = "proxybid"
SUBSYSTEMS = ("config", "assets", "auction", "directory", "cli")

LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}


def parse_subsystem_levels(text: str) -> Dict[str, int]:
    """
    Parse "subsystem=LEVEL" pairs separated by commas.

    Raises:
        ValueError: unknown subsystem or level name
    """
    levels: Dict[str, int] = {}
    for item in filter(None, (part.strip() for part in text.split(","))):
        subsystem, sep, level_name = item.partition("=")
        subsystem = subsystem.strip()
        if not sep or subsystem not in SUBSYSTEMS:
            raise ValueError(f"Bad log level override {item!r} (subsystems: {', '.join(SUBSYSTEMS)})")
        level = logging.getLevelName(level_name.strip().upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level {level_name!r} for {subsystem}")
        levels[subsystem] = level
    return levels


class ProxyBidLogger:
    """Owns the handlers of the proxybid logger tree"""

    _initialized = False
    _log_dir: Optional[Path] = None

    @classmethod
    def setup(
        cls,
        level: int = logging.INFO,
        log_dir: Optional[str] = None,
        log_to_file: bool = True,
        force: bool = False,
        subsystem_levels: Optional[Dict[str, int]] = None,
    ):
        """
        Setup logging configuration.

        Args:
            level: Default level of every subsystem
            log_dir: Directory for log files. If None, uses ./logs
            log_to_file: Whether to write logs to file
            force: Reconfigure even if already initialized
            subsystem_levels: subsystem -> level overriding `level`
        """
        if cls._initialized and not force:
            return

        overrides = subsystem_levels or {}
        if log_to_file:
            cls._log_dir = Path(log_dir) if log_dir else Path("logs")
            cls._log_dir.mkdir(parents=True, exist_ok=True)

        root_logger = logging.getLogger(ROOT)
        root_logger.setLevel(level)
        root_logger.handlers.clear()
        for subsystem in SUBSYSTEMS:
            # NOTSET defers to the root level
            logging.getLogger(f"{ROOT}.{subsystem}").setLevel(overrides.get(subsystem, logging.NOTSET))

        # Loggers filter; handlers pass whatever the most verbose subsystem lets through
        handler_level = min([level, *overrides.values()])

        console_handler = colorlog.StreamHandler(sys.stdout)
        console_handler.setLevel(handler_level)
        console_handler.setFormatter(colorlog.ColoredFormatter(
            "%(log_color)s%(asctime)s [%(name)s] %(levelname)-8s%(reset)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            log_colors=LOG_COLORS,
        ))
        root_logger.addHandler(console_handler)

        if log_to_file and cls._log_dir:
            file_handler = logging.FileHandler(cls._log_dir / "proxybid.log")
            file_handler.setLevel(handler_level)
            file_handler.setFormatter(logging.Formatter(
                "%(asctime)s [%(name)s] %(levelname)-8s %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            ))
            root_logger.addHandler(file_handler)

        cls._initialized = True

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """
        Get the logger of a subsystem or one of its parts.

        Args:
            name: Dotted name under a known subsystem ('auction', 'assets.token')

        Raises:
            ValueError: name is outside the known subsystems
        """
        if name.split(".", 1)[0] not in SUBSYSTEMS:
            raise ValueError(f"Unknown logging subsystem: {name}")

        # Library use never writes files unless setup() asked for it
        if not cls._initialized:
            cls.setup(log_to_file=False)

        return logging.getLogger(f"{ROOT}.{name}")


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a specific subsystem"""
    return ProxyBidLogger.get_logger(name)


def setup_logging(
    level: int = logging.INFO,
    log_dir: Optional[str] = None,
    log_to_file: bool = False,
    subsystem_levels: Optional[Dict[str, int]] = None,
):
    """Setup logging configuration (replaces any earlier setup)"""
    ProxyBidLogger.setup(
        level=level,
        log_dir=log_dir,
        log_to_file=log_to_file,
        force=True,
        subsystem_levels=subsystem_levels,
    )
