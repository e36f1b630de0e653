"""Logging configuration for the topic taxonomy resolver."""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from typing import ClassVar

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme


@dataclass
class LoggerConfig:
    """Configuration for rich logger options."""

    show_time: bool = True
    show_path: bool = False
    rich_tracebacks: bool = True
    console: Console | None = None


class TaxonomyLogger:
    """Logger factory sharing RichHandlers between resolver loggers.

    Handlers and consoles are cached per configuration, so creating a logger
    for every module does not create a handler per module.
    """

    # AIDEV-NOTE: Topics and templates are highlighted as strings, placeholders stand out in magenta
    _THEME = Theme(
        {
            "logging.level.debug": "cyan",
            "logging.level.info": "green",
            "logging.level.warning": "yellow",
            "logging.level.error": "red bold",
            "logging.level.critical": "red on white bold",
            "logging.keyword": "bold blue",
            "logging.string": "magenta",
            "repr.path": "magenta",
        }
    )

    DEFAULT_FORMAT: ClassVar[str] = "[bold blue]%(name)s[/bold blue] - %(message)s"

    _handler_cache: ClassVar[dict[str, RichHandler]] = {}
    _console_cache: ClassVar[dict[str, Console]] = {}
    _cache_lock: ClassVar[threading.Lock] = threading.Lock()

    @classmethod
    def get_logger(
        cls,
        name: str,
        level: int | None = None,
        config: LoggerConfig | None = None,
        format_string: str | None = None,
    ) -> logging.Logger:
        """Create a logger writing through a shared RichHandler.

        Args:
            name: Logger name (typically __name__ from calling module)
            level: Optional log level override, defaults to LOG_LEVEL env var or INFO
            config: Optional LoggerConfig instance for rich formatting options
            format_string: Optional custom format string for the logger

        Returns:
            Configured logger

        Environment Variables:
            LOG_LEVEL: Sets default log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            RICH_NO_COLOR: Set to disable colored output
        """
        if level is None:
            env_level = os.getenv("LOG_LEVEL", "INFO").upper()
            level = getattr(logging, env_level, logging.INFO)

        config = config or LoggerConfig()
        format_string = format_string or cls.DEFAULT_FORMAT

        logger = logging.getLogger(name)
        logger.setLevel(level)

        if not logger.handlers:
            logger.addHandler(cls._get_cached_handler(config, level, format_string))

        return logger

    @classmethod
    def _get_cached_handler(cls, config: LoggerConfig, level: int, format_string: str) -> RichHandler:
        console_key = cls._console_key(config)
        handler_key = (
            f"{console_key}_{level}_{hash(format_string)}_"
            f"{config.show_time}_{config.show_path}_{config.rich_tracebacks}"
        )

        with cls._cache_lock:
            if handler_key not in cls._handler_cache:
                handler = RichHandler(
                    console=cls._get_console(config, console_key),
                    show_time=config.show_time,
                    show_path=config.show_path,
                    rich_tracebacks=config.rich_tracebacks,
                    tracebacks_show_locals=level <= logging.DEBUG,
                    markup=True,
                )
                handler.setFormatter(logging.Formatter(fmt=format_string, datefmt="[%X]"))
                cls._handler_cache[handler_key] = handler

            return cls._handler_cache[handler_key]

    @classmethod
    def _get_console(cls, config: LoggerConfig, console_key: str) -> Console:
        # Caller holds _cache_lock
        if config.console is not None:
            return config.console

        if console_key not in cls._console_cache:
            cls._console_cache[console_key] = Console(
                theme=cls._THEME,
                no_color=os.getenv("RICH_NO_COLOR") is not None,
            )
        return cls._console_cache[console_key]

    @classmethod
    def _console_key(cls, config: LoggerConfig) -> str:
        if config.console is not None:
            return f"custom_console_{id(config.console)}"
        return f"default_console_{os.getenv('RICH_NO_COLOR', 'None')}"

    @classmethod
    def clear_cache(cls) -> None:
        """Drop all cached handlers and consoles."""
        with cls._cache_lock:
            cls._handler_cache.clear()
            cls._console_cache.clear()

    @classmethod
    def get_cache_stats(cls) -> dict[str, int]:
        with cls._cache_lock:
            return {
                "handlers_cached": len(cls._handler_cache),
                "consoles_cached": len(cls._console_cache),
            }
