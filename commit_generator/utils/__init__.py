"""
Utility modules for Commit Generator.

This module contains logging setup and progress reporting.
"""

import sys
import logging
from datetime import datetime
from typing import Optional
from pathlib import Path

from ..exceptions import ConfigurationError
from ..security import SecureLogger
from ..ui import AnimatedSpinner, Colors

LOGGER_NAME = 'commit_generator'


class LoggingManager:
    """Manages logging configuration and secure logging with singleton pattern."""

    _instance = None
    _initialized = False

    def __new__(cls, log_path: str = ".commitLogs"):
        """Singleton pattern implementation."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, log_path: str = ".commitLogs"):
        """
        Initialize logging manager.

        Args:
            log_path: Directory for log files
        """
        if self._initialized:
            return

        self.log_path = Path(log_path)
        self.secure_logger = None
        self.console_handler = None
        self._setup_logging()
        self._initialized = True

    def _setup_logging(self) -> None:
        """Setup file and console handlers with log rotation."""
        try:
            self.log_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigurationError(f"Cannot create log directory {self.log_path}: {e}")

        log_file = self._get_log_file_path()

        logger = logging.getLogger(LOGGER_NAME)
        logger.setLevel(logging.DEBUG)
        logger.handlers.clear()

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(SafeFormatter(
            '%(asctime)s [%(levelname)s] %(name)s: %(message)s\nDetails: %(details)s\n',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))

        # Console handler writes to stderr; stdout is reserved for the message
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(ColoredFormatter('%(message)s'))

        logger.addHandler(file_handler)
        logger.addHandler(console_handler)

        self.secure_logger = SecureLogger(logger)
        self.logger = logger
        self.console_handler = console_handler

        self._cleanup_old_logs()

        self.logger.debug(
            f"Logging initialized - log file: {log_file}",
            extra={'details': 'System initialization'})

    def _get_log_file_path(self) -> Path:
        """Get current log file path with rotation."""
        current_date = datetime.now().strftime("%Y%m%d")
        log_file = self.log_path / f'commit_{current_date}.log'

        if log_file.exists():
            max_size = 10 * 1024 * 1024  # 10MB max per file
            if log_file.stat().st_size > max_size:
                timestamp = datetime.now().strftime("%H%M%S")
                log_file.rename(self.log_path / f'commit_{current_date}_{timestamp}.log')

        return log_file

    def _cleanup_old_logs(self) -> None:
        """Remove log files older than 30 days."""
        cutoff_date = datetime.now().timestamp() - (30 * 24 * 60 * 60)
        for log_file in self.log_path.glob('commit_*.log'):
            try:
                if log_file.stat().st_mtime < cutoff_date:
                    log_file.unlink()
                    self.logger.debug(f"Cleaned up old log file: {log_file}")
            except OSError as e:
                self.logger.debug(f"Log cleanup failed for {log_file}: {e}")

    def set_verbose(self, verbose: bool = True) -> None:
        """Show debug output on the console."""
        self.console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)

    def get_secure_logger(self) -> SecureLogger:
        """Get the secure logger wrapper."""
        return self.secure_logger


class SafeFormatter(logging.Formatter):
    """A logging formatter that safely handles missing 'details' field."""

    def format(self, record):
        if not hasattr(record, 'details'):
            record.details = 'No additional details'
        return super().format(record)


class ColoredFormatter(logging.Formatter):
    """Custom log formatter with color support for console output."""

    GREY = "\x1b[38;21m"
    BLUE = "\x1b[38;5;39m"
    YELLOW = "\x1b[38;5;226m"
    RED = "\x1b[38;5;196m"
    BOLD_RED = "\x1b[31;1m"
    RESET = "\x1b[0m"

    def __init__(self, fmt):
        super().__init__()
        self.fmt = fmt
        self.FORMATS = {
            logging.DEBUG: self.GREY + self.fmt + self.RESET,
            logging.INFO: self.BLUE + self.fmt + self.RESET,
            logging.WARNING: self.YELLOW + self.fmt + self.RESET,
            logging.ERROR: self.RED + self.fmt + self.RESET,
            logging.CRITICAL: self.BOLD_RED + self.fmt + self.RESET
        }

    def format(self, record):
        log_fmt = self.FORMATS.get(record.levelno)
        formatter = logging.Formatter(log_fmt)
        return formatter.format(record)


class ProgressManager:
    """Manages progress display and user feedback on stderr."""

    def __init__(self, quiet: bool = False):
        """
        Initialize progress manager.

        Args:
            quiet: Suppress everything except errors
        """
        self.quiet = quiet
        self.current_operation = None
        self.spinner = AnimatedSpinner()

    def _print(self, text: str) -> None:
        print(text, file=sys.stderr)

    def show_operation(self, operation: str) -> None:
        """Show current operation to user with spinner."""
        self.current_operation = operation
        if not self.quiet:
            self.spinner.start(operation)

    def show_success(self, message: str) -> None:
        if not self.quiet:
            self._print(Colors.colorize(f"✓ {message}", Colors.GREEN))

    def show_error(self, message: str) -> None:
        """Show error message; errors are shown even in quiet mode."""
        self.spinner.stop()
        self._print(Colors.colorize(f"Error: {message}", Colors.RED))

    def show_info(self, message: str) -> None:
        if not self.quiet:
            self._print(message)

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - ensures proper cleanup."""
        self.cleanup()

    def cleanup(self) -> None:
        """Stop any active spinner."""
        self.spinner.stop()
        self.current_operation = None
