"""Logging setup for the post-processor: colored console output, optional rotating log file."""

import logging
import logging.handlers
import time
from typing import Any, Dict, Optional

import colorlog

LOGGER_NAME = 'onenote_md_exporter'

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

LOG_COLORS = {
    'DEBUG': 'cyan',
    'INFO': 'green',
    'WARNING': 'yellow',
    'ERROR': 'red',
    'CRITICAL': 'red,bg_white',
}


def _resolve_level(verbosity: int, level: Optional[str]) -> int:
    """Explicit level name wins; otherwise 0=WARNING, 1=INFO, 2+=DEBUG."""
    if level:
        return getattr(logging, level.upper())
    if verbosity >= 2:
        return logging.DEBUG
    return logging.INFO if verbosity == 1 else logging.WARNING


def setup_logging(
    verbosity: int = 0,
    log_file: Optional[str] = None,
    level: Optional[str] = None
) -> logging.Logger:
    """
    Configure the package logger, replacing any handlers from a previous call.

    Args:
        verbosity: Count of -v flags
        log_file: Optional path of a rotating log file
        level: Optional level name, already validated by ConfigLoader

    Returns:
        The 'onenote_md_exporter' logger
    """
    log_level = _resolve_level(verbosity, level)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)
    logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(colorlog.ColoredFormatter(
        fmt='%(log_color)s' + LOG_FORMAT,
        datefmt=DATE_FORMAT,
        log_colors=LOG_COLORS
    ))
    logger.addHandler(console_handler)

    if not log_file:
        return logger

    try:
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding='utf-8'
        )
    except OSError as e:
        logger.warning(f"Cannot write log file '{log_file}': {e}")
        return logger

    file_handler.setLevel(log_level)
    file_handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(file_handler)
    logger.info(f"Logging to file: {log_file}")

    return logger


class ProgressTracker:
    """Counts processed input pages and logs a summary when the batch ends."""

    def __init__(self, total_items: int, item_type: str = "pages"):
        self.total_items = total_items
        self.item_type = item_type
        self.successful_items = 0
        self.failed_items = 0
        self.start_time: Optional[float] = None
        self.logger = logging.getLogger(LOGGER_NAME)

    def __enter__(self) -> 'ProgressTracker':
        self.start_time = time.time()
        self.logger.info(f"Post-processing {self.total_items} {self.item_type}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.start_time is None:
            return

        if self.failed_items and self.failed_items == self.total_items:
            log_method = self.logger.error
        elif self.failed_items:
            log_method = self.logger.warning
        else:
            log_method = self.logger.info

        log_method(
            f"{self.item_type.capitalize()}: {self.successful_items} written, "
            f"{self.failed_items} failed, of {self.total_items} "
            f"in {self._format_elapsed(time.time() - self.start_time)}"
        )

    def increment(self, success: bool = True) -> None:
        """Record one finished item; failures and every tenth item are logged."""
        if success:
            self.successful_items += 1
        else:
            self.failed_items += 1

        done = self.successful_items + self.failed_items
        if done % 10 == 0 or not success:
            self.logger.info(
                f"{done}/{self.total_items} {self.item_type} done "
                f"({'ok' if success else 'failed'})"
            )

    @staticmethod
    def _format_elapsed(seconds: float) -> str:
        if seconds < 60:
            return f"{seconds:.1f}s"
        minutes, seconds = divmod(int(seconds), 60)
        if minutes < 60:
            return f"{minutes}m {seconds}s"
        hours, minutes = divmod(minutes, 60)
        return f"{hours}h {minutes}m {seconds}s"


def log_section(title: str) -> None:
    """Log a banner line pair around an upper-cased title."""
    logger = logging.getLogger(LOGGER_NAME)
    separator = "=" * 60
    logger.info(separator)
    logger.info(f"  {title.upper()}")
    logger.info(separator)


def log_config(config: Dict[str, Any]) -> None:
    """Log the effective post-processing configuration."""
    logger = logging.getLogger(LOGGER_NAME)
    post_processing = config.get('post_processing', {})
    export_settings = config.get('export', {})

    log_section("Configuration")
    logger.info(f"Debug: {config.get('debug', False)}")
    logger.info(f"Image Extraction: {post_processing.get('md_img_ref', True)}")
    logger.info(f"Remove Quotation Blocks: {post_processing.get('remove_quotation_blocks', True)}")
    logger.info(f"Remove Consecutive Linebreaks: {post_processing.get('remove_consecutive_linebreaks', True)}")
    logger.info(f"Remove Page Header: {post_processing.get('remove_onenote_header', True)}")
    logger.info(f"Resource Folder: {export_settings.get('resource_folder_name', 'resources')}")
    logger.info(f"Absolute Attachment References: {export_settings.get('absolute_attachment_ref', False)}")
    logger.info(f"Pandoc: {config.get('converter', {}).get('pandoc_path', 'pandoc')}")


__all__ = [
    'setup_logging',
    'ProgressTracker',
    'log_section',
    'log_config'
]
