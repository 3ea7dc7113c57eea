"""
Logging setup for the crawler.
"""

import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from .config import LoggingConfig


class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        if hasattr(record, 'extra_fields'):
            log_entry.update(record.extra_fields)

        return json.dumps(log_entry, ensure_ascii=False)


class CrawlerLogAdapter(logging.LoggerAdapter):
    """Logger adapter that attaches crawler context (worker name, URL) to records."""

    def __init__(self, logger: logging.Logger, extra: Optional[Dict[str, Any]] = None):
        super().__init__(logger, extra or {})

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        extra = kwargs.get('extra', {})
        fields = dict(self.extra)
        fields.update(extra.pop('extra_fields', {}))
        extra['extra_fields'] = fields
        kwargs['extra'] = extra
        return msg, kwargs

    def log_url_event(self, level: int, url: str, message: str, **kwargs):
        """Log an event about a single URL."""
        extra = kwargs.get('extra', {})
        extra['extra_fields'] = {'url': url, 'event_type': 'url_event'}
        kwargs['extra'] = extra
        self.log(level, message, **kwargs)


def setup_logging(config: LoggingConfig) -> logging.Logger:
    """
    Configure the root logger.

    Args:
        config: Logging configuration section

    Returns:
        Configured root logger
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, config.level.upper()))
    root_logger.handlers.clear()

    if config.json:
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(config.format)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if config.file:
        log_file = Path(config.file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=3,
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    for logger_name in ('aiohttp', 'asyncio', 'charset_normalizer'):
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    root_logger.debug(f"Logging configured: level={config.level} json={config.json} file={config.file}")
    return root_logger


def get_crawler_logger(name: str, **extra_context) -> CrawlerLogAdapter:
    """
    Get a logger that adds ``extra_context`` to every record.

    Args:
        name: Logger name
        **extra_context: Fields included in all log messages

    Returns:
        CrawlerLogAdapter instance
    """
    return CrawlerLogAdapter(logging.getLogger(name), extra_context)
