"""Logging bootstrap for applications embedding pagefeed."""

import logging
import sys
from typing import Optional, TextIO

from pagefeed.config import Settings, settings as default_settings
from pagefeed.constants import JSON_LOG_FORMAT, TEXT_LOG_FORMAT, LogFormat


def configure_logging(
    settings: Optional[Settings] = None,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Configure root logging from settings.

    Args:
        settings: Settings to read level and format from (default: global settings)
        stream: Output stream (default: stderr)
    """
    settings = settings or default_settings

    logging.basicConfig(
        level=getattr(logging, settings.effective_log_level),
        format=TEXT_LOG_FORMAT
        if settings.log_format == LogFormat.TEXT
        else JSON_LOG_FORMAT,
        stream=stream or sys.stderr,
        force=True,
    )

    logging.getLogger(__name__).debug(
        f"Logging configured: level={settings.effective_log_level}, "
        f"format={settings.log_format.value}"
    )
