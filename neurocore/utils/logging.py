"""
Logging Setup - Root logger and plugin logger configuration

Core modules log under their module names (``neurocore.*``). Every plugin
gets a child of ``neurocore.plugin`` named after its id, so plugin output
can be tuned separately from the core through ``plugin_level``.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from ..config.models import LogLevel

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
PLUGIN_LOGGER_NAME = "neurocore.plugin"


def plugin_logger(plugin_id: str) -> logging.Logger:
    """Logger handed to a plugin through its options"""
    return logging.getLogger(f"{PLUGIN_LOGGER_NAME}.{plugin_id}")


def _archive_name(log_file: Path) -> Path:
    stamp = datetime.fromtimestamp(log_file.stat().st_mtime).strftime("%Y%m%d_%H%M%S")
    return log_file.with_name(f"{log_file.stem}_{stamp}{log_file.suffix}")


def _rotate_log_file(log_file: Path) -> Optional[Path]:
    """
    Move a previous run's log aside, named after its last write time.

    Returns:
        The archived path, or None if there was nothing to move
    """
    if not log_file.exists():
        return None

    archived = _archive_name(log_file)
    try:
        log_file.replace(archived)
    except OSError as e:
        # Logging is not configured yet
        print(f"Warning: could not archive log file {log_file}: {e}", file=sys.stderr)
        return None
    return archived


class UTF8StreamHandler(logging.StreamHandler):
    """Console handler writing UTF-8 regardless of the terminal's locale encoding"""

    def emit(self, record):
        try:
            text = self.format(record) + self.terminator
            buffer = getattr(self.stream, 'buffer', None)
            if buffer is None:
                self.stream.write(text)
            else:
                buffer.write(text.encode('utf-8'))
            self.flush()
        except Exception:
            self.handleError(record)


def setup_logging(
    level: LogLevel = LogLevel.INFO,
    log_file: Optional[Path] = None,
    enable_console: bool = True,
    plugin_level: Optional[LogLevel] = None,
) -> None:
    """
    Configure the root logger for a NeuroCore process.

    Args:
        level: Root logging level
        log_file: Optional log file; an existing file is archived first
        enable_console: Log to stderr, keeping stdout for command output
        plugin_level: Level for plugin loggers; None inherits ``level``
    """
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        if isinstance(handler, logging.FileHandler):
            handler.close()
    root.setLevel(level.value)

    formatter = logging.Formatter(LOG_FORMAT)

    if enable_console:
        console = UTF8StreamHandler(sys.stderr)
        console.setFormatter(formatter)
        root.addHandler(console)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        archived = _rotate_log_file(log_file)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
        if archived is not None:
            logging.getLogger(__name__).info(f"Previous log archived to {archived}")

    plugins = logging.getLogger(PLUGIN_LOGGER_NAME)
    plugins.setLevel(plugin_level.value if plugin_level else logging.NOTSET)
