"""Unified logging configuration for the render CLI and worker threads.

Provides:
    - Console and optional file handler
    - JSON line output mode for log ingestion
    - Contextual fields (app, worker) prefixed to every record
    - Warning capture (Python warnings → logging)

Public API:
    setup_logging(log_level="INFO", log_file=None, json=False, context={"app": "maketargets"})
    push_context(worker=3)
    pop_context(keys=["worker"])

Format examples:
    Human: 2026-10-17T13:45:12.345Z | INFO     | app=maketargets worker=3 | Wrote tv_rings_010.png
    JSON: {"t":"2026-10-17T13:45:12.345+00:00","lvl":"INFO","worker":3,"msg":"..."}

Context uses contextvars, so each worker thread carries its own fields.
Idempotent: repeated setup_logging() calls don't duplicate handlers.
"""

import contextvars
import json
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

_context_var = contextvars.ContextVar('logging_context', default={})

_configured = False

_LEVEL_COLORS = {
    'DEBUG': '\033[36m',
    'INFO': '\033[32m',
    'WARNING': '\033[33m',
    'ERROR': '\033[31m',
    'CRITICAL': '\033[35m',
}
_RESET = '\033[0m'


class ContextFormatter(logging.Formatter):
    """Formatter that prefixes records with the current context fields.

    Parameters
    ----------
    fmt_mode : str
        "human" or "json"
    use_color : bool
        ANSI level colors (only when stderr is a TTY)
    """

    def __init__(self, fmt_mode: str = "human", use_color: bool = True):
        super().__init__()
        self.fmt_mode = fmt_mode
        self.use_color = use_color and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        context = _context_var.get({})
        ts = datetime.fromtimestamp(record.created, tz=timezone.utc)
        if self.fmt_mode == "json":
            return self._format_json(record, ts, context)
        return self._format_human(record, ts, context)

    def _format_json(self, record: logging.LogRecord, ts: datetime, context: dict) -> str:
        log_dict = {
            't': ts.isoformat(),
            'lvl': record.levelname,
            'name': record.name,
            'pid': os.getpid(),
            'thread': record.threadName,
            'msg': record.getMessage(),
        }
        log_dict.update(context)
        if record.exc_info:
            log_dict['exc'] = self.formatException(record.exc_info)
        return json.dumps(log_dict)

    def _format_human(self, record: logging.LogRecord, ts: datetime, context: dict) -> str:
        ts_str = ts.strftime('%Y-%m-%dT%H:%M:%S.%f')[:-3] + 'Z'

        level = f"{record.levelname:8s}"
        if self.use_color:
            level = f"{_LEVEL_COLORS.get(record.levelname, '')}{level}{_RESET}"

        parts = [ts_str, '|', level, '|']
        if context:
            parts.append(' '.join(f"{k}={v}" for k, v in context.items()))
            parts.append('|')
        parts.append(record.getMessage())

        line = ' '.join(parts)
        if record.exc_info:
            line += '\n' + self.formatException(record.exc_info)
        return line


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    *,
    json: bool = False,
    color: bool = True,
    to_stderr: bool = True,
    capture_warnings: bool = True,
    context: Optional[Dict[str, Any]] = None,
) -> List[logging.Handler]:
    """Configure root logger (idempotent).

    Parameters
    ----------
    log_level : str
        "DEBUG", "INFO", "WARNING", "ERROR" or "CRITICAL"
    log_file : str, optional
        Log file path; None for no file logging
    json : bool
        JSON line format on the file handler, default False
    color : bool
        ANSI colors in console output, default True
    to_stderr : bool
        Log to stderr, default True
    capture_warnings : bool
        Route Python warnings to logging, default True
    context : dict, optional
        Initial contextual fields (e.g., {"app": "maketargets"})

    Returns
    -------
    list[logging.Handler]
        Handlers installed on the root logger
    """
    global _configured

    root = logging.getLogger()
    if _configured:
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()

    root.setLevel(getattr(logging, log_level.upper()))

    handlers: List[logging.Handler] = []
    if to_stderr:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(ContextFormatter("json" if json else "human", color))
        handlers.append(console_handler)

    if log_file:
        handlers.append(_create_file_handler(log_file, json))

    for handler in handlers:
        root.addHandler(handler)

    if context:
        push_context(**context)

    if capture_warnings:
        logging.captureWarnings(True)

    _configured = True
    return handlers


def _create_file_handler(log_file: str, json_format: bool) -> logging.Handler:
    """Create an uncolored file handler, creating parent directories."""
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(log_file)
    handler.setFormatter(ContextFormatter("json" if json_format else "human", use_color=False))
    return handler


def push_context(**kwargs) -> None:
    """Add contextual fields to all subsequent log records of this context.

    Examples
    --------
    >>> push_context(app="maketargets")
    >>> push_context(worker=3)
    >>> logger.info("Wrote tv_rings_010.png")  # → "... | app=maketargets worker=3 | ..."
    """
    current = _context_var.get({})
    _context_var.set({**current, **kwargs})


def pop_context(keys: Optional[List[str]] = None) -> None:
    """Remove contextual fields; all of them when ``keys`` is None."""
    if keys is None:
        _context_var.set({})
        return
    current = dict(_context_var.get({}))
    for key in keys:
        current.pop(key, None)
    _context_var.set(current)


def get_context() -> Dict[str, Any]:
    """Return a copy of the current contextual fields."""
    return dict(_context_var.get({}))


def shutdown() -> None:
    """Flush and close all handlers (call at the end of main())."""
    logging.shutdown()
