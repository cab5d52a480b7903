"""JSON-lines sink for the store's structlog events.

Library modules log through ``structlog.get_logger(__name__)`` with keyword fields
and never configure anything themselves. ``setup_structured_logging`` routes those
events through stdlib ``logging`` into a background queue, one JSON object per line::

    {"event": "store_migration_started", "level": "info",
     "logger": "valuestore.codec.versioned", "location": "cat.json", ...}
"""

from __future__ import annotations

import atexit
import json
import logging
import logging.handlers
import queue
import sys
import threading
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Final

import structlog

ROOT_LOGGER_NAME: Final[str] = "valuestore"

# Attributes every LogRecord carries; anything else arrived via ``extra``.
_RECORD_ATTRIBUTES: Final[frozenset[str]] = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime"}

_active_lock = threading.Lock()
_active: LoggingHandle | None = None
_atexit_registered = False


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Where store events go and how much of them.

    ``rotate_bytes`` switches the file sink to size-based rotation keeping
    ``backup_count`` old files.
    """

    log_path: Path | str | None = None
    level: int | str = "INFO"
    log_to_stdout: bool = True
    queue_size: int = 4096
    rotate_bytes: int | None = None
    backup_count: int = 3


class _DroppingQueueHandler(logging.handlers.QueueHandler):
    """Never blocks the caller: records arriving at a full queue are counted and dropped."""

    def __init__(self, log_queue: queue.Queue[logging.LogRecord]) -> None:
        super().__init__(log_queue)
        self.dropped = 0

    def enqueue(self, record: logging.LogRecord) -> None:
        try:
            self.queue.put_nowait(record)
        except queue.Full:
            self.dropped += 1


class _EventLineFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        line: dict[str, object] = {
            "event": record.getMessage(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC)
            .isoformat(timespec="milliseconds")
            .replace("+00:00", "Z"),
        }
        for key, value in vars(record).items():
            if key in _RECORD_ATTRIBUTES or key.startswith("_"):
                continue
            line.setdefault(key, value)
        if record.exc_info is not None:
            line["exception"] = self.formatException(record.exc_info)
        return json.dumps(line, sort_keys=True, ensure_ascii=False, default=str)


class LoggingHandle:
    """An installed logging setup; ``shutdown`` drains pending lines and detaches it."""

    def __init__(
        self,
        logger: logging.Logger,
        queue_handler: _DroppingQueueHandler,
        listener: logging.handlers.QueueListener,
        sinks: tuple[logging.Handler, ...],
    ) -> None:
        self._logger = logger
        self._queue_handler = queue_handler
        self._listener = listener
        self._sinks = sinks
        self._closed = False

    @property
    def dropped_records(self) -> int:
        return self._queue_handler.dropped

    @property
    def closed(self) -> bool:
        return self._closed

    def shutdown(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._listener.stop()
        self._logger.removeHandler(self._queue_handler)
        for sink in self._sinks:
            sink.close()
        structlog.reset_defaults()


def setup_structured_logging(config: LoggingConfig | None = None) -> LoggingHandle:
    """Install JSON-lines logging for ``valuestore.*``, replacing any earlier setup."""
    global _active, _atexit_registered

    resolved = config if config is not None else LoggingConfig()
    level = _parse_level(resolved.level)
    if resolved.queue_size <= 0:
        raise ValueError("queue_size must be > 0")

    shutdown_logging()

    formatter = _EventLineFormatter()
    sinks = _build_sinks(resolved)
    for sink in sinks:
        sink.setFormatter(formatter)

    log_queue: queue.Queue[logging.LogRecord] = queue.Queue(maxsize=resolved.queue_size)
    queue_handler = _DroppingQueueHandler(log_queue)
    listener = logging.handlers.QueueListener(log_queue, *sinks)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False
    logger.addHandler(queue_handler)
    listener.start()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.format_exc_info,
            structlog.stdlib.render_to_log_kwargs,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handle = LoggingHandle(logger, queue_handler, listener, sinks)
    with _active_lock:
        _active = handle
        if not _atexit_registered:
            atexit.register(shutdown_logging)
            _atexit_registered = True
    return handle


def shutdown_logging() -> None:
    """Flush and remove the active setup, if any."""
    global _active

    with _active_lock:
        handle, _active = _active, None
    if handle is not None:
        handle.shutdown()


def _build_sinks(config: LoggingConfig) -> tuple[logging.Handler, ...]:
    sinks: list[logging.Handler] = []
    if config.log_path is not None:
        path = Path(config.log_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        if config.rotate_bytes is not None:
            sinks.append(
                logging.handlers.RotatingFileHandler(
                    path,
                    maxBytes=max(1, config.rotate_bytes),
                    backupCount=max(1, config.backup_count),
                    encoding="utf-8",
                )
            )
        else:
            sinks.append(logging.FileHandler(path, encoding="utf-8"))
    if config.log_to_stdout:
        sinks.append(logging.StreamHandler(sys.stdout))
    return tuple(sinks)


def _parse_level(value: int | str) -> int:
    if isinstance(value, int):
        return value
    level = logging.getLevelName(value.strip().upper())
    if not isinstance(level, int):
        raise ValueError(f"unsupported logging level {value!r}")
    return level


__all__ = [
    "LoggingConfig",
    "LoggingHandle",
    "ROOT_LOGGER_NAME",
    "setup_structured_logging",
    "shutdown_logging",
]
