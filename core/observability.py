"""
Observability module for structured logging, correlation IDs, and metrics.

Usage:
    from core.observability import setup_logging, get_logger, Timer

    # In app startup:
    setup_logging(level="INFO", json_format=False)

    # In modules:
    logger = get_logger(__name__)

    # Around an aggregation:
    with Timer("aggregate.fact_execution_alerts", logger=logger, record=True):
        rows = await cursor.to_list(None)
"""
import json
import logging
import time
import uuid
from collections import Counter, deque
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Deque, Dict, Optional

# Request correlation ID, set by the logging middleware
_correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)

# Attributes every LogRecord has; anything else came in through ``extra=``
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}

# Aggregations slower than this log at WARNING
SLOW_QUERY_MS = 1000

# Third-party loggers capped at WARNING unless include_libs is set
QUIET_LOGGERS = ("pymongo", "uvicorn.access", "watchfiles")


def get_correlation_id() -> Optional[str]:
    return _correlation_id.get()


def set_correlation_id(correlation_id: str) -> None:
    _correlation_id.set(correlation_id)


def generate_correlation_id() -> str:
    """Short random request ID (8 hex chars)."""
    return uuid.uuid4().hex[:8]


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        key: value for key, value in vars(record).items()
        if key not in _RECORD_ATTRS and not key.startswith("_")
    }


# ═══════════════════════════════════════════════════════════════════════════════
# FORMATTERS
# ═══════════════════════════════════════════════════════════════════════════════

class StructuredFormatter(logging.Formatter):
    """
    One JSON object per line.

    Keys: timestamp, level, logger, message, correlation_id (when set), any
    ``extra=`` fields, and exception (when logged with exc_info).
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        cid = get_correlation_id()
        if cid:
            entry["correlation_id"] = cid
        entry.update(_extra_fields(record))
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class HumanReadableFormatter(logging.Formatter):
    """
    Console formatter.

    Format: TIMESTAMP - LEVEL - LOGGER [CORRELATION_ID] - MESSAGE | {extras}
    """

    def format(self, record: logging.LogRecord) -> str:
        cid = get_correlation_id()
        stamp = datetime.fromtimestamp(record.created, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        logger_part = f"{record.name} [{cid}]" if cid else record.name
        line = f"{stamp} - {record.levelname:8} - {logger_part} - {record.getMessage()}"

        extras = _extra_fields(record)
        if extras:
            line = f"{line} | {extras}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def setup_logging(
    level: str = "INFO",
    json_format: bool = False,
    include_libs: bool = False
) -> None:
    """
    Install a single stream handler on the root logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: JSON lines instead of the console format
        include_libs: Keep third-party loggers at the root level
    """
    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter() if json_format else HumanReadableFormatter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not include_libs:
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


# ═══════════════════════════════════════════════════════════════════════════════
# TIMING
# ═══════════════════════════════════════════════════════════════════════════════

class Timer:
    """
    Context manager measuring wall time in milliseconds.

    With a logger the duration is logged on exit, at WARNING once it passes
    ``SLOW_QUERY_MS``. With ``record=True`` the sample is also added to the
    global metrics under the timer's name.
    """

    def __init__(self, name: str, logger: Optional[logging.Logger] = None, record: bool = False):
        self.name = name
        self.logger = logger
        self.record = record
        self.elapsed_ms: float = 0.0
        self._started: float = 0.0

    def __enter__(self) -> "Timer":
        self._started = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.elapsed_ms = (time.perf_counter() - self._started) * 1000
        if self.record:
            metrics.record_timing(self.name, self.elapsed_ms)
        if self.logger:
            slow = self.elapsed_ms > SLOW_QUERY_MS
            self.logger.log(
                logging.WARNING if slow else logging.DEBUG,
                f"{self.name} completed",
                extra={"duration_ms": round(self.elapsed_ms, 2), "slow": slow, "failed": exc_type is not None},
            )


# ═══════════════════════════════════════════════════════════════════════════════
# METRICS COLLECTOR (in-memory, per process)
# ═══════════════════════════════════════════════════════════════════════════════

def _percentile(ordered: list, fraction: float) -> float:
    return ordered[min(len(ordered) - 1, int(len(ordered) * fraction))]


class MetricsCollector:
    """
    Request counts per endpoint, error counts per type and the latest
    ``max_samples`` durations per timed operation.
    """

    def __init__(self, max_samples: int = 100):
        self._max_samples = max_samples
        self._requests: Counter = Counter()
        self._errors: Counter = Counter()
        self._timings: Dict[str, Deque[float]] = {}

    def record_request(self, endpoint: str) -> None:
        self._requests[endpoint] += 1

    def record_error(self, error_type: str) -> None:
        self._errors[error_type] += 1

    def record_timing(self, operation: str, duration_ms: float) -> None:
        if operation not in self._timings:
            self._timings[operation] = deque(maxlen=self._max_samples)
        self._timings[operation].append(duration_ms)

    def _summarize(self, samples: Deque[float]) -> Dict[str, Any]:
        ordered = sorted(samples)
        return {
            "count": len(ordered),
            "avg_ms": round(sum(ordered) / len(ordered), 2),
            "min_ms": round(ordered[0], 2),
            "max_ms": round(ordered[-1], 2),
            "p50_ms": round(_percentile(ordered, 0.5), 2),
            # p95 is noise below 20 samples
            "p95_ms": round(_percentile(ordered, 0.95), 2) if len(ordered) >= 20 else None,
        }

    def get_stats(self) -> Dict[str, Any]:
        """Snapshot of every counter and timing summary."""
        return {
            "requests": dict(self._requests),
            "errors": dict(self._errors),
            "timing": {
                operation: self._summarize(samples)
                for operation, samples in self._timings.items()
                if samples
            },
        }

    def reset(self) -> None:
        self._requests.clear()
        self._errors.clear()
        self._timings.clear()


# Global metrics instance
metrics = MetricsCollector()
