import json, logging, sys, threading, time

_RESERVED = (
    "msg", "args", "exc_info", "exc_text", "stack_info", "stack_level", "created",
    "msecs", "relativeCreated", "levelno", "levelname", "pathname", "filename",
    "module", "lineno", "funcName", "thread", "threadName", "processName", "process",
    "taskName", "name",
)

class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(record.created)),
            "level": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        # Allow extra fields via record.__dict__ (filtered)
        for k, v in record.__dict__.items():
            if k in _RESERVED:
                continue
            try:
                json.dumps({k: v})
                payload[k] = v
            except (TypeError, ValueError):
                payload[k] = str(v)
        return json.dumps(payload)

def get_logger(name: str = "agentcheck") -> logging.Logger:
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    logger.setLevel(logging.INFO)
    h = logging.StreamHandler(sys.stdout)
    h.setFormatter(JsonFormatter())
    logger.addHandler(h)
    logger.propagate = False
    return logger


def set_level(level: str, logger: logging.Logger | None = None) -> None:
    """Apply a level name such as ``"DEBUG"`` to the agent logger."""

    (logger or get_logger()).setLevel(level.upper())

# Very small metrics hook (no deps); counters are bumped from handler threads
class Counter:
    def __init__(self):
        self.value = 0
        self._lock = threading.Lock()
    def inc(self, n: int = 1):
        with self._lock:
            self.value += n

class Metrics:
    def __init__(self):
        self.counters = {}
        self._lock = threading.Lock()
    def counter(self, name: str) -> Counter:
        with self._lock:
            return self.counters.setdefault(name, Counter())
    def snapshot(self) -> dict:
        with self._lock:
            return {name: c.value for name, c in self.counters.items()}

METRICS = Metrics()
