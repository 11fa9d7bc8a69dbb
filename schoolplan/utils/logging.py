"""Log output for the planning service.

Production runs emit one ``key="value"`` line per record so that plan keys,
slot ids and retry attempts can be grepped; development keeps a readable
single-line format.
"""

import logging
import sys
from datetime import date, time
from typing import Any, Iterator, Optional, Tuple

from schoolplan.config import Settings, get_settings

# Levels applied to chatty libraries after the root logger is configured
QUIET_LOGGERS = {
    "uvicorn": logging.WARNING,
    "uvicorn.access": logging.WARNING,
    "uvicorn.error": logging.INFO,
    "sqlalchemy.engine": logging.WARNING,
    "alembic": logging.INFO,
    "aiosqlite": logging.WARNING,
    "asyncpg": logging.WARNING,
}

PLAIN_FORMAT = "%(asctime)s %(levelname)-7s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {
    "message",
    "asctime",
    "taskName",
}


def _render(value: Any) -> str:
    if isinstance(value, (date, time)):
        value = value.isoformat()
    return '"' + str(value).replace('"', '\\"') + '"'


def _flatten(name: str, value: Any) -> Iterator[Tuple[str, Any]]:
    """Expand nested dicts, e.g. a plan key, into dotted fields."""
    if isinstance(value, dict):
        for sub_name, sub_value in value.items():
            yield from _flatten(f"{name}.{sub_name}", sub_value)
    else:
        yield name, value


class StructuredFormatter(logging.Formatter):
    """One ``key="value"`` line per record.

    The fixed fields are ``time``, ``level``, ``logger`` and ``msg``; anything
    passed through ``extra`` follows, with dict values flattened into dotted
    names (``key.plan_date="2025-09-10"``) and dates in ISO form. Tracebacks
    go last under ``exc``.
    """

    def __init__(self, datefmt: Optional[str] = DATE_FORMAT) -> None:
        super().__init__(datefmt=datefmt)

    def format(self, record: logging.LogRecord) -> str:
        fields = [
            ("time", self.formatTime(record, self.datefmt)),
            ("level", record.levelname),
            ("logger", record.name),
            ("msg", record.getMessage()),
        ]
        for name, value in record.__dict__.items():
            if name in _RECORD_ATTRS or name.startswith("_"):
                continue
            fields.extend(_flatten(name, value))
        if record.exc_info:
            fields.append(("exc", self.formatException(record.exc_info)))

        return " ".join(f"{name}={_render(value)}" for name, value in fields)


def setup_logging(settings: Optional[Settings] = None) -> None:
    """Install a single stdout handler on the root logger.

    Production gets StructuredFormatter, other environments PLAIN_FORMAT.
    Levels from QUIET_LOGGERS are applied afterwards.
    """
    settings = settings or get_settings()

    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    root.setLevel(settings.LOG_LEVEL)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(settings.LOG_LEVEL)
    if settings.is_production:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT, datefmt=DATE_FORMAT))
    root.addHandler(handler)

    for name, level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(level)

    root.info(
        "Logging configured",
        extra={"log_level": settings.LOG_LEVEL, "environment": settings.ENVIRONMENT},
    )
