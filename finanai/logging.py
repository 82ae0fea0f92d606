"""Logging setup and company-scoped loggers for finanai."""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

# Context keys, in the order they are rendered in plain-text logs
CONTEXT_KEYS = ("company_id", "series", "transaction_id")

# Client libraries that log every request at INFO/DEBUG
NOISY_LOGGERS = ("confluent_kafka", "psycopg", "faker")


def setup_logging(level: str = "INFO", format_type: str = "standard") -> None:
    """Route all logs to stdout as plain text or one JSON object per line.

    Parameters
    ----------
    level : str
        Level name for the root and ``finanai`` loggers; unknown names fall
        back to INFO.
    format_type : str
        ``"standard"`` or ``"json"``.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    if format_type == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(log_level)
    logging.getLogger("finanai").setLevel(log_level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


class CompanyLogger(logging.LoggerAdapter):
    """Logger bound to a company and, optionally, a series or transaction.

    Plain-text output gets a ``[company_id=... series=...]`` prefix; the
    same values are attached to the record as ``context`` for
    ``JsonFormatter``.
    """

    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        context = {k: self.extra[k] for k in CONTEXT_KEYS if self.extra.get(k) is not None}
        if not context:
            return msg, kwargs
        kwargs.setdefault("extra", {})["context"] = context
        prefix = " ".join(f"{k}={v}" for k, v in context.items())
        return f"[{prefix}] {msg}", kwargs


def company_logger(name: str, company_id: str, **context: Any) -> CompanyLogger:
    """Return ``name``'s logger bound to ``company_id`` and extra context.

    Examples
    --------
    >>> log = company_logger(__name__, "comp-1", series="Aluguel_rec")
    >>> log.warning("Projection failed: %s", err)  # doctest: +SKIP
    """
    return CompanyLogger(logging.getLogger(name), {"company_id": company_id, **context})


class JsonFormatter(logging.Formatter):
    """One JSON object per record, with company context as top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        data.update(getattr(record, "context", {}))
        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)
        return json.dumps(data, default=str)
