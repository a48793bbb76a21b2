import logging
import json
import sys
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Dict

# (event, data) -> None. Injected into the pipeline instead of printing.
ProgressCallback = Callable[[str, Dict[str, Any]], None]


def _default(value: Any) -> Any:
    # Decimals as strings, never floats
    if isinstance(value, Decimal):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class JSONFormatter(logging.Formatter):
    """
    Formatter that outputs JSON strings for structured logging.
    """
    def format(self, record: logging.LogRecord) -> str:
        log_record = {
            "timestamp": datetime.now().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # logger.info("msg", extra={"event": "signatures_page"})
        if hasattr(record, "event"):
            log_record["event"] = record.event

        if hasattr(record, "wallet"):
            log_record["wallet"] = record.wallet

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_record, default=_default)


def get_logger(name: str, level=logging.INFO) -> logging.Logger:
    """
    Returns a logger configured with JSON formatting.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Check if handler already exists to avoid duplicates
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)

    return logger


def log_event(logger: logging.Logger, event: str, data: Dict[str, Any], level=logging.INFO):
    """
    Log a structured event. data is merged into the JSON payload.
    """
    payload = {
        "event": event,
        **data
    }
    logger.log(level, json.dumps(payload, default=_default))


_progress_logger = logging.getLogger("wallet_pnl.progress")


def log_progress(event: str, data: Dict[str, Any]) -> None:
    """Default progress sink: forwards pipeline progress to the structured log."""
    log_event(_progress_logger, event, data)
