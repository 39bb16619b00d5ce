"""Logging configuration for famledger.

Every record carries the user the command acts for. Ledger services attach
the ids of the records they touch through ``extra`` (for example
``logger.info("...", extra={"loan_id": 3})``); the JSON format emits those
ids as fields and the standard format appends them to the message.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Optional

# Record attributes that identify ledger entities.
CONTEXT_FIELDS = (
    "household_id",
    "account_id",
    "transaction_id",
    "loan_id",
    "payment_id",
    "recurring_id",
    "budget_id",
    "goal_id",
    "bill_id",
)

ANONYMOUS = "-"


class UserContextFilter(logging.Filter):
    """Stamp records with the acting user unless a caller already set one."""

    def __init__(self, user: Optional[str] = None):
        super().__init__()
        self.user = user or ANONYMOUS

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "user"):
            record.user = self.user
        return True


def entity_context(record: logging.LogRecord) -> dict[str, Any]:
    """Entity ids attached to a record, in CONTEXT_FIELDS order."""
    return {
        name: getattr(record, name)
        for name in CONTEXT_FIELDS
        if getattr(record, name, None) is not None
    }


class LedgerFormatter(logging.Formatter):
    """Plain text format with the user and any entity ids."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s | %(levelname)-8s | %(user)s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "user"):
            record.user = ANONYMOUS
        line = super().format(record)
        context = entity_context(record)
        if context:
            line += " [" + " ".join(f"{key}={value}" for key, value in context.items()) + "]"
        return line


class JsonFormatter(logging.Formatter):
    """One JSON object per record, entity ids as top-level fields."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "user": getattr(record, "user", ANONYMOUS),
            "message": record.getMessage(),
        }
        log_data.update(entity_context(record))
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data, default=str)


def setup_logging(
    level: str = "WARNING", format_type: str = "standard", user: Optional[str] = None
) -> None:
    """Configure logging for famledger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: "standard" or "json"
        user: User stamped on every record
    """
    log_level = getattr(logging, level.upper(), logging.WARNING)
    formatter: logging.Formatter = JsonFormatter() if format_type == "json" else LedgerFormatter()

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # stderr keeps command output on stdout clean
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(UserContextFilter(user))
    root_logger.addHandler(console_handler)

    logging.getLogger("famledger").setLevel(log_level)

    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
