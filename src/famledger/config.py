"""Configuration management for famledger."""

import os
from dataclasses import dataclass
from typing import Optional

from famledger.domain.errors import InvalidInputError
from famledger.domain.locks import DEFAULT_MAX_ATTEMPTS

DEFAULT_USER = "me"
DEFAULT_CURRENCY = "INR"
DEFAULT_NOTIFY_TIMEOUT = 5.0


@dataclass
class Settings:
    """Runtime settings, normally read from FAMLEDGER_* environment variables."""

    db_path: Optional[str] = None
    user: str = DEFAULT_USER
    log_level: str = "WARNING"
    log_format: str = "standard"
    notify_webhook_url: Optional[str] = None
    notify_timeout: float = DEFAULT_NOTIFY_TIMEOUT
    max_conflict_retries: int = DEFAULT_MAX_ATTEMPTS
    currency: str = DEFAULT_CURRENCY

    @classmethod
    def from_env(cls) -> "Settings":
        """Create settings from environment variables."""
        try:
            timeout = float(os.getenv("FAMLEDGER_NOTIFY_TIMEOUT", str(DEFAULT_NOTIFY_TIMEOUT)))
            retries = int(os.getenv("FAMLEDGER_MAX_RETRIES", str(DEFAULT_MAX_ATTEMPTS)))
        except ValueError as e:
            raise InvalidInputError(f"Invalid numeric setting: {e}") from e
        if timeout <= 0:
            raise InvalidInputError("FAMLEDGER_NOTIFY_TIMEOUT must be positive")
        if retries < 1:
            raise InvalidInputError("FAMLEDGER_MAX_RETRIES must be at least 1")

        return cls(
            db_path=os.getenv("FAMLEDGER_DB_PATH") or None,
            user=os.getenv("FAMLEDGER_USER", DEFAULT_USER),
            log_level=os.getenv("FAMLEDGER_LOG_LEVEL", "WARNING").upper(),
            log_format=os.getenv("FAMLEDGER_LOG_FORMAT", "standard").lower(),
            notify_webhook_url=os.getenv("FAMLEDGER_NOTIFY_WEBHOOK_URL") or None,
            notify_timeout=timeout,
            max_conflict_retries=retries,
            currency=os.getenv("FAMLEDGER_CURRENCY", DEFAULT_CURRENCY).upper(),
        )
