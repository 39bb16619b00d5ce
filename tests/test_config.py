"""Tests for settings and logging setup."""

import json
import logging

import pytest

from famledger.config import Settings
from famledger.domain.errors import InvalidInputError
from famledger.logging import JsonFormatter, LedgerFormatter, UserContextFilter, setup_logging


def test_settings_defaults(monkeypatch):
    for name in (
        "FAMLEDGER_DB_PATH",
        "FAMLEDGER_USER",
        "FAMLEDGER_LOG_LEVEL",
        "FAMLEDGER_NOTIFY_WEBHOOK_URL",
        "FAMLEDGER_MAX_RETRIES",
        "FAMLEDGER_CURRENCY",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = Settings.from_env()

    assert settings.db_path is None
    assert settings.user == "me"
    assert settings.log_level == "WARNING"
    assert settings.notify_webhook_url is None
    assert settings.max_conflict_retries == 3
    assert settings.currency == "INR"


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("FAMLEDGER_USER", "asha")
    monkeypatch.setenv("FAMLEDGER_LOG_LEVEL", "debug")
    monkeypatch.setenv("FAMLEDGER_NOTIFY_WEBHOOK_URL", "https://hooks.example.test/x")
    monkeypatch.setenv("FAMLEDGER_MAX_RETRIES", "5")
    monkeypatch.setenv("FAMLEDGER_CURRENCY", "usd")

    settings = Settings.from_env()

    assert settings.user == "asha"
    assert settings.log_level == "DEBUG"
    assert settings.notify_webhook_url == "https://hooks.example.test/x"
    assert settings.max_conflict_retries == 5
    assert settings.currency == "USD"


@pytest.mark.parametrize(
    "name,value",
    [
        ("FAMLEDGER_MAX_RETRIES", "many"),
        ("FAMLEDGER_MAX_RETRIES", "0"),
        ("FAMLEDGER_NOTIFY_TIMEOUT", "-1"),
    ],
)
def test_settings_reject_bad_numbers(monkeypatch, name, value):
    monkeypatch.setenv(name, value)

    with pytest.raises(InvalidInputError):
        Settings.from_env()


def test_setup_logging_levels():
    setup_logging("INFO")

    assert logging.getLogger().level == logging.INFO
    assert logging.getLogger("famledger").level == logging.INFO
    assert logging.getLogger("sqlalchemy").level == logging.WARNING


def test_json_formatter():
    record = logging.LogRecord("famledger.domain.loan", logging.INFO, __file__, 1, "Paid %s", ("EMI",), None)

    data = json.loads(JsonFormatter().format(record))

    assert data["level"] == "INFO"
    assert data["logger"] == "famledger.domain.loan"
    assert data["message"] == "Paid EMI"


def test_setup_logging_stamps_user():
    setup_logging("INFO", user="asha")

    handler = logging.getLogger().handlers[-1]
    record = logging.LogRecord("famledger.domain.loan", logging.INFO, __file__, 1, "Created", (), None)
    assert handler.filter(record)
    assert record.user == "asha"
    assert "| asha |" in handler.format(record)


def test_json_formatter_includes_user_and_entity_ids():
    record = logging.LogRecord("famledger.domain.loan", logging.INFO, __file__, 1, "Paid", (), None)
    UserContextFilter("ravi").filter(record)
    record.loan_id = 3
    record.payment_id = 11

    data = json.loads(JsonFormatter().format(record))

    assert data["user"] == "ravi"
    assert data["loan_id"] == 3
    assert data["payment_id"] == 11
    assert "goal_id" not in data


def test_ledger_formatter_appends_entity_ids():
    record = logging.LogRecord("famledger.domain.goal", logging.INFO, __file__, 1, "Contributed", (), None)
    record.goal_id = 5

    line = LedgerFormatter().format(record)

    assert "| - | famledger.domain.goal | Contributed [goal_id=5]" in line


def test_user_filter_keeps_explicit_user():
    record = logging.LogRecord("famledger", logging.INFO, __file__, 1, "x", (), None)
    record.user = "meera"

    UserContextFilter("asha").filter(record)

    assert record.user == "meera"
