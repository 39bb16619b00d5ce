"""Tests for per-entity locks and conflict retries."""

import threading

import pytest

from famledger.domain.errors import ConcurrencyConflictError
from famledger.domain.locks import KeyedLocks, retry_on_conflict


def test_lock_is_dropped_after_release():
    locks = KeyedLocks()

    with locks.hold(1):
        with locks.hold(2):
            assert len(locks) == 2
        assert len(locks) == 1

    assert len(locks) == 0


def test_lock_is_dropped_when_block_raises():
    locks = KeyedLocks()

    with pytest.raises(RuntimeError):
        with locks.hold("loan-7"):
            raise RuntimeError("boom")

    assert len(locks) == 0


def test_many_keys_do_not_accumulate():
    locks = KeyedLocks()

    for loan_id in range(1000):
        with locks.hold(loan_id):
            pass

    assert len(locks) == 0


def test_same_key_is_serialized():
    locks = KeyedLocks()
    counter = {"value": 0}
    inside = []

    def work():
        for _ in range(200):
            with locks.hold(42):
                inside.append(1)
                assert len(inside) == 1
                counter["value"] += 1
                inside.pop()

    threads = [threading.Thread(target=work) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert counter["value"] == 800
    assert len(locks) == 0


def test_retry_on_conflict_returns_after_conflicts():
    calls = []

    def operation():
        calls.append(1)
        if len(calls) < 3:
            raise ConcurrencyConflictError("Loan 1 was modified concurrently (expected version 1)")
        return "done"

    assert retry_on_conflict(operation, "Loan", 1, max_attempts=3) == "done"
    assert len(calls) == 3


def test_retry_on_conflict_gives_up():
    def operation():
        raise ConcurrencyConflictError("Loan 1 was modified concurrently (expected version 1)")

    with pytest.raises(ConcurrencyConflictError, match="after 2 conflicting attempts"):
        retry_on_conflict(operation, "Loan", 1, max_attempts=2)
