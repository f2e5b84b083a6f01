"""Mini README: Tests for the ephemeral sync code store.

A controllable clock drives expiry so TTL behaviour is checked without
sleeping, and a scripted random source exercises code collisions.
"""

from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone
from typing import Iterable, List

import pytest

from wealthtracker.sync import (
    CodeConflictError,
    CodeExpiredError,
    CodeNotFoundError,
    InvalidCodeFormatError,
    MissingPayloadError,
    SyncCodeStore,
    SyncInternalError,
    SyncValidationError,
)


class FakeClock:
    def __init__(self) -> None:
        self.now = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class ScriptedRandom:
    """Returns pre-arranged codes; repeats the last one when exhausted."""

    def __init__(self, values: Iterable[int]) -> None:
        self._values: List[int] = list(values)
        self.calls = 0

    def randint(self, low: int, high: int) -> int:
        assert (low, high) == (1000, 9999)
        value = self._values[min(self.calls, len(self._values) - 1)]
        self.calls += 1
        return value


def test_caller_supplied_code_round_trip() -> None:
    """Storing under "1234" and retrieving immediately returns the payload."""

    clock = FakeClock()
    store = SyncCodeStore(clock=clock)

    receipt = store.store({"x": 1}, code="1234")

    assert receipt.code == "1234"
    assert receipt.expires_at == clock.now + timedelta(seconds=3600)
    assert store.retrieve("1234") == {"x": 1}
    assert store.retrieve("1234") == {"x": 1}
    with pytest.raises(CodeNotFoundError):
        store.retrieve("9999")


def test_server_assigned_code_is_four_digits() -> None:
    store = SyncCodeStore(clock=FakeClock())
    payload = [{"id": 1, "date": "2024-03-01"}]

    receipt = store.store(payload)

    assert len(receipt.code) == 4
    assert 1000 <= int(receipt.code) <= 9999
    assert store.retrieve(receipt.code) == payload
    assert receipt.code in store


def test_expired_code_is_evicted_on_read() -> None:
    """After the TTL the first read reports expiry and later reads see nothing."""

    clock = FakeClock()
    store = SyncCodeStore(clock=clock)
    store.store({"x": 1}, code="4321")

    clock.advance(3599)
    assert store.retrieve("4321") == {"x": 1}

    clock.advance(1)
    with pytest.raises(CodeExpiredError):
        store.retrieve("4321")
    with pytest.raises(CodeNotFoundError):
        store.retrieve("4321")


def test_retrieval_does_not_extend_ttl() -> None:
    clock = FakeClock()
    store = SyncCodeStore(ttl_seconds=60, clock=clock)
    store.store("payload", code="1111")

    clock.advance(59)
    store.retrieve("1111")
    clock.advance(1)

    with pytest.raises(CodeExpiredError):
        store.retrieve("1111")


def test_conflicting_code_keeps_original_payload() -> None:
    store = SyncCodeStore(clock=FakeClock())
    store.store({"owner": "first"}, code="2468")

    with pytest.raises(CodeConflictError):
        store.store({"owner": "second"}, code="2468")

    assert store.retrieve("2468") == {"owner": "first"}


def test_expired_code_can_be_reused() -> None:
    clock = FakeClock()
    store = SyncCodeStore(clock=clock)
    store.store({"owner": "first"}, code="2468")
    clock.advance(3600)

    store.store({"owner": "second"}, code="2468")

    assert store.retrieve("2468") == {"owner": "second"}


@pytest.mark.parametrize("code", ["123", "12345", "abcd", "12a4", " 1234", "1234\n", 1234])
def test_invalid_code_format_is_rejected(code: object) -> None:
    store = SyncCodeStore(clock=FakeClock())

    with pytest.raises(InvalidCodeFormatError):
        store.store({"x": 1}, code=code)  # type: ignore[arg-type]
    assert len(store) == 0


@pytest.mark.parametrize("payload", [None, "", {}, []])
def test_missing_payload_is_rejected(payload: object) -> None:
    store = SyncCodeStore(clock=FakeClock())

    with pytest.raises(MissingPayloadError) as excinfo:
        store.store(payload, code="1234")

    assert isinstance(excinfo.value, SyncValidationError)
    assert "1234" not in store


def test_server_assigned_code_skips_live_codes() -> None:
    rng = ScriptedRandom([1234, 1234, 5678])
    store = SyncCodeStore(clock=FakeClock(), rng=rng)

    first = store.store({"n": 1})
    second = store.store({"n": 2})

    assert (first.code, second.code) == ("1234", "5678")
    assert store.retrieve("1234") == {"n": 1}


def test_code_allocation_gives_up_after_bounded_attempts() -> None:
    rng = ScriptedRandom([1234])
    store = SyncCodeStore(clock=FakeClock(), rng=rng, max_code_attempts=3)
    store.store({"n": 1})

    with pytest.raises(SyncInternalError):
        store.store({"n": 2})
    assert rng.calls == 4


def test_purge_expired_removes_only_stale_records() -> None:
    clock = FakeClock()
    store = SyncCodeStore(ttl_seconds=100, clock=clock)
    store.store("old", code="1000")
    clock.advance(50)
    store.store("new", code="2000")
    clock.advance(60)

    assert store.purge_expired() == 1
    assert len(store) == 1
    assert store.retrieve("2000") == "new"
    with pytest.raises(CodeNotFoundError):
        store.retrieve("1000")


def test_concurrent_stores_for_same_code_admit_one_winner() -> None:
    store = SyncCodeStore(clock=FakeClock())
    barrier = threading.Barrier(8)
    outcomes: List[str] = []
    lock = threading.Lock()

    def worker(index: int) -> None:
        barrier.wait()
        try:
            store.store({"writer": index}, code="7777")
            result = "stored"
        except CodeConflictError:
            result = "conflict"
        with lock:
            outcomes.append(result)

    threads = [threading.Thread(target=worker, args=(index,)) for index in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert outcomes.count("stored") == 1
    assert outcomes.count("conflict") == 7


def test_non_positive_ttl_is_rejected() -> None:
    with pytest.raises(ValueError):
        SyncCodeStore(ttl_seconds=0)


@pytest.mark.parametrize(
    "payload",
    [{"x": float("nan")}, [1, float("inf")], {"nested": [{"total": float("-inf")}]}],
)
def test_non_finite_numbers_are_rejected(payload: object) -> None:
    store = SyncCodeStore(clock=FakeClock())

    with pytest.raises(SyncValidationError):
        store.store(payload, code="1234")
    assert "1234" not in store
