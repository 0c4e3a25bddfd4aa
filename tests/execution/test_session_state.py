"""
Tests for SessionState and the lock manager.
"""

import threading

import pytest

from apigate.core.errors import AsyncBusyError
from apigate.execution.concurrency import LockManager
from apigate.execution.session import NO_ACCESS, InstanceKey, LockKey, SessionState


class TestSessionState:
    def test_access_level_default_and_set(self):
        session = SessionState("s")
        assert session.get_access_level("api") == NO_ACCESS
        session.set_access_level("api", 2)
        assert session.get_access_level("api") == 2
        assert session.get_access_level("other") == NO_ACCESS

    def test_get_or_create_instance_once(self):
        session = SessionState("s")
        key = InstanceKey("api", dict)
        calls = []

        def factory():
            calls.append(1)
            return {"n": len(calls)}

        first = session.get_or_create_instance(key, factory)
        assert session.get_or_create_instance(key, factory) is first
        assert session.get_instance(key) is first
        assert len(calls) == 1

    def test_concurrent_first_creation_builds_one(self):
        session = SessionState("s")
        key = InstanceKey("api", object)
        barrier = threading.Barrier(8)
        results = []

        def worker():
            barrier.wait()
            results.append(session.get_or_create_instance(key, object))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(5)
        assert len({id(r) for r in results}) == 1

    def test_slow_factory_does_not_block_session(self):
        session = SessionState("s")
        key = InstanceKey("api", dict)
        started = threading.Event()
        release = threading.Event()
        built = []

        def slow_factory():
            started.set()
            release.wait(5)
            built.append(1)
            return {"slow": True}

        results = []
        builder = threading.Thread(target=lambda: results.append(session.get_or_create_instance(key, slow_factory)))
        builder.start()
        assert started.wait(5)

        reader = threading.Thread(target=lambda: session.get_access_level("api"))
        reader.start()
        reader.join(2)
        assert not reader.is_alive()

        other = session.get_or_create_instance(InstanceKey("api", list), list)
        assert other == []

        waiter = threading.Thread(target=lambda: results.append(session.get_or_create_instance(key, slow_factory)))
        waiter.start()
        release.set()
        builder.join(5)
        waiter.join(5)
        assert len(results) == 2
        assert results[0] is results[1]
        assert built == [1]

    def test_failed_factory_can_be_retried(self):
        session = SessionState("s")
        key = InstanceKey("api", dict)

        def failing():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            session.get_or_create_instance(key, failing)
        assert session.get_instance(key) is None
        assert session.get_or_create_instance(key, dict) == {}

    def test_keys_are_typed(self):
        assert InstanceKey("api", dict) == InstanceKey("api", dict)
        assert LockKey("api", "g") != LockKey("other", "g")

    def test_locks_cached(self):
        session = SessionState("s")
        assert session.get_or_create_lock(LockKey("api", "g")) is session.get_or_create_lock(LockKey("api", "g"))

    def test_attributes(self):
        session = SessionState("s")
        session.set_attribute("user", "ada")
        assert session.get_attribute("user") == "ada"
        session.remove_attribute("user")
        assert session.get_attribute("user", "none") == "none"

    def test_invalidate_drops_everything(self):
        session = SessionState("s")
        session.set_access_level("api", 1)
        session.get_or_create_instance(InstanceKey("api", dict), dict)
        session.invalidate()
        assert not session.is_valid
        assert session.get_access_level("api") == NO_ACCESS
        assert session.get_instance(InstanceKey("api", dict)) is None

    def test_idle_seconds(self):
        session = SessionState("s")
        session.last_accessed -= 10
        assert session.idle_seconds() >= 10
        session.touch()
        assert session.idle_seconds() < 10


class TestLockManager:
    def test_empty_group_means_no_lock(self):
        locks = LockManager("api")
        assert locks.get_lock(SessionState("s"), "") is None
        assert locks.try_acquire(SessionState("s"), "") is None

    def test_try_acquire_rejects_second(self):
        locks = LockManager("api")
        session = SessionState("s")
        lock = locks.try_acquire(session, "g")
        assert locks.is_locked(session, "g")
        with pytest.raises(AsyncBusyError) as exc_info:
            locks.try_acquire(session, "g")
        assert exc_info.value.context.lock_group == "g"
        assert exc_info.value.context.session_id == "s"
        lock.release()
        locks.try_acquire(session, "g").release()

    def test_groups_and_sessions_independent(self):
        locks = LockManager("api")
        session = SessionState("s")
        held = locks.try_acquire(session, "a")
        locks.try_acquire(session, "b").release()
        locks.try_acquire(SessionState("t"), "a").release()
        held.release()

    def test_scoped_by_owner(self):
        session = SessionState("s")
        held = LockManager("one").try_acquire(session, "g")
        LockManager("two").try_acquire(session, "g").release()
        held.release()

    def test_non_blocking(self):
        locks = LockManager("api")
        session = SessionState("s")
        held = locks.try_acquire(session, "g")
        outcome = []

        def contender():
            try:
                locks.try_acquire(session, "g")
            except AsyncBusyError:
                outcome.append("busy")

        t = threading.Thread(target=contender)
        t.start()
        t.join(2)
        assert not t.is_alive()
        assert outcome == ["busy"]
        held.release()
