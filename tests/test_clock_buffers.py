import threading

import pytest

from intent_system.coordinator import RingBuffer, SessionClock


class TestSessionClock:
    def test_timestamps_strictly_increase(self):
        clock = SessionClock()
        stamps = [clock.now_ms() for _ in range(1000)]
        assert all(b > a for a, b in zip(stamps, stamps[1:]))

    def test_callable_and_stats(self):
        clock = SessionClock()
        clock()
        clock.now_ms()
        stats = clock.get_stats()
        assert stats['total_calls'] == 2
        assert stats['last_timestamp_ms'] is not None

    def test_reset(self):
        clock = SessionClock()
        clock()
        clock.reset()
        assert clock.get_stats() == {'total_calls': 0, 'last_timestamp_ms': None}

    def test_concurrent_callers_get_unique_stamps(self):
        clock = SessionClock()
        stamps = []
        lock = threading.Lock()

        def worker():
            local = [clock() for _ in range(200)]
            with lock:
                stamps.extend(local)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(set(stamps)) == len(stamps) == 800


class TestRingBuffer:
    def test_capacity_must_be_positive(self):
        with pytest.raises(ValueError):
            RingBuffer(0)

    def test_overflow_evicts_oldest(self):
        buf = RingBuffer(3)
        for i in range(5):
            buf.append(i)
        assert buf.snapshot() == [2, 3, 4]
        assert buf.latest() == 4
        assert len(buf) == 3

    def test_latest_on_empty(self):
        assert RingBuffer(2).latest() is None

    def test_drain_empties(self):
        buf = RingBuffer(4)
        buf.append('a')
        buf.append('b')
        assert buf.drain() == ['a', 'b']
        assert len(buf) == 0
        assert buf.drain() == []

    def test_snapshot_is_a_copy(self):
        buf = RingBuffer(2)
        buf.append(1)
        snap = buf.snapshot()
        snap.append(99)
        assert buf.snapshot() == [1]
