"""
Unit tests for the worker thread pool.
"""

import threading

import pytest

from webdispatch.core import ThreadPool


class TestThreadPool:
    """Tests for ThreadPool."""

    def test_runs_tasks(self):
        """Test that submitted tasks are executed."""
        pool = ThreadPool(workers=2)
        pool.start()
        results = []
        lock = threading.Lock()

        def task(value):
            with lock:
                results.append(value)

        for i in range(10):
            assert pool.submit(task, args=(i,), block=True)
        pool.shutdown(wait=True, timeout=5)

        assert sorted(results) == list(range(10))

    def test_kwargs(self):
        """Test keyword arguments."""
        pool = ThreadPool(workers=1)
        pool.start()
        done = threading.Event()
        seen = {}

        def task(name=None):
            seen["name"] = name
            done.set()

        pool.submit(task, kwargs={"name": "worker"})
        assert done.wait(timeout=5)
        pool.shutdown()

        assert seen == {"name": "worker"}

    def test_failing_task_does_not_kill_worker(self, caplog):
        """Test that exceptions are logged and the worker continues."""
        pool = ThreadPool(workers=1)
        pool.start()
        done = threading.Event()

        def broken():
            raise RuntimeError("boom")

        pool.submit(broken, block=True)
        pool.submit(done.set, block=True)

        assert done.wait(timeout=5)
        pool.shutdown()
        assert "boom" in caplog.text

    def test_full_queue_rejects(self):
        """Test that submit() returns False when the queue is full."""
        pool = ThreadPool(workers=1, queue_size=1)
        pool.start()
        release = threading.Event()
        started = threading.Event()

        def blocker():
            started.set()
            release.wait(timeout=5)

        pool.submit(blocker, block=True)
        assert started.wait(timeout=5)
        assert pool.submit(lambda: None) is True
        assert pool.submit(lambda: None) is False

        release.set()
        pool.shutdown()

    def test_submit_requires_start(self):
        """Test submitting to a pool that was never started."""
        with pytest.raises(RuntimeError):
            ThreadPool().submit(lambda: None)

    def test_submit_after_shutdown(self):
        """Test submitting to a stopped pool."""
        pool = ThreadPool(workers=1)
        pool.start()
        pool.shutdown()

        assert not pool.is_running
        with pytest.raises(RuntimeError):
            pool.submit(lambda: None)

    def test_rejects_zero_workers(self):
        """Test constructor validation."""
        with pytest.raises(ValueError):
            ThreadPool(workers=0)
