"""
=============================================================================
THREAD POOL
=============================================================================

A fixed set of worker threads pulling connection tasks from a queue.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   accept loop ──submit()──►  ┌──────────────┐                        │
    │                              │  Task Queue  │                        │
    │                              └──────┬───────┘                        │
    │                        ┌────────────┼────────────┐                   │
    │                        ▼            ▼            ▼                   │
    │                    Worker-0     Worker-1     Worker-2 ...            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

A task that raises is logged and the worker moves on to the next one;
one bad request never takes a worker down.

Shutdown puts one None ("poison pill") per worker on the queue. Workers
finish what they are doing, take the pill and exit.
=============================================================================
"""

import logging
import queue
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple


logger = logging.getLogger(__name__)


@dataclass
class Task:
    """A deferred call: func(*args, **kwargs)."""

    func: Callable[..., Any]
    args: Tuple[Any, ...] = ()
    kwargs: Dict[str, Any] = field(default_factory=dict)


class Worker(threading.Thread):
    """Worker thread that executes tasks until it receives None."""

    def __init__(self, task_queue: "queue.Queue[Optional[Task]]", worker_id: int):
        super().__init__(name=f"Worker-{worker_id}", daemon=True)
        self.task_queue = task_queue
        self.worker_id = worker_id
        self.tasks_completed = 0
        self.tasks_failed = 0

    def run(self):
        logger.debug(f"Worker {self.worker_id} started")

        while True:
            task = self.task_queue.get()
            try:
                if task is None:
                    break
                task.func(*task.args, **task.kwargs)
                self.tasks_completed += 1
            except Exception as e:
                self.tasks_failed += 1
                logger.exception(f"Worker {self.worker_id} task failed: {e}")
            finally:
                self.task_queue.task_done()

        logger.debug(f"Worker {self.worker_id} stopped")


class ThreadPool:
    """
    Fixed-size thread pool.

    Usage:
        pool = ThreadPool(workers=4)
        pool.start()
        pool.submit(handle_connection, args=(sock, address))
        ...
        pool.shutdown()
    """

    def __init__(self, workers: int = 4, queue_size: int = 100):
        """
        Args:
            workers: Number of worker threads.
            queue_size: Maximum number of waiting tasks. A full queue
                        makes submit() return False.
        """
        if workers < 1:
            raise ValueError("workers must be >= 1")
        self.workers = workers
        self._task_queue: "queue.Queue[Optional[Task]]" = queue.Queue(maxsize=queue_size)
        self._workers: List[Worker] = []
        self._lock = threading.Lock()
        self._started = False
        self._shutdown = False

    def start(self) -> None:
        """Start the worker threads."""
        with self._lock:
            if self._started:
                return
            logger.info(f"Starting thread pool with {self.workers} workers")
            for worker_id in range(self.workers):
                worker = Worker(self._task_queue, worker_id)
                self._workers.append(worker)
                worker.start()
            self._started = True

    def submit(
        self,
        func: Callable[..., Any],
        args: Tuple[Any, ...] = (),
        kwargs: Optional[Dict[str, Any]] = None,
        block: bool = False,
    ) -> bool:
        """
        Queue a task.

        Returns:
            True if queued, False if the queue was full.

        Raises:
            RuntimeError: If the pool is not running.
        """
        if not self._started:
            raise RuntimeError("Thread pool not started")
        if self._shutdown:
            raise RuntimeError("Thread pool is shutting down")

        try:
            self._task_queue.put(Task(func, args, kwargs or {}), block=block)
            return True
        except queue.Full:
            return False

    def shutdown(self, wait: bool = True, timeout: Optional[float] = None) -> None:
        """
        Stop the workers.

        Args:
            wait: Join the worker threads.
            timeout: Per-worker join timeout.
        """
        with self._lock:
            if not self._started or self._shutdown:
                return
            self._shutdown = True

        logger.info("Shutting down thread pool...")
        for _ in self._workers:
            self._task_queue.put(None)

        if wait:
            for worker in self._workers:
                worker.join(timeout=timeout)

    @property
    def is_running(self) -> bool:
        return self._started and not self._shutdown
