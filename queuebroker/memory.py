"""Thread-safe in-memory storage for queues and messages."""

from __future__ import annotations

import threading
from collections import deque
from typing import Callable

from .model import Message, MessageNotFoundError, Queue, QueueNotFoundError


class InMemoryQueue:
    """Keeps the messages of every queue in memory, oldest first."""

    def __init__(self) -> None:
        self._messages: dict[str, deque[Message]] = {}
        self._lock = threading.Lock()

    def put_message_to_end(self, queue_name: str, message: Message) -> None:
        with self._lock:
            self._messages.setdefault(queue_name, deque()).append(message)

    def get_first_message(self, queue_name: str) -> Message:
        with self._lock:
            messages = self._messages.get(queue_name)
            if not messages:
                raise MessageNotFoundError()
            return messages.popleft()

    def count_messages(self, queue_name: str) -> int:
        with self._lock:
            return len(self._messages.get(queue_name, ()))


class InMemoryBroker:
    """Keeps queues in memory, built on demand by a factory."""

    def __init__(self, queue_factory: Callable[[str], Queue]) -> None:
        self._queues: dict[str, Queue] = {}
        self._queue_factory = queue_factory
        self._lock = threading.Lock()

    def create_queue(self, queue_name: str) -> Queue:
        """Create the queue, or return the existing one of that name."""
        with self._lock:
            queue = self._queues.get(queue_name)
            if queue is None:
                queue = self._queue_factory(queue_name)
                self._queues[queue_name] = queue
            return queue

    def get_queue(self, queue_name: str) -> Queue:
        with self._lock:
            try:
                return self._queues[queue_name]
            except KeyError:
                raise QueueNotFoundError() from None

    def count_queues(self) -> int:
        with self._lock:
            return len(self._queues)