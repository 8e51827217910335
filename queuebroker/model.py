"""Domain model: messages, queues, the broker and the waiter registry."""

from __future__ import annotations

import threading
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Protocol


@dataclass(frozen=True)
class Message:
    """A message carried through a queue."""

    content: str

    def is_valid(self) -> bool:
        """A message is valid when its content is not empty."""
        return self.content != ""


class QueueBrokerError(Exception):
    """Base class for broker errors."""

    default_message = "queue broker error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class BrokerIsFullError(QueueBrokerError):
    """No more queues can be created."""

    default_message = "broker is full"


class QueueNotFoundError(QueueBrokerError):
    """The named queue does not exist."""

    default_message = "queue not found"


class QueueIsFullError(QueueBrokerError):
    """The queue holds its maximum number of messages."""

    default_message = "queue is full"


class MessageNotFoundError(QueueBrokerError):
    """The queue holds no messages."""

    default_message = "message not found"


class WaitTimeoutError(QueueBrokerError):
    """No message arrived before the timeout or cancellation."""

    default_message = "wait timeout"


class QueueStorage(Protocol):
    """Storage of the messages of all queues."""

    def put_message_to_end(self, queue_name: str, message: Message) -> None:
        """Append a message to the named queue."""

    def get_first_message(self, queue_name: str) -> Message:
        """Remove and return the oldest message; raise MessageNotFoundError if none."""

    def count_messages(self, queue_name: str) -> int:
        """Return the number of messages in the named queue."""


class BrokerStorage(Protocol):
    """Storage of the queues known to a broker."""

    def create_queue(self, queue_name: str) -> Queue:
        """Create the queue, or return it if it already exists."""

    def get_queue(self, queue_name: str) -> Queue:
        """Return the queue; raise QueueNotFoundError if it does not exist."""

    def count_queues(self) -> int:
        """Return the number of queues."""


class Queue:
    """A named queue with an optional message limit (0 means unlimited)."""

    def __init__(self, name: str, max_messages: int, storage: QueueStorage) -> None:
        self._name = name
        self._max_messages = max_messages
        self._storage = storage

    @property
    def name(self) -> str:
        return self._name

    def get_message(self) -> Message:
        """Remove and return the oldest message."""
        return self._storage.get_first_message(self._name)

    def put_message(self, message: Message) -> None:
        """Append a message, raising QueueIsFullError when at the limit."""
        if self._is_full():
            raise QueueIsFullError()
        self._storage.put_message_to_end(self._name, message)

    def _is_full(self) -> bool:
        if self._max_messages == 0:
            return False
        return self._storage.count_messages(self._name) >= self._max_messages

    def __repr__(self) -> str:
        return f"Queue(name={self._name!r}, max_messages={self._max_messages})"


class Broker:
    """Creates and looks up queues, with an optional queue limit (0 means unlimited)."""

    def __init__(self, max_queues: int, storage: BrokerStorage) -> None:
        self._max_queues = max_queues
        self._storage = storage

    def get_queue(self, queue_name: str) -> Queue:
        return self._storage.get_queue(queue_name)

    def create_queue(self, queue_name: str) -> Queue:
        """Create a queue, raising BrokerIsFullError when at the limit."""
        if self._is_full():
            raise BrokerIsFullError()
        return self._storage.create_queue(queue_name)

    def _is_full(self) -> bool:
        if self._max_queues == 0:
            return False
        return self._storage.count_queues() >= self._max_queues


@dataclass(eq=False)
class _Slot:
    ready: threading.Event = field(default_factory=threading.Event)
    message: Message | None = None


class Waiter:
    """Hands messages directly to consumers blocked on empty queues, first come first served."""

    _POLL_INTERVAL = 0.05

    def __init__(self) -> None:
        self._slots: dict[str, deque[_Slot]] = {}
        self._lock = threading.Lock()

    def wait_message(
        self,
        queue_name: str,
        timeout: float,
        cancel: threading.Event | None = None,
    ) -> Message:
        """Block until a message is handed over for the queue.

        Raises WaitTimeoutError when ``timeout`` seconds pass or ``cancel`` is set.
        """
        slot = _Slot()
        with self._lock:
            self._slots.setdefault(queue_name, deque()).append(slot)

        deadline = time.monotonic() + max(timeout, 0.0)
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0 or (cancel is not None and cancel.is_set()):
                break
            step = min(remaining, self._POLL_INTERVAL) if cancel is not None else remaining
            if slot.ready.wait(step):
                assert slot.message is not None
                return slot.message

        with self._lock:
            pending = self._slots.get(queue_name)
            if pending is not None and slot in pending:
                pending.remove(slot)
                if not pending:
                    del self._slots[queue_name]
                raise WaitTimeoutError()

        # A notifier claimed this slot just as the wait ended.
        slot.ready.wait()
        assert slot.message is not None
        return slot.message

    def notify(self, queue_name: str, message: Message) -> bool:
        """Hand the message to the oldest waiter of the queue; return whether one existed."""
        with self._lock:
            pending = self._slots.get(queue_name)
            if not pending:
                return False
            slot = pending.popleft()
            if not pending:
                del self._slots[queue_name]
            slot.message = message
            slot.ready.set()
            return True