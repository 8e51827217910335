"""Putting and getting messages across the broker and the waiter registry."""

from __future__ import annotations

import threading

from .model import Broker, Message, MessageNotFoundError, Queue, QueueNotFoundError, Waiter


class MessagePutter:
    """Delivers a message to a waiting consumer, or stores it in its queue."""

    def __init__(self, broker: Broker, waiter: Waiter) -> None:
        self._broker = broker
        self._waiter = waiter

    def put(self, queue_name: str, message: Message) -> None:
        """Put a message, creating the queue if needed.

        Raises BrokerIsFullError or QueueIsFullError when a limit is reached.
        """
        queue = self._get_or_create_queue(queue_name)
        if self._waiter.notify(queue.name, message):
            return
        queue.put_message(message)

    def _get_or_create_queue(self, queue_name: str) -> Queue:
        try:
            return self._broker.get_queue(queue_name)
        except QueueNotFoundError:
            return self._broker.create_queue(queue_name)


class MessageGetter:
    """Takes the oldest message of a queue, waiting for one if the queue is empty."""

    def __init__(self, broker: Broker, waiter: Waiter) -> None:
        self._broker = broker
        self._waiter = waiter

    def get(
        self,
        queue_name: str,
        timeout: float,
        cancel: threading.Event | None = None,
    ) -> Message:
        """Return the next message.

        Raises QueueNotFoundError for an unknown queue and WaitTimeoutError
        when nothing arrives within ``timeout`` seconds or ``cancel`` is set.
        """
        queue = self._broker.get_queue(queue_name)
        try:
            return queue.get_message()
        except MessageNotFoundError:
            return self._waiter.wait_message(queue_name, timeout, cancel)