import threading

import pytest

from queuebroker.memory import InMemoryBroker, InMemoryQueue
from queuebroker.model import Message, MessageNotFoundError, Queue, QueueNotFoundError


def test_queue_put_and_get_fifo():
    store = InMemoryQueue()
    store.put_message_to_end("q", Message("one"))
    store.put_message_to_end("q", Message("two"))
    assert store.get_first_message("q") == Message("one")
    assert store.get_first_message("q") == Message("two")


def test_queue_get_from_missing_or_empty():
    store = InMemoryQueue()
    with pytest.raises(MessageNotFoundError):
        store.get_first_message("missing")
    store.put_message_to_end("q", Message("x"))
    store.get_first_message("q")
    with pytest.raises(MessageNotFoundError):
        store.get_first_message("q")


def test_queue_count_messages():
    store = InMemoryQueue()
    assert store.count_messages("missing") == 0
    for text in ("a", "b", "c"):
        store.put_message_to_end("q", Message(text))
    assert store.count_messages("q") == 3
    store.get_first_message("q")
    assert store.count_messages("q") == 2


def test_queues_are_independent():
    store = InMemoryQueue()
    store.put_message_to_end("a", Message("for-a"))
    store.put_message_to_end("b", Message("for-b"))
    assert store.get_first_message("b") == Message("for-b")
    assert store.count_messages("a") == 1


def test_queue_concurrent_puts_are_all_kept():
    store = InMemoryQueue()

    def put_many():
        for i in range(200):
            store.put_message_to_end("q", Message(str(i)))

    threads = [threading.Thread(target=put_many) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert store.count_messages("q") == 800


def _broker():
    storage = InMemoryQueue()
    return InMemoryBroker(lambda name: Queue(name, 0, storage))


def test_broker_get_missing():
    with pytest.raises(QueueNotFoundError):
        _broker().get_queue("absent")


def test_broker_create_is_idempotent():
    broker = _broker()
    first = broker.create_queue("q")
    second = broker.create_queue("q")
    assert first is second
    assert broker.count_queues() == 1
    assert broker.get_queue("q") is first


def test_broker_factory_receives_name():
    broker = _broker()
    assert broker.create_queue("orders").name == "orders"


def test_broker_count_queues():
    broker = _broker()
    assert broker.count_queues() == 0
    broker.create_queue("a")
    broker.create_queue("b")
    assert broker.count_queues() == 2