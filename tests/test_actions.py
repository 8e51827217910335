import json
import threading
import time

import pytest

from queuebroker.actions import GetAction, PutAction
from queuebroker.memory import InMemoryBroker, InMemoryQueue
from queuebroker.model import Broker, Queue, Waiter
from queuebroker.transport import Request
from queuebroker.usecase import MessageGetter, MessagePutter


def _actions(max_queues=10, max_messages=10, default_timeout=0.2):
    waiter = Waiter()
    queue_storage = InMemoryQueue()
    broker_storage = InMemoryBroker(lambda name: Queue(name, max_messages, queue_storage))
    broker = Broker(max_queues, broker_storage)
    put = PutAction(MessagePutter(broker, waiter))
    get = GetAction(MessageGetter(broker, waiter), default_timeout)
    return put, get


def _put(action, name, content):
    body = json.dumps({"message": content}).encode()
    return action.handle(Request("PUT", f"/queue/{name}", body=body), {"queueName": name})


def test_routes_and_methods():
    put, get = _actions()
    assert put.route() == "/queue/{queueName}"
    assert get.route() == "/queue/{queueName}"
    assert put.method() == "PUT"
    assert get.method() == "GET"


def test_put_then_get_round_trip():
    put, get = _actions()
    assert _put(put, "q", "hello").status == 200
    response = get.handle(Request("GET", "/queue/q"), {"queueName": "q"})
    assert response.status == 200
    assert response.headers["Content-Type"] == "application/json"
    assert json.loads(response.body) == {"message": "hello"}


def test_get_encodes_html_characters_safely():
    put, get = _actions()
    _put(put, "q", "<a&b>")
    response = get.handle(Request("GET", "/queue/q"), {"queueName": "q"})
    assert b"<" not in response.body
    assert b"\\u003c" in response.body
    assert json.loads(response.body)["message"] == "<a&b>"


@pytest.mark.parametrize("body", [b"{}", b"not json", b"[1,2]", b'{"message": 5}', b"null"])
def test_put_invalid_message(body):
    put, _ = _actions()
    response = put.handle(Request("PUT", "/queue/q", body=body), {"queueName": "q"})
    assert response.status == 400
    assert response.body == b"invalid message\n"


def test_put_accepts_case_insensitive_key():
    put, get = _actions()
    body = b'{"Message": "hi"}'
    assert put.handle(Request("PUT", "/queue/q", body=body), {"queueName": "q"}).status == 200
    response = get.handle(Request("GET", "/queue/q"), {"queueName": "q"})
    assert json.loads(response.body)["message"] == "hi"


def test_invalid_queue_name():
    put, get = _actions()
    assert put.handle(Request("PUT", "/queue/", body=b'{"message":"x"}'), {}).body == (
        b"invalid queue name\n"
    )
    assert get.handle(Request("GET", "/queue/"), {"queueName": ""}).status == 400


def test_put_queue_full_is_conflict():
    put, _ = _actions(max_messages=1)
    assert _put(put, "small", "first").status == 200
    response = _put(put, "small", "second")
    assert response.status == 409
    assert response.body == b"queue is full\n"


def test_put_broker_full_is_conflict():
    put, _ = _actions(max_queues=1)
    assert _put(put, "one", "a").status == 200
    response = _put(put, "two", "a")
    assert response.status == 409
    assert response.body == b"broker is full\n"


def test_get_unknown_queue_is_not_found():
    _, get = _actions()
    response = get.handle(Request("GET", "/queue/none"), {"queueName": "none"})
    assert response.status == 404
    assert response.body == b"queue not found\n"


def test_get_timeout_query_overrides_default():
    put, get = _actions(default_timeout=30)
    _put(put, "q", "x")
    get.handle(Request("GET", "/queue/q"), {"queueName": "q"})
    start = time.monotonic()
    response = get.handle(Request("GET", "/queue/q", query={"timeout": "0"}), {"queueName": "q"})
    assert time.monotonic() - start < 5
    assert response.status == 404
    assert response.body == b"wait timeout\n"


def test_get_bad_timeout_falls_back_to_default():
    put, get = _actions(default_timeout=0.2)
    _put(put, "q", "x")
    get.handle(Request("GET", "/queue/q"), {"queueName": "q"})
    start = time.monotonic()
    response = get.handle(Request("GET", "/queue/q", query={"timeout": "abc"}), {"queueName": "q"})
    elapsed = time.monotonic() - start
    assert response.status == 404
    assert 0.15 <= elapsed < 5


def test_get_is_cancelled():
    put, get = _actions(default_timeout=30)
    _put(put, "q", "x")
    get.handle(Request("GET", "/queue/q"), {"queueName": "q"})
    cancel = threading.Event()
    cancel.set()
    start = time.monotonic()
    response = get.handle(Request("GET", "/queue/q", cancel=cancel), {"queueName": "q"})
    assert response.status == 404
    assert time.monotonic() - start < 5