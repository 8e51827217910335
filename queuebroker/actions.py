"""Queue endpoints: put a message into a queue and get one out."""

from __future__ import annotations

import json
import re
from typing import Any, Optional

from .model import (
    BrokerIsFullError,
    Message,
    MessageNotFoundError,
    QueueBrokerError,
    QueueIsFullError,
    QueueNotFoundError,
    WaitTimeoutError,
)
from .transport import Params, Request, Response
from .usecase import MessageGetter, MessagePutter

_QUEUE_ROUTE = "/queue/{queueName}"
_PARAM_NAME = "queueName"
_INTEGER = re.compile(r"[+-]?[0-9]+")
_JSON_WHITESPACE = " \t\n\r"
_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def _decode_message(body: bytes) -> Optional[Message]:
    """Read the first JSON value of the body as a message, or None if malformed."""
    try:
        text = body.decode("utf-8").lstrip(_JSON_WHITESPACE)
        value, _ = json.JSONDecoder().raw_decode(text)
    except (UnicodeDecodeError, json.JSONDecodeError):
        return None
    if value is None:
        return Message("")
    if not isinstance(value, dict):
        return None
    content: Any = ""
    for key, field_value in value.items():
        if key.lower() != "message":
            continue
        if field_value is None:
            continue
        if not isinstance(field_value, str):
            return None
        content = field_value
    return Message(content)


def _encode_message(message: Message) -> bytes:
    text = json.dumps({"message": message.content}, ensure_ascii=False, separators=(",", ":"))
    for char, escape in _HTML_ESCAPES.items():
        text = text.replace(char, escape)
    return (text + "\n").encode("utf-8")


class PutAction:
    """PUT /queue/{queueName}: store a message or hand it to a waiting consumer."""

    def __init__(self, putter: MessagePutter) -> None:
        self._putter = putter

    def route(self) -> str:
        return _QUEUE_ROUTE

    def method(self) -> str:
        return "PUT"

    def handle(self, request: Request, params: Params) -> Response:
        queue_name = params.get(_PARAM_NAME, "")
        if not queue_name:
            return Response.text_error(400, "invalid queue name")

        message = _decode_message(request.body)
        if message is None or not message.is_valid():
            return Response.text_error(400, "invalid message")

        try:
            self._putter.put(queue_name, message)
        except (QueueIsFullError, BrokerIsFullError) as err:
            return Response.text_error(409, str(err))
        except QueueBrokerError as err:
            return Response.text_error(500, str(err))
        return Response(200)


class GetAction:
    """GET /queue/{queueName}[?timeout=N]: take the next message, waiting if needed."""

    def __init__(self, getter: MessageGetter, default_wait_timeout: float) -> None:
        self._getter = getter
        self._default_wait_timeout = default_wait_timeout

    def route(self) -> str:
        return _QUEUE_ROUTE

    def method(self) -> str:
        return "GET"

    def _wait_timeout(self, request: Request) -> float:
        raw = request.query.get("timeout", "")
        if _INTEGER.fullmatch(raw):
            return float(int(raw))
        return self._default_wait_timeout

    def handle(self, request: Request, params: Params) -> Response:
        queue_name = params.get(_PARAM_NAME, "")
        if not queue_name:
            return Response.text_error(400, "invalid queue name")

        try:
            message = self._getter.get(queue_name, self._wait_timeout(request), request.cancel)
        except (QueueNotFoundError, WaitTimeoutError, MessageNotFoundError) as err:
            return Response.text_error(404, str(err))
        except QueueBrokerError as err:
            return Response.text_error(500, str(err))

        return Response(200, _encode_message(message), {"Content-Type": "application/json"})