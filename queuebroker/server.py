"""HTTP server exposing the in-memory queue broker."""

from __future__ import annotations

import argparse
import logging
import signal
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Optional, Sequence

from .actions import GetAction, PutAction
from .memory import InMemoryBroker, InMemoryQueue
from .model import Broker, Queue, Waiter
from .transport import Request, Router
from .usecase import MessageGetter, MessagePutter

logger = logging.getLogger(__name__)


def build_router(max_queues: int, max_messages: int, default_wait_timeout: float) -> Router:
    """Wire storage, domain and actions into a router (limits of 0 mean unlimited)."""
    waiter = Waiter()
    queue_storage = InMemoryQueue()
    broker_storage = InMemoryBroker(lambda name: Queue(name, max_messages, queue_storage))
    broker = Broker(max_queues, broker_storage)
    putter = MessagePutter(broker, waiter)
    getter = MessageGetter(broker, waiter)
    return Router(PutAction(putter), GetAction(getter, float(default_wait_timeout)))


class _BrokerHTTPServer(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self, address: tuple[str, int], router: Router) -> None:
        self.router = router
        self.closing = threading.Event()
        super().__init__(address, _RequestHandler)

    def shutdown(self) -> None:
        # Release consumers still blocked waiting for messages.
        self.closing.set()
        super().shutdown()


class _RequestHandler(BaseHTTPRequestHandler):
    server: _BrokerHTTPServer
    protocol_version = "HTTP/1.1"

    def _dispatch(self) -> None:
        try:
            length = int(self.headers.get("Content-Length") or 0)
        except ValueError:
            self.send_error(400, "invalid Content-Length")
            return
        body = self.rfile.read(length) if length > 0 else b""
        request = Request.from_target(self.command, self.path, body, self.server.closing)
        response = self.server.router.handle(request)

        self.send_response(response.status)
        for name, value in response.headers.items():
            self.send_header(name, value)
        self.send_header("Content-Length", str(len(response.body)))
        self.end_headers()
        if self.command != "HEAD":
            self.wfile.write(response.body)

    do_GET = do_PUT = do_POST = do_DELETE = do_PATCH = do_HEAD = do_OPTIONS = _dispatch

    def log_message(self, format: str, *args: object) -> None:
        logger.debug("%s - %s", self.address_string(), format % args)


def make_server(port: int, router: Router) -> _BrokerHTTPServer:
    """Bind a threaded HTTP server on all interfaces; call serve_forever to run it."""
    return _BrokerHTTPServer(("", port), router)


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="In-memory message queue broker.")
    parser.add_argument("-port", "--port", type=int, default=8080, help="HTTP port")
    parser.add_argument(
        "-max-queues", "--max-queues", dest="max_queues", type=int, default=0,
        help="max number of queues",
    )
    parser.add_argument(
        "-max-messages", "--max-messages", dest="max_messages", type=int, default=0,
        help="max messages in queue",
    )
    parser.add_argument(
        "-wait-timeout", "--wait-timeout", dest="wait_timeout", type=int, default=86400,
        help="default timeout (sec)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Run the server until SIGINT or SIGTERM."""
    args = _parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")

    stop = threading.Event()

    def _on_signal(signum: int, frame: object) -> None:
        stop.set()

    signal.signal(signal.SIGINT, _on_signal)
    signal.signal(signal.SIGTERM, _on_signal)

    router = build_router(args.max_queues, args.max_messages, args.wait_timeout)
    server = make_server(args.port, router)
    logger.info("Listening on :%d", args.port)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()

    while not stop.wait(0.5):
        pass

    logger.info("Shutting down server...")
    server.shutdown()
    server.server_close()
    thread.join(timeout=10)