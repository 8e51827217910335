# queuebroker

A small message broker that keeps named queues in memory and serves them
over HTTP. Producers put JSON messages onto a queue; consumers read them
back in first-in, first-out order. A read from an empty queue waits until a
message arrives or a timeout passes, and waiting readers are served in the
order they started waiting.

## Install

```
pip install .
```

## Run the server

```
queuebroker --port 8080 --max-queues 0 --max-messages 0 --wait-timeout 86400
```

| Option           | Default | Meaning                                             |
|------------------|---------|-----------------------------------------------------|
| `--port`         | 8080    | HTTP port to listen on (all interfaces)             |
| `--max-queues`   | 0       | Maximum number of queues (0 means unlimited)        |
| `--max-messages` | 0       | Maximum messages held per queue (0 means unlimited) |
| `--wait-timeout` | 86400   | Default time in seconds a read waits for a message  |

Each option may also be written with a single dash (`-port 8080`).

The server runs until SIGINT or SIGTERM. On shutdown, readers still waiting
for a message are released and answered with `404`.

## HTTP interface

### Put a message

```
PUT /queue/{queueName}

{"message": "hello"}
```

* `200` – the message was handed straight to the oldest waiting reader of
  that queue, or, if no reader was waiting, stored at the end of the queue.
* `400` – the body is not a JSON object with a string `message`, or
  `message` is empty.
* `409` – the queue already holds `--max-messages` messages (`queue is
  full`), or the queue does not exist yet and the broker already holds
  `--max-queues` queues (`broker is full`).

A queue is created on its first put. The `message` key is matched without
regard to case.

### Get a message

```
GET /queue/{queueName}?timeout=5
```

* `200` – the body is `{"message": "..."}` with the oldest message of the
  queue, served as `application/json`.
* `404` – the queue does not exist (`queue not found`), or no message arrived
  within the timeout (`wait timeout`).

`timeout` is a whole number of seconds; if it is absent or not an integer,
the server's `--wait-timeout` applies. A timeout of zero or less returns at
once when the queue is empty.

Any other method or path is answered with `404 page not found`. Error bodies
are plain text.

## Using it as a library

```python
from queuebroker.server import build_router, make_server

router = build_router(max_queues=10, max_messages=100, default_wait_timeout=30)
server = make_server(8080, router)
server.serve_forever()
```

A router can also be driven without a network:

```python
from queuebroker.server import build_router
from queuebroker.transport import Request

router = build_router(0, 0, 5)
router.handle(Request.from_target("PUT", "/queue/jobs", b'{"message": "hi"}'))
response = router.handle(Request.from_target("GET", "/queue/jobs"))
print(response.status, response.body)   # 200 b'{"message":"hi"}\n'
```

`Request.cancel` takes a `threading.Event`; setting it ends a waiting read
with `404`.

The building blocks:

* `queuebroker.model` – `Message`, `Queue`, `Broker`, `Waiter`, the storage
  protocols `QueueStorage` and `BrokerStorage`, and the errors
  `QueueBrokerError`, `BrokerIsFullError`, `QueueNotFoundError`,
  `QueueIsFullError`, `MessageNotFoundError`, `WaitTimeoutError`.
* `queuebroker.memory` – `InMemoryQueue`, `InMemoryBroker`.
* `queuebroker.usecase` – `MessagePutter`, `MessageGetter`.
* `queuebroker.transport` – `Router`, `Request`, `Response`, `Action` and
  the path helpers `path_segments`, `is_param`, `match_path_segments`.
* `queuebroker.actions` – `PutAction`, `GetAction`.
* `queuebroker.server` – `build_router`, `make_server`, `main`.

## What it does not do

Queues and messages live only in the memory of the running process; nothing
is written to disk, so everything is lost when the server stops. There is no
way to delete a queue or to list queues, and no authentication.

## Tests

```
pip install ".[test]"
pytest
```