"""In-memory named message queues served over HTTP with long-polling reads."""

__version__ = "0.1.0"