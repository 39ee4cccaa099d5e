"""chatwall: a terminal chat client with durable, streaming sessions."""

__version__ = "0.1.0"
