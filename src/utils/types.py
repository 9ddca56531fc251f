"""Common types for the project."""

from typing import Awaitable, Callable

# (system prompt, user message) -> completion text
CompletionFunction = Callable[[str, str], Awaitable[str]]

# source of monotonic time in seconds
Clock = Callable[[], float]


class Singleton(type):
    """Metaclass for Singleton support."""

    _instances = {}  # type: ignore

    def __call__(cls, *args, **kwargs):  # type: ignore
        """Ensure a single instance is created."""
        if cls not in cls._instances:
            cls._instances[cls] = super(Singleton, cls).__call__(*args, **kwargs)
        return cls._instances[cls]
