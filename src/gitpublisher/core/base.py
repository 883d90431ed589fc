"""Base classes for configuration and state models.

- Closeable Protocol for resource cleanup
- BaseCloseable for the cleanup cascade over model fields
- BaseConfig for configuration sections
- BaseState for mutable runtime state

Kept apart from config.py so that log.py can import them without a
circular dependency.
"""

from __future__ import annotations

import sys
from typing import Protocol, runtime_checkable

from pydantic import BaseModel


@runtime_checkable
class Closeable(Protocol):
    """Protocol for objects that support close()."""

    def close(self) -> None:
        """Release resources."""
        ...


class BaseCloseable(BaseModel):
    """Pydantic model that closes its Closeable fields on close().

    Usable as a context manager. A child that fails to close does not
    stop the remaining children from being closed:
    Config.close() → Logger.close() → Sink.close()
    """

    def close(self):
        """Close every field that implements Closeable."""
        for field_name in self.__class__.model_fields:
            child = getattr(self, field_name, None)
            if child is None:
                continue

            if isinstance(child, Closeable):
                try:
                    child.close()
                except Exception as e:
                    msg = f"Warning: Error closing {field_name}: {e}"
                    print(msg, file=sys.stderr)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):  # noqa: U100
        self.close()
        return False


class BaseConfig(BaseCloseable):
    """Marker base for configuration loaded from YAML/env/CLI."""
    pass


class BaseState(BaseCloseable):
    """Marker base for state mutated while a step runs."""
    pass


__all__ = ["Closeable", "BaseCloseable", "BaseConfig", "BaseState"]
