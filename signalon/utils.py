from typing import Any, TypeVar

T = TypeVar("T")


def callable_name(cb: Any) -> str:
    """Return a human-readable name for a callable, safe for logging.

    Falls back through ``__qualname__``, ``__name__``, and ``repr()``
    so that ``functools.partial``, callable instances, and other exotic
    callables never raise ``AttributeError``.

    Args:
        cb: Any callable object.

    Returns:
        Display name string.
    """
    return (
        getattr(cb, "__qualname__", None) or getattr(cb, "__name__", None) or repr(cb)
    )


def as_list(value: T | list[T] | tuple[T, ...]) -> list[T]:
    """Normalize a single value or a list/tuple of values to a list."""
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]
