from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

from hypervault.core.errors import AuthorizationError

T = TypeVar("T")


def status_tuple(
    fn: Callable[..., T],
) -> Callable[..., tuple[bool, T | str]]:
    """Wrap a method to return ``(True, result)`` or ``(False, error_str)``.

    The decorated function should perform its work and return the result directly.
    Exceptions are caught, logged via ``self.logger``, and returned as ``(False, str(e))``.
    """

    @wraps(fn)
    def wrapper(self: Any, *args: Any, **kwargs: Any) -> tuple[bool, T | str]:
        try:
            result = fn(self, *args, **kwargs)
            return (True, result)
        except Exception as exc:
            self.logger.error(f"Error in {fn.__name__}: {exc}")
            return (False, str(exc))

    return wrapper


def only_owner(fn: Callable) -> Callable:
    """Raise ``AuthorizationError`` unless ``caller`` equals ``self.owner``."""

    @wraps(fn)
    def wrapper(self: Any, caller: str, *args: Any, **kwargs: Any) -> Any:
        if caller != getattr(self, "owner", None):
            raise AuthorizationError(f"{fn.__name__}: caller {caller} is not the owner")
        return fn(self, caller, *args, **kwargs)

    return wrapper
