"""Small helpers shared by the struct modules."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from typing import Any


class _Undefined:
    """Marker for an absent value, such as a key missing from a mapping."""

    _instance: _Undefined | None = None

    def __new__(cls) -> _Undefined:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> _Undefined:
        return self

    def __deepcopy__(self, memo: dict) -> _Undefined:
        return self

    def __reduce__(self) -> str:
        return "UNDEFINED"


UNDEFINED = _Undefined()


def is_object(value: Any) -> bool:
    """Check if a value is a key-value container of any kind."""
    return isinstance(value, Mapping)


def is_plain_object(value: Any) -> bool:
    """Check if a value is a plain key-value record.

    Only ``dict`` instances qualify (subclasses included). Lists, tuples,
    ``None``, arbitrary class instances and read-only mappings such as
    ``MappingProxyType`` are not plain records.
    """
    return isinstance(value, dict)


def print_value(value: Any) -> str:
    """Render a value for use inside a failure message."""
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    return repr(value)


def iter_results(result: Any) -> Iterable[Any]:
    """Normalize a validator or refiner result into an iterable of results.

    A single ``bool``, ``None``, ``str`` or ``dict`` becomes a one-item
    list; any other iterable (list, generator) is returned untouched so
    lazy validators are only advanced as far as the caller needs.
    """
    if result is None or isinstance(result, (bool, str, bytes, Mapping)):
        return [result]
    if isinstance(result, Iterable):
        return result
    return [result]


def to_failure_fields(result: Any) -> dict[str, Any] | None:
    """Convert a single validator result into failure fields.

    Returns None when the result means "valid".
    """
    if result is True or result is None:
        return None
    if result is False:
        return {}
    if isinstance(result, str):
        return {"message": result}
    if isinstance(result, Mapping):
        return dict(result)
    raise TypeError(
        f"Validators must return a bool, str, dict or an iterable of those, "
        f"got {type(result).__name__}"
    )
