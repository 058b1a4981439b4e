"""Helpers for defining and composing structs."""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import replace
from typing import Any

from .struct import Context, Struct, Validator
from .types import object_, optional, type_
from .utils import UNDEFINED

logger = logging.getLogger(__name__)


def _same_kind(struct: Struct, schema: Mapping[str, Struct]) -> Struct:
    return type_(schema) if struct.type == "type" else object_(schema)


def define(name: str, validator: Validator) -> Struct:
    """Define a custom leaf struct from a validator function."""
    return Struct(name, schema=None, validator=validator)


def _log_deprecated(value: Any, context: Context) -> None:
    logger.warning("Deprecated value at path %s: %r", list(context.path), value)


def deprecated(
    struct: Struct, log: Callable[[Any, Context], None] | None = None
) -> Struct:
    """Mark a struct as deprecated.

    Values other than ``UNDEFINED`` are reported through ``log`` (a warning
    on this module's logger by default) and then validated as usual.
    """
    log = log or _log_deprecated

    def validator(value: Any, context: Context) -> Any:
        if value is UNDEFINED:
            return True
        log(value, context)
        return struct.validator(value, context)

    def refiner(value: Any, context: Context) -> Any:
        return value is UNDEFINED or struct.refiner(value, context)

    return replace(struct, validator=validator, refiner=refiner)


def dynamic(fn: Callable[[Any, Context], Struct]) -> Struct:
    """Choose the struct at validation time, based on the value.

    ``fn`` receives the value and its context. During coercion no path is
    known yet, so it receives a root context.
    """
    return Struct(
        "dynamic",
        schema=None,
        validator=lambda value, context: fn(value, context).validator(value, context),
        coercer=lambda value: fn(value, Context((), (value,))).coercer(value),
        refiner=lambda value, context: fn(value, context).refiner(value, context),
        entries=lambda value, context: fn(value, context).entries(value, context),
    )


def lazy(fn: Callable[[], Struct]) -> Struct:
    """Build the struct on first use, allowing self-referential structs."""
    resolve = functools.lru_cache(maxsize=None)(fn)

    return Struct(
        "lazy",
        schema=None,
        validator=lambda value, context: resolve().validator(value, context),
        coercer=lambda value: resolve().coercer(value),
        refiner=lambda value, context: resolve().refiner(value, context),
        entries=lambda value, context: resolve().entries(value, context),
    )


def assign(*structs: Struct) -> Struct:
    """Merge the schemas of several object structs; later keys win.

    The result is a ``type_`` struct if the first struct is one, an
    ``object_`` struct otherwise.
    """
    schema: dict[str, Struct] = {}
    for struct in structs:
        schema.update(struct.schema or {})
    return _same_kind(structs[0], schema)


def omit(struct: Struct, keys: Iterable[str]) -> Struct:
    """Copy an object struct without the given keys."""
    excluded = set(keys)
    return _same_kind(
        struct, {key: s for key, s in struct.schema.items() if key not in excluded}
    )


def pick(struct: Struct, keys: Iterable[str]) -> Struct:
    """Copy an object struct keeping only the given keys."""
    return _same_kind(struct, {key: struct.schema[key] for key in keys})


def partial(struct: Struct | Mapping[str, Struct]) -> Struct:
    """Make every key of an object struct (or a schema dict) optional."""
    if isinstance(struct, Struct):
        return _same_kind(struct, {key: optional(s) for key, s in struct.schema.items()})
    return object_({key: optional(s) for key, s in struct.items()})
