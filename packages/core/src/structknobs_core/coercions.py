"""Coercion combinators.

Each combinator returns a new struct that rewrites its input before
validation, to increase the likelihood that it passes, for example to fill
in default values or strip whitespace. The validator and schema of the
wrapped struct are left untouched.

Note: coercion only takes effect through ``create`` (or ``mask``, or
``validate(..., coerce=True)``). ``is_`` and ``assert_`` never coerce.
"""

from __future__ import annotations

import copy
from collections.abc import Callable
from typing import Any

from .struct import Struct, is_, with_coercer
from .types import string, unknown
from .utils import UNDEFINED, is_object, is_plain_object


def coerce(struct: Struct, condition: Struct, coercer: Callable[[Any], Any]) -> Struct:
    """Add a coercion step to a struct.

    ``coercer`` is applied only to values that validate against
    ``condition``; other values pass through. The result is then handed to
    the struct's existing coercer, so a later ``coerce`` layer sees the
    raw input first and earlier layers see its output.

    Args:
        struct: Struct to augment
        condition: Struct used purely as a guard (checked with ``is_``)
        coercer: Transform applied to values matching the condition

    Returns:
        New struct with the combined coercer
    """
    previous = struct.coercer

    def combined(value: Any) -> Any:
        if is_(value, condition):
            return previous(coercer(value))
        return previous(value)

    return with_coercer(struct, combined)


def defaulted(struct: Struct, fallback: Any, strict: bool = False) -> Struct:
    """Replace ``UNDEFINED`` values with a default.

    If ``fallback`` is callable it is called on every coercion, so mutable
    defaults are never shared between results. Unless ``strict``, a plain
    dict input also gets every top-level key of a dict fallback it is
    missing. Only one level is filled in.

    Args:
        struct: Struct to augment
        fallback: Default value or zero-argument function producing it
        strict: If True, only an ``UNDEFINED`` input is replaced

    Returns:
        New struct with the defaulting coercer
    """

    def fill(value: Any) -> Any:
        default = fallback() if callable(fallback) else fallback

        if value is UNDEFINED:
            return default

        if not strict and is_plain_object(value) and is_plain_object(default):
            result = copy.copy(value)
            changed = False

            for key in default:
                if result.get(key, UNDEFINED) is UNDEFINED:
                    result[key] = default[key]
                    changed = True

            if changed:
                return result

        return value

    return coerce(struct, unknown(), fill)


def masked(struct: Struct) -> Struct:
    """Drop input keys that the struct's schema does not declare.

    Masking is one level deep; nested values are kept as they are. Inputs
    that are not mappings, and structs without a mapping schema, pass
    through unchanged.
    """

    def drop_unknown(value: Any) -> Any:
        if not is_object(struct.schema) or not is_object(value):
            return value
        return {key: value[key] for key in struct.schema if key in value}

    return coerce(struct, unknown(), drop_unknown)


def trimmed(struct: Struct) -> Struct:
    """Strip leading and trailing whitespace from string inputs."""
    return coerce(struct, string(), str.strip)
