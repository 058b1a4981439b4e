"""Catalogue of built-in structs.

Leaf types check a single value. Container types additionally expose their
children through ``entries`` so the traversal in ``struct.run`` can descend
into them while tracking the path.
"""

from __future__ import annotations

import datetime
import math
import numbers
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import replace
from typing import Any

from structknobs_common import ConfigurationError

from .struct import Context, Struct, run
from .utils import UNDEFINED, is_object, is_plain_object, iter_results, print_value


def _same(value: Any, constant: Any) -> bool:
    # Keep True from matching 1 and 1.0 from matching True.
    if value is constant:
        return True
    return type(value) is type(constant) and value == constant


def _without_coercion(struct: Struct) -> Struct:
    """Struct checking values against ``struct`` with every nested coercer off."""

    def validator(value: Any, context: Context) -> Any:
        failure, _ = run(value, struct, context)
        if failure is None:
            return True
        failure_fields = failure.to_dict()
        del failure_fields["explanation"]
        return failure_fields

    return Struct(
        struct.type, schema=struct.schema, validator=validator, description=struct.description
    )


def any_() -> Struct:
    """Accept any value."""
    return Struct("any")


def unknown() -> Struct:
    """Accept any value, including ``UNDEFINED``."""
    return Struct("unknown")


def never() -> Struct:
    """Reject every value."""
    return Struct("never", validator=lambda value, context: False)


def string() -> Struct:
    def validator(value: Any, context: Context) -> Any:
        return isinstance(value, str) or f"Expected a string, but received: {print_value(value)}"

    return Struct("string", validator=validator)


def number() -> Struct:
    """Accept real numbers, excluding booleans and NaN."""

    def validator(value: Any, context: Context) -> Any:
        if (
            isinstance(value, numbers.Real)
            and not isinstance(value, bool)
            and not (isinstance(value, float) and math.isnan(value))
        ):
            return True
        return f"Expected a number, but received: {print_value(value)}"

    return Struct("number", validator=validator)


def integer() -> Struct:
    def validator(value: Any, context: Context) -> Any:
        if isinstance(value, numbers.Integral) and not isinstance(value, bool):
            return True
        return f"Expected an integer, but received: {print_value(value)}"

    return Struct("integer", validator=validator)


def boolean() -> Struct:
    return Struct("boolean", validator=lambda value, context: isinstance(value, bool))


def date() -> Struct:
    """Accept ``datetime.date`` and ``datetime.datetime`` objects."""

    def validator(value: Any, context: Context) -> Any:
        return isinstance(value, datetime.date) or (
            f"Expected a date, but received: {print_value(value)}"
        )

    return Struct("date", validator=validator)


def func() -> Struct:
    def validator(value: Any, context: Context) -> Any:
        return callable(value) or f"Expected a function, but received: {print_value(value)}"

    return Struct("func", validator=validator)


def instance(cls: type) -> Struct:
    """Accept instances of ``cls`` (or its subclasses)."""

    def validator(value: Any, context: Context) -> Any:
        return isinstance(value, cls) or (
            f"Expected a `{cls.__name__}` instance, but received: {print_value(value)}"
        )

    return Struct("instance", schema=None, validator=validator, description=cls.__name__)


def literal(constant: Any) -> Struct:
    description = print_value(constant)

    def validator(value: Any, context: Context) -> Any:
        return _same(value, constant) or (
            f"Expected the literal `{description}`, but received: {print_value(value)}"
        )

    return Struct("literal", schema=constant, validator=validator, description=description)


def enums(values: Sequence[Any]) -> Struct:
    """Accept one of a fixed set of values."""
    values = tuple(values)
    if not values:
        raise ConfigurationError("enums() requires at least one value", context={"values": []})
    description = " | ".join(print_value(v) for v in values)

    def validator(value: Any, context: Context) -> Any:
        if any(_same(value, v) for v in values):
            return True
        return f"Expected one of `{description}`, but received: {print_value(value)}"

    return Struct("enums", schema=values, validator=validator, description=description)


def array(element: Struct | None = None) -> Struct:
    """Accept lists and tuples, validating every element against ``element``."""

    def validator(value: Any, context: Context) -> Any:
        return isinstance(value, (list, tuple)) or (
            f"Expected an array value, but received: {print_value(value)}"
        )

    def entries(value: Any, context: Context) -> Iterator[tuple[Any, Any, Struct]]:
        if element is not None and isinstance(value, (list, tuple)):
            for index, item in enumerate(value):
                yield index, item, element

    description = f"Array<{element.description}>" if element is not None else "Array"
    return Struct(
        "array", schema=element, validator=validator, entries=entries, description=description
    )


def tuple_(elements: Sequence[Struct]) -> Struct:
    """Accept sequences whose items match ``elements`` position by position."""
    elements = tuple(elements)
    fallback = never()

    def validator(value: Any, context: Context) -> Any:
        return isinstance(value, (list, tuple)) or (
            f"Expected an array, but received: {print_value(value)}"
        )

    def entries(value: Any, context: Context) -> Iterator[tuple[Any, Any, Struct]]:
        if isinstance(value, (list, tuple)):
            for index in range(max(len(elements), len(value))):
                item = value[index] if index < len(value) else UNDEFINED
                yield index, item, elements[index] if index < len(elements) else fallback

    description = "[" + ", ".join(s.description for s in elements) + "]"
    return Struct(
        "tuple", schema=elements, validator=validator, entries=entries, description=description
    )


def set_(element: Struct | None = None) -> Struct:
    """Accept sets and frozensets, validating every member against ``element``."""

    def validator(value: Any, context: Context) -> Any:
        return isinstance(value, (set, frozenset)) or (
            f"Expected a `Set` object, but received: {print_value(value)}"
        )

    def entries(value: Any, context: Context) -> Iterator[tuple[Any, Any, Struct]]:
        if element is not None and isinstance(value, (set, frozenset)):
            for item in value:
                yield item, item, element

    description = f"Set<{element.description}>" if element is not None else "Set"
    return Struct("set", schema=element, validator=validator, entries=entries, description=description)


def map_(key: Struct | None = None, value: Struct | None = None) -> Struct:
    """Accept any mapping, validating every key and value.

    Keys are validated but never coerced.
    """
    key_check = _without_coercion(key) if key is not None else None

    def validator(data: Any, context: Context) -> Any:
        return is_object(data) or f"Expected a `Map` object, but received: {print_value(data)}"

    def entries(data: Any, context: Context) -> Iterator[tuple[Any, Any, Struct]]:
        if key_check is not None and value is not None and is_object(data):
            for k, v in data.items():
                yield k, k, key_check
                yield k, v, value

    if key is not None and value is not None:
        description = f"Map<{key.description},{value.description}>"
    else:
        description = "Map"
    return Struct(
        "map", schema=(key, value), validator=validator, entries=entries, description=description
    )


def record(key: Struct, value: Struct) -> Struct:
    """Accept plain dicts whose keys and values all match.

    Keys are validated but never coerced.
    """
    key_check = _without_coercion(key)

    def validator(data: Any, context: Context) -> Any:
        return is_plain_object(data) or (
            f"Expected an object, but received: {print_value(data)}"
        )

    def entries(data: Any, context: Context) -> Iterator[tuple[Any, Any, Struct]]:
        if is_plain_object(data):
            for k, v in data.items():
                yield k, k, key_check
                yield k, v, value

    return Struct(
        "record",
        schema=None,
        validator=validator,
        entries=entries,
        description=f"Record<{key.description},{value.description}>",
    )


def object_(schema: Mapping[str, Struct] | None = None) -> Struct:
    """Accept mappings with exactly the keys of ``schema``.

    Without a schema any mapping is accepted. Keys missing from the input
    are validated as ``UNDEFINED``; keys unknown to the schema fail.
    """
    schema = dict(schema) if schema is not None else None
    unknown_key = never()

    def validator(value: Any, context: Context) -> Any:
        return is_object(value) or f"Expected an object, but received: {print_value(value)}"

    def entries(value: Any, context: Context) -> Iterator[tuple[Any, Any, Struct]]:
        if schema is None or not is_object(value):
            return
        for key, struct in schema.items():
            yield key, value.get(key, UNDEFINED), struct
        for key in value:
            if key not in schema:
                yield key, value[key], unknown_key

    return Struct("object", schema=schema, validator=validator, entries=entries)


def type_(schema: Mapping[str, Struct]) -> Struct:
    """Accept mappings that have at least the keys of ``schema``."""
    schema = dict(schema)

    def validator(value: Any, context: Context) -> Any:
        return is_object(value) or f"Expected an object, but received: {print_value(value)}"

    def entries(value: Any, context: Context) -> Iterator[tuple[Any, Any, Struct]]:
        if is_object(value):
            for key, struct in schema.items():
                yield key, value.get(key, UNDEFINED), struct

    return Struct("type", schema=schema, validator=validator, entries=entries)


def optional(struct: Struct) -> Struct:
    """Also accept ``UNDEFINED``, i.e. a missing key."""
    return replace(
        struct,
        validator=lambda value, context: value is UNDEFINED or struct.validator(value, context),
        refiner=lambda value, context: value is UNDEFINED or struct.refiner(value, context),
    )


def nullable(struct: Struct) -> Struct:
    """Also accept ``None``."""
    return replace(
        struct,
        validator=lambda value, context: value is None or struct.validator(value, context),
        refiner=lambda value, context: value is None or struct.refiner(value, context),
    )


def union(structs: Sequence[Struct]) -> Struct:
    """Accept values matching at least one of ``structs``.

    With coercion, the first member whose coerced value validates wins.
    """
    structs = tuple(structs)
    description = " | ".join(s.description for s in structs)

    def coercer(value: Any) -> Any:
        for struct in structs:
            failure, coerced = run(value, struct, coerce=True)
            if failure is None:
                return coerced
        return value

    def validator(value: Any, context: Context) -> Any:
        for struct in structs:
            failure, _ = run(value, struct, context)
            if failure is None:
                return True
        return (
            f"Expected the value to satisfy a union of `{description}`, "
            f"but received: {print_value(value)}"
        )

    return Struct(
        "union", schema=structs, validator=validator, coercer=coercer, description=description
    )


def intersection(structs: Sequence[Struct]) -> Struct:
    """Accept values matching every one of ``structs``."""
    structs = tuple(structs)

    def validator(value: Any, context: Context) -> Iterator[Any]:
        for struct in structs:
            yield from iter_results(struct.validator(value, context))

    def refiner(value: Any, context: Context) -> Iterator[Any]:
        for struct in structs:
            yield from iter_results(struct.refiner(value, context))

    def entries(value: Any, context: Context) -> Iterator[tuple[Any, Any, Struct]]:
        for struct in structs:
            yield from struct.entries(value, context)

    return Struct(
        "intersection",
        schema=structs,
        validator=validator,
        refiner=refiner,
        entries=entries,
        description=" & ".join(s.description for s in structs),
    )
