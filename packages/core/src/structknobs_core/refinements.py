"""Refinements: additional checks layered on top of a struct's type check.

Refiners only run once a value passed its struct's validator and all of
its nested values, so they can rely on the value having the right type.
"""

from __future__ import annotations

import datetime
import numbers
import re
from collections.abc import Iterator
from dataclasses import replace
from re import Pattern
from typing import Any

from structknobs_common import ConfigurationError

from .struct import Context, Struct, Validator
from .utils import iter_results, print_value, to_failure_fields


def refine(struct: Struct, name: str, refiner: Validator) -> Struct:
    """Add a named refinement to a struct.

    The struct's existing refinements run first. Failures produced by
    ``refiner`` carry ``refinement=name``.

    Args:
        struct: Struct to augment
        name: Refinement name reported in failures
        refiner: ``(value, context)`` returning a validator result

    Returns:
        New struct with the combined refiner
    """
    previous = struct.refiner

    def combined(value: Any, context: Context) -> Iterator[Any]:
        yield from iter_results(previous(value, context))
        for result in iter_results(refiner(value, context)):
            failure_fields = to_failure_fields(result)
            if failure_fields is not None:
                yield {**failure_fields, "refinement": name}

    return replace(struct, refiner=combined)


def _is_magnitude(value: Any) -> bool:
    return (
        isinstance(value, (numbers.Real, datetime.date)) and not isinstance(value, bool)
    )


def empty(struct: Struct) -> Struct:
    """Require a string, list, mapping or set to be empty."""

    def check(value: Any, context: Context) -> Any:
        length = len(value)
        return length == 0 or (
            f"Expected an empty {struct.type} but received one with a size of `{length}`"
        )

    return refine(struct, "empty", check)


def nonempty(struct: Struct) -> Struct:
    """Require a string, list, mapping or set to be non-empty."""

    def check(value: Any, context: Context) -> Any:
        return len(value) > 0 or f"Expected a nonempty {struct.type} but received an empty one"

    return refine(struct, "nonempty", check)


def size(struct: Struct, min: Any, max: Any = None) -> Struct:
    """Require a length (or, for numbers and dates, a value) between ``min`` and ``max``.

    ``max`` defaults to ``min``, i.e. an exact size.
    """
    if max is None:
        max = min
    if min > max:
        raise ConfigurationError(
            f"size() minimum ({min}) cannot be greater than maximum ({max})",
            context={"min": min, "max": max},
        )
    expected = f"of `{min}`" if min == max else f"between `{min}` and `{max}`"

    def check(value: Any, context: Context) -> Any:
        if _is_magnitude(value):
            return min <= value <= max or (
                f"Expected a {struct.type} {expected} but received `{value}`"
            )
        length = len(value)
        return min <= length <= max or (
            f"Expected a {struct.type} with a length {expected} "
            f"but received one with a length of `{length}`"
        )

    return refine(struct, "size", check)


def min_(struct: Struct, threshold: Any, exclusive: bool = False) -> Struct:
    """Require a number or date to be at least ``threshold``."""
    qualifier = "" if exclusive else "or equal to "

    def check(value: Any, context: Context) -> Any:
        passed = value > threshold if exclusive else value >= threshold
        return passed or (
            f"Expected a {struct.type} greater than {qualifier}{threshold} "
            f"but received `{value}`"
        )

    return refine(struct, "min", check)


def max_(struct: Struct, threshold: Any, exclusive: bool = False) -> Struct:
    """Require a number or date to be at most ``threshold``."""
    qualifier = "" if exclusive else "or equal to "

    def check(value: Any, context: Context) -> Any:
        passed = value < threshold if exclusive else value <= threshold
        return passed or (
            f"Expected a {struct.type} less than {qualifier}{threshold} "
            f"but received `{value}`"
        )

    return refine(struct, "max", check)


def pattern(struct: Struct, regexp: str | Pattern) -> Struct:
    """Require a string to contain a match for ``regexp``."""
    compiled = re.compile(regexp) if isinstance(regexp, str) else regexp

    def check(value: Any, context: Context) -> Any:
        return compiled.search(value) is not None or (
            f"Expected a {struct.type} matching `/{compiled.pattern}/` "
            f"but received {print_value(value)}"
        )

    return refine(struct, "pattern", check)
