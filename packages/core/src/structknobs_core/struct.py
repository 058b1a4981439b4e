"""Struct definition, the validation traversal and its entry points.

A ``Struct`` bundles everything needed to check one shape of data: a type
tag, a schema descriptor, a validator, a coercer, a refiner and an
``entries`` function exposing nested values for recursive validation.
Structs are immutable; combinators build new ones with
``dataclasses.replace``.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field, fields, replace
from typing import Any

from structknobs_common import ValidationError

from .utils import UNDEFINED, is_object, iter_results, print_value, to_failure_fields

logger = logging.getLogger(__name__)

Validator = Callable[[Any, "Context"], Any]
Coercer = Callable[[Any], Any]
Entries = Callable[[Any, "Context"], Iterable[tuple[Any, Any, "Struct"]]]


def _identity(value: Any) -> Any:
    return value


def _always_valid(value: Any, context: Context) -> bool:
    return True


def _no_refinements(value: Any, context: Context) -> tuple:
    return ()


def _no_entries(value: Any, context: Context) -> tuple:
    return ()


@dataclass(frozen=True)
class Context:
    """Location of the value currently being validated.

    ``path`` holds the keys/indices from the root, ``branch`` the values
    from the root down to (and including) the current value.
    """

    path: tuple = ()
    branch: tuple = ()

    def child(self, key: Any, value: Any) -> Context:
        """Context for a nested value reached through ``key``."""
        return Context(self.path + (key,), self.branch + (value,))


@dataclass(frozen=True, eq=False)
class Struct:
    """Immutable validator for one shape of data.

    Args:
        type: Tag naming the kind of validator ("string", "map", ...)
        schema: Descriptor of the expected shape; child structs for containers
        validator: ``(value, context)`` returning True/False, a message, a
            dict of failure fields or an iterable of those
        coercer: ``(value) -> value`` applied by ``create``; identity by default
        refiner: Like ``validator`` but only run once the value and its
            children passed type validation
        entries: ``(value, context)`` yielding ``(key, child_value, child_struct)``
        description: Human readable type used in failures; defaults to ``type``
    """

    type: str
    schema: Any = None
    validator: Validator = _always_valid
    coercer: Coercer = _identity
    refiner: Validator = _no_refinements
    entries: Entries = _no_entries
    description: str | None = None

    def __post_init__(self) -> None:
        defaults = {
            "validator": _always_valid,
            "coercer": _identity,
            "refiner": _no_refinements,
            "entries": _no_entries,
        }
        for name, default in defaults.items():
            if getattr(self, name) is None:
                object.__setattr__(self, name, default)
        if self.description is None:
            object.__setattr__(self, "description", self.type)

    def __repr__(self) -> str:
        return f"Struct({self.description})"

    def validate(
        self,
        value: Any = UNDEFINED,
        coerce: bool = False,
        mask: bool = False,
        message: str | None = None,
    ) -> ValidationResult:
        """Validate a value against this struct; see ``validate``."""
        return validate(value, self, coerce=coerce, mask=mask, message=message)

    def create(self, value: Any = UNDEFINED, message: str | None = None) -> Any:
        """Coerce then validate a value; see ``create``."""
        return create(value, self, message=message)

    def mask(self, value: Any = UNDEFINED, message: str | None = None) -> Any:
        """Coerce, mask and validate a value; see ``mask``."""
        return mask(value, self, message=message)

    def is_(self, value: Any = UNDEFINED) -> bool:
        """Check a value without coercion; see ``is_``."""
        return is_(value, self)

    def assert_(self, value: Any = UNDEFINED, message: str | None = None) -> None:
        """Validate a value without coercion or raise; see ``assert_``."""
        assert_(value, self, message=message)


@dataclass
class Failure:
    """Description of a single validation failure."""

    value: Any
    type: str
    message: str
    path: list = field(default_factory=list)
    branch: list = field(default_factory=list)
    key: Any = None
    refinement: str | None = None
    reason: Any = None
    explanation: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert the failure to a plain dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self)}


class StructError(ValidationError):
    """Raised by ``create``, ``assert_`` and ``mask`` for invalid values.

    The failure's fields are available directly on the error
    (``error.path``, ``error.value``, ...) and as the error context.
    """

    def __init__(self, failure: Failure):
        self.failure = failure
        if failure.explanation is not None:
            message = failure.explanation
        elif failure.path:
            path = ".".join(str(key) for key in failure.path)
            message = f"At path: {path} -- {failure.message}"
        else:
            message = failure.message
        super().__init__(message, context=failure.to_dict())

        self.value = failure.value
        self.key = failure.key
        self.type = failure.type
        self.refinement = failure.refinement
        self.path = failure.path
        self.branch = failure.branch
        self.reason = failure.reason


@dataclass
class ValidationResult:
    """Outcome of ``validate``.

    ``value`` is the validated (possibly coerced) value on success and the
    original input on failure, where ``error`` holds the ``StructError``.
    """

    valid: bool
    value: Any
    error: StructError | None = None

    def __bool__(self) -> bool:
        """Allow 'if result:' usage to check validity."""
        return self.valid

    @classmethod
    def success(cls, value: Any) -> ValidationResult:
        return cls(valid=True, value=value)

    @classmethod
    def failure(cls, value: Any, error: StructError) -> ValidationResult:
        return cls(valid=False, value=value, error=error)


def _first_failure(
    result: Any,
    context: Context,
    struct: Struct,
    value: Any,
    explanation: str | None,
) -> Failure | None:
    """Build a failure from the first invalid item of a validator result."""
    for item in iter_results(result):
        failure_fields = to_failure_fields(item)
        if failure_fields is None:
            continue

        refinement = failure_fields.get("refinement")
        message = failure_fields.pop("message", None)
        if message is None:
            message = f"Expected a value of type `{struct.description}`"
            if refinement:
                message += f" with refinement `{refinement}`"
            message += f", but received: `{print_value(value)}`"

        params: dict[str, Any] = {
            "value": value,
            "type": struct.description,
            "key": context.path[-1] if context.path else None,
            "path": list(context.path),
            "branch": list(context.branch),
            "explanation": explanation,
        }
        params.update(failure_fields)
        return Failure(message=message, **params)
    return None


def _drop_unknown_keys(value: Mapping, schema: Mapping) -> Any:
    if all(key in schema for key in value):
        return value
    return {key: item for key, item in value.items() if key in schema}


def _apply_updates(value: Any, updates: dict[Any, Any]) -> Any:
    """Return a shallow copy of ``value`` with coerced children written in."""
    if isinstance(value, Mapping):
        result = copy.copy(value) if isinstance(value, dict) else dict(value)
        result.update(updates)
        return result
    if isinstance(value, (list, tuple)):
        items = list(value)
        for index, item in updates.items():
            items[index] = item
        return items if isinstance(value, list) else type(value)(items)
    if isinstance(value, (set, frozenset)):
        items = set(value).difference(updates)
        items.update(updates.values())
        return type(value)(items)
    return value


def run(
    value: Any,
    struct: Struct,
    context: Context | None = None,
    coerce: bool = False,
    mask: bool = False,
    message: str | None = None,
) -> tuple[Failure | None, Any]:
    """Validate ``value`` against ``struct`` depth first.

    Returns ``(failure, None)`` for the first failure found, otherwise
    ``(None, value)`` with the (possibly coerced) value. Nothing is
    checked after the first failure. The input is never mutated: coerced
    children are written into shallow copies of their containers.
    """
    if context is None:
        context = Context((), (value,))

    if coerce:
        value = struct.coercer(value)
        if mask and struct.type != "type" and is_object(struct.schema) and is_object(value):
            value = _drop_unknown_keys(value, struct.schema)

    failure = _first_failure(struct.validator(value, context), context, struct, value, message)
    if failure is not None:
        return failure, None

    updates: dict[Any, Any] = {}
    for key, child_value, child_struct in struct.entries(value, context):
        child_context = context.child(key, child_value)
        failure, coerced = run(child_value, child_struct, child_context, coerce, mask, message)
        if failure is not None:
            return failure, None
        if coerce and coerced is not child_value:
            updates[key] = coerced

    if updates:
        value = _apply_updates(value, updates)

    failure = _first_failure(struct.refiner(value, context), context, struct, value, message)
    if failure is not None:
        return failure, None

    return None, value


def validate(
    value: Any,
    struct: Struct,
    coerce: bool = False,
    mask: bool = False,
    message: str | None = None,
) -> ValidationResult:
    """Validate a value and return the outcome instead of raising.

    Args:
        value: Value to validate
        struct: Struct to validate against
        coerce: If True, run the struct's coercers first
        mask: If True (with coerce), drop keys unknown to object schemas
        message: Optional message replacing the default failure message

    Returns:
        ValidationResult with the coerced value or the StructError
    """
    failure, result = run(value, struct, coerce=coerce, mask=mask, message=message)
    if failure is not None:
        return ValidationResult.failure(value, StructError(failure))
    return ValidationResult.success(result)


def _unwrap(result: ValidationResult) -> Any:
    if result.error is not None:
        logger.debug(
            "Rejected value at path %s: %s", result.error.path, result.error.failure.message
        )
        raise result.error
    return result.value


def create(value: Any, struct: Struct, message: str | None = None) -> Any:
    """Coerce then validate a value, returning it or raising StructError."""
    return _unwrap(validate(value, struct, coerce=True, message=message))


def mask(value: Any, struct: Struct, message: str | None = None) -> Any:
    """Like ``create`` but also drops keys not declared by object schemas."""
    return _unwrap(validate(value, struct, coerce=True, mask=True, message=message))


def assert_(value: Any, struct: Struct, message: str | None = None) -> None:
    """Validate a value without coercion, raising StructError if invalid."""
    _unwrap(validate(value, struct, message=message))


def is_(value: Any, struct: Struct) -> bool:
    """Check a value without coercion."""
    return validate(value, struct).valid


def with_coercer(struct: Struct, coercer: Coercer) -> Struct:
    """Copy of ``struct`` with only its coercer replaced."""
    return replace(struct, coercer=coercer)
