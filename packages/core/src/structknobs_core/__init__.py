"""Composable runtime validation and coercion of Python data.

A struct describes the expected shape of a value. Build one from the type
catalogue, layer coercions and refinements on top, then check data with
``create`` (coerce, then validate), ``is_``, ``assert_`` or ``validate``.

Example:
    ```python
    from structknobs_core import create, defaulted, number, object_, string, trimmed

    User = object_({
        "name": trimmed(string()),
        "age": defaulted(number(), 18),
    })

    create({"name": "  Ada "}, User)
    # {'name': 'Ada', 'age': 18}
    ```
"""

from .coercions import coerce, defaulted, masked, trimmed
from .refinements import empty, max_, min_, nonempty, pattern, refine, size
from .struct import (
    Context,
    Failure,
    Struct,
    StructError,
    ValidationResult,
    assert_,
    create,
    is_,
    mask,
    validate,
)
from .types import (
    any_,
    array,
    boolean,
    date,
    enums,
    func,
    instance,
    integer,
    intersection,
    literal,
    map_,
    never,
    nullable,
    number,
    object_,
    optional,
    record,
    set_,
    string,
    tuple_,
    type_,
    union,
    unknown,
)
from .utilities import assign, define, deprecated, dynamic, lazy, omit, partial, pick
from .utils import UNDEFINED, is_plain_object

__version__ = "0.1.0"

__all__ = [
    # Core
    "Struct",
    "Context",
    "Failure",
    "StructError",
    "ValidationResult",
    "UNDEFINED",
    "validate",
    "create",
    "mask",
    "is_",
    "assert_",
    "is_plain_object",
    # Coercions
    "coerce",
    "defaulted",
    "masked",
    "trimmed",
    # Types
    "any_",
    "array",
    "boolean",
    "date",
    "enums",
    "func",
    "instance",
    "integer",
    "intersection",
    "literal",
    "map_",
    "never",
    "nullable",
    "number",
    "object_",
    "optional",
    "record",
    "set_",
    "string",
    "tuple_",
    "type_",
    "union",
    "unknown",
    # Refinements
    "refine",
    "empty",
    "nonempty",
    "size",
    "min_",
    "max_",
    "pattern",
    # Utilities
    "define",
    "deprecated",
    "dynamic",
    "lazy",
    "assign",
    "omit",
    "pick",
    "partial",
]
