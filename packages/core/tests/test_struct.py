"""
Tests for the Struct abstraction, the validation traversal and entry points.
"""

import copy
import dataclasses
import logging

import pytest

from structknobs_common import StructknobsError, ValidationError
from structknobs_core import (
    UNDEFINED,
    Context,
    Failure,
    Struct,
    StructError,
    ValidationResult,
    any_,
    array,
    assert_,
    create,
    define,
    is_,
    is_plain_object,
    map_,
    mask,
    nullable,
    number,
    object_,
    string,
    trimmed,
    type_,
    validate,
)


class TestStructConstruction:
    """Test building structs."""

    def test_defaults(self):
        """Test omitted functions default to permissive behaviour."""
        struct = Struct("custom")
        value = object()

        assert struct.coercer(value) is value
        assert struct.validator(value, Context()) is True
        assert list(struct.refiner(value, Context())) == []
        assert list(struct.entries(value, Context())) == []
        assert struct.schema is None
        assert struct.description == "custom"

    def test_explicit_none_coercer_is_identity(self):
        """Test passing None for the coercer also means identity."""
        struct = Struct("custom", coercer=None)

        assert struct.coercer("x") == "x"

    def test_is_immutable(self):
        """Test fields cannot be reassigned."""
        struct = string()

        with pytest.raises(dataclasses.FrozenInstanceError):
            struct.coercer = str.strip

    def test_reusable_across_calls(self):
        """Test a struct keeps no state between validations."""
        struct = object_({"name": trimmed(string())})

        assert create({"name": " a "}, struct) == {"name": "a"}
        assert not is_({"name": 1}, struct)
        assert create({"name": " b "}, struct) == {"name": "b"}

    def test_repr(self):
        """Test the representation names the struct's type."""
        assert repr(array(string())) == "Struct(Array<string>)"


class TestContext:
    """Test Context path tracking."""

    def test_child_extends_path_and_branch(self):
        """Test a child context appends one key and one value."""
        root = Context((), ({"a": 1},))
        child = root.child("a", 1)

        assert child.path == ("a",)
        assert child.branch == ({"a": 1}, 1)
        assert root.path == ()


class TestTraversal:
    """Test failure reporting during validation."""

    def test_root_failure(self):
        """Test a root failure has an empty path and a one-value branch."""
        result = validate(42, string())

        failure = result.error.failure
        assert failure.path == []
        assert failure.branch == [42]
        assert failure.value == 42
        assert failure.key is None
        assert failure.type == "string"
        assert failure.reason is None
        assert failure.message == "Expected a string, but received: 42"

    def test_nested_failure(self):
        """Test nested failures report the full path and branch."""
        struct = object_({"tags": array(string())})
        data = {"tags": ["a", 1]}

        error = validate(data, struct).error

        assert error.path == ["tags", 1]
        assert error.key == 1
        assert error.value == 1
        assert error.type == "string"
        assert error.branch == [data, ["a", 1], 1]
        assert str(error) == "At path: tags.1 -- Expected a string, but received: 1"

    def test_fail_fast_siblings(self):
        """Test siblings after the first failure are never checked."""
        calls = []
        struct = object_({
            "a": define("a", lambda v, c: calls.append("a") or False),
            "b": define("b", lambda v, c: calls.append("b") or True),
        })

        result = validate({"a": 1, "b": 2}, struct)

        assert not result
        assert result.error.path == ["a"]
        assert calls == ["a"]

    def test_fail_fast_within_validator(self):
        """Test a generator validator is not advanced past its first failure."""
        calls = []

        def checks(value, context):
            yield True
            yield "first problem"
            calls.append("second")
            yield "second problem"

        error = validate(1, define("checks", checks)).error

        assert error.failure.message == "first problem"
        assert calls == []

    def test_children_skipped_after_validator_failure(self):
        """Test entries are not visited when the container itself is invalid."""
        calls = []
        struct = Struct(
            "custom",
            validator=lambda v, c: False,
            entries=lambda v, c: calls.append(v) or [],
        )

        assert not is_({}, struct)
        assert calls == []

    def test_dict_result_fields(self):
        """Test validators can supply a message and a reason."""
        struct = define("short", lambda v, c: {"message": "too long", "reason": {"max": 3}})

        failure = validate("abcd", struct).error.failure

        assert failure.message == "too long"
        assert failure.reason == {"max": 3}
        assert failure.type == "short"

    def test_default_message(self):
        """Test False produces a generic message naming the type."""
        failure = validate("x", define("even", lambda v, c: False)).error.failure

        assert failure.message == 'Expected a value of type `even`, but received: `"x"`'

    def test_invalid_validator_result(self):
        """Test unsupported validator results are a programming error."""
        with pytest.raises(TypeError):
            validate(1, define("bad", lambda v, c: 42))

    def test_coercion_does_not_mutate_input(self):
        """Test nested coercion writes into copies."""
        struct = object_({"user": object_({"name": trimmed(string())})})
        data = {"user": {"name": "  Ada "}}
        original = copy.deepcopy(data)

        result = create(data, struct)

        assert result == {"user": {"name": "Ada"}}
        assert data == original

    def test_coercion_keeps_sequence_type(self):
        """Test coerced tuples stay tuples."""
        assert create((" a", "b "), array(trimmed(string()))) == ("a", "b")
        assert create([" a"], array(trimmed(string()))) == ["a"]

    def test_none_key_extends_path(self):
        """Test a None mapping key is reported like any other key."""
        data = {"a": 1, None: "bad"}

        error = validate(data, map_(any_(), number())).error

        assert error.path == [None]
        assert error.key is None
        assert error.branch == [data, "bad"]
        assert str(error) == "At path: None -- Expected a number, but received: \"bad\""

    def test_none_key_coercion(self):
        """Test a coerced value under a None key is written back under that key."""
        struct = map_(nullable(string()), trimmed(string()))
        data = {None: "  x  ", "a": "b"}

        assert create(data, struct) == {None: "x", "a": "b"}
        assert data == {None: "  x  ", "a": "b"}


class TestEntryPoints:
    """Test validate, create, mask, is_ and assert_."""

    def test_validate_success(self):
        """Test a successful ValidationResult."""
        result = validate("ok", string())

        assert isinstance(result, ValidationResult)
        assert result.valid is True
        assert bool(result) is True
        assert result.value == "ok"
        assert result.error is None

    def test_validate_failure(self):
        """Test a failed ValidationResult keeps the input."""
        result = validate(" x ", trimmed(number()))

        assert result.valid is False
        assert bool(result) is False
        assert result.value == " x "
        assert isinstance(result.error, StructError)

    def test_create_raises(self):
        """Test create raises StructError for invalid input."""
        with pytest.raises(StructError) as exc_info:
            create("x", number())

        assert exc_info.value.path == []

    def test_assert_does_not_coerce(self):
        """Test assert_ validates the raw value."""
        struct = trimmed(string())

        assert assert_(" a ", struct) is None
        with pytest.raises(StructError):
            assert_(1, struct)

    def test_is_does_not_coerce(self):
        """Test is_ ignores coercion."""
        struct = object_({"name": string()})

        assert is_({"name": "a"}, struct) is True
        assert is_({"name": "a", "extra": 1}, struct) is False

    def test_mask(self):
        """Test mask drops unknown keys at every object level."""
        struct = object_({"user": object_({"id": number()})})
        data = {"user": {"id": 1, "secret": "x"}, "other": 3}

        assert mask(data, struct) == {"user": {"id": 1}}
        assert data["user"] == {"id": 1, "secret": "x"}

    def test_mask_keeps_type_extras(self):
        """Test type_ structs keep keys they do not declare."""
        assert mask({"a": 1, "b": 2}, type_({"a": number()})) == {"a": 1, "b": 2}

    def test_optional_key(self, user_struct):
        """Test missing optional keys pass and present ones are checked."""
        assert is_({"name": "a"}, user_struct)
        assert validate({"name": "a", "age": "x"}, user_struct).error.path == ["age"]

    def test_struct_methods(self):
        """Test the entry points are also available on structs."""
        struct = trimmed(string())

        assert struct.create(" a ") == "a"
        assert struct.is_("a")
        assert struct.validate(1).valid is False
        assert struct.mask(" b ") == "b"
        with pytest.raises(StructError):
            struct.assert_(1)

    def test_custom_message(self):
        """Test a caller-supplied message replaces the failure message."""
        with pytest.raises(StructError) as exc_info:
            assert_({"a": 1}, object_({"a": string()}), message="Bad payload")

        error = exc_info.value
        assert str(error) == "Bad payload"
        assert error.failure.explanation == "Bad payload"
        assert error.path == ["a"]

    def test_rejection_is_logged(self, caplog):
        """Test rejected values are logged at debug level."""
        with caplog.at_level(logging.DEBUG, logger="structknobs_core.struct"):
            with pytest.raises(StructError):
                create(1, string())

        assert "Rejected value at path []" in caplog.text


class TestStructError:
    """Test the StructError exception."""

    def test_hierarchy(self):
        """Test StructError belongs to the common exception hierarchy."""
        error = validate(1, string()).error

        assert isinstance(error, ValidationError)
        assert isinstance(error, StructknobsError)

    def test_context_holds_failure(self):
        """Test the error context exposes the failure fields."""
        error = validate({"a": 1}, object_({"a": string()})).error

        assert error.context == error.failure.to_dict()
        assert error.context["path"] == ["a"]
        assert error.context["type"] == "string"


class TestFailure:
    """Test the Failure record."""

    def test_to_dict(self):
        """Test conversion to a plain dictionary."""
        failure = Failure(value=1, type="string", message="bad", path=["a"], branch=[{}, 1])

        assert failure.to_dict() == {
            "value": 1,
            "type": "string",
            "message": "bad",
            "path": ["a"],
            "branch": [{}, 1],
            "key": None,
            "refinement": None,
            "reason": None,
            "explanation": None,
        }

    def test_fresh_per_call(self):
        """Test each failed call produces a new failure record."""
        struct = string()

        first = validate(1, struct).error.failure
        second = validate(1, struct).error.failure

        assert first is not second
        assert first.path is not second.path


class TestUtils:
    """Test the small helpers."""

    def test_undefined_singleton(self):
        """Test UNDEFINED is a falsy singleton that survives copying."""
        assert not UNDEFINED
        assert repr(UNDEFINED) == "UNDEFINED"
        assert copy.copy(UNDEFINED) is UNDEFINED
        assert copy.deepcopy(UNDEFINED) is UNDEFINED
        assert type(UNDEFINED)() is UNDEFINED

    def test_is_plain_object(self):
        """Test only dicts are plain records."""
        assert is_plain_object({})
        assert is_plain_object({"a": 1})
        assert not is_plain_object([])
        assert not is_plain_object(None)
        assert not is_plain_object("text")
        assert not is_plain_object(object())
