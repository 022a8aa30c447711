"""
Tests for domain entities.

This module tests the domain entities including:
- Collection and as_collection
- Function selectors (Direct, Named, Field, Position)
- MapCall validation
- SafeResult, ErrorDiagnostic and QuietResult
"""

from unittest.mock import Mock

import msgspec
import pytest

from mapflow.domain.entity import (
    Arguments,
    Collection,
    Direct,
    ErrorDiagnostic,
    Field,
    FunctionSelector,
    MapCall,
    Named,
    Position,
    QuietResult,
    SafeResult,
    as_collection,
)
from mapflow.domain.exception import SizeMismatchError
from mapflow.domain.value_object import ResultKind


class Point(msgspec.Struct):
    x: int
    y: int


class TestCollection:
    """Test cases for Collection."""

    def test_create_unnamed_collection(self):
        """Test creating a collection without names."""
        c = Collection(values=[1, 2, 3])

        assert c.values == (1, 2, 3)
        assert c.names is None
        assert c.kind == ResultKind.GENERIC
        assert len(c) == 3

    def test_values_and_names_become_tuples(self):
        """Test that list inputs are stored as tuples."""
        c = Collection(values=[1, 2], names=["a", "b"])

        assert isinstance(c.values, tuple)
        assert isinstance(c.names, tuple)

    def test_empty_collection(self):
        """Test that an empty collection is valid."""
        c = Collection()

        assert len(c) == 0
        assert list(c) == []

    def test_names_length_must_match(self):
        """Test that names and values must have the same length."""
        with pytest.raises(ValueError, match="2 values but 1 names"):
            Collection(values=[1, 2], names=["a"])

    def test_names_must_be_unique(self):
        """Test that duplicated names are rejected."""
        with pytest.raises(ValueError, match="unique"):
            Collection(values=[1, 2], names=["a", "a"])

    def test_collection_is_frozen(self):
        """Test that collections cannot be modified."""
        c = Collection(values=[1])

        with pytest.raises(AttributeError):
            c.values = (2,)

    def test_iteration_yields_values(self):
        """Test iterating over a collection."""
        c = Collection(values=["x", "y"], names=["a", "b"])

        assert list(c) == ["x", "y"]

    def test_getitem_by_index_and_name(self):
        """Test indexing by position and by name."""
        c = Collection(values=[10, 20], names=["a", "b"])

        assert c[0] == 10
        assert c[-1] == 20
        assert c["b"] == 20

    def test_getitem_unknown_name(self):
        """Test that unknown names raise KeyError."""
        c = Collection(values=[10], names=["a"])

        with pytest.raises(KeyError):
            c["missing"]

    def test_getitem_name_on_unnamed_collection(self):
        """Test that name lookups on unnamed collections raise KeyError."""
        with pytest.raises(KeyError, match="no names"):
            Collection(values=[1])["a"]

    def test_get_with_default(self):
        """Test get returns the default for missing names."""
        c = Collection(values=[1], names=["a"])

        assert c.get("a") == 1
        assert c.get("b") is None
        assert c.get("b", 0) == 0
        assert Collection(values=[1]).get("a", "d") == "d"

    def test_items_and_name_at(self):
        """Test items pairs names with values."""
        named = Collection(values=[1, 2], names=["a", "b"])
        unnamed = Collection(values=[1, 2])

        assert named.items() == [("a", 1), ("b", 2)]
        assert unnamed.items() == [(None, 1), (None, 2)]
        assert named.name_at(1) == "b"
        assert unnamed.name_at(1) is None

    def test_to_dict_requires_names(self):
        """Test conversion to a dict."""
        assert Collection(values=[1, 2], names=["a", "b"]).to_dict() == {"a": 1, "b": 2}
        with pytest.raises(ValueError, match="named"):
            Collection(values=[1]).to_dict()

    def test_with_values_keeps_names(self):
        """Test building a same-shaped collection from new values."""
        c = Collection(values=[1, 2], names=["a", "b"])

        new = c.with_values((v * 10 for v in c), kind=ResultKind.INT)

        assert new.values == (10, 20)
        assert new.names == ("a", "b")
        assert new.kind == ResultKind.INT
        assert c.values == (1, 2)

    def test_with_values_length_mismatch(self):
        """Test that with_values rejects a different number of values."""
        with pytest.raises(SizeMismatchError):
            Collection(values=[1, 2]).with_values([1])

    def test_equality(self):
        """Test that collections compare by content."""
        assert Collection(values=[1, 2]) == Collection(values=(1, 2))
        assert Collection(values=[1, 2]) != Collection(values=[1, 2], kind=ResultKind.INT)


class TestAsCollection:
    """Test cases for as_collection."""

    def test_collection_is_returned_as_is(self):
        c = Collection(values=[1])
        assert as_collection(c) is c

    def test_mapping_keys_become_names(self):
        c = as_collection({"a": 1, "b": 2})

        assert c.values == (1, 2)
        assert c.names == ("a", "b")

    def test_list_and_generator(self):
        assert as_collection([1, 2]).values == (1, 2)
        assert as_collection(x for x in range(3)).values == (0, 1, 2)

    def test_strings_are_rejected(self):
        with pytest.raises(TypeError, match="str"):
            as_collection("abc")

    def test_non_iterables_are_rejected(self):
        with pytest.raises(TypeError, match="int"):
            as_collection(5)


class TestSelectors:
    """Test cases for function selectors."""

    def test_direct_returns_callable(self):
        assert Direct(function=len).resolve() is len

    def test_direct_rejects_non_callable(self):
        with pytest.raises(TypeError, match="not callable"):
            Direct(function=3).resolve()

    def test_named_uses_resolver(self):
        resolver = Mock()
        resolver.resolve.return_value = abs

        assert Named(name="abs").resolve(resolver) is abs
        resolver.resolve.assert_called_once_with("abs")

    def test_named_requires_resolver(self):
        with pytest.raises(ValueError, match="resolver"):
            Named(name="abs").resolve()

    def test_field_on_mapping_struct_and_collection(self):
        get = Field(key="x").resolve()

        assert get({"x": 1}) == 1
        assert get(Point(x=2, y=3)) == 2
        assert get(Collection(values=[4], names=["x"])) == 4

    def test_field_missing_returns_default(self):
        assert Field(key="z").resolve()({"x": 1}) is None
        assert Field(key="z", default=0).resolve()(Point(x=1, y=2)) == 0

    def test_position_on_sequences_mappings_and_structs(self):
        second = Position(index=1).resolve()

        assert second([1, 2, 3]) == 2
        assert second("abc") == "b"
        assert second({"a": 1, "b": 2}) == 2
        assert second(Point(x=1, y=5)) == 5

    def test_position_out_of_range_returns_default(self):
        assert Position(index=5, default="none").resolve()([1]) == "none"

    def test_selectors_are_tagged(self):
        assert isinstance(Field(key="a"), FunctionSelector)
        assert msgspec.to_builtins(Field(key="a"))["selector"] == "field"
        assert msgspec.to_builtins(Position(index=0))["selector"] == "position"


class TestMapCall:
    """Test cases for MapCall."""

    def test_validate_equal_lengths(self):
        call = MapCall(inputs=(Collection(values=[1, 2]), Collection(values=[3, 4])), function=Direct(function=max))

        call.validate()
        assert call.size == 2

    def test_validate_size_mismatch(self):
        call = MapCall(inputs=(Collection(values=[1, 2]), Collection(values=[3])), function=Direct(function=max))

        with pytest.raises(SizeMismatchError) as exc:
            call.validate()
        assert exc.value.lengths == [2, 1]

    def test_validate_requires_inputs(self):
        with pytest.raises(ValueError, match="At least one"):
            MapCall(inputs=(), function=Direct(function=max)).validate()

    def test_validate_argument_names_count(self):
        call = MapCall(inputs=(Collection(values=[1]),), function=Direct(function=max), arg_names=("a", "b"))

        with pytest.raises(ValueError, match="argument names"):
            call.validate()

    def test_names_come_from_first_input(self):
        call = MapCall(
            inputs=(Collection(values=[1], names=["a"]), Collection(values=[2], names=["z"])),
            function=Direct(function=max),
        )

        assert call.names == ("a",)


class TestResults:
    """Test cases for SafeResult, ErrorDiagnostic and QuietResult."""

    def test_safe_result_success(self):
        r = SafeResult(result=3)

        assert r.ok
        assert r.error is None

    def test_safe_result_failure(self):
        r = SafeResult(error=ErrorDiagnostic(kind="ValueError", message="bad"))

        assert not r.ok
        assert r.result is None

    def test_safe_result_cannot_hold_both(self):
        with pytest.raises(ValueError, match="both"):
            SafeResult(result=1, error=ErrorDiagnostic(kind="ValueError", message="bad"))

    def test_diagnostic_from_exception(self):
        try:
            raise ValueError("boom")
        except ValueError as e:
            diag = ErrorDiagnostic.from_exception(e, (1, "a"), {"flag": True})

        assert diag.kind == "ValueError"
        assert diag.message == "boom"
        assert diag.args == ["1", "'a'"]
        assert diag.kwargs == {"flag": "True"}
        assert "ValueError: boom" in diag.traceback

    def test_diagnostic_is_encodable(self):
        diag = ErrorDiagnostic(kind="KeyError", message="'x'")

        assert msgspec.json.decode(msgspec.json.encode(diag), type=ErrorDiagnostic) == diag

    def test_quiet_result_defaults(self):
        r = QuietResult(result=1)

        assert r.output == ""
        assert r.warnings == []
        assert r.messages == ""

    def test_arguments_defaults(self):
        a = Arguments()

        assert a.args == ()
        assert a.kwargs == {}
