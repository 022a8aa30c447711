"""
Tests for in-memory function resolver.

This module tests the InMemoryFunctionResolver implementation.
"""

import pytest

from mapflow.domain.exception import UnresolvedCallableError
from mapflow.infrastructure.adapter.in_memory.function_resolver import InMemoryFunctionResolver


def shout(text: str) -> str:
    return text.upper()


def whisper(text: str) -> str:
    return text.lower()


class TestInMemoryFunctionResolver:
    """Test cases for InMemoryFunctionResolver."""

    def test_create_resolver_empty(self):
        """Test creating resolver without functions."""
        resolver = InMemoryFunctionResolver()

        assert isinstance(resolver._registry, dict)
        assert resolver.names() == []

    def test_create_resolver_with_list(self):
        """Test that listed functions are registered under their __name__."""
        resolver = InMemoryFunctionResolver([shout, whisper])

        assert resolver.names() == ["shout", "whisper"]
        assert resolver.resolve("shout") is shout

    def test_create_resolver_with_mapping(self):
        """Test that mapping keys are used as names."""
        resolver = InMemoryFunctionResolver({"loud": shout})

        assert resolver.names() == ["loud"]
        assert resolver.resolve("loud")("hi") == "HI"

    def test_register_replaces_existing(self):
        """Test that registering a name again replaces the function."""
        resolver = InMemoryFunctionResolver({"speak": shout})

        resolver.register(whisper, "speak")

        assert resolver.resolve("speak") is whisper

    def test_register_requires_callable(self):
        with pytest.raises(TypeError, match="not callable"):
            InMemoryFunctionResolver().register("shout", "x")

    def test_register_requires_a_name(self):
        class Anonymous:
            def __call__(self):
                return None

        with pytest.raises(ValueError, match="name is required"):
            InMemoryFunctionResolver().register(Anonymous())

    def test_resolve_unknown_name(self):
        """Test resolving an unregistered name."""
        resolver = InMemoryFunctionResolver([shout])

        with pytest.raises(UnresolvedCallableError, match="No function registered under name 'missing'"):
            resolver.resolve("missing")

    def test_resolve_is_case_sensitive(self):
        resolver = InMemoryFunctionResolver([shout])

        with pytest.raises(UnresolvedCallableError):
            resolver.resolve("SHOUT")
