"""
Tests for the operation registry.
"""

import pytest

from apigate.framework.operations import describe_handler
from apigate.framework.registry import OperationRegistry
from tests._support.handlers import Calculator, Spy


class TestOperationRegistry:
    def test_resolve(self):
        registry = OperationRegistry({"calc": Calculator})
        assert registry.resolve("calc").handler is Calculator
        assert registry.resolve("nope") is None

    def test_accepts_descriptors(self):
        descriptor = describe_handler(Calculator, factory=Calculator)
        registry = OperationRegistry({"calc": descriptor})
        assert registry.resolve("calc") is descriptor

    def test_descriptor_for_type(self):
        registry = OperationRegistry({"calc": Calculator, "spy": Spy})
        assert registry.descriptor_for(Spy).handler is Spy
        assert registry.descriptor_for(int) is None

    def test_first_registration_wins_for_type(self):
        first = describe_handler(Calculator, factory=lambda: Calculator())
        registry = OperationRegistry({"a": first, "b": Calculator})
        assert registry.descriptor_for(Calculator) is first

    def test_container_protocol(self):
        registry = OperationRegistry({"spy": Spy, "calc": Calculator})
        assert "calc" in registry
        assert len(registry) == 2
        assert list(registry) == ["calc", "spy"]
        assert [cid for cid, _ in registry.items()] == ["calc", "spy"]

    @pytest.mark.parametrize("class_id", ["", None, 3])
    def test_rejects_bad_identifiers(self, class_id):
        with pytest.raises(ValueError):
            OperationRegistry({class_id: Calculator})
