"""
Global pytest configuration and fixtures.
"""

import pytest

from recordguard.record import define_record_type
from recordguard.validator import CollectingDiagnosticSink, SchemaRegistry


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep local recordguard settings from leaking into tests."""
    for name in ("RECORDGUARD_CONFIG", "RECORDGUARD_PRODUCTION", "RECORDGUARD_MODE"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sink():
    return CollectingDiagnosticSink()


@pytest.fixture
def registry():
    """Registry holding fresh Item and Player record types.

    The types are rebuilt per test so schema extensions never leak.
    """
    registry = SchemaRegistry()
    define_record_type("Item", {"id": "String", "weight": "float"}, registry)
    define_record_type(
        "Player",
        {
            "name": "String",
            "level": "int",
            "health": "float?",
            "inventory": "Array<Item>",
            "weapon": "Item?",
        },
        registry,
        description="A player character",
    )
    return registry


@pytest.fixture
def item_type(registry):
    return registry.get("Item")


@pytest.fixture
def player_type(registry):
    return registry.get("Player")
