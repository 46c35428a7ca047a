"""Tests for recordguard.record.core module."""

import pytest

from recordguard.config import RecordguardSettingsModel
from recordguard.record import ValidatedRecord, define_record_type, wrap_nested
from recordguard.validator import (
    ConstructionRejected,
    IssueKind,
    SchemaRegistry,
    Severity,
    TypeValidator,
    ValidationMode,
    parse_descriptor,
)

HERO = {
    "name": "Hero",
    "level": 1,
    "inventory": [{"id": "sword", "weight": 3}],
}


class Monster(ValidatedRecord):
    base_schema = {"kind": "String", "hp": "int"}


class TestConstruction:
    """Test building records from initial data."""

    def test_valid_data_is_committed(self, player_type, sink):
        hero = player_type(HERO, ValidationMode.STRICT, sink=sink)
        assert hero.construction_result.valid
        assert hero.is_valid
        assert hero.get("name") == "Hero"
        assert hero.keys() == ["name", "level", "inventory"]
        assert sink.events == []

    def test_initial_data_is_copied(self, player_type):
        data = {"name": "Hero", "level": 1, "inventory": [], "tags": ["a"]}
        hero = player_type(data)
        data["name"] = "Changed"
        data["tags"].append("b")
        assert hero.get("name") == "Hero"
        assert hero.get("tags") == ["a"]

    def test_rejected_data_leaves_record_empty(self, player_type, sink):
        hero = player_type({"name": 5, "level": 1, "inventory": []}, ValidationMode.STRICT, sink=sink)
        assert not hero.construction_result.valid
        assert hero.construction_result.issue.field == "name"
        assert len(hero) == 0
        assert not hero.is_valid

        assert sink.events[0].severity is Severity.ERROR
        assert sink.events[0].kind is IssueKind.TYPE_MISMATCH
        assert sink.last.kind is IssueKind.CONSTRUCTION_REJECTED
        assert sink.last.context_label == "Player"

    def test_missing_field_rejected_in_loose_mode(self, player_type, sink):
        hero = player_type({"name": "Hero"}, sink=sink)
        assert hero.construction_result.issue.kind is IssueKind.MISSING_FIELD
        assert hero.keys() == []
        assert sink.events[0].severity is Severity.WARNING

    def test_create_checked_raises(self, player_type):
        with pytest.raises(ConstructionRejected, match="Cannot construct 'Player'") as excinfo:
            player_type.create_checked({"name": "Hero", "level": "one", "inventory": []})
        assert excinfo.value.schema_name == "Player"
        assert excinfo.value.issue.field == "level"

    def test_create_checked_returns_record(self, player_type):
        hero = player_type.create_checked(HERO, ValidationMode.STRICT)
        assert isinstance(hero, player_type)
        assert hero.mode is ValidationMode.STRICT

    def test_schema_name_defaults_to_class_name(self):
        assert Monster.schema_name == "Monster"
        monster = Monster({"kind": "orc", "hp": 10})
        assert monster.is_valid

    def test_explicit_validator_is_used(self, player_type):
        validator = TypeValidator(enabled=False)
        hero = player_type({"name": 5}, validator=validator)
        assert hero.is_valid
        assert hero.get("name") == 5


class TestNestedRecords:
    """Test wrapping of nested schema references."""

    def test_array_elements_are_wrapped(self, player_type, item_type):
        hero = player_type(HERO, ValidationMode.STRICT)
        sword = hero.get("inventory")[0]
        assert isinstance(sword, item_type)
        assert sword.get("id") == "sword"
        assert sword.mode is ValidationMode.STRICT

    def test_single_reference_is_wrapped_on_set(self, player_type, item_type):
        hero = player_type(HERO, ValidationMode.STRICT)
        assert hero.set("weapon", {"id": "bow", "weight": 1.5})
        assert isinstance(hero.get("weapon"), item_type)

    def test_invalid_nested_data_rejects_the_record(self, player_type):
        hero = player_type(
            {"name": "Hero", "level": 1, "inventory": [{"id": 5}]}, ValidationMode.STRICT
        )
        assert not hero.construction_result.valid
        issue = hero.construction_result.issue
        assert issue.field == "inventory"
        assert issue.path == ("inventory", 0)

    def test_wrong_record_type_is_rejected(self, player_type):
        hero = player_type(HERO, ValidationMode.STRICT)
        other = player_type(HERO)
        assert not hero.set("weapon", other)
        assert hero.get("weapon") is None

    def test_wrapping_is_idempotent(self, registry, item_type):
        descriptor = parse_descriptor("Array<Item>")
        items = [{"id": "a", "weight": 1.0}]
        wrapped = wrap_nested(items, descriptor, registry)
        assert wrapped is not items
        assert wrap_nested(wrapped, descriptor, registry) is wrapped
        assert wrap_nested(wrapped[0], parse_descriptor("Item"), registry) is wrapped[0]

    def test_tuple_of_mappings_is_wrapped(self, player_type, item_type):
        hero = player_type(HERO, ValidationMode.STRICT)
        assert hero.set("inventory", ({"id": "a", "weight": 1.0}, {"id": "b", "weight": 2}))

        inventory = hero.get("inventory")
        assert isinstance(inventory, list)
        assert [item.get("id") for item in inventory] == ["a", "b"]
        assert all(isinstance(item, item_type) for item in inventory)

    def test_tuple_wrapping_returns_list(self, registry, item_type):
        descriptor = parse_descriptor("Array<Item>")
        wrapped = wrap_nested(({"id": "a", "weight": 1.0},), descriptor, registry)
        assert isinstance(wrapped, list)
        assert isinstance(wrapped[0], item_type)
        assert wrap_nested(wrapped, descriptor, registry) is wrapped

    def test_unknown_reference_is_left_alone(self):
        value = {"id": "a"}
        assert wrap_nested(value, parse_descriptor("Item"), SchemaRegistry()) is value
        assert wrap_nested(value, parse_descriptor("Item"), None) is value

    def test_get_upgrades_plain_mapping(self, player_type, item_type):
        hero = player_type(HERO)
        assert hero.set("pet", {"id": "cat", "weight": 4.0})
        assert isinstance(hero.get("pet"), dict)

        player_type.extend_schema({"pet": "Item?"})
        pet = hero.get("pet")
        assert isinstance(pet, item_type)
        assert hero.get("pet") is pet

    def test_to_dict_flattens_nested_records(self, player_type):
        hero = player_type(HERO, ValidationMode.STRICT)
        assert hero.to_dict() == HERO
        assert player_type(hero.to_dict(), ValidationMode.STRICT) == hero


class TestStrictWrites:
    """Test that STRICT records roll back failing writes."""

    def test_failed_set_rolls_back(self, player_type, sink):
        hero = player_type(HERO, ValidationMode.STRICT, sink=sink)
        before = hero.to_dict()

        assert not hero.set("level", "one")
        assert hero.to_dict() == before
        assert hero.is_valid
        assert not hero.tainted
        assert sink.of_severity(Severity.ERROR)[0].field == "level"
        assert sink.last.severity is Severity.INFO

    def test_valid_set_after_rollback_changes_only_that_field(self, player_type):
        hero = player_type(HERO, ValidationMode.STRICT)
        hero.set("level", "one")

        assert hero.set("level", 2)
        expected = dict(HERO, level=2)
        assert hero.to_dict() == expected

    def test_failed_set_of_new_field_removes_it(self, player_type):
        hero = player_type(HERO, ValidationMode.STRICT)
        assert not hero.set("bogus", 1)
        assert "bogus" not in hero

    def test_nullable_field_accepts_none(self, player_type):
        hero = player_type(HERO, ValidationMode.STRICT)
        assert hero.set("health", None)
        assert hero.set("health", 5)
        assert not hero.set("name", None)

    def test_failed_update_restores_whole_snapshot(self, player_type):
        hero = player_type(HERO, ValidationMode.STRICT)
        assert not hero.update({"name": "Renamed", "level": "one"})
        assert hero.get("name") == "Hero"
        assert hero.get("level") == 1

    def test_update(self, player_type, item_type):
        hero = player_type(HERO, ValidationMode.STRICT)
        assert hero.update({"level": 5, "weapon": {"id": "axe", "weight": 7}})
        assert hero.get("level") == 5
        assert isinstance(hero.get("weapon"), item_type)

    def test_item_assignment(self, player_type):
        hero = player_type(HERO, ValidationMode.STRICT)
        hero["level"] = 3
        hero["level"] = "three"
        assert hero["level"] == 3
        with pytest.raises(KeyError):
            hero["missing"]


class TestLooseWrites:
    """Test that LOOSE records keep failing writes and report them."""

    def test_failed_set_keeps_value(self, player_type, sink):
        hero = player_type(HERO, sink=sink)
        assert not hero.set("level", "one")
        assert hero.get("level") == "one"
        assert hero.tainted
        assert not hero.is_valid
        assert sink.last.severity is Severity.WARNING

    def test_valid_write_clears_taint(self, player_type):
        hero = player_type(HERO)
        hero.set("level", "one")
        assert hero.set("level", 2)
        assert not hero.tainted
        assert hero.is_valid

    def test_extra_fields_allowed(self, player_type):
        hero = player_type(HERO)
        assert hero.set("nickname", "H")
        assert hero.get("nickname") == "H"

    def test_failed_update_keeps_merge(self, player_type):
        hero = player_type(HERO)
        assert not hero.update({"name": "Renamed", "level": "one"})
        assert hero.get("name") == "Renamed"
        assert hero.tainted


class TestSchemaExtension:
    """Test runtime schema extension."""

    def test_later_extension_wins(self, player_type):
        player_type.extend_schema({"x": "int"})
        player_type.extend_schema({"x": "String"})
        assert player_type.effective_schema()["x"] == "String"
        assert player_type.get_extended_schema() == {"x": "String"}

    def test_extension_overrides_base(self, player_type):
        player_type.extend_schema({"level": "String"})
        assert player_type.get_base_schema()["level"] == "int"
        assert player_type(dict(HERO, level="ten")).is_valid
        assert not player_type(HERO).is_valid

    def test_extension_applies_to_existing_records(self, player_type):
        hero = player_type(HERO, ValidationMode.STRICT)
        player_type.extend_schema({"mana": "int"})
        assert not hero.set("level", 2)
        assert hero.set("mana", 10)

    def test_extensions_are_per_type(self, player_type, item_type):
        player_type.extend_schema({"mana": "int?"})
        assert "mana" not in item_type.effective_schema()

    def test_reset_extensions(self, player_type):
        player_type.extend_schema({"mana": "int?"})
        player_type.reset_extensions()
        assert player_type.get_extended_schema() == {}

    def test_non_string_extension_does_not_break_writes(self, player_type, sink):
        hero = player_type(HERO, ValidationMode.STRICT, sink=sink)
        player_type.extend_schema({"rank": ["int"]})

        assert not hero.set("level", 2)
        assert hero.get("level") == 1
        assert not hero.update({"level": 3})
        assert hero.get("rank") is None
        assert sink.of_severity(Severity.ERROR)[-1].field == "rank"

    def test_sealed_type_rejects_extension(self):
        locked = define_record_type("Locked", {"a": "int"}, extendable=False)
        with pytest.raises(TypeError, match="not extendable"):
            locked.extend_schema({"b": "int"})


class TestValidateData:
    """Test validation without building a record."""

    def test_first_failure(self, player_type):
        result = player_type.validate_data({"name": "Hero"})
        assert not result.valid
        assert result.issue.kind is IssueKind.MISSING_FIELD

    def test_exhaustive(self, player_type):
        result = player_type.validate_data(
            {"name": 1, "level": "one", "extra": 0}, ValidationMode.STRICT, exhaustive=True
        )
        assert [issue.field for issue in result.issues] == ["name", "level", "inventory", "extra"]

    def test_nested_data_is_wrapped(self, player_type):
        assert player_type.validate_data(HERO, ValidationMode.STRICT).valid

    def test_namespace_field_is_ignored(self, player_type):
        data = dict(HERO, _mod_data={"mod": {"k": 1}})
        assert player_type.validate_data(data, ValidationMode.STRICT).valid


class TestRecordProtocol:
    """Test mapping-style access and equality."""

    def test_container_methods(self, player_type):
        hero = player_type(HERO)
        assert "name" in hero
        assert "weapon" not in hero
        assert hero.has("level")
        assert list(hero) == ["name", "level", "inventory"]
        assert len(hero) == 3

    def test_equality(self, player_type, item_type):
        assert player_type(HERO) == player_type(HERO)
        assert player_type(HERO) != player_type(dict(HERO, level=2))
        assert item_type({"id": "a", "weight": 1.0}) != {"id": "a", "weight": 1.0}

    def test_records_are_unhashable(self, player_type):
        with pytest.raises(TypeError):
            hash(player_type(HERO))

    def test_repr(self, item_type):
        item = item_type({"id": "a", "weight": 1.0}, ValidationMode.STRICT)
        assert repr(item) == "Item({'id': 'a', 'weight': 1.0}, mode=strict)"

    def test_failing_sink_does_not_break_writes(self, player_type):
        class BrokenSink:
            def emit(self, event):
                raise RuntimeError("sink down")

        hero = player_type(HERO, ValidationMode.STRICT, sink=BrokenSink())
        assert not hero.set("level", "one")
        assert hero.get("level") == 1


class TestFromSettings:
    """Test records configured from settings."""

    def test_default_mode_from_settings(self, player_type):
        settings = RecordguardSettingsModel(default_mode=ValidationMode.STRICT)
        hero = player_type.from_settings(HERO, settings)
        assert hero.mode is ValidationMode.STRICT
        assert not hero.set("bogus", 1)

    def test_explicit_mode_wins(self, player_type):
        settings = RecordguardSettingsModel(default_mode=ValidationMode.STRICT)
        hero = player_type.from_settings(HERO, settings, ValidationMode.LOOSE)
        assert hero.mode is ValidationMode.LOOSE

    def test_disabled_validation(self, player_type):
        settings = RecordguardSettingsModel(validation_enabled=False)
        hero = player_type.from_settings({"name": 5}, settings, ValidationMode.STRICT)
        assert hero.is_valid
        assert hero.set("level", "one")

    def test_production_environment(self, player_type, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("RECORDGUARD_PRODUCTION", "1")
        hero = player_type.from_settings({"name": 5})
        assert hero.is_valid
        assert hero.get("name") == 5

    def test_validation_on_by_default(self, player_type, tmp_path, monkeypatch, sink):
        monkeypatch.chdir(tmp_path)
        hero = player_type.from_settings({"name": 5}, sink=sink)
        assert not hero.is_valid
        assert sink.last.kind is IssueKind.CONSTRUCTION_REJECTED
