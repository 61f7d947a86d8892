"""
Diff resolver: field-level changes and display rendering of snapshot values
"""
import json

from app.services.diff import (
    EMPTY_MARKER,
    UNRESOLVABLE_KEY,
    UNRESOLVABLE_MARKER,
    LookupTables,
    label_for,
    render_diff,
    resolve_diff,
    resolve_value,
)


def test_only_changed_fields_produce_rows():
    rows = resolve_diff({"name": "A", "cost": 10}, {"name": "A", "cost": 20})

    assert len(rows) == 1
    assert rows[0].raw_key == "cost"
    assert (rows[0].old, rows[0].new) == (10, 20)


def test_key_order_does_not_matter():
    before = json.dumps({"customData": {"a": "1", "b": "2"}, "name": "X"})
    after = json.dumps({"name": "X", "customData": {"b": "2", "a": "1"}})

    assert resolve_diff(before, after) == []


def test_union_of_keys_and_missing_equals_null():
    rows = resolve_diff({"a": 1, "b": None}, {"c": 3})

    assert [row.raw_key for row in rows] == ["a", "c"]


def test_creation_and_deletion_snapshots():
    created = resolve_diff(None, {"phoneNumber": "11 9999"})
    deleted = resolve_diff('{"phoneNumber": "11 9999"}', "null")

    assert [(row.old, row.new) for row in created] == [(None, "11 9999")]
    assert [(row.old, row.new) for row in deleted] == [("11 9999", None)]


def test_system_keys_are_skipped():
    assert resolve_diff({"_adminUser": "a"}, {"_adminUser": "b"}) == []


def test_malformed_snapshot_degrades_to_one_row():
    rows = resolve_diff("{not json", {"name": "A"})

    assert len(rows) == 1
    assert rows[0].raw_key == UNRESOLVABLE_KEY
    assert rows[0].field == UNRESOLVABLE_MARKER

    rendered = render_diff("[1, 2]", {"name": "A"})
    assert rendered[0]["oldDisplay"] == UNRESOLVABLE_MARKER


def test_labels_fall_back_to_raw_key():
    assert label_for("assetTag") == "Patrimônio"
    assert label_for("somethingNew") == "somethingNew"


def test_empty_values_render_marker():
    for value in (None, "", "---", "S/T", [], {}):
        assert resolve_value("assetTag", value) == EMPTY_MARKER


def test_dates_are_localized():
    assert resolve_value("purchaseDate", "2024-03-05") == "05/03/2024"
    assert resolve_value("timestamp", "2024-03-05T14:07:00") == "05/03/2024 14:07"


def test_currency_fields():
    assert resolve_value("purchaseCost", 1234.5) == "R$ 1.234,50"
    assert resolve_value("cost", "abc") == "abc"


def test_foreign_keys_resolve_through_lookups():
    lookups = LookupTables(
        sectors={"s1": "Vendas"},
        users={"u1": "Maria Silva"},
        sims={"m1": "11 9999-0000"},
        models={"d1": "Galaxy A54"},
    )

    assert resolve_value("sectorId", "s1", lookups) == "Vendas"
    assert resolve_value("currentUserId", "u1", lookups) == "Maria Silva"
    assert resolve_value("userId", "u1", lookups) == "Maria Silva"
    assert resolve_value("linkedSimId", "m1", lookups) == "11 9999-0000"
    assert resolve_value("modelId", "d1", lookups) == "Galaxy A54"


def test_deleted_reference_renders_raw_id():
    lookups = LookupTables(sectors={"s1": "Vendas"})

    assert resolve_value("sectorId", "gone-42", lookups) == "gone-42"
    rows = render_diff({"sectorId": "s1"}, {"sectorId": "gone-42"}, lookups)
    assert rows[0]["oldDisplay"] == "Vendas"
    assert rows[0]["newDisplay"] == "gone-42"


def test_active_flag():
    assert resolve_value("active", True) == "Ativo"
    assert resolve_value("active", False) == "Inativo"


def test_custom_data_uses_field_names():
    lookups = LookupTables(custom_fields={"cf1": "Memória RAM", "cf2": "Processador"})

    rendered = resolve_value("customData", {"cf1": "16GB", "cf2": "i7"}, lookups)
    assert rendered == "Memória RAM: 16GB; Processador: i7"
    assert resolve_value("customData", '{"cfX": "a"}', lookups) == "cfX: a"


def test_default_rendering():
    assert resolve_value("hasPendingIssues", True) == "Sim"
    assert resolve_value("accessories", [{"name": "Capa"}]) == '[{"name": "Capa"}]'
    assert resolve_value("imei", 3519) == "3519"


def test_resolve_value_never_raises():
    class Broken:
        def __str__(self):
            raise RuntimeError("boom")

    assert resolve_value("notes", Broken()) == UNRESOLVABLE_MARKER
