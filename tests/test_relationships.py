"""Tests for key detection and relationship discovery."""

import pytest

from storelens.core.profiling import guess_referenced_table, profile_columns
from storelens.core.relationships import (
    ForeignKeyCandidate,
    Relationship,
    RelationshipMapper,
    RelationshipType,
    TableAnalysis,
    to_mermaid,
)
from storelens.core.store import InMemoryRecordStore, RecordStore
from storelens.core.types import DataType


def test_users_primary_key(shop_store):
    analysis = RelationshipMapper(shop_store).analyze_table("users")

    assert analysis.primary_key_candidate == "id"
    assert analysis.primary_key_score >= 50
    assert analysis.columns["id"].patterns.is_id
    assert analysis.foreign_key_candidates == []


def test_orders_foreign_key_candidate(shop_store):
    analysis = RelationshipMapper(shop_store).analyze_table("orders")

    assert analysis.primary_key_candidate == "id"
    assert [c.column_name for c in analysis.foreign_key_candidates] == ["userId"]

    candidate = analysis.foreign_key_candidates[0]
    assert candidate.score == 70
    assert candidate.referenced_table == "user"
    assert candidate.confidence == 1.0


def test_orders_to_users_relationship(shop_store):
    result = RelationshipMapper(shop_store).analyze_all_tables()

    assert len(result.relationships) == 1
    rel = result.relationships[0]
    assert (rel.from_table, rel.from_column) == ("orders", "userId")
    assert (rel.to_table, rel.to_column) == ("users", "id")
    assert rel.confidence >= 0.8
    assert rel.type == RelationshipType.ONE_TO_MANY
    assert rel.value_overlap == 1.0
    assert rel.fk_candidate_score == 70

    stats = result.statistics
    assert stats.total_tables == 2
    assert stats.tables_with_data == 2
    assert stats.relationships_found == 1
    assert stats.confidence_distribution == {
        "high": 1,
        "medium": 0,
        "low": 0,
        "veryLow": 0,
    }


def test_unrelated_tables_have_no_relationships(unrelated_store):
    result = RelationshipMapper(unrelated_store).analyze_all_tables()
    assert result.relationships == []
    assert result.statistics.total_tables == 2


def test_columns_merely_ending_in_id_are_not_references():
    store = InMemoryRecordStore.from_tables(
        {
            "orders": [{"id": 1, "paid": True}, {"id": 2, "paid": False}],
            "products": [{"id": "a", "valid": "yes"}, {"id": "b", "valid": "no"}],
        }
    )
    result = RelationshipMapper(store).analyze_all_tables()

    assert result.tables["orders"].foreign_key_candidates == []
    assert not result.tables["products"].columns["valid"].patterns.is_foreign_key
    assert result.relationships == []


def _evaluate_with_fixed_confidence(monkeypatch, score, confidence):
    mapper = RelationshipMapper(InMemoryRecordStore())
    monkeypatch.setattr(mapper, "find_match_column", lambda analysis: ("id", 0.0))
    candidate = ForeignKeyCandidate(
        table_name="orders", column_name="ref", score=score, confidence=confidence
    )
    target = TableAnalysis(table_name="parents", record_count=0, data_type=DataType.ARRAY)
    return mapper.evaluate_relationship("orders", candidate, "parents", target)


@pytest.mark.parametrize(
    "score,confidence,expected",
    [
        (50, 0.9, RelationshipType.MANY_TO_ONE),
        (51, 0.7, RelationshipType.MANY_TO_ONE),
        (51, 0.71, RelationshipType.ONE_TO_MANY),
    ],
)
def test_one_to_many_needs_both_bounds_exceeded(monkeypatch, score, confidence, expected):
    relationship = _evaluate_with_fixed_confidence(monkeypatch, score, confidence)
    assert relationship.type == expected
    assert relationship.confidence == confidence


def test_weak_links_below_perfect_confidence(weak_link_store):
    result = RelationshipMapper(weak_link_store).analyze_all_tables()

    ids = [r.id for r in result.relationships]
    assert ids == ["accounts.user_id->orders.id", "orders.fk_thing->accounts.user_id"]
    assert all(r.type == RelationshipType.MANY_TO_ONE for r in result.relationships)
    assert result.relationships[0].confidence == pytest.approx(50 / 70 + 0.2)
    assert result.relationships[1].confidence == pytest.approx(50 / 70 + 0.1)


def test_threshold_filters_relationships(weak_link_store):
    mapper = RelationshipMapper(weak_link_store)

    mapper.set_confidence_threshold(0.85)
    assert len(mapper.analyze_all_tables().relationships) == 1

    mapper.set_confidence_threshold(1.0)
    assert mapper.analyze_all_tables().relationships == []


def test_perfect_confidence_survives_max_threshold(shop_store):
    mapper = RelationshipMapper(shop_store, {"confidence_threshold": 1.0})
    relationships = mapper.analyze_all_tables().relationships

    assert len(relationships) == 1
    assert relationships[0].confidence == 1.0


@pytest.mark.parametrize("threshold,expected", [(5, 1.0), (-1, 0.0), (0.6, 0.6)])
def test_threshold_is_clamped(shop_store, threshold, expected):
    mapper = RelationshipMapper(shop_store)
    mapper.set_confidence_threshold(threshold)
    assert mapper.confidence_threshold == expected


@pytest.mark.parametrize("threshold", ["high", None, float("nan"), "nan"])
def test_invalid_threshold_is_ignored(shop_store, threshold):
    mapper = RelationshipMapper(shop_store)
    mapper.set_confidence_threshold(0.6)
    mapper.set_confidence_threshold(threshold)
    assert mapper.confidence_threshold == 0.6


def test_confidence_bounds(shop_store, weak_link_store):
    for store in (shop_store, weak_link_store):
        mapper = RelationshipMapper(store)
        for rel in mapper.analyze_all_tables().relationships:
            assert mapper.confidence_threshold <= rel.confidence <= 1.0


def test_analysis_is_idempotent(weak_link_store):
    mapper = RelationshipMapper(weak_link_store)
    first = mapper.analyze_all_tables().relationships
    second = mapper.analyze_all_tables().relationships
    mapper.clear_cache()
    third = mapper.analyze_all_tables().relationships

    assert first == second == third


def test_relationships_sorted_by_confidence(weak_link_store):
    relationships = RelationshipMapper(weak_link_store).analyze_all_tables().relationships
    confidences = [r.confidence for r in relationships]
    assert confidences == sorted(confidences, reverse=True)


def _rel(from_table, from_column, to_table, to_column, confidence):
    return Relationship(
        from_table=from_table,
        from_column=from_column,
        to_table=to_table,
        to_column=to_column,
        type=RelationshipType.MANY_TO_ONE,
        confidence=confidence,
    )


def test_deduplicate_keeps_best_per_endpoint_pair():
    forward = _rel("a", "b_id", "b", "id", 0.5)
    backward = _rel("b", "id", "a", "b_id", 0.7)
    other = _rel("a", "c_id", "c", "id", 0.6)

    kept = RelationshipMapper.deduplicate_relationships([forward, backward, other])

    assert backward in kept and other in kept
    assert forward not in kept
    assert len({r.endpoint_key for r in kept}) == len(kept)


def test_deduplicate_first_wins_ties():
    first = _rel("a", "b_id", "b", "id", 0.5)
    second = _rel("b", "id", "a", "b_id", 0.5)

    kept = RelationshipMapper.deduplicate_relationships([first, second])
    assert kept == [first]


def test_primary_key_ties_go_to_first_column():
    mapper = RelationshipMapper(InMemoryRecordStore())

    columns = profile_columns([{"a": "x", "b": "y"}, {"a": "z", "b": "w"}])
    assert mapper.detect_primary_key(columns) == ("a", 50)

    columns = profile_columns([{"b": "y", "a": "x"}, {"b": "w", "a": "z"}])
    assert mapper.detect_primary_key(columns) == ("b", 50)


def test_no_primary_key_below_minimum_score():
    mapper = RelationshipMapper(InMemoryRecordStore())
    columns = profile_columns([{"color": "red"}, {"color": "red"}])
    assert mapper.detect_primary_key(columns) == (None, 0)


def test_primary_key_never_foreign_key_candidate():
    store = InMemoryRecordStore.from_tables(
        {"links": [{"link_id": "1", "note": "a"}, {"link_id": "2", "note": "b"}]}
    )
    analysis = RelationshipMapper(store).analyze_table("links")

    assert analysis.primary_key_candidate == "link_id"
    assert not analysis.is_foreign_key_candidate("link_id")


def test_primitive_table_has_no_keys():
    store = InMemoryRecordStore.from_tables({"tags": ["a", "b", "c"]})
    analysis = RelationshipMapper(store).analyze_table("tags")

    assert analysis.is_primitive
    assert list(analysis.columns) == ["value"]
    assert analysis.primary_key_candidate is None
    assert analysis.foreign_key_candidates == []


def test_absent_table():
    assert RelationshipMapper(InMemoryRecordStore()).analyze_table("nope") is None


class _FlakyStore(RecordStore):
    """Store whose 'broken' table cannot be read."""

    def __init__(self, tables):
        self.tables = tables

    def list_table_names(self):
        return sorted(self.tables)

    def get_table(self, name):
        if name == "broken":
            raise OSError("disk on fire")
        return self.tables.get(name)


def test_unreadable_table_degrades(users, orders):
    store = _FlakyStore({"users": users, "orders": orders, "broken": None})
    result = RelationshipMapper(store).analyze_all_tables()

    assert result.tables["broken"].columns == {}
    assert result.statistics.total_tables == 3
    assert result.statistics.tables_with_data == 2
    assert len(result.relationships) == 1
    assert result.warnings == ["Could not read table 'broken': disk on fire"]


def test_value_overlap_across_types():
    store = InMemoryRecordStore.from_tables(
        {
            "a": [{"ref": 1}, {"ref": 2}, {"ref": None}],
            "b": [{"id": "1"}, {"id": "3"}, {"id": "4"}, {"id": "5"}],
        }
    )
    mapper = RelationshipMapper(store)

    assert mapper.calculate_value_overlap("a", "ref", "b", "id") == 0.5
    assert mapper.calculate_value_overlap("a", "ref", "b", "missing") == 0.0


@pytest.mark.parametrize(
    "name,expected",
    [
        ("customer_id", "customer"),
        ("userId", "user"),
        ("orderID", "order"),
        ("paid", None),
        ("android", None),
        ("fk_user", "user"),
        ("owner_ref", "owner"),
        ("id", None),
        ("email", None),
    ],
)
def test_guess_referenced_table(name, expected):
    assert guess_referenced_table(name) == expected


def test_index_suggestions(shop_store):
    analysis = RelationshipMapper(shop_store).analyze_table("users")
    by_name = {s.name: s for s in analysis.index_suggestions}

    assert by_name["idx_id_unique"].unique
    assert by_name["idx_id_unique"].priority == "high"
    assert by_name["idx_email_search"].priority == "low"


def test_generate_erd(shop_store):
    erd = RelationshipMapper(shop_store).generate_erd()

    assert [node.id for node in erd.nodes] == ["orders", "users"]
    assert erd.get_node("users").primary_key == "id"
    assert len(erd.edges) == 1

    edge = erd.edges[0]
    assert edge.label == "userId → id"
    assert (edge.source, edge.target) == ("orders", "users")

    data = erd.to_dict()
    assert data["metadata"]["statistics"]["relationshipsFound"] == 1
    assert "generatedAt" in data["metadata"]
    assert data["nodes"][0]["position"] == {"x": 0, "y": 0}


def test_mermaid_export(shop_store):
    text = to_mermaid(RelationshipMapper(shop_store).generate_erd())

    assert text.startswith("erDiagram\n")
    assert "    users {" in text
    assert "string id PK" in text
    assert "string userId FK" in text
    assert 'orders ||--o{ users : "userId"' in text
