"""Tests for the analysis facade."""

from storelens.core.facade import AnalysisFacade
from storelens.core.relationships import to_mermaid


def test_analyze_all_tables(shop_store):
    report = AnalysisFacade(shop_store).analyze_all_tables()

    assert set(report.tables) == {"orders", "users"}
    assert set(report.schemas) == {"orders", "users"}
    assert report.schemas["users"].properties["email"].format == "email"
    assert len(report.relationships) == 1
    assert report.statistics.relationships_found == 1
    assert report.generated_at


def test_report_to_dict(shop_store):
    data = AnalysisFacade(shop_store).analyze_all_tables().to_dict()

    assert set(data) == {
        "tables",
        "schemas",
        "relationships",
        "statistics",
        "warnings",
        "generatedAt",
    }
    assert data["relationships"][0]["id"] == "orders.userId->users.id"
    assert data["relationships"][0]["metadata"]["valueOverlap"] == 1.0
    assert data["tables"]["users"]["primaryKeyCandidate"] == "id"


def test_table_analysis_is_cached(shop_store):
    facade = AnalysisFacade(shop_store)
    first = facade.analyze_table("users")

    assert facade.analyze_table("users") is first

    facade.clear_cache()
    assert facade.analyze_table("users") is not first


def test_clear_cache_keeps_results(weak_link_store):
    facade = AnalysisFacade(weak_link_store)
    before = facade.analyze_all_tables().relationships
    facade.clear_cache()
    after = facade.analyze_all_tables().relationships

    assert before == after


def test_threshold_change_invalidates_cache(weak_link_store):
    facade = AnalysisFacade(weak_link_store)
    cached = facade.analyze_table("orders")
    assert len(facade.analyze_all_tables().relationships) == 2

    facade.set_confidence_threshold(1.0)
    assert facade.confidence_threshold == 1.0
    assert facade.analyze_table("orders") is not cached
    assert facade.analyze_all_tables().relationships == []


def test_defined_schema_appears_in_report(shop_store):
    facade = AnalysisFacade(shop_store)
    facade.schema_manager.define_schema(
        "users", {"properties": {"id": {"type": "string"}}}
    )

    report = facade.analyze_all_tables()
    assert report.schemas["users"].source == "defined"
    assert list(report.schemas["users"].properties) == ["id"]


def test_warnings_collected(shop_store):
    shop_store.put("mixed", [{"a": 1}, "oops", {"a": 2}])
    report = AnalysisFacade(shop_store).analyze_all_tables()

    assert len(report.warnings) == 1
    assert "mixed" in report.warnings[0]


def test_empty_store():
    from storelens.core.store import InMemoryRecordStore

    report = AnalysisFacade(InMemoryRecordStore()).analyze_all_tables()
    assert report.tables == {}
    assert report.relationships == []
    assert report.statistics.total_tables == 0


def test_generate_erd(shop_store):
    erd = AnalysisFacade(shop_store).generate_erd()

    assert len(erd.nodes) == 2
    assert len(erd.edges) == 1
    assert "erDiagram" in to_mermaid(erd)


def test_unreadable_table_reported(shop_store):
    class BrokenStore(type(shop_store)):
        def get_table(self, name):
            if name == "broken":
                raise OSError("disk on fire")
            return super().get_table(name)

    store = BrokenStore.from_tables(
        {"users": shop_store.get_table("users"), "broken": []}
    )
    report = AnalysisFacade(store).analyze_all_tables()

    assert "users" in report.schemas
    assert "broken" not in report.schemas
    assert len(report.warnings) == 2
    assert all("broken" in w for w in report.warnings)
