"""Tests for duplicate entity-list detection."""

from segment_insights.models import Statement, SupportingEntity
from segment_insights.statements.duplicates import entity_signature, find_duplicate_entity_lists


def _entity(entity_id: str) -> SupportingEntity:
    return SupportingEntity(id=entity_id, name=None, email=None, satisfaction=5, loyalty=5)


def _statement(statement_id: str, *entity_ids: str) -> Statement:
    return Statement(
        id=statement_id,
        kind="risk",
        category="proximity",
        text="",
        priority=1,
        entities=tuple(_entity(i) for i in entity_ids),
    )


class TestDuplicates:
    """Tests for find_duplicate_entity_lists()."""

    def test_signature_is_order_independent(self) -> None:
        assert entity_signature(_statement("a", "e2", "e1")) == "e1,e2"

    def test_shared_lists_grouped(self) -> None:
        statements = [
            _statement("risk-a", "e1", "e2"),
            _statement("risk-b", "e3"),
            _statement("action-c", "e2", "e1"),
        ]
        assert find_duplicate_entity_lists(statements) == {"e1,e2": ("risk-a", "action-c")}

    def test_empty_lists_ignored(self) -> None:
        assert find_duplicate_entity_lists([_statement("a"), _statement("b")]) == {}
