"""Detection of identical supporting-entity lists across statements."""

from collections.abc import Iterable

from segment_insights.models import Statement


def entity_signature(statement: Statement) -> str:
    return ",".join(sorted(statement.entity_ids))


def find_duplicate_entity_lists(statements: Iterable[Statement]) -> dict[str, tuple[str, ...]]:
    """
    Group statements that share the same supporting-entity list.

    Returns:
        Signature (sorted entity ids joined by ",") -> statement ids in input
        order, only for lists shared by more than one statement. Statements
        without entities are ignored.
    """
    groups: dict[str, list[str]] = {}
    for statement in statements:
        if not statement.entities:
            continue
        groups.setdefault(entity_signature(statement), []).append(statement.id)
    return {signature: tuple(ids) for signature, ids in groups.items() if len(ids) > 1}
