"""SQL helpers for building parameterized statements."""
from typing import Any, Iterable, Mapping, Sequence


def build_where_clause(conditions: Sequence[tuple[str, Any]]) -> tuple[str, dict[str, Any]]:
    """
    Fold ``(predicate template, bound value)`` pairs into a WHERE clause.

    Each template refers to its value with a ``{param}`` placeholder, which is
    replaced by a generated bind name (``:p0``, ``:p1``...). Values are only ever
    returned as bind parameters.

    Args:
        conditions: Ordered predicate/value pairs, combined with AND

    Returns:
        Tuple of (clause, params). The clause is empty when there are no conditions.

    Examples:
        >>> build_where_clause([("name ILIKE {param}", "%car%")])
        ('WHERE name ILIKE :p0', {'p0': '%car%'})
    """
    predicates = []
    params: dict[str, Any] = {}

    for index, (template, value) in enumerate(conditions):
        bind_name = f"p{index}"
        predicates.append(template.format(param=f":{bind_name}"))
        params[bind_name] = value

    if not predicates:
        return "", {}

    return "WHERE " + " AND ".join(predicates), params


def escape_like(text: str, escape: str = "\\") -> str:
    """Escape LIKE wildcards so ``text`` matches literally."""
    return (
        text.replace(escape, escape * 2)
        .replace("%", f"{escape}%")
        .replace("_", f"{escape}_")
    )


def merge_fields(
    current: Mapping[str, Any],
    incoming: Mapping[str, Any],
    fields: Iterable[str],
) -> dict[str, Any]:
    """Overlay supplied values on ``current``; missing or None keeps the current value."""
    return {
        field: incoming[field] if incoming.get(field) is not None else current[field]
        for field in fields
    }
