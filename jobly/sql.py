"""
SQL fragment builders for partial updates and filtered searches.

Both builders are pure: they turn caller data into a parameterized fragment
plus a list of values, where ``values[i]`` binds placeholder ``$<i+1>``.

Column names in a SET clause come from the field name map or from the
payload keys themselves. Only keys that survived request schema validation
may reach ``build_set_clause``; it does not sanitize column-name-shaped
strings.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from .errors import InvalidInput

UpdatePayload = Union[Mapping[str, Any], Iterable[Tuple[str, Any]]]


class EntityKind(Enum):
    COMPANY = "company"
    JOB = "job"


@dataclass(frozen=True)
class SqlFragment:
    """Column assignments for an UPDATE ... SET clause."""

    set_cols: str
    values: List[Any] = field(default_factory=list)


@dataclass(frozen=True)
class FilterFragment:
    """WHERE clause (possibly empty) for a filtered SELECT."""

    where_clause: str
    values: List[Any] = field(default_factory=list)


# (key, column, comparison) in the order predicates are emitted.
# "like" escapes the value and wraps it in wildcards, "flag" emits a fixed
# predicate.
FILTER_KEYS: Dict[EntityKind, List[Tuple[str, str, str]]] = {
    EntityKind.COMPANY: [
        ("nameLike", "name", "like"),
        ("minEmployees", "num_employees", ">="),
        ("maxEmployees", "num_employees", "<="),
    ],
    EntityKind.JOB: [
        ("title", "title", "like"),
        ("minSalary", "salary", ">="),
        ("hasEquity", "equity", "flag"),
    ],
}

# min key -> max key, per entity
RANGE_BOUNDS: Dict[EntityKind, List[Tuple[str, str]]] = {
    EntityKind.COMPANY: [("minEmployees", "maxEmployees")],
    EntityKind.JOB: [],
}


def _pairs(update: UpdatePayload) -> List[Tuple[str, Any]]:
    if isinstance(update, Mapping):
        return list(update.items())
    return [(k, v) for k, v in update]


def build_set_clause(
    update: UpdatePayload,
    field_name_map: Optional[Mapping[str, str]] = None,
) -> SqlFragment:
    """
    Build the SET clause for a partial update.

    Args:
        update: Fields to change, e.g. {"firstName": "Aliya", "age": 32}.
            A list of (key, value) pairs is accepted as well.
        field_name_map: External name -> column name, e.g.
            {"firstName": "first_name"}. Unmapped keys are used as-is.

    Returns:
        SqlFragment('"first_name"=$1, "age"=$2', ["Aliya", 32])

    Raises:
        InvalidInput: If there is nothing to update.
    """
    pairs = _pairs(update)
    if not pairs:
        raise InvalidInput("No data")

    field_name_map = field_name_map or {}
    cols = [
        f'"{field_name_map.get(key, key)}"=${idx}'
        for idx, (key, _) in enumerate(pairs, start=1)
    ]
    return SqlFragment(set_cols=", ".join(cols), values=[v for _, v in pairs])


LIKE_ESCAPE = "\\"


def _escape_like(text: str) -> str:
    """Make % and _ in search text match literally."""
    for char in (LIKE_ESCAPE, "%", "_"):
        text = text.replace(char, LIKE_ESCAPE + char)
    return text


def build_filter_clause(filters: Mapping[str, Any], entity_kind: EntityKind) -> FilterFragment:
    """
    Build the WHERE clause for a filtered search.

    Args:
        filters: Search filters, e.g. {"nameLike": "green", "minEmployees": 5}.
            A key with a None value is treated as not supplied.
        entity_kind: Which entity's filter keys are recognized.

    Returns:
        FilterFragment("WHERE lower(name) LIKE lower($1) ESCAPE '\\' AND num_employees >= $2",
                       ["%green%", 5])

        With no usable filters the clause is "" and values is [].

    Raises:
        InvalidInput: On an unrecognized key, or a minimum above its maximum.
    """
    recognized = FILTER_KEYS[entity_kind]
    known = {key for key, _, _ in recognized}
    for key in filters:
        if key not in known:
            raise InvalidInput(f"{key} is not a valid search filter")

    for min_key, max_key in RANGE_BOUNDS[entity_kind]:
        low = filters.get(min_key)
        high = filters.get(max_key)
        if low is not None and high is not None and low > high:
            raise InvalidInput(f"{min_key} must be less than or equal to {max_key}")

    predicates: List[str] = []
    values: List[Any] = []
    for key, column, op in recognized:
        value = filters.get(key)
        if value is None:
            continue
        if op == "flag":
            if value is True:
                predicates.append(f"{column} > 0")
            continue
        if op == "like":
            values.append(f"%{_escape_like(value)}%")
            predicates.append(
                f"lower({column}) LIKE lower(${len(values)}) ESCAPE '{LIKE_ESCAPE}'"
            )
        else:
            values.append(value)
            predicates.append(f"{column} {op} ${len(values)}")

    if not predicates:
        return FilterFragment(where_clause="", values=[])
    return FilterFragment(where_clause="WHERE " + " AND ".join(predicates), values=values)
