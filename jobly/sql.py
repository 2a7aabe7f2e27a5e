"""
SQL fragment builders.

Pure functions turning partial field maps and filter records into SQL text
plus positional ``$n`` parameter lists. Values are always parameterized;
column names are checked against a plain-identifier pattern and never
interpolated otherwise.
"""

import re
from typing import Any, List, Mapping, NamedTuple, Optional, Sequence

from .errors import ValidationError
from .filters import CompanyFilters, JobFilters

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_CONTAINS = "{column} ILIKE {{}} ESCAPE '\\'"


class Assignment(NamedTuple):
    column: str
    index: int
    value: Any

    def render(self) -> str:
        return f'"{self.column}"=${self.index}'


class PartialUpdate(NamedTuple):
    assignments: List[Assignment]

    @property
    def set_cols(self) -> str:
        return ", ".join(a.render() for a in self.assignments)

    @property
    def values(self) -> List[Any]:
        return [a.value for a in self.assignments]

    @property
    def next_index(self) -> int:
        """Placeholder number for the first parameter after the SET list."""
        return len(self.assignments) + 1


class FilterClause(NamedTuple):
    sql: str
    values: List[Any]

    @property
    def where(self) -> str:
        return f"WHERE {self.sql}" if self.sql else ""


def column_for(name: str, js_to_sql: Mapping[str, str]) -> str:
    """Storage column for a field name; fields not in the table map to themselves."""
    return js_to_sql.get(name, name)


def sql_for_partial_update(
    data: Mapping[str, Any],
    js_to_sql: Mapping[str, str],
    fields: Optional[Sequence[str]] = None,
) -> PartialUpdate:
    """
    Build the SET list of a partial UPDATE.

    Args:
        data: fields to change, field name -> new value
        js_to_sql: field name -> column name for fields whose column differs
        fields: recognized field names in the order they should be assigned;
            when omitted the order of ``data`` is used

    Returns:
        PartialUpdate, e.g. for {"firstName": "Aliya", "age": 32}:
        set_cols '"first_name"=$1, "age"=$2', values ["Aliya", 32]

    Raises:
        ValidationError: empty ``data``, a key outside ``fields``, or a column
            that is not a plain identifier
    """
    if not data:
        raise ValidationError("No data")

    if fields is None:
        names = list(data)
    else:
        unknown = [k for k in data if k not in fields]
        if unknown:
            raise ValidationError(
                f"Cannot update field(s): {', '.join(unknown)}",
                errors=[f"Unknown field: {k}" for k in unknown],
            )
        names = [f for f in fields if f in data]

    assignments: List[Assignment] = []
    for name in names:
        column = column_for(name, js_to_sql)
        if not _IDENTIFIER_RE.match(column):
            raise ValidationError(f"Invalid column name: {column!r}")
        assignments.append(Assignment(column, len(assignments) + 1, data[name]))

    return PartialUpdate(assignments)


class _Predicates:
    """Accumulates predicates, numbering placeholders by values appended so far."""

    def __init__(self):
        self.parts: List[str] = []
        self.values: List[Any] = []

    def add(self, template: str, value: Any) -> None:
        self.values.append(value)
        self.parts.append(template.format(f"${len(self.values)}"))

    def add_bare(self, predicate: str) -> None:
        self.parts.append(predicate)

    def clause(self) -> FilterClause:
        return FilterClause(" AND ".join(self.parts), self.values)


def contains_pattern(value: str) -> str:
    """LIKE pattern matching ``value`` anywhere, with its own % and _ taken literally."""
    escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def company_filters_sql(filters: CompanyFilters) -> FilterClause:
    """
    Predicate for filtering companies.

    nameLike is a case-insensitive substring match; the employee bounds are
    inclusive.
    """
    p = _Predicates()
    if filters.name_like:
        p.add(_CONTAINS.format(column="name"), contains_pattern(filters.name_like))
    if filters.min_employees is not None:
        p.add("num_employees >= {}", filters.min_employees)
    if filters.max_employees is not None:
        p.add("num_employees <= {}", filters.max_employees)
    return p.clause()


def job_filters_sql(filters: JobFilters) -> FilterClause:
    """
    Predicate for filtering jobs.

    hasEquity restricts to rows with a non-null equity and adds no value.
    """
    p = _Predicates()
    if filters.title_like:
        p.add(_CONTAINS.format(column="title"), contains_pattern(filters.title_like))
    if filters.min_salary is not None:
        p.add("salary >= {}", filters.min_salary)
    if filters.has_equity:
        p.add_bare("equity IS NOT NULL")
    return p.clause()
