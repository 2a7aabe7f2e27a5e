"""
Tests for sql.py - partial update and filter fragment builders.
"""

import pytest

from jobly.errors import ValidationError
from jobly.filters import CompanyFilters, JobFilters
from jobly.sql import (
    Assignment,
    column_for,
    company_filters_sql,
    contains_pattern,
    job_filters_sql,
    sql_for_partial_update,
)


class TestPartialUpdate:
    """Test sql_for_partial_update."""

    def test_set_cols_and_values(self):
        """Columns are mapped, numbered from 1 in input order."""
        update = sql_for_partial_update(
            {"username": "test", "firstName": "Test", "isAdmin": True},
            {"firstName": "first_name", "lastName": "last_name", "isAdmin": "is_admin"},
        )

        assert update.set_cols == '"username"=$1, "first_name"=$2, "is_admin"=$3'
        assert update.values == ["test", "Test", True]

    def test_assignments_are_explicit_triples(self):
        """Each assignment carries its column, placeholder index and value."""
        update = sql_for_partial_update({"firstName": "Aliya", "age": 32}, {"firstName": "first_name"})

        assert update.assignments == [
            Assignment("first_name", 1, "Aliya"),
            Assignment("age", 2, 32),
        ]
        assert update.next_index == 3

    def test_single_field(self):
        """One field gives one assignment and the key goes in $2."""
        update = sql_for_partial_update({"name": "New"}, {})

        assert update.set_cols == '"name"=$1'
        assert update.values == ["New"]
        assert update.next_index == 2

    def test_none_values_are_kept(self):
        """Setting a field to null is still an assignment."""
        update = sql_for_partial_update({"salary": None, "equity": None}, {})

        assert update.set_cols == '"salary"=$1, "equity"=$2'
        assert update.values == [None, None]

    def test_empty_data_raises(self):
        """Partial update must change at least one field."""
        with pytest.raises(ValidationError):
            sql_for_partial_update({}, {"firstName": "first_name"})

    def test_fields_fix_the_order(self):
        """With an explicit field list, assignments follow that list."""
        update = sql_for_partial_update(
            {"logoUrl": "http://x.img", "name": "X"},
            {"logoUrl": "logo_url"},
            fields=("name", "description", "logoUrl"),
        )

        assert update.set_cols == '"name"=$1, "logo_url"=$2'
        assert update.values == ["X", "http://x.img"]

    def test_unknown_field_raises(self):
        """Keys outside the recognized fields are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            sql_for_partial_update({"name": "X", "handle": "y"}, {}, fields=("name",))

        assert "handle" in exc_info.value.message

    def test_non_identifier_column_raises(self):
        """Column names are never interpolated unless they are plain identifiers."""
        with pytest.raises(ValidationError):
            sql_for_partial_update({'name"=1; DROP TABLE jobs; --': "x"}, {})

    def test_column_for_defaults_to_field_name(self):
        """Fields missing from the lookup table use their own name."""
        assert column_for("numEmployees", {"numEmployees": "num_employees"}) == "num_employees"
        assert column_for("name", {"numEmployees": "num_employees"}) == "name"


class TestCompanyFiltersSql:
    """Test company_filters_sql."""

    def test_no_filters(self):
        """No filters gives an empty fragment and no values."""
        clause = company_filters_sql(CompanyFilters())

        assert clause == ("", [])
        assert clause.where == ""

    def test_name_like(self):
        """nameLike is a case-insensitive substring match."""
        clause = company_filters_sql(CompanyFilters(name_like="acme"))

        assert clause.sql == "name ILIKE $1 ESCAPE '\\'"
        assert clause.values == ["%acme%"]
        assert clause.where == "WHERE name ILIKE $1 ESCAPE '\\'"

    def test_min_employees(self):
        clause = company_filters_sql(CompanyFilters(min_employees=2))

        assert clause == ("num_employees >= $1", [2])

    def test_max_employees_alone_uses_first_placeholder(self):
        """Placeholder numbers count applied filters only."""
        clause = company_filters_sql(CompanyFilters(max_employees=2))

        assert clause == ("num_employees <= $1", [2])

    def test_min_and_max(self):
        clause = company_filters_sql(CompanyFilters(min_employees=2, max_employees=5))

        assert clause.sql == "num_employees >= $1 AND num_employees <= $2"
        assert clause.values == [2, 5]

    def test_name_and_max(self):
        clause = company_filters_sql(CompanyFilters(name_like="c", max_employees=3))

        assert clause == ("name ILIKE $1 ESCAPE '\\' AND num_employees <= $2", ["%c%", 3])

    def test_all_filters(self):
        clause = company_filters_sql(
            CompanyFilters(name_like="name", min_employees=2, max_employees=3)
        )

        assert clause.sql == "name ILIKE $1 ESCAPE '\\' AND num_employees >= $2 AND num_employees <= $3"
        assert clause.values == ["%name%", 2, 3]

    def test_zero_bound_is_applied(self):
        """A bound of 0 is present, not missing."""
        clause = company_filters_sql(CompanyFilters(min_employees=0))

        assert clause == ("num_employees >= $1", [0])

    def test_name_like_wildcards_are_literal(self):
        clause = company_filters_sql(CompanyFilters(name_like="50%_off"))

        assert clause.values == ["%50\\%\\_off%"]

    @pytest.mark.parametrize("raw, pattern", [
        ("acme", "%acme%"),
        ("100%", "%100\\%%"),
        ("a_b", "%a\\_b%"),
        ("back\\slash", "%back\\\\slash%"),
    ])
    def test_contains_pattern(self, raw, pattern):
        assert contains_pattern(raw) == pattern


class TestJobFiltersSql:
    """Test job_filters_sql."""

    def test_no_filters(self):
        assert job_filters_sql(JobFilters()) == ("", [])

    def test_title_like(self):
        clause = job_filters_sql(JobFilters(title_like="title"))

        assert clause == ("title ILIKE $1 ESCAPE '\\'", ["%title%"])

    def test_min_salary(self):
        clause = job_filters_sql(JobFilters(min_salary=60000))

        assert clause == ("salary >= $1", [60000])

    def test_has_equity_adds_no_value(self):
        """hasEquity is a null check with no parameter."""
        clause = job_filters_sql(JobFilters(has_equity=True))

        assert clause.sql == "equity IS NOT NULL"
        assert clause.values == []

    def test_has_equity_false_adds_nothing(self):
        assert job_filters_sql(JobFilters(min_salary=1, has_equity=False)) == ("salary >= $1", [1])

    def test_all_filters(self):
        clause = job_filters_sql(JobFilters(title_like="title", min_salary=60000, has_equity=True))

        assert clause.sql == "title ILIKE $1 ESCAPE '\\' AND salary >= $2 AND equity IS NOT NULL"
        assert clause.values == ["%title%", 60000]

    def test_min_salary_without_title(self):
        """minSalary takes $1 when it is the first applied filter."""
        clause = job_filters_sql(JobFilters(min_salary=75000, has_equity=True))

        assert clause == ("salary >= $1 AND equity IS NOT NULL", [75000])
