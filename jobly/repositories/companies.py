"""
Companies Repository.

Responsibilities:
- CRUD operations for the companies table.
- Filtered listing.
- Fetching a company together with its jobs.

Non-Responsibilities:
- No HTTP concerns.
- No authorization.

Invariant:
A company's handle is unique and never changes after creation.
"""

from typing import Any, Dict, List, Mapping, Optional

from ..database import Database
from ..errors import NotFoundError, ValidationError
from ..filters import parse_company_filters
from ..normalize import decimal_str
from ..schema import (
    COMPANY_UPDATE_FIELDS,
    ensure_valid,
    validate_company_new,
    validate_company_update,
)
from ..sql import company_filters_sql, sql_for_partial_update

JS_TO_SQL = {
    "numEmployees": "num_employees",
    "logoUrl": "logo_url",
}

COMPANY_COLUMNS = (
    'handle, name, description, '
    'num_employees AS "numEmployees", logo_url AS "logoUrl"'
)


class CompanyRepository:
    """Related functions for companies."""

    def __init__(self, db: Database):
        self.db = db
        self.logger = db.logger

    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a company from ``data`` and return it.

        data should be { handle, name, description, numEmployees, logoUrl }

        Returns { handle, name, description, numEmployees, logoUrl }

        Raises:
            ValidationError: invalid payload or company already exists
        """
        ensure_valid(validate_company_new(data), "Invalid company")
        handle = data["handle"]

        duplicate_check = self.db.query(
            """SELECT handle
               FROM companies
               WHERE handle = $1""",
            [handle],
        )
        if duplicate_check.rows:
            self.logger.warning("Duplicate company", handle=handle)
            raise ValidationError(f"Duplicate company: {handle}")

        result = self.db.query(
            f"""INSERT INTO companies
                (handle, name, description, num_employees, logo_url)
                VALUES ($1, $2, $3, $4, $5)
                RETURNING {COMPANY_COLUMNS}""",
            [
                handle,
                data["name"],
                data["description"],
                data.get("numEmployees"),
                data.get("logoUrl"),
            ],
        )
        self.logger.info("Company created", handle=handle)
        return result.first()

    def find_all(self, filters: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        """
        Find all companies, ordered by name.

        Can filter on:
        - nameLike (case-insensitive, partial match)
        - minEmployees
        - maxEmployees

        Raises:
            ValidationError: unknown filter, non-integer bound, or
                minEmployees > maxEmployees
        """
        if not filters:
            result = self.db.query(
                f"""SELECT {COMPANY_COLUMNS}
                    FROM companies
                    ORDER BY name"""
            )
            return result.rows

        try:
            parsed = parse_company_filters(filters)
        except ValidationError as e:
            self.logger.warning("Rejected company filters", error=e.message)
            raise

        clause = company_filters_sql(parsed)
        result = self.db.query(
            f"""SELECT {COMPANY_COLUMNS}
                FROM companies
                {clause.where}
                ORDER BY name""",
            clause.values,
        )
        return result.rows

    def get(self, handle: str) -> Dict[str, Any]:
        """
        Return a company with its jobs.

        Returns { handle, name, description, numEmployees, logoUrl, jobs }
          where jobs is [{ id, title, salary, equity, companyHandle }, ...]

        Raises:
            NotFoundError: no such company
        """
        result = self.db.query(
            """SELECT c.handle,
                      c.name,
                      c.description,
                      c.num_employees AS "numEmployees",
                      c.logo_url AS "logoUrl",
                      j.id,
                      j.title,
                      j.salary,
                      j.equity,
                      j.company_handle AS "companyHandle"
               FROM companies c
               LEFT JOIN jobs j ON c.handle = j.company_handle
               WHERE c.handle = $1
               ORDER BY j.id""",
            [handle],
        )
        if not result.rows:
            self.logger.warning("Company not found", handle=handle)
            raise NotFoundError(f"No company: {handle}")

        first = result.rows[0]
        company = {
            "handle": first["handle"],
            "name": first["name"],
            "description": first["description"],
            "numEmployees": first["numEmployees"],
            "logoUrl": first["logoUrl"],
        }

        # with no jobs the single joined row has null job columns
        company["jobs"] = [
            {
                "id": row["id"],
                "title": row["title"],
                "salary": row["salary"],
                "equity": decimal_str(row["equity"]),
                "companyHandle": row["companyHandle"],
            }
            for row in result.rows
            if row["id"] is not None
        ]
        return company

    def update(self, handle: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Partially update a company; only the supplied fields change.

        Data can include: { name, description, numEmployees, logoUrl }

        Raises:
            ValidationError: empty payload, unknown field, or attempt to
                change the handle
            NotFoundError: no such company
        """
        ensure_valid(validate_company_update(data), "Invalid company update")
        update = sql_for_partial_update(data, JS_TO_SQL, fields=COMPANY_UPDATE_FIELDS)

        result = self.db.query(
            f"""UPDATE companies
                SET {update.set_cols}
                WHERE handle = ${update.next_index}
                RETURNING {COMPANY_COLUMNS}""",
            [*update.values, handle],
        )
        company = result.first()
        if company is None:
            self.logger.warning("Company not found", handle=handle)
            raise NotFoundError(f"No company: {handle}")

        self.logger.info("Company updated", handle=handle, fields=list(data))
        return company

    def remove(self, handle: str) -> None:
        """
        Delete a company (and, by cascade, its jobs).

        Raises:
            NotFoundError: no such company
        """
        result = self.db.query(
            """DELETE
               FROM companies
               WHERE handle = $1
               RETURNING handle""",
            [handle],
        )
        if not result.rows:
            self.logger.warning("Company not found", handle=handle)
            raise NotFoundError(f"No company: {handle}")
        self.logger.info("Company removed", handle=handle)
