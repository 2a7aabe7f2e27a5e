"""
Jobs Repository.

Responsibilities:
- CRUD operations for the jobs table.
- Filtered listing.

Non-Responsibilities:
- No HTTP concerns.
- No authorization.

Invariant:
A job always belongs to an existing company and never moves to another.
Equity leaves this module as a decimal string, never a float.
"""

from typing import Any, Dict, List, Mapping, Optional

from ..database import Database
from ..errors import NotFoundError, ValidationError
from ..filters import parse_int, parse_job_filters
from ..normalize import decimal_str
from ..schema import (
    JOB_UPDATE_FIELDS,
    ensure_valid,
    validate_job_new,
    validate_job_update,
)
from ..sql import job_filters_sql, sql_for_partial_update


JOB_COLUMNS = 'id, title, salary, equity, company_handle AS "companyHandle"'


def _job_record(row: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if row is None:
        return None
    return {**row, "equity": decimal_str(row["equity"])}


class JobRepository:
    """Related functions for jobs."""

    def __init__(self, db: Database):
        self.db = db
        self.logger = db.logger

    def _job_id(self, job_id: Any) -> int:
        ok, parsed = parse_int(job_id)
        if not ok:
            self.logger.warning("Job not found", id=job_id)
            raise NotFoundError(f"No job with id: {job_id}")
        return parsed

    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a job from ``data`` and return it.

        data should be { title, salary, equity, companyHandle }

        Returns { id, title, salary, equity, companyHandle }

        Raises:
            ValidationError: invalid payload or companyHandle doesn't match
                any company
        """
        ensure_valid(validate_job_new(data), "Invalid job")
        company_handle = data["companyHandle"]

        company_exists = self.db.query(
            """SELECT handle
               FROM companies
               WHERE handle = $1""",
            [company_handle],
        )
        if not company_exists.rows:
            self.logger.warning("Company does not exist", company_handle=company_handle)
            raise ValidationError(f"Company does not exist: {company_handle}")

        result = self.db.query(
            f"""INSERT INTO jobs
                (title, salary, equity, company_handle)
                VALUES ($1, $2, $3, $4)
                RETURNING {JOB_COLUMNS}""",
            [
                data["title"],
                data.get("salary"),
                decimal_str(data.get("equity")),
                company_handle,
            ],
        )
        job = _job_record(result.first())
        self.logger.info("Job created", id=job["id"], company_handle=company_handle)
        return job

    def find_all(self, filters: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        """
        Find all jobs, ordered by title.

        Can filter on:
        - titleLike (case-insensitive, partial match)
        - minSalary
        - hasEquity ("true" keeps only jobs with non-null equity)

        Raises:
            ValidationError: unknown filter, non-integer minSalary, or
                non-boolean hasEquity
        """
        if not filters:
            result = self.db.query(
                f"""SELECT {JOB_COLUMNS}
                    FROM jobs
                    ORDER BY title, id"""
            )
            return [_job_record(row) for row in result.rows]

        try:
            parsed = parse_job_filters(filters)
        except ValidationError as e:
            self.logger.warning("Rejected job filters", error=e.message)
            raise

        clause = job_filters_sql(parsed)
        result = self.db.query(
            f"""SELECT {JOB_COLUMNS}
                FROM jobs
                {clause.where}
                ORDER BY title, id""",
            clause.values,
        )
        return [_job_record(row) for row in result.rows]

    def get(self, job_id: Any) -> Dict[str, Any]:
        """
        Return a job.

        Raises:
            NotFoundError: no such job
        """
        job_id = self._job_id(job_id)
        result = self.db.query(
            f"""SELECT {JOB_COLUMNS}
                FROM jobs
                WHERE id = $1""",
            [job_id],
        )
        job = _job_record(result.first())
        if job is None:
            self.logger.warning("Job not found", id=job_id)
            raise NotFoundError(f"No job with id: {job_id}")
        return job

    def update(self, job_id: Any, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Partially update a job; only the supplied fields change.

        Data can include: { title, salary, equity }

        Raises:
            ValidationError: empty payload, unknown field, or attempt to
                change id or companyHandle
            NotFoundError: no such job
        """
        ensure_valid(validate_job_update(data), "Invalid job update")
        job_id = self._job_id(job_id)

        values = dict(data)
        if "equity" in values:
            values["equity"] = decimal_str(values["equity"])
        update = sql_for_partial_update(values, {}, fields=JOB_UPDATE_FIELDS)

        result = self.db.query(
            f"""UPDATE jobs
                SET {update.set_cols}
                WHERE id = ${update.next_index}
                RETURNING {JOB_COLUMNS}""",
            [*update.values, job_id],
        )
        job = _job_record(result.first())
        if job is None:
            self.logger.warning("Job not found", id=job_id)
            raise NotFoundError(f"No job with id: {job_id}")

        self.logger.info("Job updated", id=job_id, fields=list(data))
        return job

    def remove(self, job_id: Any) -> None:
        """
        Delete a job.

        Raises:
            NotFoundError: no such job
        """
        job_id = self._job_id(job_id)
        result = self.db.query(
            """DELETE
               FROM jobs
               WHERE id = $1
               RETURNING id""",
            [job_id],
        )
        if not result.rows:
            self.logger.warning("Job not found", id=job_id)
            raise NotFoundError(f"No job with id: {job_id}")
        self.logger.info("Job removed", id=job_id)
