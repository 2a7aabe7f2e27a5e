"""
Database schema and connection management.

Tables are declared with SQLAlchemy so ``init_database`` can create them on
any supported backend. Repositories talk to storage only through
``Database.query(sql, values)``, passing SQL written with ``$1..$n``
positional placeholders.
"""

import re
import time
from pathlib import Path
from typing import Any, Dict, List, NamedTuple, Optional, Sequence, Tuple, Union

from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    create_engine,
    event,
    text,
)
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base

from .logger import StructuredLogger, get_logger

Base = declarative_base()

_PLACEHOLDER_RE = re.compile(r"\$(\d+)")
_ILIKE_RE = re.compile(r"\bILIKE\b", re.IGNORECASE)


class Company(Base):
    """Company table."""

    __tablename__ = "companies"

    handle = Column(String(25), primary_key=True)
    name = Column(Text, unique=True, nullable=False)
    description = Column(Text, nullable=False)
    num_employees = Column(Integer, CheckConstraint("num_employees >= 0"))
    logo_url = Column(Text)


class Job(Base):
    """
    Job table. Equity is a fraction of the company, at most 1.

    SQLite would store NUMERIC as a double, so there equity is kept as its
    decimal text.
    """

    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False)
    salary = Column(Integer, CheckConstraint("salary >= 0"))
    equity = Column(
        Numeric().with_variant(Text(), "sqlite"),
        CheckConstraint("CAST(equity AS REAL) <= 1.0"),
    )
    company_handle = Column(
        String(25),
        ForeignKey("companies.handle", ondelete="CASCADE"),
        nullable=False,
    )


class QueryResult(NamedTuple):
    rows: List[Dict[str, Any]]

    def first(self) -> Optional[Dict[str, Any]]:
        return self.rows[0] if self.rows else None


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(url: str, echo: bool = False) -> Engine:
    """
    Create an engine for ``url``.

    For file-backed SQLite the parent directory is created and foreign keys
    are switched on for every connection.
    """
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite" and parsed.database not in (None, "", ":memory:"):
        Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(url, echo=echo)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def init_database(url_or_engine: Union[str, Engine]) -> Engine:
    """
    Create the companies and jobs tables if they do not exist.

    Args:
        url_or_engine: Database URL or an existing engine

    Returns:
        The engine the tables were created on
    """
    engine = create_db_engine(url_or_engine) if isinstance(url_or_engine, str) else url_or_engine
    Base.metadata.create_all(engine)
    return engine


def to_bind_style(sql: str, values: Sequence[Any]) -> Tuple[str, Dict[str, Any]]:
    """
    Rewrite ``$n`` placeholders as SQLAlchemy named parameters ``:pn``.

    Raises:
        ValueError: a placeholder has no matching value
    """
    values = list(values)
    params: Dict[str, Any] = {}

    def replace(match):
        n = int(match.group(1))
        if n < 1 or n > len(values):
            raise ValueError(f"Placeholder ${n} has no value ({len(values)} given)")
        params[f"p{n}"] = values[n - 1]
        return f":p{n}"

    return _PLACEHOLDER_RE.sub(replace, sql), params


class Database:
    """Storage collaborator: runs one parameterized statement per call."""

    def __init__(self, engine: Union[str, Engine], logger: Optional[StructuredLogger] = None):
        self.engine = create_db_engine(engine) if isinstance(engine, str) else engine
        self.logger = logger or get_logger()

    @classmethod
    def from_settings(cls, settings, logger: Optional[StructuredLogger] = None) -> "Database":
        return cls(create_db_engine(settings.database_url, echo=settings.sql_echo), logger=logger)

    @property
    def dialect(self) -> str:
        return self.engine.dialect.name

    def query(self, sql: str, values: Optional[Sequence[Any]] = None) -> QueryResult:
        """
        Execute ``sql`` with positional ``values`` and return its rows.

        Each call runs in its own transaction, committed on success. Storage
        errors are logged and re-raised unchanged.
        """
        statement = sql.strip().split(None, 1)[0].upper() if sql.strip() else ""
        bound_sql, params = to_bind_style(sql, values or [])
        if self.dialect == "sqlite":
            bound_sql = _ILIKE_RE.sub("LIKE", bound_sql)

        started = time.perf_counter()
        try:
            with self.engine.begin() as conn:
                result = conn.execute(text(bound_sql), params)
                rows = [dict(row) for row in result.mappings()] if result.returns_rows else []
        except SQLAlchemyError as e:
            self.logger.record_query_failure(type(e).__name__)
            self.logger.error(
                "Query failed",
                statement=statement,
                error=str(e.__cause__ or e),
            )
            raise

        self.logger.record_query(statement, len(rows))
        self.logger.debug(
            "Query executed",
            statement=statement,
            rows=len(rows),
            elapsed_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return QueryResult(rows)

    def dispose(self) -> None:
        self.engine.dispose()
