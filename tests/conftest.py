"""
Pytest configuration and shared fixtures.
"""

import json
from pathlib import Path
from typing import Dict

import pytest

from jobly.database import Database, init_database
from jobly.logger import get_logger, reset_logger
from jobly.repositories import CompanyRepository, JobRepository


@pytest.fixture(autouse=True)
def quiet_logger():
    """Global logger with no console or file output."""
    reset_logger()
    logger = get_logger(enable_console=False, enable_file=False)
    yield logger
    reset_logger()


@pytest.fixture
def db_url(tmp_path) -> str:
    """URL of a fresh SQLite database file with the tables created."""
    url = f"sqlite:///{tmp_path / 'jobly_test.db'}"
    engine = init_database(url)
    engine.dispose()
    return url


@pytest.fixture
def empty_db(db_url, quiet_logger):
    """Database with tables but no rows."""
    db = Database(db_url, logger=quiet_logger)
    yield db
    db.dispose()


@pytest.fixture
def db(empty_db) -> Database:
    """
    Database seeded with:

    companies c1 (1 employee), c2 (2), c3 (3)
    jobs j1 (c1, 70000, 0.65), j2 (c1, 85000, 0.55), j3 (c2, 75000, no equity)
    """
    for n in (1, 2, 3):
        empty_db.query(
            """INSERT INTO companies (handle, name, description, num_employees, logo_url)
               VALUES ($1, $2, $3, $4, $5)""",
            [f"c{n}", f"C{n}", f"Desc{n}", n, f"http://c{n}.img"],
        )
    for title, salary, equity, handle in [
        ("j1", 70000, "0.65", "c1"),
        ("j2", 85000, "0.55", "c1"),
        ("j3", 75000, None, "c2"),
    ]:
        empty_db.query(
            """INSERT INTO jobs (title, salary, equity, company_handle)
               VALUES ($1, $2, $3, $4)""",
            [title, salary, equity, handle],
        )
    return empty_db


@pytest.fixture
def companies(db) -> CompanyRepository:
    return CompanyRepository(db)


@pytest.fixture
def jobs(db) -> JobRepository:
    return JobRepository(db)


@pytest.fixture
def job_ids(db) -> Dict[str, int]:
    """Seeded job ids by title."""
    rows = db.query("SELECT id, title FROM jobs").rows
    return {row["title"]: row["id"] for row in rows}


@pytest.fixture
def new_company() -> Dict:
    """Valid company payload."""
    return {
        "handle": "new",
        "name": "New",
        "description": "New Description",
        "numEmployees": 1,
        "logoUrl": "http://new.img",
    }


@pytest.fixture
def write_json(tmp_path):
    """Write ``data`` to a JSON file under tmp_path and return its path."""
    def _write(name: str, data) -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return path
    return _write
