"""
Load companies and jobs from a JSON file into the database.

The file holds {"companies": [...], "jobs": [...]} using the same field
names the repositories accept. Records are created through the
repositories, so the usual validation applies.

Usage:
    jobly load-fixtures --json data/fixtures.json
"""

import json
from pathlib import Path

from .database import Database, init_database
from .errors import ValidationError
from .repositories import CompanyRepository, JobRepository


def load(json_path: Path, db: Database, dry_run: bool = False) -> dict:
    """
    Create every company, then every job, from ``json_path``.

    Args:
        json_path: Path to the fixtures file
        db: Database to load into; tables are created if missing
        dry_run: If True, only report what would be loaded

    Returns:
        Counts: {"companies": n, "jobs": n, "skipped": n}
    """
    print(f"Loading fixtures from {json_path}...")
    with open(json_path, encoding="utf-8") as f:
        data = json.load(f)

    companies = data.get("companies", [])
    jobs = data.get("jobs", [])
    print(f"Found {len(companies)} companies and {len(jobs)} jobs")

    if dry_run:
        print("\n[DRY RUN] Would load the following companies:")
        for i, company in enumerate(companies[:5], 1):
            print(f"  {i}. {company.get('handle')}: {company.get('name')}")
        if len(companies) > 5:
            print(f"  ... and {len(companies) - 5} more")
        return {"companies": 0, "jobs": 0, "skipped": 0}

    init_database(db.engine)
    company_repo = CompanyRepository(db)
    job_repo = JobRepository(db)
    counts = {"companies": 0, "jobs": 0, "skipped": 0}

    for company in companies:
        try:
            company_repo.create(company)
            counts["companies"] += 1
        except ValidationError as e:
            print(f"Skipping company {company.get('handle')}: {e.message}")
            counts["skipped"] += 1

    for job in jobs:
        try:
            job_repo.create(job)
            counts["jobs"] += 1
        except ValidationError as e:
            print(f"Skipping job {job.get('title')}: {e.message}")
            counts["skipped"] += 1

    print("\nLoad complete!")
    print(f"   Companies: {counts['companies']}")
    print(f"   Jobs:      {counts['jobs']}")
    print(f"   Skipped:   {counts['skipped']}")
    return counts

