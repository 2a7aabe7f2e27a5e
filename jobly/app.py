import argparse
import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Optional

from . import __version__
from .config import get_settings
from .database import Database, init_database
from .errors import JoblyError, NotFoundError
from .fixtures import load as load_fixtures
from .logger import get_logger
from .repositories import CompanyRepository, JobRepository

EXIT_VALIDATION = 2
EXIT_NOT_FOUND = 4


def _load_payload(path: str) -> Dict[str, Any]:
    input_path = Path(path)
    if not input_path.exists():
        raise SystemExit(f"Input file not found: {input_path}")
    with input_path.open("r", encoding="utf-8") as f:
        payload = json.load(f)
    if not isinstance(payload, dict):
        raise SystemExit(f"Input must be a JSON object: {input_path}")
    return payload


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _present(**options: Optional[Any]) -> Dict[str, Any]:
    return {k: v for k, v in options.items() if v is not None}


def cmd_init_db(args: argparse.Namespace, db: Database) -> None:
    init_database(db.engine)
    print(f"Initialized database: {db.engine.url.render_as_string(hide_password=True)}")


def cmd_load_fixtures(args: argparse.Namespace, db: Database) -> None:
    json_path = Path(args.json)
    if not json_path.exists():
        raise SystemExit(f"JSON file not found: {json_path}")
    load_fixtures(json_path, db, dry_run=args.dry_run)


def cmd_companies_list(args: argparse.Namespace, db: Database) -> None:
    filters = _present(
        nameLike=args.name_like,
        minEmployees=args.min_employees,
        maxEmployees=args.max_employees,
    )
    _print_json(CompanyRepository(db).find_all(filters))


def cmd_companies_get(args: argparse.Namespace, db: Database) -> None:
    _print_json(CompanyRepository(db).get(args.handle))


def cmd_companies_create(args: argparse.Namespace, db: Database) -> None:
    _print_json(CompanyRepository(db).create(_load_payload(args.input)))


def cmd_companies_update(args: argparse.Namespace, db: Database) -> None:
    _print_json(CompanyRepository(db).update(args.handle, _load_payload(args.input)))


def cmd_companies_remove(args: argparse.Namespace, db: Database) -> None:
    CompanyRepository(db).remove(args.handle)
    print(f"Deleted: {args.handle}")


def cmd_jobs_list(args: argparse.Namespace, db: Database) -> None:
    filters = _present(
        titleLike=args.title_like,
        minSalary=args.min_salary,
        hasEquity=args.has_equity,
    )
    _print_json(JobRepository(db).find_all(filters))


def cmd_jobs_get(args: argparse.Namespace, db: Database) -> None:
    _print_json(JobRepository(db).get(args.id))


def cmd_jobs_create(args: argparse.Namespace, db: Database) -> None:
    _print_json(JobRepository(db).create(_load_payload(args.input)))


def cmd_jobs_update(args: argparse.Namespace, db: Database) -> None:
    _print_json(JobRepository(db).update(args.id, _load_payload(args.input)))


def cmd_jobs_remove(args: argparse.Namespace, db: Database) -> None:
    JobRepository(db).remove(args.id)
    print(f"Deleted: {args.id}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="jobly", description="Jobly: companies and jobs")
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--database-url", help="Database URL (default: JOBLY_DATABASE_URL or sqlite:///data/jobly.db)")

    subparsers = parser.add_subparsers(dest="command")

    init = subparsers.add_parser("init-db", help="Create the companies and jobs tables")
    init.set_defaults(func=cmd_init_db)

    fix = subparsers.add_parser("load-fixtures", help="Load companies and jobs from a JSON file")
    fix.add_argument("--json", default="data/fixtures.json", help="Path to fixtures JSON (default: data/fixtures.json)")
    fix.add_argument("--dry-run", action="store_true", help="Show what would be loaded without writing")
    fix.set_defaults(func=cmd_load_fixtures)

    companies = subparsers.add_parser("companies", help="Manage companies")
    csub = companies.add_subparsers(dest="action", required=True)

    clist = csub.add_parser("list", help="List companies, optionally filtered")
    clist.add_argument("--name-like", help="Case-insensitive substring of the name")
    clist.add_argument("--min-employees", help="Minimum number of employees (inclusive)")
    clist.add_argument("--max-employees", help="Maximum number of employees (inclusive)")
    clist.set_defaults(func=cmd_companies_list)

    cget = csub.add_parser("get", help="Show a company and its jobs")
    cget.add_argument("handle")
    cget.set_defaults(func=cmd_companies_get)

    ccreate = csub.add_parser("create", help="Create a company from a JSON file")
    ccreate.add_argument("--input", required=True, help="Path to company JSON")
    ccreate.set_defaults(func=cmd_companies_create)

    cupdate = csub.add_parser("update", help="Partially update a company from a JSON file")
    cupdate.add_argument("handle")
    cupdate.add_argument("--input", required=True, help="Path to JSON with the fields to change")
    cupdate.set_defaults(func=cmd_companies_update)

    cremove = csub.add_parser("remove", help="Delete a company and its jobs")
    cremove.add_argument("handle")
    cremove.set_defaults(func=cmd_companies_remove)

    jobs = subparsers.add_parser("jobs", help="Manage jobs")
    jsub = jobs.add_subparsers(dest="action", required=True)

    jlist = jsub.add_parser("list", help="List jobs, optionally filtered")
    jlist.add_argument("--title-like", help="Case-insensitive substring of the title")
    jlist.add_argument("--min-salary", help="Minimum salary (inclusive)")
    jlist.add_argument("--has-equity", choices=["true", "false"], help="Only jobs with equity when true")
    jlist.set_defaults(func=cmd_jobs_list)

    jget = jsub.add_parser("get", help="Show a job")
    jget.add_argument("id")
    jget.set_defaults(func=cmd_jobs_get)

    jcreate = jsub.add_parser("create", help="Create a job from a JSON file")
    jcreate.add_argument("--input", required=True, help="Path to job JSON")
    jcreate.set_defaults(func=cmd_jobs_create)

    jupdate = jsub.add_parser("update", help="Partially update a job from a JSON file")
    jupdate.add_argument("id")
    jupdate.add_argument("--input", required=True, help="Path to JSON with the fields to change")
    jupdate.set_defaults(func=cmd_jobs_update)

    jremove = jsub.add_parser("remove", help="Delete a job")
    jremove.add_argument("id")
    jremove.set_defaults(func=cmd_jobs_remove)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return 0

    if not hasattr(args, "func"):
        parser.print_help()
        return 0

    settings = get_settings()
    logger = get_logger()
    url = args.database_url or settings.database_url
    db = Database.from_settings(replace(settings, database_url=url), logger=logger)
    try:
        args.func(args, db)
    except JoblyError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_NOT_FOUND if isinstance(e, NotFoundError) else EXIT_VALIDATION
    finally:
        db.dispose()
    return 0


if __name__ == "__main__":
    sys.exit(main())
