"""
Filter records and the parsing done at the validation boundary.

Raw filter options arrive as loosely-typed mappings (query strings, CLI
flags). They are parsed exactly once into ``CompanyFilters`` / ``JobFilters``
before any SQL is built; the SQL builder only ever sees typed records.
"""

import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple

from .errors import ValidationError

COMPANY_FILTER_KEYS = ("nameLike", "minEmployees", "maxEmployees")
JOB_FILTER_KEYS = ("titleLike", "minSalary", "hasEquity")

_INT_RE = re.compile(r"^[+-]?\d+$")


@dataclass(frozen=True)
class CompanyFilters:
    name_like: Optional[str] = None
    min_employees: Optional[int] = None
    max_employees: Optional[int] = None


@dataclass(frozen=True)
class JobFilters:
    title_like: Optional[str] = None
    min_salary: Optional[int] = None
    has_equity: bool = False


def parse_int(value: Any) -> Tuple[bool, Optional[int]]:
    """
    Parse an integer from an int or a string of digits.

    Returns (ok, value). Booleans, floats and strings such as "12abc" or ""
    are failures.
    """
    if isinstance(value, bool):
        return False, None
    if isinstance(value, int):
        return True, value
    if isinstance(value, str) and _INT_RE.match(value.strip()):
        return True, int(value.strip())
    return False, None


def parse_bool(value: Any) -> Tuple[bool, Optional[bool]]:
    """Parse a boolean from True/False or exactly "true"/"false"."""
    if isinstance(value, bool):
        return True, value
    if value == "true":
        return True, True
    if value == "false":
        return True, False
    return False, None


def _check_keys(raw: Mapping[str, Any], allowed: Tuple[str, ...]) -> None:
    unknown = [k for k in raw if k not in allowed]
    if unknown:
        raise ValidationError(
            f"Can only pass {', '.join(allowed)} as filters",
            errors=[f"Unknown filter: {k}" for k in unknown],
        )


def _pattern(value: Any, key: str) -> Optional[str]:
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string")
    return value


def _integer(value: Any, key: str) -> Optional[int]:
    if value is None:
        return None
    ok, parsed = parse_int(value)
    if not ok:
        raise ValidationError(f"{key} must be an integer")
    return parsed


def parse_company_filters(raw: Optional[Mapping[str, Any]]) -> CompanyFilters:
    """
    Validate raw company filter options.

    Raises:
        ValidationError: unknown key, non-integer bound, or
            minEmployees > maxEmployees
    """
    raw = raw or {}
    _check_keys(raw, COMPANY_FILTER_KEYS)

    min_employees = _integer(raw.get("minEmployees"), "minEmployees")
    max_employees = _integer(raw.get("maxEmployees"), "maxEmployees")
    if (
        min_employees is not None
        and max_employees is not None
        and min_employees > max_employees
    ):
        raise ValidationError("minEmployees cannot be greater than maxEmployees")

    return CompanyFilters(
        name_like=_pattern(raw.get("nameLike"), "nameLike"),
        min_employees=min_employees,
        max_employees=max_employees,
    )


def parse_job_filters(raw: Optional[Mapping[str, Any]]) -> JobFilters:
    """
    Validate raw job filter options.

    Raises:
        ValidationError: unknown key, non-integer minSalary, or a hasEquity
            value other than true/false
    """
    raw = raw or {}
    _check_keys(raw, JOB_FILTER_KEYS)

    has_equity = False
    if raw.get("hasEquity") is not None:
        ok, parsed = parse_bool(raw["hasEquity"])
        if not ok:
            raise ValidationError("hasEquity must be true or false")
        has_equity = parsed

    return JobFilters(
        title_like=_pattern(raw.get("titleLike"), "titleLike"),
        min_salary=_integer(raw.get("minSalary"), "minSalary"),
        has_equity=has_equity,
    )
