"""
Payload checks for creating and updating companies and jobs.

Each ``validate_*`` function returns a list of error messages; an empty
list means the payload is acceptable.
"""

from typing import Any, Dict, List, Tuple
from urllib.parse import urlparse

from .errors import ValidationError
from .normalize import is_handle, to_decimal

COMPANY_FIELDS = ("handle", "name", "description", "numEmployees", "logoUrl")
COMPANY_REQUIRED = ("handle", "name", "description")
COMPANY_UPDATE_FIELDS = ("name", "description", "numEmployees", "logoUrl")

JOB_FIELDS = ("title", "salary", "equity", "companyHandle")
JOB_REQUIRED = ("title", "companyHandle")
JOB_UPDATE_FIELDS = ("title", "salary", "equity")


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def _is_int(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


def _valid_url(v: str) -> bool:
    p = urlparse(v)
    return bool(p.scheme and p.netloc)


def _unknown(data: Dict[str, Any], allowed: Tuple[str, ...]) -> List[str]:
    return [f"Unknown field: {k}" for k in data if k not in allowed]


def _check_company_values(data: Dict[str, Any]) -> List[str]:
    errors: List[str] = []
    for f in ("name", "description"):
        if f in data and not isinstance(data[f], str):
            errors.append(f"Field '{f}' must be a string")
    if "name" in data and isinstance(data["name"], str) and not data["name"].strip():
        errors.append("Field 'name' must be a non-empty string")

    n = data.get("numEmployees")
    if n is not None and not (_is_int(n) and n >= 0):
        errors.append("Field 'numEmployees' must be a non-negative integer")

    url = data.get("logoUrl")
    if url is not None:
        if not isinstance(url, str):
            errors.append("Field 'logoUrl' must be a string")
        elif url.strip() and not _valid_url(url):
            errors.append("Field 'logoUrl' must be a valid absolute URL (scheme + host)")
    return errors


def _check_job_values(data: Dict[str, Any]) -> List[str]:
    errors: List[str] = []
    if "title" in data and not _is_non_empty_str(data["title"]):
        errors.append("Field 'title' must be a non-empty string")

    salary = data.get("salary")
    if salary is not None and not (_is_int(salary) and salary >= 0):
        errors.append("Field 'salary' must be a non-negative integer")

    if data.get("equity") is not None:
        equity = to_decimal(data["equity"])
        if equity is None or not (0 <= equity <= 1):
            errors.append("Field 'equity' must be a number between 0 and 1")
    return errors


def validate_company_new(data: Dict[str, Any]) -> List[str]:
    errors = _unknown(data, COMPANY_FIELDS)
    for f in COMPANY_REQUIRED:
        if f not in data:
            errors.append(f"Missing required field: {f}")
    if "handle" in data and not is_handle(data["handle"]):
        errors.append("Field 'handle' must be a lowercase slug of at most 25 characters")
    return errors + _check_company_values(data)


def validate_company_update(data: Dict[str, Any]) -> List[str]:
    if "handle" in data:
        return ["Field 'handle' cannot be changed"]
    return _unknown(data, COMPANY_UPDATE_FIELDS) + _check_company_values(data)


def validate_job_new(data: Dict[str, Any]) -> List[str]:
    errors = _unknown(data, JOB_FIELDS)
    for f in JOB_REQUIRED:
        if f not in data:
            errors.append(f"Missing required field: {f}")
    if "companyHandle" in data and not _is_non_empty_str(data["companyHandle"]):
        errors.append("Field 'companyHandle' must be a non-empty string")
    return errors + _check_job_values(data)


def validate_job_update(data: Dict[str, Any]) -> List[str]:
    immutable = [f for f in ("id", "companyHandle") if f in data]
    if immutable:
        return [f"Field '{f}' cannot be changed" for f in immutable]
    return _unknown(data, JOB_UPDATE_FIELDS) + _check_job_values(data)


def ensure_valid(errors: List[str], message: str = "Invalid data") -> None:
    """Raise ValidationError carrying ``errors`` if there are any."""
    if errors:
        raise ValidationError(f"{message}: {'; '.join(errors)}", errors=errors)
