"""
Error kinds raised by the data-access layer.

Each error carries a ``status`` code so an outer layer (HTTP, CLI) can map
it without inspecting the message.
"""

from typing import List, Optional


class JoblyError(Exception):
    """Base class for errors raised by jobly."""

    status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(JoblyError):
    """Caller-supplied data is malformed or violates a precondition."""

    status = 400

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = list(errors) if errors else [message]


class NotFoundError(JoblyError):
    """Operation targets a record that does not exist."""

    status = 404
