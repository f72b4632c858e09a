"""Typed commands handed to ``TaskService``.

Constructing a command validates it, so the service never sees missing or
blank required fields.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .errors import MissingFields, MissingTitle

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
# bounds of the Integer primary key columns
ID_MIN, ID_MAX = -(2**31), 2**31 - 1


def parse_id(raw: int | str | None) -> int | None:
    """Read a numeric id from a path segment; leading digits win (``"12abc"`` is 12).

    Values that cannot name a stored row (outside the Integer column range)
    read as ``None``.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        value = raw
    else:
        m = _LEADING_INT.match(str(raw))
        # more than 12 digits is out of range anyway
        if not m or len(m.group(1).lstrip("+-")) > 12:
            return None
        value = int(m.group(1))
    return value if ID_MIN <= value <= ID_MAX else None


def _clean(value: str | None) -> str:
    return (value or "").strip()


@dataclass(frozen=True)
class RegisterCommand:
    name: str
    # stored exactly as given; blank-only counts as missing
    email: str
    password: str

    def __post_init__(self):
        name = _clean(self.name)
        if not name or not _clean(self.email) or not self.password:
            raise MissingFields("name/email/password required")
        object.__setattr__(self, "name", name)


@dataclass(frozen=True)
class LoginCommand:
    email: str
    password: str

    def __post_init__(self):
        if not _clean(self.email) or not self.password:
            raise MissingFields("email/password required")


@dataclass(frozen=True)
class CreateTaskCommand:
    title: str
    description: str | None = None

    def __post_init__(self):
        title = _clean(self.title)
        if not title:
            raise MissingTitle()
        object.__setattr__(self, "title", title)
        object.__setattr__(self, "description", self.description or None)


@dataclass(frozen=True)
class AdvanceStatusCommand:
    task_id: int | None
    # None means implicit advance
    status: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "task_id", parse_id(self.task_id))
        object.__setattr__(self, "status", self.status or None)
