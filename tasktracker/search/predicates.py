"""
Composable filters over tasks.

A ``Predicate`` can be checked against a loaded task with ``matches()`` or
turned into a SQLAlchemy where-clause with ``clause()``. Predicates combine
with ``&``, ``|`` and ``~``; ``ALWAYS`` is the identity for ``&`` and is what
an empty search produces.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Optional, Tuple

from sqlalchemy import and_, func, not_, or_, true

from ..models import Tag, Task
from ..models.lifecycle import as_utc

# Columns a FieldEquals / Contains predicate may target
TASK_FIELDS = ("id", "status", "priority", "user_id", "title", "description")


class Predicate:
    def matches(self, task) -> bool:
        raise NotImplementedError

    def clause(self):
        raise NotImplementedError

    def __and__(self, other: "Predicate") -> "Predicate":
        return all_of([self, other])

    def __or__(self, other: "Predicate") -> "Predicate":
        return any_of([self, other])

    def __invert__(self) -> "Predicate":
        return Not(self)


class _Always(Predicate):
    def matches(self, task) -> bool:
        return True

    def clause(self):
        return true()

    def __repr__(self) -> str:
        return "ALWAYS"


ALWAYS = _Always()


def _column(field: str):
    if field not in TASK_FIELDS:
        raise ValueError(f"Unsupported task field: {field}")
    return getattr(Task, field)


def _utc_bound(value: Optional[datetime]) -> Optional[datetime]:
    return None if value is None else as_utc(value)


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


@dataclass(frozen=True)
class FieldEquals(Predicate):
    field: str
    value: Any

    def matches(self, task) -> bool:
        return getattr(task, self.field) == self.value

    def clause(self):
        return _column(self.field) == self.value


@dataclass(frozen=True)
class FieldIn(Predicate):
    field: str
    values: Tuple[Any, ...]

    def matches(self, task) -> bool:
        return getattr(task, self.field) in self.values

    def clause(self):
        return _column(self.field).in_(self.values)


@dataclass(frozen=True)
class Contains(Predicate):
    """
    Case-insensitive substring match. A NULL column never matches.

    Both forms fold case with Python's ``str.lower``; on SQLite the SQL
    ``lower()`` is replaced by the same function when a connection opens
    (see ``tasktracker.db.session``).
    """

    field: str
    keyword: str

    def matches(self, task) -> bool:
        value = getattr(task, self.field)
        if value is None:
            return False
        return self.keyword.lower() in value.lower()

    def clause(self):
        pattern = f"%{_escape_like(self.keyword.lower())}%"
        return func.lower(_column(self.field)).like(pattern, escape="\\")


@dataclass(frozen=True)
class CreatedBetween(Predicate):
    """Inclusive on both ends; a missing bound leaves that side open."""

    start: Optional[datetime] = None
    end: Optional[datetime] = None

    def __post_init__(self):
        if self.start is None and self.end is None:
            raise ValueError("CreatedBetween needs at least one bound")
        object.__setattr__(self, "start", _utc_bound(self.start))
        object.__setattr__(self, "end", _utc_bound(self.end))

    def matches(self, task) -> bool:
        created = as_utc(task.created_at)
        if self.start is not None and created < self.start:
            return False
        if self.end is not None and created > self.end:
            return False
        return True

    def clause(self):
        if self.start is None:
            return Task.created_at <= self.end
        if self.end is None:
            return Task.created_at >= self.start
        return Task.created_at.between(self.start, self.end)


@dataclass(frozen=True)
class HasTag(Predicate):
    name: str

    def matches(self, task) -> bool:
        return any(tag.name == self.name for tag in task.tags)

    def clause(self):
        return Task.tags.any(Tag.name == self.name)


@dataclass(frozen=True)
class And(Predicate):
    parts: Tuple[Predicate, ...]

    def matches(self, task) -> bool:
        return all(part.matches(task) for part in self.parts)

    def clause(self):
        return and_(*(part.clause() for part in self.parts))


@dataclass(frozen=True)
class Or(Predicate):
    parts: Tuple[Predicate, ...]

    def matches(self, task) -> bool:
        return any(part.matches(task) for part in self.parts)

    def clause(self):
        return or_(*(part.clause() for part in self.parts))


@dataclass(frozen=True)
class Not(Predicate):
    inner: Predicate

    def matches(self, task) -> bool:
        return not self.inner.matches(task)

    def clause(self):
        return not_(self.inner.clause())


def all_of(predicates: Iterable[Predicate]) -> Predicate:
    parts = []
    for predicate in predicates:
        if predicate is ALWAYS:
            continue
        if isinstance(predicate, And):
            parts.extend(predicate.parts)
        else:
            parts.append(predicate)
    if not parts:
        return ALWAYS
    if len(parts) == 1:
        return parts[0]
    return And(tuple(parts))


def any_of(predicates: Iterable[Predicate]) -> Predicate:
    parts = []
    for predicate in predicates:
        if predicate is ALWAYS:
            return ALWAYS
        if isinstance(predicate, Or):
            parts.extend(predicate.parts)
        else:
            parts.append(predicate)
    if not parts:
        raise ValueError("any_of() needs at least one predicate")
    if len(parts) == 1:
        return parts[0]
    return Or(tuple(parts))


# --- Building blocks used by the services ---

def has_status(status: str) -> Predicate:
    return FieldEquals("status", status)


def has_priority(priority: str) -> Predicate:
    return FieldEquals("priority", priority)


def belongs_to_user(user_id) -> Predicate:
    return FieldEquals("user_id", user_id)


def title_contains(keyword: str) -> Predicate:
    return Contains("title", keyword)


def description_contains(keyword: str) -> Predicate:
    return Contains("description", keyword)


def keyword_matches(keyword: str) -> Predicate:
    return title_contains(keyword) | description_contains(keyword)


def created_between(start: Optional[datetime], end: Optional[datetime]) -> Predicate:
    if start is None and end is None:
        return ALWAYS
    return CreatedBetween(start, end)


def has_tag(name: str) -> Predicate:
    return HasTag(name)


def build_task_predicate(search) -> Predicate:
    """
    Combine the fields set on a ``TaskSearch`` into one predicate.

    Fields left as ``None`` are skipped. ``keyword`` matches title or
    description; everything else is AND-ed. An empty search gives ``ALWAYS``.
    """
    if search is None:
        return ALWAYS

    parts = []
    if search.status is not None:
        parts.append(has_status(search.status))
    if search.priority is not None:
        parts.append(has_priority(search.priority))
    if search.user_id is not None:
        parts.append(belongs_to_user(search.user_id))
    if search.keyword is not None:
        parts.append(keyword_matches(search.keyword))
    if search.tag_name is not None:
        parts.append(has_tag(search.tag_name))
    parts.append(created_between(search.created_after, search.created_before))
    return all_of(parts)
