"""
Filterable, searchable, paginated report table.

Every listing (employees, leave requests, monthly summaries) is described
by one ``ReportTable`` configuration instead of carrying its own search /
filter / paging code.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from app.core.exceptions import ValidationError
from app.schemas.report import Page

T = TypeVar("T")

Getter = Callable[[Any], Any]


def attr(path: str) -> Getter:
    """Getter for a dotted attribute path, e.g. ``"summary.present_days"``."""
    parts = path.split(".")

    def _get(row: Any) -> Any:
        value = row
        for part in parts:
            if value is None:
                return None
            value = getattr(value, part, None)
        return value

    return _get


@dataclass(frozen=True)
class Column:
    header: str
    getter: Getter


@dataclass(frozen=True)
class ReportTable(Generic[T]):
    columns: Sequence[Column]
    search_fields: Sequence[Getter] = ()
    filters: Mapping[str, Getter] = field(default_factory=dict)

    def matches(
        self,
        row: T,
        search: str | None = None,
        filter_values: Mapping[str, str | None] | None = None,
    ) -> bool:
        if search:
            needle = search.strip().lower()
            if needle and not any(
                needle in str(get(row) or "").lower() for get in self.search_fields
            ):
                return False
        for name, wanted in (filter_values or {}).items():
            if not wanted:
                continue
            getter = self.filters.get(name)
            if getter is None:
                raise ValidationError(f"Unknown filter: {name}")
            if str(getter(row) or "").strip().lower() != wanted.strip().lower():
                return False
        return True

    def filter(
        self,
        rows: Sequence[T],
        search: str | None = None,
        filter_values: Mapping[str, str | None] | None = None,
    ) -> list[T]:
        return [r for r in rows if self.matches(r, search, filter_values)]

    def apply(
        self,
        rows: Sequence[T],
        search: str | None = None,
        filter_values: Mapping[str, str | None] | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> Page[T]:
        if page < 1 or page_size < 1:
            raise ValidationError("page and page_size must be >= 1")
        matched = self.filter(rows, search, filter_values)
        start = (page - 1) * page_size
        return Page(
            items=matched[start : start + page_size],
            total=len(matched),
            page=page,
            page_size=page_size,
            pages=math.ceil(len(matched) / page_size) if matched else 0,
        )

    def headers(self) -> list[str]:
        return [c.header for c in self.columns]

    def row_values(self, row: T) -> list[Any]:
        return [c.getter(row) for c in self.columns]
