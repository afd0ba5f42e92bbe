"""Filter, sort and search over in-memory job and application lists.

Every stage is a pure function ``(items, criterion) -> items`` over a list
already fetched from the database; nothing is pushed down into SQL.
Items may be ORM rows, Pydantic models or plain dicts. Applications are
matched on the fields of their nested ``job_position``.
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal, TypeVar

from dateutil import parser as date_parser

from hireflow.services.pagination import PAGE_SIZE, clamp_page, page_count
from hireflow.utils.salary_parser import SalaryRange, parse_salary_range

T = TypeVar("T")

ALL = "all"

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


class SortOption(str, Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
    TITLE_ASC = "title-asc"
    TITLE_DESC = "title-desc"
    SALARY_HIGH = "salary-high"
    SALARY_LOW = "salary-low"
    STATUS = "status"


def _get(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def _job_data(item: Any) -> Any:
    """The job fields of an item: the item itself, or an application's job."""
    job = _get(item, "job_position")
    return job if job is not None else item


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def _timestamp(value: Any) -> datetime:
    if value is None:
        return _EPOCH
    if isinstance(value, str):
        value = date_parser.isoparse(value)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def _salary(item: Any) -> SalaryRange | None:
    return parse_salary_range(_get(_job_data(item), "salary_range"))


def filter_by_search(items: Sequence[T], search_query: str) -> list[T]:
    """Case-insensitive substring match on title, description or location."""
    if not search_query or not search_query.strip():
        return list(items)

    query = search_query.lower()

    def matches(item: Any) -> bool:
        job = _job_data(item)
        return any(
            query in _text(_get(job, name)).lower()
            for name in ("title", "description", "location")
        )

    return [item for item in items if matches(item)]


def filter_by_location(items: Sequence[T], location_filter: str) -> list[T]:
    if location_filter == ALL:
        return list(items)
    return [item for item in items if _get(_job_data(item), "location") == location_filter]


def filter_by_status(items: Sequence[T], status_filter: str) -> list[T]:
    """Exact status match. Items without a status (jobs) always pass."""
    if status_filter == ALL:
        return list(items)

    def matches(item: Any) -> bool:
        status = _get(item, "status")
        return status is None or _text(status) == status_filter

    return [item for item in items if matches(item)]


def filter_by_employment_type(items: Sequence[T], employment_types: Iterable[str]) -> list[T]:
    """Keep items whose employment type is selected; nothing selected keeps all."""
    selected = set(employment_types)
    if not selected:
        return list(items)
    return [
        item
        for item in items
        if _get(_job_data(item), "employment_type") in selected
    ]


def filter_by_salary_range(
    items: Sequence[T],
    salary_min: int | None = None,
    salary_max: int | None = None,
) -> list[T]:
    """Keep items whose parsed salary interval overlaps the query interval.

    Bounds are inclusive and either may be open. While any bound is set,
    items whose salary text cannot be parsed are excluded.
    """
    if salary_min is None and salary_max is None:
        return list(items)

    def overlaps(item: Any) -> bool:
        salary = _salary(item)
        if salary is None:
            return False
        min_match = salary_min is None or salary.max >= salary_min
        max_match = salary_max is None or salary.min <= salary_max
        return min_match and max_match

    return [item for item in items if overlaps(item)]


def _title_key(item: Any) -> tuple[str, str]:
    title = _text(_get(_job_data(item), "title"))
    return title.casefold(), title


def sort_items(items: Sequence[T], sort_by: SortOption | str) -> list[T]:
    """Stable sort. Unparsable salaries go last in both salary orders."""
    sort_by = SortOption(sort_by)

    if sort_by == SortOption.NEWEST:
        return sorted(items, key=lambda i: _timestamp(_get(_job_data(i), "created_at")), reverse=True)
    if sort_by == SortOption.OLDEST:
        return sorted(items, key=lambda i: _timestamp(_get(_job_data(i), "created_at")))
    if sort_by == SortOption.TITLE_ASC:
        return sorted(items, key=_title_key)
    if sort_by == SortOption.TITLE_DESC:
        return sorted(items, key=_title_key, reverse=True)
    if sort_by == SortOption.SALARY_HIGH:
        def salary_high(item: Any) -> tuple[bool, int]:
            salary = _salary(item)
            return (salary is None, -salary.max if salary else 0)

        return sorted(items, key=salary_high)
    if sort_by == SortOption.SALARY_LOW:
        def salary_low(item: Any) -> tuple[bool, int]:
            salary = _salary(item)
            return (salary is None, salary.min if salary else 0)

        return sorted(items, key=salary_low)

    # SortOption.STATUS: jobs have no status and keep their order
    return sorted(items, key=lambda i: _text(_get(i, "status")))


def extract_unique_values(
    items: Sequence[Any],
    field_name: Literal["location", "employment_type"],
) -> list[str]:
    """Distinct non-empty values in first-seen order, for filter choices."""
    values = (_get(_job_data(item), field_name) for item in items)
    return list(dict.fromkeys(value for value in values if value))


@dataclass(frozen=True)
class FilterState:
    """Filter criteria plus the current page.

    Changing any criterion through :meth:`update` returns to page 1.
    """

    search_query: str = ""
    status_filter: str = ALL
    location_filter: str = ALL
    employment_type_filter: tuple[str, ...] = field(default_factory=tuple)
    salary_min: int | None = None
    salary_max: int | None = None
    sort_by: SortOption = SortOption.NEWEST
    page: int = 1

    def update(self, **changes: Any) -> "FilterState":
        changes.pop("page", None)
        if "employment_type_filter" in changes:
            changes["employment_type_filter"] = tuple(changes["employment_type_filter"])
        if "sort_by" in changes:
            changes["sort_by"] = SortOption(changes["sort_by"])
        return replace(self, **changes, page=1)

    def toggle_employment_type(self, employment_type: str) -> "FilterState":
        current = self.employment_type_filter
        if employment_type in current:
            selected = tuple(t for t in current if t != employment_type)
        else:
            selected = (*current, employment_type)
        return self.update(employment_type_filter=selected)

    def clear(self) -> "FilterState":
        return FilterState()

    @property
    def active_filters_count(self) -> int:
        """Active categorical/range criteria; search and sort are not counted."""
        return sum(
            [
                self.location_filter != ALL,
                self.status_filter != ALL,
                len(self.employment_type_filter),
                self.salary_min is not None or self.salary_max is not None,
            ]
        )

    def go_to_page(self, page: int, total_items: int, page_size: int | None = None) -> "FilterState":
        pages = page_count(total_items, page_size or PAGE_SIZE)
        return replace(self, page=clamp_page(page, pages))


def apply_all_filters(items: Sequence[T], state: FilterState) -> list[T]:
    """Run every stage in the fixed order: search, location, status,
    employment type, salary, then sort."""
    filtered = filter_by_search(items, state.search_query)
    filtered = filter_by_location(filtered, state.location_filter)
    filtered = filter_by_status(filtered, state.status_filter)
    filtered = filter_by_employment_type(filtered, state.employment_type_filter)
    filtered = filter_by_salary_range(filtered, state.salary_min, state.salary_max)
    return sort_items(filtered, state.sort_by)
