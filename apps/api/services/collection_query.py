from __future__ import annotations

import json
import math
import re
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from core.exceptions import InvalidQueryError
from core.storage.fixture_store import FixtureStore, same_id, singularize

RESERVED_PARAMS = {"q", "_", "callback", "_sort", "_order", "_start", "_end", "_limit", "_page", "_embed", "_expand"}
OPERATOR_SUFFIXES = ("_gte", "_lte", "_ne", "_like")
DEFAULT_PAGE_SIZE = 10

_MISSING = object()


def pluralize(name: str) -> str:
    if name.endswith("y") and len(name) > 1 and name[-2] not in "aeiou":
        return name[:-1] + "ies"
    if name.endswith(("s", "x", "z", "ch", "sh")):
        return name + "es"
    return name + "s"


def resolve_path(record: Any, path: str) -> Any:
    value = record
    for part in path.split("."):
        if isinstance(value, dict) and part in value:
            value = value[part]
        elif isinstance(value, list) and part.isdigit() and int(part) < len(value):
            value = value[int(part)]
        else:
            return _MISSING
    return value


def as_text(value: Any) -> str:
    """Render a JSON value the way it appears in a query string."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _split(values: Iterable[str]) -> List[str]:
    return [item.strip() for value in values for item in value.split(",") if item.strip()]


def _parse_int(name: str, value: Optional[str]) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except ValueError as exc:
        raise InvalidQueryError(f"Query parameter '{name}' must be an integer, got '{value}'") from exc


@dataclass
class CollectionQuery:
    filters: Dict[str, List[str]] = field(default_factory=dict)
    operators: List[Tuple[str, str, str]] = field(default_factory=list)
    search: Optional[str] = None
    sort: List[str] = field(default_factory=list)
    order: List[str] = field(default_factory=list)
    start: Optional[int] = None
    end: Optional[int] = None
    limit: Optional[int] = None
    page: Optional[int] = None
    embed: List[str] = field(default_factory=list)
    expand: List[str] = field(default_factory=list)

    @classmethod
    def from_params(cls, params: Iterable[Tuple[str, str]]) -> "CollectionQuery":
        grouped: Dict[str, List[str]] = {}
        for key, value in params:
            grouped.setdefault(key, []).append(value)

        def first(name: str) -> Optional[str]:
            values = grouped.get(name)
            return values[0] if values else None

        query = cls(
            search=first("q") or None,
            sort=_split(grouped.get("_sort", [])),
            order=[value.lower() for value in _split(grouped.get("_order", []))],
            start=_parse_int("_start", first("_start")),
            end=_parse_int("_end", first("_end")),
            limit=_parse_int("_limit", first("_limit")),
            page=_parse_int("_page", first("_page")),
            embed=_split(grouped.get("_embed", [])),
            expand=_split(grouped.get("_expand", [])),
        )
        for key, values in grouped.items():
            if key in RESERVED_PARAMS:
                continue
            suffix = next((suffix for suffix in OPERATOR_SUFFIXES if key.endswith(suffix) and len(key) > len(suffix)), None)
            if suffix is None:
                query.filters[key] = values
            else:
                for value in values:
                    query.operators.append((key[: -len(suffix)], suffix[1:], value))
        return query


@dataclass
class QueryResult:
    items: List[Dict[str, Any]]
    headers: Dict[str, str] = field(default_factory=dict)


class CollectionQueryService:
    """Filter, sort, slice and join the records of one collection."""

    def __init__(self, store: FixtureStore) -> None:
        self._store = store

    def run(
        self,
        name: str,
        query: CollectionQuery,
        page_url: Optional[Callable[[int], str]] = None,
        records: Optional[List[Dict[str, Any]]] = None,
    ) -> QueryResult:
        items = self._store.list_items(name) if records is None else records
        query = self._drop_unknown_fields(items, query)
        if query.search:
            items = [record for record in items if self._matches_search(record, query.search.lower())]
        items = [record for record in items if self._matches_filters(record, query)]
        items = self._sort(items, query.sort, query.order)

        headers: Dict[str, str] = {}
        total = len(items)
        if query.page is not None:
            page = max(query.page, 1)
            limit = query.limit if query.limit and query.limit > 0 else DEFAULT_PAGE_SIZE
            offset = (page - 1) * limit
            items = items[offset : offset + limit]
            headers["X-Total-Count"] = str(total)
            if page_url is not None:
                headers["Link"] = self._link_header(page, limit, total, page_url)
        elif query.end is not None:
            items = items[query.start or 0 : query.end]
            headers["X-Total-Count"] = str(total)
        elif query.limit is not None:
            start = query.start or 0
            items = items[start : start + max(query.limit, 0)]
            headers["X-Total-Count"] = str(total)

        items = [self.attach_relations(name, record, query) for record in items]
        return QueryResult(items=items, headers=headers)

    @staticmethod
    def _drop_unknown_fields(items: List[Dict[str, Any]], query: CollectionQuery) -> CollectionQuery:
        def known(path: str) -> bool:
            return any(resolve_path(record, path) is not _MISSING for record in items)

        return replace(
            query,
            filters={path: values for path, values in query.filters.items() if known(path)},
            operators=[clause for clause in query.operators if known(clause[0])],
        )

    def attach_relations(self, name: str, record: Dict[str, Any], query: CollectionQuery) -> Dict[str, Any]:
        id_field = self._store.id_field
        for child in query.embed:
            if not self._store.is_collection(child):
                continue
            foreign_key = self._store.foreign_key(name)
            record[child] = [
                item for item in self._store.list_items(child) if same_id(item.get(foreign_key, _MISSING), record.get(id_field))
            ]
        for parent in query.expand:
            collection = next((candidate for candidate in (pluralize(parent), parent) if self._store.is_collection(candidate)), None)
            if collection is None:
                continue
            foreign_key = f"{singularize(parent)}{self._store.foreign_key_suffix}"
            if foreign_key not in record:
                continue
            match = next(
                (item for item in self._store.list_items(collection) if same_id(item.get(id_field), record[foreign_key])),
                None,
            )
            if match is not None:
                record[singularize(parent)] = match
        return record

    def _matches_search(self, value: Any, term: str) -> bool:
        if isinstance(value, str):
            return term in value.lower()
        if isinstance(value, dict):
            return any(self._matches_search(item, term) for item in value.values())
        if isinstance(value, list):
            return any(self._matches_search(item, term) for item in value)
        return False

    def _matches_filters(self, record: Dict[str, Any], query: CollectionQuery) -> bool:
        for path, values in query.filters.items():
            actual = resolve_path(record, path)
            if actual is _MISSING or as_text(actual) not in values:
                return False
        for path, operator, expected in query.operators:
            actual = resolve_path(record, path)
            if operator == "ne":
                if actual is not _MISSING and as_text(actual) == expected:
                    return False
                continue
            if actual is _MISSING:
                return False
            if operator == "like":
                try:
                    if re.search(expected, as_text(actual), re.IGNORECASE) is None:
                        return False
                except re.error as exc:
                    raise InvalidQueryError(f"Invalid pattern for '{path}_like': {exc}") from exc
            elif not self._compare(actual, expected, operator):
                return False
        return True

    @staticmethod
    def _compare(actual: Any, expected: str, operator: str) -> bool:
        left = _as_number(actual)
        right = _as_number(expected)
        if left is None or right is None:
            left_text, right_text = as_text(actual), expected
            return left_text >= right_text if operator == "gte" else left_text <= right_text
        return left >= right if operator == "gte" else left <= right

    @staticmethod
    def _sort(items: List[Dict[str, Any]], fields: List[str], orders: List[str]) -> List[Dict[str, Any]]:
        def sort_key(value: Any) -> Tuple[int, Any]:
            number = _as_number(value) if isinstance(value, (int, float)) else None
            if number is not None:
                return (0, number)
            if isinstance(value, str):
                return (1, value)
            return (2, as_text(value))

        # Apply the least significant key first; list.sort is stable.
        for index in reversed(range(len(fields))):
            path = fields[index]
            descending = index < len(orders) and orders[index] == "desc"
            present = [record for record in items if resolve_path(record, path) is not _MISSING]
            missing = [record for record in items if resolve_path(record, path) is _MISSING]
            present.sort(key=lambda record: sort_key(resolve_path(record, path)), reverse=descending)
            items = present + missing
        return items

    @staticmethod
    def _link_header(page: int, limit: int, total: int, page_url: Callable[[int], str]) -> str:
        last = max(math.ceil(total / limit), 1)
        links = [f'<{page_url(1)}>; rel="first"']
        if page > 1:
            links.append(f'<{page_url(min(page - 1, last))}>; rel="prev"')
        if page < last:
            links.append(f'<{page_url(page + 1)}>; rel="next"')
        links.append(f'<{page_url(last)}>; rel="last"')
        return ", ".join(links)
