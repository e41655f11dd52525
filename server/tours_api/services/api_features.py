"""Translation of list-endpoint query parameters into a Mongo find."""

import re
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from pymongo import ASCENDING, DESCENDING

RESERVED_PARAMS = ("page", "sort", "limit", "fields")
COMPARISON_OPERATORS = ("gte", "gt", "lte", "lt")

DEFAULT_SORT = [("createdAt", DESCENDING)]
DEFAULT_LIMIT = 100

_BRACKET_PARAM = re.compile(r"^(?P<field>[\w.]+)\[(?P<op>\w+)\]$")


def _coerce(value: str) -> Any:
    """Turn numeric query strings into numbers; leave everything else alone."""
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        return value


def _split_list(value: Optional[str]) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def _positive_int(value: Optional[str], default: int) -> int:
    try:
        number = int(value) if value is not None else default
    except ValueError:
        return default
    return number if number > 0 else default


@dataclass
class APIFeatures:
    """
    Filtering, sorting, field limiting and pagination for list endpoints.

    ``?difficulty=easy&duration[gte]=5&sort=-price,name&fields=name,price&page=2&limit=10``
    becomes a filter ``{"difficulty": "easy", "duration": {"$gte": 5}}``, a sort
    ``[("price", -1), ("name", 1)]``, a projection ``{"name": 1, "price": 1}``
    and ``skip=10, limit=10``.
    """

    filter: dict[str, Any] = field(default_factory=dict)
    sort: list[tuple[str, int]] = field(default_factory=lambda: list(DEFAULT_SORT))
    projection: Optional[dict[str, int]] = None
    skip: int = 0
    limit: int = DEFAULT_LIMIT

    @classmethod
    def from_query(cls, query: Mapping[str, str]) -> "APIFeatures":
        features = cls()
        features.filter = cls.build_filter(query)

        sort_fields = _split_list(query.get("sort"))
        if sort_fields:
            features.sort = [
                (name[1:], DESCENDING) if name.startswith("-") else (name, ASCENDING)
                for name in sort_fields
            ]

        selected = _split_list(query.get("fields"))
        if selected:
            features.projection = {name: 1 for name in selected}
        else:
            features.projection = {"__v": 0}

        page = _positive_int(query.get("page"), 1)
        features.limit = _positive_int(query.get("limit"), DEFAULT_LIMIT)
        features.skip = (page - 1) * features.limit
        return features

    @staticmethod
    def build_filter(query: Mapping[str, str]) -> dict[str, Any]:
        """Build the Mongo filter from every non-reserved parameter."""
        conditions: dict[str, Any] = {}
        for key, value in query.items():
            if key in RESERVED_PARAMS:
                continue
            match = _BRACKET_PARAM.match(key)
            if match and match.group("op") in COMPARISON_OPERATORS:
                operators = conditions.setdefault(match.group("field"), {})
                if isinstance(operators, dict):
                    operators[f"${match.group('op')}"] = _coerce(value)
            else:
                conditions[key] = _coerce(value)
        return conditions

    def apply(self, cursor):
        """Apply sort/skip/limit to a find cursor."""
        return cursor.sort(self.sort).skip(self.skip).limit(self.limit)


TOP_TOURS_PRESET = {
    "limit": "5",
    "sort": "-ratingsAverage,price",
    "fields": "name,price,ratingsAverage,summary,difficulty",
}


def alias_top_tours(query: dict[str, str]) -> dict[str, str]:
    """Pin limit, sort and fields to the top-five-tours listing; other params pass through."""
    query.update(TOP_TOURS_PRESET)
    return query
