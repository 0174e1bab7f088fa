"""
Query plan executor.

A query arrives as an ordered list of (verb, *args) parts:

    [["find", {"owner": "u1"}], ["sort", {"created": -1}], ["limit", 20]]

Only four verbs exist: find, skip, limit, sort. The whole list is parsed
and validated before the store is touched, so a bad verb never leaves a
half-run query behind. Parsing folds the parts into one set of find()
arguments; run() then issues a single collection.find() round trip and
normalizes what comes back.

Order of modifiers does not matter: [limit, find] and [find, limit] give
the same cursor, because nothing executes until run().
"""

from collections.abc import Mapping
from enum import Enum

import pymongo

from .codec import INBOUND, OUTBOUND, stringify_keys, transform_scalars
from .errors import InvalidQuery
from .ids import to_public_id, to_store_filter


class Verb(str, Enum):
    FIND = "find"
    SKIP = "skip"
    LIMIT = "limit"
    SORT = "sort"


_ARITY = {
    Verb.FIND: (0, 2),
    Verb.SKIP: (1, 1),
    Verb.LIMIT: (1, 1),
    Verb.SORT: (1, 2),
}

_DIRECTIONS = {
    1: pymongo.ASCENDING,
    -1: pymongo.DESCENDING,
    "asc": pymongo.ASCENDING,
    "ascending": pymongo.ASCENDING,
    "desc": pymongo.DESCENDING,
    "descending": pymongo.DESCENDING,
}


class QueryPlan:
    """
    Validated, composed form of a query part list.

    Usage:
        plan = QueryPlan.parse([["find", {"id": "u1"}], ["limit", 1]])
        docs = plan.run(db["users"])
    """

    def __init__(self):
        self.filters = []
        self.projection = None
        self.skip = None
        self.limit = None
        self.sort = []

    # ── Building ──────────────────────────────────────────────

    @classmethod
    def parse(cls, parts):
        """
        Build a plan from (verb, *args) parts.

        Raises:
            InvalidQuery: On the first part whose verb is not allowed or
                          whose arguments don't fit the verb.
        """
        plan = cls()
        for part in parts:
            verb, args = _split(part)
            low, high = _ARITY[verb]
            if not low <= len(args) <= high:
                raise InvalidQuery(verb.value, f"takes {low} to {high} arguments, got {len(args)}")
            args = [stringify_keys(a) if isinstance(a, Mapping) else a for a in args]
            plan._HANDLERS[verb](plan, *args)
        return plan

    def _find(self, query=None, projection=None):
        if query is not None and not isinstance(query, Mapping):
            raise InvalidQuery(Verb.FIND.value, f"filter must be a mapping, got {query!r}")
        if query:
            query = to_store_filter(transform_scalars(query, OUTBOUND))
            self.filters.append(query)
        if projection is not None:
            self.projection = projection

    def _skip(self, count):
        self.skip = _count(Verb.SKIP, count)

    def _limit(self, count):
        self.limit = _count(Verb.LIMIT, count)

    def _sort(self, spec, direction=pymongo.ASCENDING):
        if isinstance(spec, Mapping):
            keys = list(spec.items())
        elif isinstance(spec, str):
            keys = [(spec, direction)]
        elif isinstance(spec, (list, tuple)) and all(
                isinstance(pair, (list, tuple)) and len(pair) == 2 for pair in spec):
            keys = [tuple(pair) for pair in spec]
        else:
            raise InvalidQuery(Verb.SORT.value, f"cannot sort by {spec!r}")
        for field, way in keys:
            self.sort.append((field, _direction(way)))

    _HANDLERS = {
        Verb.FIND: _find,
        Verb.SKIP: _skip,
        Verb.LIMIT: _limit,
        Verb.SORT: _sort,
    }

    # ── Execution ─────────────────────────────────────────────

    @property
    def filter(self):
        if not self.filters:
            return {}
        if len(self.filters) == 1:
            return self.filters[0]
        return {"$and": list(self.filters)}

    def find_kwargs(self) -> dict:
        kwargs = {"filter": self.filter}
        if self.projection is not None:
            kwargs["projection"] = self.projection
        if self.skip is not None:
            kwargs["skip"] = self.skip
        if self.limit is not None:
            kwargs["limit"] = self.limit
        if self.sort:
            kwargs["sort"] = list(self.sort)
        return kwargs

    def run(self, collection) -> list[dict]:
        """Materialize the plan: one round trip, then normalize every document."""
        docs = [stringify_keys(to_public_id(doc)) for doc in collection.find(**self.find_kwargs())]
        return transform_scalars(docs, INBOUND)

    def __repr__(self):
        return f"<QueryPlan {self.find_kwargs()}>"


def _split(part):
    if isinstance(part, (str, bytes)) or not isinstance(part, (list, tuple)) or not part:
        raise InvalidQuery(part, "query parts must be [verb, *args] sequences")
    name, *args = part
    try:
        return Verb(name), args
    except ValueError:
        raise InvalidQuery(name) from None


def _count(verb, value):
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidQuery(verb.value, f"expected a non-negative integer, got {value!r}")
    return value


def _direction(value):
    key = value.lower() if isinstance(value, str) else value
    if isinstance(key, bool) or not isinstance(key, (str, int)) or key not in _DIRECTIONS:
        raise InvalidQuery(Verb.SORT.value, f"unknown sort direction {value!r}")
    return _DIRECTIONS[key]
