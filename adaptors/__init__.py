"""
docbridge Adaptors — the query protocol over a document store
==============================================================

An adaptor implements the same small protocol for every store:

    class SomeAdaptor:
        def connected(self) -> bool: ...
        def insert(self, collection, doc): ...
        def update(self, collection, doc) -> None | dict: ...
        def query(self, collection, plan) -> list[dict]: ...
        def delete(self, collection, query) -> int: ...
        def drop_collection(self, collection): ...
        def drop_database(self): ...
        def adapter_version(self) -> str: ...

Available adaptors:
    - mongo.py — MongoDB via pymongo

Shared pieces, usable on their own:
    - codec.py  — deep key stringification + Instant/Decimal scalar codec
    - ids.py    — `id` ⇄ `_id` renaming
    - query.py  — query plan parsing and single-round-trip execution
    - errors.py — InvalidQuery and duplicate-key classification

Like the connectors, the protocol is duck-typed: there is no abstract
base class for adaptors, only the method list above.
"""

from .codec import INBOUND, OUTBOUND, Instant, stringify_deep, transform_scalars
from .errors import DocbridgeError, InvalidQuery
from .ids import PRIMARY_KEY, PUBLIC_ID, to_public_id, to_store_id
from .mongo import MongoAdaptor
from .query import QueryPlan, Verb

__all__ = [
    "MongoAdaptor",
    "QueryPlan",
    "Verb",
    "Instant",
    "INBOUND",
    "OUTBOUND",
    "stringify_deep",
    "transform_scalars",
    "to_public_id",
    "to_store_id",
    "PUBLIC_ID",
    "PRIMARY_KEY",
    "DocbridgeError",
    "InvalidQuery",
]
