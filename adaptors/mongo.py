"""
docbridge MongoDB adaptor — the query protocol on top of pymongo
================================================================

The application talks to every store through the same small protocol:

    connected()                     → bool
    insert(collection, doc)         → public id
    update(collection, doc)         → None | {"error": message}
    query(collection, plan)         → list[dict]
    delete(collection, query)       → deleted count (0 or 1)
    drop_collection(collection)
    drop_database()
    adapter_version()               → pymongo version string

Documents cross the boundary in both directions through the same
pipeline: keys stringified, scalars converted (Instant ⇄ datetime,
Decimal ⇄ Decimal128), and `id` ⇄ `_id` renamed. Callers never see
`_id`, ObjectId, or naive datetimes.

UPSERT BY CUSTOM ID:
  update() is really "insert or replace by id". It tries insert_one; if
  that fails on the _id unique index, it replaces the existing document
  instead. Two round trips, not atomic: two concurrent updates of one new
  id can both try the insert, and the loser falls through to the replace.

ERRORS:
  - Bad query plans raise InvalidQuery before the store is touched.
  - update() never raises for write failures; it returns {"error": ...}
    so batch callers can carry on with the next record.
  - Connection failures propagate as pymongo raised them, except from
    connected(), which just says False.
"""

import logging
import os
from collections.abc import Mapping

import pymongo
from bson.errors import BSONError
from pymongo.errors import ConnectionFailure, PyMongoError

from connectors import connect

from .codec import OUTBOUND, stringify_deep, stringify_keys, transform_scalars
from .errors import is_primary_key_conflict
from .ids import PRIMARY_KEY, to_store_filter, to_store_id
from .query import QueryPlan

logger = logging.getLogger(__name__)

# Write failures that are the record's problem, not the connection's.
_WRITE_ERRORS = (PyMongoError, BSONError)


def _env_flag(name):
    return os.environ.get(name, "").lower() in ("1", "true", "yes", "on")


class MongoAdaptor:
    """
    Query-protocol adaptor over a store connector.

    Usage:
        adaptor = MongoAdaptor(connect("mongodb://127.0.0.1/app"))
        adaptor.update("users", {"id": "u1", "name": "Ann"})
        adaptor.query("users", [["find", {"id": "u1"}], ["limit", 1]])
    """

    def __init__(self, store, log_queries=None, quiet_collections=()):
        """
        Args:
            store:             A connectors.StoreConnector. Its client is
                               created on first use and shared afterwards.
            log_queries:       Log every query plan at INFO. Defaults to the
                               DOCBRIDGE_LOG_QUERIES env var.
            quiet_collections: Collection names never logged (heartbeat
                               tables and the like).
        """
        self.store = store
        if log_queries is None:
            log_queries = _env_flag("DOCBRIDGE_LOG_QUERIES")
        self.log_queries = log_queries
        self.quiet_collections = frozenset(quiet_collections)

    @classmethod
    def from_url(cls, url=None, **kwargs):
        return cls(connect(url), **kwargs)

    # ── Health ────────────────────────────────────────────────

    def connected(self) -> bool:
        """Check the store can be reached. Never raises."""
        try:
            self.store.database
        except PyMongoError:
            return False
        return self.store.ping()

    def adapter_version(self) -> str:
        return pymongo.version

    # ── Writes ────────────────────────────────────────────────

    def insert(self, collection, values):
        """
        Insert one document, normalized the same way update() does.

        Returns:
            str: The public id (store-assigned ObjectIds come back as hex).

        Raises:
            Whatever pymongo raises, including DuplicateKeyError. Use
            update() for insert-or-replace.
        """
        doc = self._outbound(values)
        result = self.store.collection(collection).insert_one(doc)
        return str(result.inserted_id)

    def update(self, collection, values):
        """
        Insert, or replace the existing document with the same id.

        Returns:
            None on success, {"error": message} on any write failure.
        """
        if not isinstance(values, Mapping):
            return {"error": f"update expects a mapping, got {type(values).__name__}"}

        coll = self.store.collection(collection)
        try:
            doc = self._outbound(values)
        except ArithmeticError as error:
            return {"error": str(error)}

        try:
            coll.insert_one(doc)
            return None
        except ConnectionFailure:
            raise
        except _WRITE_ERRORS as error:
            if not is_primary_key_conflict(error):
                return {"error": str(error)}

        # Already exists; apply as a replace instead.
        replacement = dict(doc)
        doc_id = replacement.pop(PRIMARY_KEY)
        logger.debug("%s: id %r exists, replacing", collection, doc_id)
        try:
            result = coll.replace_one({PRIMARY_KEY: doc_id}, replacement)
        except ConnectionFailure:
            raise
        except _WRITE_ERRORS as error:
            return {"error": str(error)}
        if result.matched_count == 0:
            # Deleted between the insert and the replace.
            return {"error": f"no document with _id {doc_id!r} to replace"}
        return None

    def delete(self, collection, query) -> int:
        """
        Delete at most one document matching query.

        Returns:
            int: 1 if a document was removed, 0 if nothing matched.
        """
        query = to_store_filter(transform_scalars(stringify_keys(query), OUTBOUND))
        result = self.store.collection(collection).delete_one(query)
        return result.deleted_count

    def drop_collection(self, collection):
        """Remove the collection and every document in it. No undo."""
        logger.warning("dropping collection %s on %r", collection, self.store)
        self.store.collection(collection).drop()

    def drop_database(self):
        """Remove the whole database. No undo."""
        db = self.store.database
        logger.warning("dropping database %s on %r", db.name, self.store)
        db.client.drop_database(db.name)

    # ── Reads ─────────────────────────────────────────────────

    def query(self, collection, query) -> list[dict]:
        """
        Run a query plan and return public-form documents.

        Args:
            collection: Collection name.
            query:      [[verb, *args], ...] with verb in find/skip/limit/sort.
                        An empty list returns the whole collection.

        Raises:
            InvalidQuery: For any verb or argument outside the protocol.
                          Raised before anything is sent to the store.
        """
        if self.log_queries and collection not in self.quiet_collections:
            logger.info("Query: %s: %r", collection, query)

        plan = QueryPlan.parse(query)
        return plan.run(self.store.collection(collection))

    # ── Helpers ───────────────────────────────────────────────

    @staticmethod
    def _outbound(values):
        doc = transform_scalars(stringify_deep(values), OUTBOUND)
        return to_store_id(doc)

    def __repr__(self):
        return f"<MongoAdaptor {self.store!r}>"
