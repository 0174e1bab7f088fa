"""
Identifier normalizer.

The protocol addresses documents by `id`. MongoDB insists on `_id`.
These helpers move the value between the two names, in place, on whole
documents and on filter predicates alike.

Store-assigned keys are ObjectIds, which leave as 24-char hex strings.
Filters can't tell such a string from a caller-chosen id that happens to
look like hex, so to_store_filter() matches either form.
"""

from bson import ObjectId

PUBLIC_ID = "id"
PRIMARY_KEY = "_id"


def to_store_id(doc):
    """Rename `id` → `_id` in place. No-op when `id` is absent."""
    if PUBLIC_ID in doc:
        doc[PRIMARY_KEY] = doc.pop(PUBLIC_ID)
    return doc


def to_public_id(doc):
    """
    Rename `_id` → `id` in place, stringifying the value.

    str() turns an ObjectId into its 24-char hex form; string ids pass
    through unchanged. No-op when `_id` is absent.
    """
    if PRIMARY_KEY in doc:
        doc[PUBLIC_ID] = str(doc.pop(PRIMARY_KEY))
    return doc


def to_store_filter(query):
    """
    to_store_id() for filter predicates.

    A hex string id also matches the ObjectId it was rendered from, so ids
    handed out by insert() and query() can address their documents again.
    """
    to_store_id(query)
    value = query.get(PRIMARY_KEY)
    if isinstance(value, str) and ObjectId.is_valid(value):
        query[PRIMARY_KEY] = {"$in": [value, ObjectId(value)]}
    return query
