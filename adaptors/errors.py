"""
Error types and driver-error classification.

FRAGILE: duplicate-key detection.
  pymongo raises DuplicateKeyError (code 11000) for every unique index,
  not just _id. Servers 4.4+ attach details["keyPattern"] naming the
  conflicting field; older servers and some proxies only put it in the
  message ("... index: _id_ dup key ..." or the legacy
  "... index: app.users.$_id_ ..."). duplicate_key_field() tries the
  structured form first and falls back to parsing the message. Re-check
  the patterns when upgrading the server or driver.
"""

import re

from pymongo.errors import OperationFailure

from .ids import PRIMARY_KEY

# 11001 and 12582 are legacy variants of 11000 from older servers.
DUPLICATE_KEY_CODES = frozenset({11000, 11001, 12582})

_DUP_KEY_MESSAGE = re.compile(r"(?:^|caused by :: 11000 )E11000")
_INDEX_NAME = re.compile(r"index: (?:\S+\.\$)?(\S+)")
_INDEX_FIELD = re.compile(r"^(.+?)_-?1(?:_|$)")


class DocbridgeError(Exception):
    """Base class for adaptor errors."""


class InvalidQuery(DocbridgeError):
    """A query plan used a verb or argument outside the protocol."""

    def __init__(self, verb, reason=None):
        self.verb = verb
        self.reason = reason
        message = f"`{verb}` is not part of a valid query"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


def is_duplicate_key(error) -> bool:
    if isinstance(error, OperationFailure) and error.code in DUPLICATE_KEY_CODES:
        return True
    return bool(_DUP_KEY_MESSAGE.search(str(error)))


def duplicate_key_field(error):
    """
    Name the field a duplicate-key error collided on.

    Args:
        error: Any exception raised by a write.

    Returns:
        str | None: The first field of the violated index, or None if the
        error is not a duplicate-key error or the field can't be told.
    """
    if not is_duplicate_key(error):
        return None

    details = getattr(error, "details", None) or {}
    pattern = details.get("keyPattern")
    if pattern:
        return next(iter(pattern))

    match = _INDEX_NAME.search(str(error))
    if not match:
        return None
    return _field_from_index(match.group(1))


def _field_from_index(name):
    """`_id_` → `_id`; `email_1` → `email`; `a_1_b_-1` → `a`."""
    if name == "_id_":
        return PRIMARY_KEY
    match = _INDEX_FIELD.match(name)
    return match.group(1) if match else None


def is_primary_key_conflict(error) -> bool:
    return duplicate_key_field(error) == PRIMARY_KEY
