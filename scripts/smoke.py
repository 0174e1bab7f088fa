#!/usr/bin/env python3
"""Smoke-check a MongoDB target: health, version, and an upsert/query/delete round trip.

Run from an installed checkout (`pip install -e .`): python scripts/smoke.py
"""

import logging
import sys
import uuid

from adaptors import Instant, MongoAdaptor
from connectors import connect

SCRATCH = "docbridge_smoke"


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    store = connect(argv[0] if argv else None)
    adaptor = MongoAdaptor(store)
    print(f"Target:  {store!r}")
    print(f"pymongo: {adaptor.adapter_version()}")

    if not adaptor.connected():
        print("Not reachable.", file=sys.stderr)
        return 1

    doc_id = uuid.uuid4().hex
    try:
        for name in ("first", "second"):
            err = adaptor.update(SCRATCH, {"id": doc_id, "name": name, "at": Instant.now()})
            if err:
                print(f"update failed: {err['error']}", file=sys.stderr)
                return 1

        rows = adaptor.query(SCRATCH, [["find", {"id": doc_id}]])
        if len(rows) != 1 or rows[0]["name"] != "second":
            print(f"Unexpected read-back: {rows}", file=sys.stderr)
            return 1
        print(f"Round trip ok: {rows[0]}")
    finally:
        adaptor.delete(SCRATCH, {"id": doc_id})
        store.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
