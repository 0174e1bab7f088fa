#!/usr/bin/env python3
"""Drop one collection. Irreversible, so it refuses to run without --yes.

Run from an installed checkout (`pip install -e .`).
"""

import argparse
import logging
import sys

from adaptors import MongoAdaptor
from connectors import connect


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("collection")
    parser.add_argument("--url", help="MongoDB URI (default: $DOCBRIDGE_URL or ~/.docbridge.json)")
    parser.add_argument("--yes", action="store_true", help="really drop it")
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    store = connect(args.url)
    if not args.yes:
        print(f"Would drop '{args.collection}' on {store!r}. Re-run with --yes.", file=sys.stderr)
        return 2

    adaptor = MongoAdaptor(store)
    try:
        adaptor.drop_collection(args.collection)
    finally:
        store.close()
    print(f"Dropped {args.collection}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
