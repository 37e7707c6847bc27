#!/usr/bin/env python3
"""
Build the Memberstack method index

Compiles the markdown catalog into the JSON index shipped alongside it.

Usage:
    python3 scripts/build_index.py
    python3 scripts/build_index.py --source docs/memberstack-complete.md --output docs/memberstack-index.json
"""

import argparse
import logging
import sys
from pathlib import Path

from jsonschema import ValidationError

from msdocs.config import BUNDLED_DOCS_DIR
from msdocs.errors import SourceMissingError
from msdocs.indexer import build_index_from_file, write_index
from msdocs.scanner import DEFAULT_NAMESPACE


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Build the Memberstack documentation index")
    parser.add_argument("--source", type=Path, default=BUNDLED_DOCS_DIR / "complete.md",
                        help="Markdown catalog (default: bundled complete.md)")
    parser.add_argument("--output", type=Path, default=Path("docs") / "memberstack-index.json",
                        help="Index file to write")
    parser.add_argument("--namespace", default=DEFAULT_NAMESPACE,
                        help="Object the invocation examples are called on")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(message)s")
    print("Building Memberstack documentation index...")
    try:
        index = build_index_from_file(args.source, args.namespace)
        path = write_index(index, args.output)
    except (SourceMissingError, ValidationError, ValueError) as exc:
        print(f"❌ Error building index: {exc}", file=sys.stderr)
        return 1

    print(f"✓ Index generated with {index['totalMethods']} methods")
    print(f"✓ Saved to {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
