"""
CLI entry point. Run as: python -m mmcheck set.mm
"""

import argparse
import sys

from .core.errors import LoadError, UnknownLabel
from .reader import load_database, load_file
from .report import print_summary
from .runner import VerifyOptions, verify_all


EXIT_OK = 0
EXIT_FAILED = 1
EXIT_LOAD_ERROR = 2


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Verify a Metamath database")
    parser.add_argument("database", nargs="?", default=None,
                        help="Metamath file to verify (default: read stdin)")
    parser.add_argument("--workers", type=int, default=1,
                        help="Processes used to check proofs (default 1)")
    parser.add_argument("--fail-fast", action="store_true",
                        help="Stop at the first failed proof")
    parser.add_argument("-b", "--begin-label", type=str, default=None,
                        help="Label where proof checking begins (included)")
    parser.add_argument("-s", "--stop-label", type=str, default=None,
                        help="Label where proof checking stops (not included)")
    parser.add_argument("--quiet", action="store_true", help="Less output")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    # --- Load ---
    try:
        if args.database:
            db = load_file(args.database)
        else:
            db = load_database(sys.stdin.buffer.read(), "<stdin>")
    except LoadError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_LOAD_ERROR
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_LOAD_ERROR

    if not args.quiet:
        print(f"Loaded {db.name}: {len(db.theorems)} theorems, {len(db)} labels")

    # --- Verify ---
    options = VerifyOptions(
        workers=args.workers,
        fail_fast=args.fail_fast,
        begin_label=args.begin_label,
        stop_label=args.stop_label,
        verbose=not args.quiet,
    )
    try:
        results = verify_all(db, options=options)
    except UnknownLabel as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_LOAD_ERROR

    print_summary(db.name, results)
    return EXIT_OK if all(r.ok for _, r in results) else EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
