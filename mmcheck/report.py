"""
Reporting utilities.
"""

from collections import Counter


def summarize(results: list) -> dict:
    """Counts of verified and failed theorems, failures broken down by kind."""
    failed = Counter(r.kind for _, r in results if not r.ok)
    return {
        "theorems": len(results),
        "verified": sum(1 for _, r in results if r.ok),
        "failed": sum(failed.values()),
        "by_kind": dict(sorted(failed.items())),
    }


def print_failures(results: list):
    """One line per failed theorem."""
    for label, result in results:
        if not result.ok:
            print(f"  {label}: {result}")


def print_summary(name: str, results: list):
    summary = summarize(results)
    print(f"\n{'='*60}")
    print(f"Database: {name}")
    print(f"Theorems checked: {summary['theorems']}")
    print(f"Verified: {summary['verified']}")
    print(f"Failed:   {summary['failed']}")
    for kind, n in summary["by_kind"].items():
        print(f"  {kind}: {n}")
    print(f"{'='*60}")
    if summary["failed"]:
        print_failures(results)
