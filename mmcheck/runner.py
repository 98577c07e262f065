"""
Verifying a loaded database.

Each $p statement carries a frozen snapshot of its context, so proofs
can be checked in any order and on any number of processes. Results
always come back in source order.
"""

from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from typing import Optional

from .core.engine import verify_statement
from .core.state import Database


@dataclass(frozen=True)
class VerifyOptions:
    """
    workers:      1 checks in this process; more uses a process pool
    fail_fast:    stop after the first failed theorem
    begin_label:  first statement whose proof is checked (inclusive)
    stop_label:   statement where checking stops (exclusive)
    verbose:      print one line per theorem
    """
    workers: int = 1
    fail_fast: bool = False
    begin_label: Optional[str] = None
    stop_label: Optional[str] = None
    verbose: bool = False


def select_theorems(db: Database, begin_label: Optional[str] = None,
                    stop_label: Optional[str] = None) -> list:
    """Labels of the $p statements in [begin_label, stop_label), source order."""
    start = db.lookup(begin_label).index if begin_label else 0
    stop = db.lookup(stop_label).index if stop_label else len(db)
    return [t.label for t in db.theorems if start <= t.index < stop]


# The database each pool worker checks against, set once per process.
_worker_db: Optional[Database] = None


def _init_worker(db: Database):
    global _worker_db
    _worker_db = db


def _verify_chunk(labels: list) -> list:
    return [(label, verify_statement(_worker_db, label)) for label in labels]


def _chunks(labels: list, n: int) -> list:
    size = max(1, -(-len(labels) // n))
    return [labels[i:i + size] for i in range(0, len(labels), size)]


def _report(label, result, verbose):
    if verbose:
        if result.ok:
            print(f"  [verified] {label}")
        else:
            print(f"  [FAILED] {label}: {result}")


def verify_all(
    db: Database,
    workers: int = 1,
    fail_fast: bool = False,
    begin_label: Optional[str] = None,
    stop_label: Optional[str] = None,
    verbose: bool = False,
    options: Optional[VerifyOptions] = None,
) -> list:
    """
    Verify every $p statement of db.

    Returns [(label, Verified() | Failed(kind, reason)), ...] in source
    order. Semantic errors never escape; a bad begin/stop label raises
    UnknownLabel. With fail_fast the list ends at the first failure.

    Args:
        db:        a Database from load_database / load_file
        workers:   number of processes; 1 means no pool
        options:   a VerifyOptions; overrides the keyword arguments
    """
    if options is None:
        options = VerifyOptions(workers, fail_fast, begin_label, stop_label, verbose)
    labels = select_theorems(db, options.begin_label, options.stop_label)
    results = []

    if options.workers <= 1 or len(labels) < 2:
        for label in labels:
            result = verify_statement(db, label)
            results.append((label, result))
            _report(label, result, options.verbose)
            if options.fail_fast and not result.ok:
                break
        return results

    # Several chunks per worker keeps the pool busy when proof sizes vary.
    chunks = _chunks(labels, options.workers * 4)
    executor = ProcessPoolExecutor(max_workers=options.workers,
                                   initializer=_init_worker, initargs=(db,))
    try:
        for chunk_results in executor.map(_verify_chunk, chunks):
            for label, result in chunk_results:
                results.append((label, result))
                _report(label, result, options.verbose)
                if options.fail_fast and not result.ok:
                    return results
    finally:
        executor.shutdown(wait=True, cancel_futures=True)
    return results
