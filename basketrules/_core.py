"""Level-wise frequent itemset search shared by Apriori and Eclat.

Itemsets are sorted tuples of item indices (see :class:`TransactionStore`).
Each level joins the previous level's frequent itemsets on their common
prefix, prunes candidates with an infrequent subset, and counts the
survivors either by scanning the horizontal rows (``"scan"``) or by
intersecting the parents' transaction-id arrays (``"tidset"``). Both
strategies produce identical counts.
"""

from __future__ import annotations

import logging
import math
import time
from collections import Counter
from collections.abc import Callable, Iterator, Mapping, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from itertools import combinations
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Literal, TypeVar

import numpy as np

from .exceptions import InvalidParameterError, MiningTimeoutError
from .results import Itemset, ItemsetCollection

if TYPE_CHECKING:
    from .params import MiningParameters
    from .transactions import TransactionStore

logger = logging.getLogger(__name__)

Counting = Literal["scan", "tidset"]
COUNTING_METHODS = ("scan", "tidset")

Encoded = tuple[int, ...]
_T = TypeVar("_T")
_R = TypeVar("_R")

# rows / candidates handled between two deadline checks
_CHECK_EVERY = 512

_clock = time.monotonic


@dataclass(frozen=True)
class SupportTable:
    """Support counts of every frequent itemset found in one run.

    ``itemsets`` is in canonical order: by size, then lexicographically by
    item index. All sizes from 1 up to the run's ``max_len`` are present,
    regardless of ``min_len``, so subset lookups always succeed.
    """

    n_transactions: int
    itemsets: tuple[Encoded, ...]
    counts: Mapping[Encoded, int]

    def count(self, itemset: Encoded) -> int:
        return self.counts.get(itemset, 0)

    def support(self, itemset: Encoded) -> float:
        return self.count(itemset) / self.n_transactions

    def sized(self, min_len: int = 1, max_len: int | None = None) -> Iterator[Encoded]:
        for itemset in self.itemsets:
            if len(itemset) >= min_len and (max_len is None or len(itemset) <= max_len):
                yield itemset

    def __len__(self) -> int:
        return len(self.itemsets)


class Deadline:
    """Monotonic-clock budget for a run; ``check`` raises once it is spent."""

    def __init__(self, timeout: float | None) -> None:
        self.timeout = timeout
        self._end = None if timeout is None else _clock() + timeout

    def check(self, stage: str) -> None:
        if self._end is not None and _clock() > self._end:
            raise MiningTimeoutError(f"Mining exceeded the timeout of {self.timeout}s while {stage}.")


def min_support_count(min_support: float, n_transactions: int) -> int:
    """Smallest count ``c`` with ``c / n_transactions >= min_support``."""
    c = max(1, math.ceil(min_support * n_transactions))
    while c > 1 and (c - 1) / n_transactions >= min_support:
        c -= 1
    while c / n_transactions < min_support:
        c += 1
    return c


def generate_candidates(
    frequent: Sequence[Encoded],
    frequent_set: set[Encoded] | frozenset[Encoded],
) -> list[tuple[Encoded, Encoded, Encoded]]:
    """Join step plus subset pruning.

    *frequent* must be sorted. Two (k-1)-itemsets are joined when they share
    their first k-2 items; the candidate survives only if each of its
    (k-1)-subsets is in *frequent_set*. Returns ``(candidate, left, right)``
    triples in lexicographic candidate order, where *left* and *right* are the
    joined parents.
    """
    out: list[tuple[Encoded, Encoded, Encoded]] = []
    n = len(frequent)
    for i in range(n):
        left = frequent[i]
        prefix = left[:-1]
        for j in range(i + 1, n):
            right = frequent[j]
            if right[:-1] != prefix:
                break
            cand = left + (right[-1],)
            # dropping either of the last two items gives a parent
            if all(cand[:d] + cand[d + 1 :] in frequent_set for d in range(len(cand) - 2)):
                out.append((cand, left, right))
    return out


def _chunks(seq: Sequence[_T], n_chunks: int) -> list[Sequence[_T]]:
    if n_chunks <= 1 or len(seq) <= 1:
        return [seq]
    size = math.ceil(len(seq) / n_chunks)
    return [seq[i : i + size] for i in range(0, len(seq), size)]


def _map_chunks(
    pool: ThreadPoolExecutor | None,
    fn: Callable[[Sequence[_T]], _R],
    seq: Sequence[_T],
    n_chunks: int,
) -> list[_R]:
    if pool is None:
        return [fn(seq)]
    futures: list[Future[_R]] = [pool.submit(fn, chunk) for chunk in _chunks(seq, n_chunks)]
    try:
        return [f.result() for f in futures]
    except BaseException:
        for f in futures:
            f.cancel()
        raise


def _count_scan(
    rows: Sequence[Encoded],
    candidates: Sequence[Encoded],
    candidate_set: frozenset[Encoded],
    k: int,
    deadline: Deadline,
) -> Counter[Encoded]:
    counts: Counter[Encoded] = Counter()
    n_cand = len(candidates)
    for r, row in enumerate(rows):
        if r % _CHECK_EVERY == 0:
            deadline.check(f"counting {k}-itemsets")
        if math.comb(len(row), k) <= n_cand:
            for combo in combinations(row, k):
                if combo in candidate_set:
                    counts[combo] += 1
        else:
            row_set = set(row)
            for cand in candidates:
                if row_set.issuperset(cand):
                    counts[cand] += 1
    return counts


def _intersect_tidsets(
    jobs: Sequence[tuple[Encoded, Encoded, Encoded]],
    tidsets: Mapping[Encoded, np.ndarray],
    k: int,
    deadline: Deadline,
) -> dict[Encoded, np.ndarray]:
    out: dict[Encoded, np.ndarray] = {}
    for n, (cand, left, right) in enumerate(jobs):
        if n % _CHECK_EVERY == 0:
            deadline.check(f"intersecting {k}-itemset tid-lists")
        out[cand] = np.intersect1d(tidsets[left], tidsets[right], assume_unique=True)
    return out


def find_frequent_itemsets(
    store: TransactionStore,
    params: MiningParameters,
    counting: Counting = "scan",
    verbose: int = 0,
    deadline: Deadline | None = None,
) -> SupportTable:
    """Enumerate every itemset with support ``>= params.min_support``.

    Parameters
    ----------
    store : TransactionStore
        Transactions to mine. Only read.
    params : MiningParameters
        Thresholds and bounds. ``min_len`` is not applied here; see
        :meth:`SupportTable.sized`.
    counting : {'scan', 'tidset'}, default='scan'
        Support counting strategy.
    verbose : int, default=0
        If > 0, print per-level progress.
    deadline : Deadline | None
        Budget shared with the rest of the run. Defaults to a fresh
        ``Deadline(params.timeout)``.

    Raises
    ------
    InvalidParameterError
        Unknown counting strategy.
    MiningTimeoutError
        ``params.timeout`` elapsed before the last level was counted.
    """
    if counting not in COUNTING_METHODS:
        raise InvalidParameterError(f"`counting` must be one of {COUNTING_METHODS}. Got: {counting!r}")

    if deadline is None:
        deadline = Deadline(params.timeout)
    n = store.n_transactions
    floor = min_support_count(params.min_support, n)
    max_len = params.max_len
    workers = params.workers
    n_chunks = workers * 4

    t_start = time.perf_counter()
    if verbose:
        print(
            f"[{time.strftime('%X')}] Mining {n:,} transactions ({counting}, min_count={floor}, "
            f"max_len={max_len}, workers={workers})..."
        )

    item_counts = store._item_counts
    level: list[Encoded] = [(i,) for i in range(store.n_items) if item_counts[i] >= floor]
    counts: dict[Encoded, int] = {it: int(item_counts[it[0]]) for it in level}
    ordered: list[Encoded] = list(level)
    tidsets: dict[Encoded, np.ndarray] = {}
    if counting == "tidset":
        tidsets = {it: store._tidsets[it[0]] for it in level}
    rows: Sequence[Encoded] = store._rows

    logger.debug("level 1: %d items, %d frequent (min_count=%d)", store.n_items, len(level), floor)
    if verbose:
        print(f"[{time.strftime('%X')}] Level 1: {store.n_items:,} items, {len(level):,} frequent.")

    pool = ThreadPoolExecutor(max_workers=workers) if workers > 1 else None
    try:
        k = 1
        while level and (max_len is None or k < max_len):
            k += 1
            deadline.check(f"generating {k}-candidates")
            t0 = time.perf_counter()

            jobs = generate_candidates(level, frozenset(level))
            if not jobs:
                logger.debug("level %d: no candidates", k)
                break
            candidates = [job[0] for job in jobs]

            if counting == "scan":
                relevant = {i for cand in candidates for i in cand}
                rows = [r for r in (tuple(i for i in row if i in relevant) for row in rows) if len(r) >= k]
                candidate_set = frozenset(candidates)
                level_counts: Counter[Encoded] = Counter()
                for partial in _map_chunks(
                    pool, lambda chunk: _count_scan(chunk, candidates, candidate_set, k, deadline), rows, n_chunks
                ):
                    level_counts.update(partial)
                level = [cand for cand in candidates if level_counts[cand] >= floor]
                for cand in level:
                    counts[cand] = level_counts[cand]
            else:
                found: dict[Encoded, np.ndarray] = {}
                for partial_tids in _map_chunks(
                    pool, lambda chunk: _intersect_tidsets(chunk, tidsets, k, deadline), jobs, n_chunks
                ):
                    found.update(partial_tids)
                level = [cand for cand in candidates if len(found[cand]) >= floor]
                tidsets = {cand: found[cand] for cand in level}
                for cand in level:
                    counts[cand] = len(found[cand])

            ordered.extend(level)
            logger.debug("level %d: %d candidates, %d frequent", k, len(candidates), len(level))
            if verbose:
                print(
                    f"[{time.strftime('%X')}] Level {k}: {len(candidates):,} candidates, "
                    f"{len(level):,} frequent ({time.perf_counter() - t0:.2f}s)."
                )
    finally:
        if pool is not None:
            pool.shutdown(wait=True, cancel_futures=True)

    deadline.check("finishing")
    if verbose:
        print(
            f"[{time.strftime('%X')}] Found {len(ordered):,} frequent itemsets in {time.perf_counter() - t_start:.2f}s."
        )
    return SupportTable(n_transactions=n, itemsets=tuple(ordered), counts=MappingProxyType(counts))


def itemsets_from_table(
    table: SupportTable,
    decode: Callable[[Encoded], tuple[Any, ...]],
    min_len: int = 1,
    max_len: int | None = None,
) -> ItemsetCollection:
    """Label the table's itemsets within ``[min_len, max_len]``."""
    n = table.n_transactions
    return ItemsetCollection(
        (
            Itemset(items=decode(enc), support=table.counts[enc] / n, count=table.counts[enc])
            for enc in table.sized(min_len, max_len)
        ),
        n_transactions=n,
    )
