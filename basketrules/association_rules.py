from __future__ import annotations

import logging
import time
from collections.abc import Callable, Hashable, Iterable, Mapping
from itertools import combinations
from typing import TYPE_CHECKING, Any

from .exceptions import InternalConsistencyError, InvalidParameterError
from .results import ItemsetCollection, Rule, RuleCollection

if TYPE_CHECKING:
    from ._core import Deadline, SupportTable

logger = logging.getLogger(__name__)


def _count_of(counts: Mapping[Any, int], subset: tuple[Any, ...], itemset: tuple[Any, ...]) -> int:
    count = counts.get(subset, 0)
    if count <= 0:
        raise InternalConsistencyError(
            f"Subset {subset!r} of frequent itemset {itemset!r} has no recorded support; "
            "every subset of a frequent itemset must itself be frequent."
        )
    return count


def _rules(
    itemsets: Iterable[tuple[Hashable, ...]],
    counts: Mapping[Any, int],
    n_transactions: int,
    decode: Callable[[tuple[Any, ...]], tuple[Any, ...]],
    min_confidence: float,
    deadline: Deadline | None = None,
) -> Iterable[Rule]:
    for z in itemsets:
        if deadline is not None:
            deadline.check(f"generating rules from {len(z)}-itemsets")
        cz = _count_of(counts, z, z)
        for r in range(1, len(z)):
            for x in combinations(z, r):
                cx = _count_of(counts, x, z)
                confidence = cz / cx
                if confidence < min_confidence:
                    continue
                y = tuple(i for i in z if i not in x)
                cy = _count_of(counts, y, z)
                yield Rule(
                    antecedent=decode(x),
                    consequent=decode(y),
                    support=cz / n_transactions,
                    confidence=confidence,
                    lift=cz * n_transactions / (cx * cy),
                    coverage=cx / n_transactions,
                    count=cz,
                )


def generate_rules(
    table: SupportTable,
    decode: Callable[[tuple[int, ...]], tuple[Any, ...]],
    min_confidence: float = 0.8,
    min_len: int = 1,
    max_len: int | None = None,
    verbose: int = 0,
    deadline: Deadline | None = None,
) -> RuleCollection:
    """Derive every rule ``X => Z - X`` with confidence ``>= min_confidence``.

    Itemsets are visited in the table's canonical order and, within one
    itemset, antecedents by increasing size in lexicographic combination
    order. That generation order is the tie-break of every later sort.

    Parameters
    ----------
    table : SupportTable
        Output of :func:`basketrules._core.find_frequent_itemsets`.
    decode : callable
        Maps encoded item tuples back to labels.
    min_confidence : float, default=0.8
        Inclusive confidence floor.
    min_len, max_len : int
        Bounds on the rule size ``|X| + |Y|``. Rules always have size >= 2.
    deadline : Deadline | None
        Checked once per frequent itemset.

    Raises
    ------
    InternalConsistencyError
        A subset of a frequent itemset is missing from *table*.
    MiningTimeoutError
        *deadline* expired while rules were being generated.
    """
    if not 0.0 <= min_confidence <= 1.0:
        raise InvalidParameterError(
            f"`min_confidence` must be a number within the interval `[0, 1]`. Got {min_confidence}."
        )
    t0 = time.perf_counter()
    rules = RuleCollection(
        _rules(
            table.sized(max(2, min_len), max_len),
            table.counts,
            table.n_transactions,
            decode,
            min_confidence,
            deadline,
        ),
        n_transactions=table.n_transactions,
    )
    logger.debug("generated %d rules at min_confidence=%s", len(rules), min_confidence)
    if verbose:
        print(f"[{time.strftime('%X')}] Generated {len(rules):,} rules in {time.perf_counter() - t0:.2f}s.")
    return rules


def association_rules(
    itemsets: ItemsetCollection,
    min_confidence: float = 0.8,
    min_len: int = 1,
    max_len: int | None = None,
) -> RuleCollection:
    """Generate rules from an already mined :class:`ItemsetCollection`.

    The collection must hold every subset of its itemsets, i.e. it must have
    been mined without a ``min_len`` cut (``eclat(..., min_len=1)``).

    Examples
    --------
    >>> import basketrules
    >>> sets = basketrules.eclat([["a", "b"], ["a", "b"], ["a"]], min_support=0.5)
    >>> [str(r) for r in basketrules.association_rules(sets, min_confidence=0.9)]
    ['{b} => {a}']
    """
    if not 0.0 <= min_confidence <= 1.0:
        raise InvalidParameterError(
            f"`min_confidence` must be a number within the interval `[0, 1]`. Got {min_confidence}."
        )
    counts = {e.items: e.count for e in itemsets}
    ordered = [
        e.items
        for e in itemsets
        if e.size >= max(2, min_len) and (max_len is None or e.size <= max_len)
    ]
    ordered.sort(key=len)
    return RuleCollection(
        _rules(ordered, counts, itemsets.n_transactions, tuple, min_confidence),
        n_transactions=itemsets.n_transactions,
    )
