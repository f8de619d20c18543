from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal

from ._core import Counting, Deadline, itemsets_from_table
from .association_rules import generate_rules
from .model import Miner
from .params import MiningParameters

if TYPE_CHECKING:
    from .results import ItemsetCollection, RuleCollection


class Apriori(Miner):
    """Apriori association rule miner.

    Mines frequent itemsets level by level and derives every rule whose
    confidence clears ``min_confidence``.

    Examples
    --------
    >>> import basketrules
    >>> baskets = [["bread", "milk"], ["bread", "butter"], ["bread", "milk", "butter"]]
    >>> rules = basketrules.Apriori(baskets, min_support=0.5, min_confidence=0.6).mine()
    >>> [str(r) for r in rules.sort(by="confidence")]
    ['{butter} => {bread}', '{milk} => {bread}', '{bread} => {butter}', '{bread} => {milk}']
    """

    default_counting: Counting = "scan"

    def __init__(
        self,
        data: Any,
        min_support: float = 0.1,
        min_confidence: float = 0.8,
        min_len: int = 1,
        max_len: int | None = 10,
        counting: Counting = "scan",
        n_jobs: int = 1,
        timeout: float | None = None,
        verbose: int = 0,
    ) -> None:
        """Initialize the Apriori miner.

        Parameters
        ----------
        data : TransactionStore, pandas.DataFrame, mapping or list of lists
            The transactions to mine.
        min_support : float, default=0.1
            The minimum support threshold `(0.0, 1.0]`, as a fraction of all transactions.
        min_confidence : float, default=0.8
            The minimum confidence `[0.0, 1.0]` a rule needs to be reported.
        min_len : int, default=1
            Minimum rule size (antecedent plus consequent).
        max_len : int | None, default=10
            Maximum itemset / rule size. If None, no limit is applied.
        counting : {'scan', 'tidset'}, default='scan'
            Count candidate support by scanning transactions or by
            intersecting transaction-id lists.
        n_jobs : int, default=1
            Threads used for counting. ``-1`` uses all cores.
        timeout : float | None, default=None
            Abort with ``MiningTimeoutError`` after this many seconds.
        verbose : int, default=0
            If > 0, print progress details to standard output.
        """
        params = MiningParameters(
            min_support=min_support,
            min_confidence=min_confidence,
            min_len=min_len,
            max_len=max_len,
            timeout=timeout,
            n_jobs=n_jobs,
        )
        super().__init__(data, params=params, counting=counting, verbose=verbose)

    def mine(self, **kwargs: Any) -> RuleCollection:
        """Execute Apriori and return the association rules.

        Keyword arguments override the miner's parameters for this call
        only (e.g. ``mine(min_confidence=0.5)``).

        Returns
        -------
        RuleCollection
            Rules in generation order.
        """
        params, counting = self._resolve(kwargs)
        deadline = Deadline(params.timeout)
        table = self._support_table(params, counting, deadline)
        return generate_rules(
            table,
            self.store.decode,
            min_confidence=params.min_confidence,
            min_len=params.min_len,
            max_len=params.max_len,
            verbose=self.verbose,
            deadline=deadline,
        )

    def frequent_itemsets(self, **kwargs: Any) -> ItemsetCollection:
        """Frequent itemsets behind the rules, within ``[min_len, max_len]``."""
        params, counting = self._resolve(kwargs)
        table = self._support_table(params, counting, Deadline(params.timeout))
        return itemsets_from_table(table, self.store.decode, params.min_len, params.max_len)


def apriori(
    data: Any,
    min_support: float = 0.1,
    min_confidence: float = 0.8,
    min_len: int = 1,
    max_len: int | None = 10,
    target: Literal["rules", "frequent itemsets"] = "rules",
    counting: Counting = "scan",
    n_jobs: int = 1,
    timeout: float | None = None,
    verbose: int = 0,
) -> RuleCollection | ItemsetCollection:
    """Mine association rules (or, with ``target="frequent itemsets"``, the itemsets).

    This module-level function relies on the Object-Oriented APIs.
    """
    if target not in ("rules", "frequent itemsets"):
        raise ValueError(f"`target` must be 'rules' or 'frequent itemsets'. Got: {target}")
    miner = Apriori(
        data,
        min_support=min_support,
        min_confidence=min_confidence,
        min_len=min_len,
        max_len=max_len,
        counting=counting,
        n_jobs=n_jobs,
        timeout=timeout,
        verbose=verbose,
    )
    if target == "frequent itemsets":
        return miner.frequent_itemsets()
    return miner.mine()
