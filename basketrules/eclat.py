from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ._core import Counting, Deadline, itemsets_from_table
from .model import Miner
from .params import MiningParameters

if TYPE_CHECKING:
    from .results import ItemsetCollection


class Eclat(Miner):
    """Eclat frequent itemset miner.

    Counts support by intersecting per-item transaction-id lists instead of
    rescanning the transactions, and reports itemsets only: no confidence,
    no lift, no rules.
    """

    default_counting: Counting = "tidset"

    def __init__(
        self,
        data: Any,
        min_support: float = 0.1,
        min_len: int = 1,
        max_len: int | None = 10,
        counting: Counting = "tidset",
        n_jobs: int = 1,
        timeout: float | None = None,
        verbose: int = 0,
    ) -> None:
        """Initialize the Eclat miner.

        Parameters
        ----------
        data : TransactionStore, pandas.DataFrame, mapping or list of lists
            The transactions to mine.
        min_support : float, default=0.1
            The minimum support threshold `(0.0, 1.0]`, as a fraction of all transactions.
        min_len : int, default=1
            Minimum length of the itemsets reported.
        max_len : int | None, default=10
            Maximum length of the itemsets generated. If None, no limit is applied.
        counting : {'tidset', 'scan'}, default='tidset'
            Support counting strategy. Both give identical supports.
        n_jobs : int, default=1
            Threads used for counting. ``-1`` uses all cores.
        timeout : float | None, default=None
            Abort with ``MiningTimeoutError`` after this many seconds.
        verbose : int, default=0
            If > 0, print progress details to standard output.
        """
        params = MiningParameters(
            min_support=min_support,
            min_len=min_len,
            max_len=max_len,
            timeout=timeout,
            n_jobs=n_jobs,
        )
        super().__init__(data, params=params, counting=counting, verbose=verbose)

    def mine(self, **kwargs: Any) -> ItemsetCollection:
        """Execute Eclat on the stored transactions.

        Returns
        -------
        ItemsetCollection
            Frequent itemsets in canonical order (by size, then items).
        """
        params, counting = self._resolve(kwargs)
        table = self._support_table(params, counting, Deadline(params.timeout))
        return itemsets_from_table(table, self.store.decode, params.min_len, params.max_len)


def eclat(
    data: Any,
    min_support: float = 0.1,
    min_len: int = 1,
    max_len: int | None = 10,
    counting: Counting = "tidset",
    n_jobs: int = 1,
    timeout: float | None = None,
    verbose: int = 0,
) -> ItemsetCollection:
    """Find frequent itemsets using the Eclat algorithm.

    This module-level function relies on the Object-Oriented APIs.
    """
    return Eclat(
        data,
        min_support=min_support,
        min_len=min_len,
        max_len=max_len,
        counting=counting,
        n_jobs=n_jobs,
        timeout=timeout,
        verbose=verbose,
    ).mine()
