from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from ._core import COUNTING_METHODS, Counting, Deadline, SupportTable, find_frequent_itemsets
from .exceptions import InvalidParameterError
from .params import MiningParameters
from .transactions import TransactionStore, from_transactions

if TYPE_CHECKING:
    import pandas as pd
    from typing_extensions import Self

    from .results import ItemsetCollection, RuleCollection


class Miner(ABC):
    """Base class for the frequent-pattern miners.

    Holds the :class:`TransactionStore` and the :class:`MiningParameters` of
    the miner. Keyword overrides passed to :meth:`mine` produce a new
    parameter object for that call only; the miner itself is never mutated
    by a run.

    Inherited by :class:`Apriori` and :class:`Eclat`.
    """

    default_counting: Counting = "scan"

    def __init__(
        self,
        data: TransactionStore | pd.DataFrame | Mapping[Any, Iterable[Any]] | Sequence[Iterable[Any]] | Any,
        params: MiningParameters | None = None,
        counting: Counting | None = None,
        verbose: int = 0,
    ) -> None:
        """Initialize the miner.

        Parameters
        ----------
        data
            A :class:`TransactionStore` or anything :func:`from_transactions`
            accepts (long-format or one-hot DataFrame, mapping, list of lists).
        params : MiningParameters | None
            Run configuration. Defaults to ``MiningParameters()``.
        counting : {'scan', 'tidset'} | None
            Support counting strategy; ``None`` picks the miner's default.
        verbose : int, default=0
            If > 0, print progress details to standard output.
        """
        self.store = from_transactions(data, verbose=verbose)
        self.params = params if params is not None else MiningParameters()
        self.counting: Counting = counting if counting is not None else self.default_counting
        if self.counting not in COUNTING_METHODS:
            raise InvalidParameterError(f"`counting` must be one of {COUNTING_METHODS}. Got: {self.counting!r}")
        self.verbose = verbose
        self._result: Any = None
        self._table_cache: dict[tuple[float, int | None], SupportTable] = {}

    @classmethod
    def from_transactions(
        cls,
        data: pd.DataFrame | Mapping[Any, Iterable[Any]] | Sequence[Iterable[Any]] | Any,
        transaction_col: str | None = None,
        item_col: str | None = None,
        verbose: int = 0,
        **kwargs: Any,
    ) -> Self:
        """Load long-format transactional data into the miner.

        Parameters
        ----------
        data
            One of:

            - **Pandas / Polars DataFrame** with (at least) two columns:
              one for the transaction identifier and one for the item.
            - **List of lists** where each inner list contains the items of a
              single transaction, e.g. ``[["bread", "milk"], ["bread", "eggs"]]``.
        transaction_col
            Name of the column that identifies transactions. If ``None`` the
            first column is used. Ignored for list-of-lists input.
        item_col
            Name of the column that contains item values. If ``None`` the
            second column is used. Ignored for list-of-lists input.
        verbose : int, default=0
            Whether to print progress details.
        **kwargs
            Miner parameters (e.g., ``min_support``).
        """
        if transaction_col is not None or item_col is not None:
            store = TransactionStore.from_dataframe(data, transaction_col, item_col, verbose=verbose)
        else:
            store = from_transactions(data, verbose=verbose)
        return cls(store, verbose=verbose, **kwargs)

    @classmethod
    def from_pandas(
        cls,
        df: pd.DataFrame,
        transaction_col: str | None = None,
        item_col: str | None = None,
        verbose: int = 0,
        **kwargs: Any,
    ) -> Self:
        """Shorthand for ``from_transactions(df, transaction_col, item_col)``."""
        return cls.from_transactions(df, transaction_col=transaction_col, item_col=item_col, verbose=verbose, **kwargs)

    @classmethod
    def from_baskets(
        cls,
        baskets: Mapping[Any, Iterable[Any]] | Sequence[Iterable[Any]],
        verbose: int = 0,
        **kwargs: Any,
    ) -> Self:
        """Build the miner from pre-grouped transactions."""
        return cls(TransactionStore.from_baskets(baskets, verbose=verbose), verbose=verbose, **kwargs)

    def __dir__(self) -> list[str]:
        return [k for k in super().__dir__() if not k.startswith("_")]

    def _resolve(self, overrides: dict[str, Any]) -> tuple[MiningParameters, Counting]:
        overrides = dict(overrides)
        counting = overrides.pop("counting", self.counting)
        if counting not in COUNTING_METHODS:
            raise InvalidParameterError(f"`counting` must be one of {COUNTING_METHODS}. Got: {counting!r}")
        params = self.params.replace(**overrides) if overrides else self.params
        return params, counting

    def _support_table(self, params: MiningParameters, counting: Counting, deadline: Deadline) -> SupportTable:
        # The table depends on support and depth only; counting strategy,
        # threads and timeout never change it.
        key = (params.min_support, params.max_len)
        table = self._table_cache.get(key)
        if table is None:
            table = find_frequent_itemsets(
                self.store, params, counting=counting, verbose=self.verbose, deadline=deadline
            )
            self._table_cache[key] = table
        return table

    @abstractmethod
    def mine(self, **kwargs: Any) -> ItemsetCollection | RuleCollection:
        """Execute the mining algorithm.

        Must be implemented by subclasses.
        """

    def fit(self, **kwargs: Any) -> Self:
        """Sklearn-compatible alias for ``mine()``. Caches the result.

        Returns
        -------
        self
        """
        self._result = self.mine(**kwargs)
        return self

    def predict(self, **kwargs: Any) -> ItemsetCollection | RuleCollection:
        """Return the last mined result. Runs ``fit()`` first when unfitted or when overrides are given."""
        if self._result is None or kwargs:
            self.fit(**kwargs)
        return self._result

    def __repr__(self) -> str:
        p = self.params
        return (
            f"{type(self).__name__}("
            f"n_transactions={self.store.n_transactions}, "
            f"min_support={p.min_support}, "
            f"max_len={p.max_len}, "
            f"counting={self.counting!r}, "
            f"fitted={self._result is not None})"
        )
