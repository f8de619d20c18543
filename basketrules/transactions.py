from __future__ import annotations

import time
import warnings
from collections.abc import Hashable, Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import numpy as np
import pandas as pd
from scipy import sparse as sp

from ._compat import is_arrow_table, is_polars_frame, to_pandas
from .exceptions import InvalidInputError

if TYPE_CHECKING:
    import polars as pl


def item_sort_key(item: Any) -> tuple[bool, Any]:
    """Canonical total order over item labels (numbers first, then strings)."""
    return (isinstance(item, str), item)


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        # pd.isna on a container returns an array; containers are not missing
        return False


def _check_item(item: Any, key: Any) -> Any:
    if _is_missing(item):
        raise InvalidInputError(f"Transaction {key!r} contains a null item label.")
    if isinstance(item, str) and not item.strip():
        raise InvalidInputError(f"Transaction {key!r} contains an empty item label.")
    if not isinstance(item, Hashable):
        raise InvalidInputError(f"Item labels must be hashable, got {type(item).__name__} in transaction {key!r}.")
    return item


@dataclass(frozen=True)
class TransactionSummary:
    """Overview of a :class:`TransactionStore`.

    ``sizes`` maps transaction size to the number of transactions of that
    size; ``most_frequent`` holds the absolute counts of the top items.
    """

    n_transactions: int
    n_items: int
    density: float
    sizes: pd.Series
    most_frequent: pd.Series

    def __str__(self) -> str:
        lines = [
            f"transactions: {self.n_transactions:,}  items: {self.n_items:,}  density: {self.density:.6f}",
            "most frequent items:",
            self.most_frequent.to_string(),
            "transaction sizes:",
            self.sizes.to_string(),
        ]
        return "\n".join(lines)


class TransactionStore:
    """Read-only collection of baskets, each an unordered set of items.

    Items are re-coded as indices into the canonically sorted vocabulary so
    that every itemset the miners build is a sorted tuple of ints. The store
    keeps both a horizontal view (one tuple of item indices per transaction)
    and a vertical view (one sorted transaction-id array per item), the two
    layouts the counting strategies work on.

    Construct it with :meth:`from_pairs`, :meth:`from_baskets`,
    :meth:`from_dataframe`, :meth:`from_onehot` or :func:`from_transactions`.
    """

    def __init__(self, keys: Iterable[Any], baskets: Iterable[Iterable[Any]], verbose: int = 0) -> None:
        keys = list(keys)
        baskets = list(baskets)
        if len(keys) != len(baskets):
            raise InvalidInputError(f"Got {len(keys)} transaction keys for {len(baskets)} baskets.")
        if not baskets:
            raise InvalidInputError("Transaction data is empty.")

        t0 = 0.0
        if verbose:
            print(f"[{time.strftime('%X')}] Building transaction store from {len(baskets):,} baskets...")
            t0 = time.perf_counter()

        kept_keys: list[Any] = []
        kept_sets: list[frozenset[Any]] = []
        seen: set[Any] = set()
        for key, basket in zip(keys, baskets):
            if _is_missing(key):
                raise InvalidInputError("Transaction keys must not be null.")
            if key in seen:
                raise InvalidInputError(f"Duplicate transaction key {key!r}.")
            seen.add(key)
            if isinstance(basket, (str, bytes)):
                raise InvalidInputError(
                    f"Transaction {key!r} is a string; pass an iterable of item labels instead."
                )
            items = frozenset(_check_item(item, key) for item in basket)
            if items:
                kept_keys.append(key)
                kept_sets.append(items)

        if not kept_sets:
            raise InvalidInputError("Transaction data contains no non-empty transactions.")

        vocabulary: set[Any] = set().union(*kept_sets)
        try:
            items_sorted = sorted(vocabulary, key=item_sort_key)
        except TypeError as e:
            raise InvalidInputError(f"Item labels are not mutually comparable: {e}") from e
        item_to_idx = {item: i for i, item in enumerate(items_sorted)}

        rows = tuple(tuple(sorted(item_to_idx[item] for item in basket)) for basket in kept_sets)

        indptr = np.zeros(len(rows) + 1, dtype=np.int64)
        indptr[1:] = np.cumsum([len(r) for r in rows])
        indices = np.fromiter((i for r in rows for i in r), dtype=np.int64, count=int(indptr[-1]))
        csr = sp.csr_matrix(
            (np.ones(len(indices), dtype=bool), indices, indptr),
            shape=(len(rows), len(items_sorted)),
        )
        csc = csr.tocsc()
        csc.sort_indices()

        self._keys: tuple[Any, ...] = tuple(kept_keys)
        self._key_index: dict[Any, int] = {key: i for i, key in enumerate(kept_keys)}
        self._items: tuple[Any, ...] = tuple(items_sorted)
        self._item_index: dict[Any, int] = item_to_idx
        self._rows: tuple[tuple[int, ...], ...] = rows
        self._csr = csr
        self._item_counts: np.ndarray = np.diff(csc.indptr).astype(np.int64)
        self._tidsets: tuple[np.ndarray, ...] = tuple(
            np.asarray(csc.indices[csc.indptr[j] : csc.indptr[j + 1]], dtype=np.int64)
            for j in range(len(items_sorted))
        )
        for arr in self._tidsets:
            arr.flags.writeable = False
        self._item_counts.flags.writeable = False

        if verbose:
            print(
                f"[{time.strftime('%X')}] Kept {len(rows):,} transactions over {len(items_sorted):,} items "
                f"in {time.perf_counter() - t0:.2f}s."
            )

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[Any, Any]], verbose: int = 0) -> TransactionStore:
        """Group ``(transaction_key, item)`` pairs into baskets.

        Keys keep their first-seen order; repeated items in one basket
        collapse into a single occurrence.
        """
        groups: dict[Any, list[Any]] = {}
        for pair in pairs:
            try:
                key, item = pair
            except (TypeError, ValueError) as e:
                raise InvalidInputError(f"Expected (transaction_key, item) pairs, got {pair!r}.") from e
            if _is_missing(key):
                raise InvalidInputError("Transaction keys must not be null.")
            groups.setdefault(key, []).append(item)
        return cls(list(groups), list(groups.values()), verbose=verbose)

    @classmethod
    def from_baskets(
        cls,
        baskets: Mapping[Any, Iterable[Any]] | Sequence[Iterable[Any]],
        verbose: int = 0,
    ) -> TransactionStore:
        """Build a store from pre-grouped transactions.

        A mapping (or a pandas Series) supplies its own keys; a plain
        sequence of baskets is keyed by position. Empty baskets are dropped.
        """
        if isinstance(baskets, (str, bytes)):
            raise InvalidInputError("Expected a collection of baskets, got a string.")
        if isinstance(baskets, (Mapping, pd.Series)):
            pairs = list(baskets.items())
            return cls([k for k, _ in pairs], [v for _, v in pairs], verbose=verbose)
        values = list(baskets)
        return cls(range(len(values)), values, verbose=verbose)

    @classmethod
    def from_dataframe(
        cls,
        df: pd.DataFrame | pl.DataFrame | Any,
        transaction_col: str | None = None,
        item_col: str | None = None,
        verbose: int = 0,
    ) -> TransactionStore:
        """Build a store from long-format data: one row per (transaction, item).

        Parameters
        ----------
        df
            Pandas, Polars or PyArrow table with at least two columns.
        transaction_col
            Column identifying the transaction. Defaults to the first column.
        item_col
            Column holding the item label. Defaults to the second column.
        """
        df = to_pandas(df)
        if not isinstance(df, pd.DataFrame):
            raise TypeError(f"Expected a Pandas/Polars/PyArrow DataFrame, got {type(df)}")

        cols = list(df.columns)
        if len(cols) < 2:
            raise InvalidInputError(
                f"DataFrame must have at least 2 columns (transaction id + item), got {len(cols)}: {cols}"
            )

        txn_col = transaction_col if transaction_col is not None else cols[0]
        itm_col = item_col if item_col is not None else cols[1]

        if txn_col not in df.columns:
            raise InvalidInputError(f"Transaction column '{txn_col}' not found. Available columns: {cols}")
        if itm_col not in df.columns:
            raise InvalidInputError(f"Item column '{itm_col}' not found. Available columns: {cols}")

        if verbose:
            print(f"[{time.strftime('%X')}] Grouping {len(df):,} rows by '{txn_col}'...")

        return cls.from_pairs(zip(df[txn_col].tolist(), df[itm_col].tolist()), verbose=verbose)

    @classmethod
    def from_onehot(cls, df: pd.DataFrame | pl.DataFrame | Any, verbose: int = 0) -> TransactionStore:
        """Build a store from a one-hot matrix (rows = transactions, columns = items).

        Boolean columns are expected; 0/1 integer columns are accepted with a
        warning. Dense and sparse pandas frames are both supported. The frame
        index supplies the transaction keys.
        """
        df = to_pandas(df)
        if not isinstance(df, pd.DataFrame):
            raise TypeError(f"Expected a Pandas/Polars/PyArrow DataFrame, got {type(df)}")
        if df.size == 0:
            raise InvalidInputError("Transaction data is empty.")

        if hasattr(df, "sparse"):
            csr = df.sparse.to_coo().tocsr()
            values = csr.data
        else:
            if pd.isna(df).any().any():
                raise InvalidInputError("NaN values are not permitted in a one-hot transaction matrix.")
            values = df.to_numpy()
            csr = None

        if not df.dtypes.apply(pd.api.types.is_bool_dtype).all():
            warnings.warn(
                "One-hot DataFrames with non-bool columns are converted to bool. "
                "Pass a DataFrame with bool dtype to skip this step.",
                UserWarning,
                stacklevel=2,
            )
            bad = np.where((values != 1) & (values != 0))
            if len(bad[0]) > 0:
                val = values[tuple(loc[0] for loc in bad)]
                raise InvalidInputError(
                    f"The allowed values for a one-hot DataFrame are True, False, 0, 1. Found value {val}"
                )

        if csr is None:
            csr = sp.csr_matrix(np.asarray(values, dtype=bool))
        else:
            csr = csr.astype(bool)
        csr.eliminate_zeros()
        csr.sort_indices()

        columns = list(df.columns)
        baskets = [
            [columns[j] for j in csr.indices[csr.indptr[i] : csr.indptr[i + 1]]] for i in range(csr.shape[0])
        ]
        return cls(df.index.tolist(), baskets, verbose=verbose)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def n_transactions(self) -> int:
        return len(self._rows)

    @property
    def n_items(self) -> int:
        return len(self._items)

    @property
    def items(self) -> tuple[Any, ...]:
        """Item vocabulary in canonical order."""
        return self._items

    @property
    def keys(self) -> tuple[Any, ...]:
        """Transaction keys in first-seen order (empty baskets excluded)."""
        return self._keys

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[frozenset[Any]]:
        for row in self._rows:
            yield frozenset(self._items[i] for i in row)

    def __getitem__(self, key: Any) -> frozenset[Any]:
        try:
            row = self._rows[self._key_index[key]]
        except KeyError:
            raise KeyError(f"Unknown transaction key {key!r}") from None
        return frozenset(self._items[i] for i in row)

    def __contains__(self, key: Any) -> bool:
        return key in self._key_index

    def __repr__(self) -> str:
        return f"TransactionStore(n_transactions={self.n_transactions}, n_items={self.n_items})"

    def decode(self, encoded: Iterable[int]) -> tuple[Any, ...]:
        """Map item indices back to labels, keeping canonical order."""
        return tuple(self._items[i] for i in encoded)

    def encode(self, items: Iterable[Any]) -> tuple[int, ...]:
        """Map labels to sorted item indices. Unknown labels raise ``KeyError``."""
        return tuple(sorted(self._item_index[item] for item in items))

    def item_counts(self) -> pd.Series:
        """Number of transactions each item occurs in, in vocabulary order."""
        return pd.Series(np.array(self._item_counts), index=pd.Index(self._items, dtype=object), name="count")

    def item_frequency(
        self,
        kind: str = "relative",
        top_n: int | None = None,
        min_support: float | None = None,
    ) -> pd.Series:
        """Item frequencies sorted in descending order.

        Parameters
        ----------
        kind : {'relative', 'absolute'}, default='relative'
            Report support (fraction of transactions) or raw counts.
        top_n : int | None, default=None
            Keep only the ``top_n`` most frequent items.
        min_support : float | None, default=None
            Keep only items whose relative frequency is at least this value.

        Ties keep vocabulary order.
        """
        if kind not in ("relative", "absolute"):
            raise ValueError(f"`kind` must be 'relative' or 'absolute'. Got: {kind}")
        counts = self.item_counts()
        freq = counts / self.n_transactions
        if min_support is not None:
            keep = freq >= min_support
            counts, freq = counts[keep], freq[keep]
        result = freq.rename("support") if kind == "relative" else counts
        result = result.sort_values(ascending=False, kind="stable")
        if top_n is not None:
            result = result.head(top_n)
        return result

    def summary(self, top_n: int = 5) -> TransactionSummary:
        sizes = np.diff(self._csr.indptr)
        size_dist = pd.Series(sizes).value_counts().sort_index().rename("transactions")
        size_dist.index.name = "size"
        n_cells = self.n_transactions * self.n_items
        return TransactionSummary(
            n_transactions=self.n_transactions,
            n_items=self.n_items,
            density=float(self._csr.nnz / n_cells) if n_cells else 0.0,
            sizes=size_dist,
            most_frequent=self.item_frequency(kind="absolute", top_n=top_n),
        )

    def to_onehot(self) -> pd.DataFrame:
        """Sparse boolean one-hot DataFrame, indexed by transaction key."""
        return pd.DataFrame.sparse.from_spmatrix(
            self._csr.copy(),
            index=pd.Index(self._keys, dtype=object),
            columns=pd.Index(self._items, dtype=object),
        ).astype(pd.SparseDtype("bool", fill_value=False))


def _looks_onehot(df: pd.DataFrame) -> bool:
    """All-bool columns, or integer columns holding only 0 and 1."""
    if df.shape[1] == 0:
        return False
    if df.dtypes.apply(pd.api.types.is_bool_dtype).all():
        return True
    if not df.dtypes.apply(pd.api.types.is_integer_dtype).all():
        return False
    return bool(df.isin([0, 1]).all().all())


def from_transactions(
    data: TransactionStore | pd.DataFrame | Mapping[Any, Iterable[Any]] | Sequence[Iterable[Any]] | Any,
    transaction_col: str | None = None,
    item_col: str | None = None,
    verbose: int = 0,
) -> TransactionStore:
    """Coerce any supported input into a :class:`TransactionStore`.

    - ``TransactionStore`` is returned unchanged.
    - **Pandas / Polars / PyArrow** frames: all-bool (or all 0/1 integer)
      frames are read as one-hot matrices, anything else as long format
      (``transaction_col`` / ``item_col``, defaulting to the first two columns).
    - **Mappings** of key to basket, or **lists of lists** of items.

    Examples
    --------
    >>> import pandas as pd
    >>> df = pd.DataFrame({"invoice": [1, 1, 2], "item": ["tea", "milk", "tea"]})
    >>> from_transactions(df).n_transactions
    2
    """
    if isinstance(data, TransactionStore):
        return data

    if is_polars_frame(data) or is_arrow_table(data):
        data = to_pandas(data)

    if isinstance(data, pd.DataFrame):
        if transaction_col is None and item_col is None and _looks_onehot(data):
            return TransactionStore.from_onehot(data, verbose=verbose)
        return TransactionStore.from_dataframe(data, transaction_col, item_col, verbose=verbose)

    if isinstance(data, (Mapping, pd.Series, list, tuple)):
        return TransactionStore.from_baskets(data, verbose=verbose)

    raise TypeError(f"Expected a Pandas/Polars/PyArrow DataFrame, a mapping or a list of lists, got {type(data)}")
