from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from operator import attrgetter
from typing import Any, ClassVar, Generic, TypeVar, overload

import pandas as pd

from .exceptions import InvalidParameterError


@dataclass(frozen=True)
class Itemset:
    """A frequent itemset. ``items`` is in canonical item order."""

    items: tuple[Any, ...]
    support: float
    count: int

    @property
    def size(self) -> int:
        return len(self.items)

    def __contains__(self, item: Any) -> bool:
        return item in self.items


@dataclass(frozen=True)
class Rule:
    """Association rule ``antecedent => consequent``.

    ``support`` is the support of the union, ``coverage`` the support of the
    antecedent and ``count`` the number of transactions containing the union.
    """

    antecedent: tuple[Any, ...]
    consequent: tuple[Any, ...]
    support: float
    confidence: float
    lift: float
    coverage: float
    count: int

    @property
    def size(self) -> int:
        return len(self.antecedent) + len(self.consequent)

    @property
    def items(self) -> tuple[Any, ...]:
        return self.antecedent + self.consequent

    def __str__(self) -> str:
        lhs = ", ".join(map(str, self.antecedent))
        rhs = ", ".join(map(str, self.consequent))
        return f"{{{lhs}}} => {{{rhs}}}"


_E = TypeVar("_E", Itemset, Rule)
_C = TypeVar("_C", bound="_ResultCollection[Any]")


def _as_items(items: Any) -> tuple[Any, ...]:
    if isinstance(items, (str, bytes)) or not isinstance(items, Iterable):
        return (items,)
    return tuple(items)


class _ResultCollection(Sequence[_E], Generic[_E]):
    """Immutable, ordered result of a mining run.

    Every combinator returns a new collection; the receiver is never
    modified. All views derived from one run share the generation order,
    which breaks ties in :meth:`sort`.
    """

    metrics: ClassVar[tuple[str, ...]] = ()

    def __init__(
        self,
        entries: Iterable[_E],
        n_transactions: int,
        _rank: Mapping[_E, int] | None = None,
    ) -> None:
        self._entries: tuple[_E, ...] = tuple(entries)
        self._n_transactions = n_transactions
        self._rank: Mapping[_E, int] = (
            _rank if _rank is not None else {entry: i for i, entry in enumerate(self._entries)}
        )

    def _derive(self: _C, entries: Iterable[_E]) -> _C:
        return type(self)(entries, self._n_transactions, _rank=self._rank)

    @property
    def n_transactions(self) -> int:
        """Number of transactions the supports are relative to."""
        return self._n_transactions

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[_E]:
        return iter(self._entries)

    @overload
    def __getitem__(self, index: int) -> _E: ...

    @overload
    def __getitem__(self: _C, index: slice) -> _C: ...

    def __getitem__(self, index: int | slice) -> Any:
        if isinstance(index, slice):
            return self._derive(self._entries[index])
        return self._entries[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, type(self)):
            return NotImplemented
        return self._entries == other._entries and self._n_transactions == other._n_transactions

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(n={len(self)}, n_transactions={self._n_transactions})"

    def sort(self: _C, by: str = "support", descending: bool = True) -> _C:
        """Order by a metric. Ties keep the order in which entries were generated."""
        if by not in self.metrics:
            raise InvalidParameterError(f"Cannot sort by {by!r}; choose one of {self.metrics}.")
        in_generation_order = sorted(self._entries, key=self._rank.__getitem__)
        return self._derive(sorted(in_generation_order, key=attrgetter(by), reverse=descending))

    def head(self: _C, n: int = 6) -> _C:
        return self._derive(self._entries[:n])

    def filter(self: _C, predicate: Callable[[_E], bool]) -> _C:
        return self._derive(e for e in self._entries if predicate(e))

    def _size_filter(
        self, entry: _E, size: int | None, min_size: int | None, max_size: int | None
    ) -> bool:
        s = entry.size
        if size is not None and s != size:
            return False
        if min_size is not None and s < min_size:
            return False
        if max_size is not None and s > max_size:
            return False
        return True

    def _frame_rows(self) -> list[dict[str, Any]]:
        raise NotImplementedError

    _columns: ClassVar[tuple[str, ...]] = ()

    def to_frame(self) -> pd.DataFrame:
        """Tabular copy of the collection for reporting and plotting."""
        rows = self._frame_rows()
        if not rows:
            return pd.DataFrame(columns=list(self._columns))
        return pd.DataFrame(rows, columns=list(self._columns))

    def describe(self) -> pd.DataFrame:
        """Summary statistics of every metric column."""
        numeric = [m for m in self.metrics if m != "size"]
        return self.to_frame()[numeric].astype(float).describe()

    def size_distribution(self) -> pd.Series:
        """Number of entries per size."""
        sizes = pd.Series([e.size for e in self._entries], dtype="int64")
        dist = sizes.value_counts().sort_index().rename("count")
        dist.index.name = "size"
        return dist


class ItemsetCollection(_ResultCollection[Itemset]):
    """Frequent itemsets of one run (the Eclat result)."""

    metrics = ("support", "count", "size")
    _columns = ("support", "itemsets", "count", "size")

    def subset(
        self,
        size: int | None = None,
        min_size: int | None = None,
        max_size: int | None = None,
        items: Any = None,
    ) -> ItemsetCollection:
        """Keep itemsets matching every given condition.

        ``items`` is one label or an iterable of labels that must all be
        members of the itemset.
        """
        wanted = _as_items(items) if items is not None else ()
        return self._derive(
            e
            for e in self._entries
            if self._size_filter(e, size, min_size, max_size) and all(i in e.items for i in wanted)
        )

    def _frame_rows(self) -> list[dict[str, Any]]:
        return [{"support": e.support, "itemsets": e.items, "count": e.count, "size": e.size} for e in self._entries]


class RuleCollection(_ResultCollection[Rule]):
    """Association rules of one run (the Apriori result)."""

    metrics = ("support", "confidence", "lift", "coverage", "count", "size")
    _columns = ("antecedents", "consequents", "support", "confidence", "lift", "coverage", "count", "size")

    def subset(
        self,
        size: int | None = None,
        min_size: int | None = None,
        max_size: int | None = None,
        lhs: Any = None,
        rhs: Any = None,
        items: Any = None,
    ) -> RuleCollection:
        """Keep rules matching every given condition.

        ``lhs`` / ``rhs`` name labels that must all appear in the antecedent /
        consequent; ``items`` labels that must appear on either side.

        Examples
        --------
        >>> rules.subset(rhs="white hanging heart t-light holder")  # doctest: +SKIP
        >>> rules.subset(size=2)  # doctest: +SKIP
        """
        want_lhs = _as_items(lhs) if lhs is not None else ()
        want_rhs = _as_items(rhs) if rhs is not None else ()
        want_any = _as_items(items) if items is not None else ()
        return self._derive(
            r
            for r in self._entries
            if self._size_filter(r, size, min_size, max_size)
            and all(i in r.antecedent for i in want_lhs)
            and all(i in r.consequent for i in want_rhs)
            and all(i in r.items for i in want_any)
        )

    def _frame_rows(self) -> list[dict[str, Any]]:
        return [
            {
                "antecedents": r.antecedent,
                "consequents": r.consequent,
                "support": r.support,
                "confidence": r.confidence,
                "lift": r.lift,
                "coverage": r.coverage,
                "count": r.count,
                "size": r.size,
            }
            for r in self._entries
        ]
