"""Tests for the level-wise search engine in basketrules._core."""

from __future__ import annotations

import itertools
import logging
from typing import Any

import numpy as np
import pytest

import basketrules._core as core
from basketrules import (
    Apriori,
    InvalidParameterError,
    MiningParameters,
    MiningTimeoutError,
    TransactionStore,
    apriori,
)
from basketrules._core import (
    Deadline,
    find_frequent_itemsets,
    generate_candidates,
    itemsets_from_table,
    min_support_count,
)
from basketrules.association_rules import generate_rules


@pytest.mark.parametrize(
    ("min_support", "n", "expected"),
    [
        (0.7, 10, 7),
        (0.4, 5, 2),
        (0.1, 5, 1),
        (1 / 3, 3, 1),
        (1.0, 7, 7),
        (0.0001, 100, 1),
    ],
)
def test_min_support_count(min_support: float, n: int, expected: int) -> None:
    c = min_support_count(min_support, n)
    assert c == expected
    assert c / n >= min_support
    assert c == 1 or (c - 1) / n < min_support


class TestCandidates:
    def test_singletons_join_pairwise(self) -> None:
        level = [(0,), (1,), (2,)]
        cands = [c for c, _, _ in generate_candidates(level, frozenset(level))]
        assert cands == [(0, 1), (0, 2), (1, 2)]

    def test_infrequent_subset_is_pruned(self) -> None:
        level = [(0, 1), (0, 2), (1, 2), (1, 3)]
        out = generate_candidates(level, frozenset(level))
        # (1, 2, 3) needs (2, 3)
        assert out == [((0, 1, 2), (0, 1), (0, 2))]

    def test_prefix_mismatch_stops_join(self) -> None:
        level = [(0, 1), (1, 2)]
        assert generate_candidates(level, frozenset(level)) == []

    def test_empty(self) -> None:
        assert generate_candidates([], frozenset()) == []


class TestFindFrequentItemsets:
    def test_abc_table(self, abc_store: TransactionStore) -> None:
        table = find_frequent_itemsets(abc_store, MiningParameters(min_support=0.4))
        assert table.itemsets == ((0,), (1,), (2,), (0, 1), (0, 2), (1, 2), (0, 1, 2))
        assert table.count((0, 1, 2)) == 2
        assert table.support((1, 2)) == pytest.approx(0.6)
        assert table.count((5,)) == 0
        assert len(table) == 7

    def test_counts_are_read_only(self, abc_store: TransactionStore) -> None:
        table = find_frequent_itemsets(abc_store, MiningParameters(min_support=0.4))
        with pytest.raises(TypeError):
            table.counts[(0,)] = 1  # type: ignore[index]

    def test_sized(self, abc_store: TransactionStore) -> None:
        table = find_frequent_itemsets(abc_store, MiningParameters(min_support=0.4))
        assert list(table.sized(2, 2)) == [(0, 1), (0, 2), (1, 2)]
        assert list(table.sized(3)) == [(0, 1, 2)]

    def test_max_len_stops_search(self, abc_store: TransactionStore) -> None:
        table = find_frequent_itemsets(abc_store, MiningParameters(min_support=0.4, max_len=1))
        assert table.itemsets == ((0,), (1,), (2,))

    def test_min_len_is_not_applied(self, abc_store: TransactionStore) -> None:
        table = find_frequent_itemsets(abc_store, MiningParameters(min_support=0.4, min_len=3))
        assert len(table) == 7

    def test_strategies_and_threads_agree(self) -> None:
        rng = np.random.default_rng(7)
        baskets = [list(rng.choice(30, size=rng.integers(1, 9), replace=False)) for _ in range(400)]
        store = TransactionStore.from_baskets(baskets)
        tables = [
            find_frequent_itemsets(store, MiningParameters(min_support=0.02, max_len=None, n_jobs=jobs), counting)
            for counting in ("scan", "tidset")
            for jobs in (1, 4)
        ]
        first = tables[0]
        assert len(first) > 30
        for other in tables[1:]:
            assert other.itemsets == first.itemsets
            assert dict(other.counts) == dict(first.counts)

    def test_unknown_counting(self, abc_store: TransactionStore) -> None:
        with pytest.raises(InvalidParameterError, match="counting"):
            find_frequent_itemsets(abc_store, MiningParameters(), counting="bitmap")  # type: ignore[arg-type]

    def test_itemsets_from_table(self, abc_store: TransactionStore) -> None:
        table = find_frequent_itemsets(abc_store, MiningParameters(min_support=0.4))
        res = itemsets_from_table(table, abc_store.decode, min_len=2)
        assert [e.items for e in res] == [("a", "b"), ("a", "c"), ("b", "c"), ("a", "b", "c")]
        assert res.n_transactions == 5

    def test_debug_logging(self, abc_store: TransactionStore, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="basketrules._core"):
            find_frequent_itemsets(abc_store, MiningParameters(min_support=0.4))
        assert "level 2: 3 candidates, 3 frequent" in caplog.text


class TestTimeout:
    @staticmethod
    def _ticking_clock(monkeypatch: pytest.MonkeyPatch) -> None:
        ticks = itertools.count()

        def clock() -> Any:
            return float(next(ticks))

        monkeypatch.setattr(core, "_clock", clock)

    def test_deadline_without_timeout(self) -> None:
        Deadline(None).check("anything")

    def test_deadline_expires(self, monkeypatch: pytest.MonkeyPatch) -> None:
        self._ticking_clock(monkeypatch)
        deadline = Deadline(1.5)
        deadline.check("first")
        with pytest.raises(MiningTimeoutError, match="while second"):
            deadline.check("second")

    def test_mining_times_out(self, abc_store: TransactionStore, monkeypatch: pytest.MonkeyPatch) -> None:
        self._ticking_clock(monkeypatch)
        with pytest.raises(MiningTimeoutError):
            apriori(abc_store, min_support=0.4, timeout=0.5)

    def test_timeout_is_a_builtin_timeout(self, abc_store: TransactionStore, monkeypatch: pytest.MonkeyPatch) -> None:
        self._ticking_clock(monkeypatch)
        with pytest.raises(TimeoutError):
            find_frequent_itemsets(abc_store, MiningParameters(min_support=0.4, timeout=0.5), counting="tidset")

    def test_rule_generation_checks_deadline(self, monkeypatch: pytest.MonkeyPatch) -> None:
        store = TransactionStore.from_baskets([["a", "b", "c", "d"]] * 4)
        table = find_frequent_itemsets(store, MiningParameters(min_support=0.5, max_len=None))
        self._ticking_clock(monkeypatch)
        with pytest.raises(MiningTimeoutError, match="generating rules"):
            generate_rules(table, store.decode, min_confidence=0.0, deadline=Deadline(0.5))

    def test_cached_table_still_times_out(self, monkeypatch: pytest.MonkeyPatch) -> None:
        model = Apriori([["a", "b", "c", "d"]] * 4, min_support=0.5, min_confidence=0.0, max_len=None)
        assert len(model.mine()) == 50
        self._ticking_clock(monkeypatch)
        with pytest.raises(MiningTimeoutError, match="generating rules"):
            model.mine(timeout=0.5)
        assert len(model.mine()) == 50

    def test_generous_timeout_completes(self, abc_store: TransactionStore) -> None:
        assert len(apriori(abc_store, min_support=0.4, min_confidence=0.7, timeout=60)) == 6
