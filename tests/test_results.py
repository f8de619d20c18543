"""Tests for the immutable result collections."""

from __future__ import annotations

import pytest

from basketrules import (
    InvalidParameterError,
    ItemsetCollection,
    RuleCollection,
    TransactionStore,
    apriori,
    eclat,
)


@pytest.fixture()
def abc_rules(abc_store: TransactionStore) -> RuleCollection:
    # lift is 0.9375 for every 2-item rule and 5/6 for every 3-item rule
    return apriori(abc_store, min_support=0.4, min_confidence=0.0)


@pytest.fixture()
def abc_itemsets(abc_store: TransactionStore) -> ItemsetCollection:
    return eclat(abc_store, min_support=0.4)


class TestSort:
    def test_ties_keep_generation_order(self, abc_rules: RuleCollection) -> None:
        assert abc_rules.sort(by="lift") == abc_rules

    def test_ascending(self, abc_rules: RuleCollection) -> None:
        ordered = [str(r) for r in abc_rules.sort(by="confidence", descending=False)]
        assert ordered[:6] == [
            "{a} => {b, c}",
            "{b} => {a, c}",
            "{c} => {a, b}",
            "{a, b} => {c}",
            "{a, c} => {b}",
            "{b, c} => {a}",
        ]
        assert ordered[6:] == [str(r) for r in abc_rules.subset(size=2)]

    def test_resort_restores_generation_ties(self, abc_rules: RuleCollection) -> None:
        once = abc_rules.sort(by="lift", descending=False)
        again = abc_rules.sort(by="confidence").sort(by="lift", descending=False)
        assert again == once

    def test_itemsets_by_support(self, abc_itemsets: ItemsetCollection) -> None:
        ordered = abc_itemsets.sort(by="support", descending=False)
        assert [e.items for e in ordered] == [
            ("a", "b", "c"),
            ("a", "b"),
            ("a", "c"),
            ("b", "c"),
            ("a",),
            ("b",),
            ("c",),
        ]

    def test_unknown_metric(self, abc_rules: RuleCollection, abc_itemsets: ItemsetCollection) -> None:
        with pytest.raises(InvalidParameterError, match="Cannot sort"):
            abc_rules.sort(by="leverage")
        with pytest.raises(InvalidParameterError, match="Cannot sort"):
            abc_itemsets.sort(by="confidence")

    def test_receiver_unchanged(self, abc_rules: RuleCollection) -> None:
        before = list(abc_rules)
        abc_rules.sort(by="confidence", descending=False)
        abc_rules.head(2)
        abc_rules.subset(size=3)
        assert list(abc_rules) == before


class TestSelection:
    def test_head(self, abc_rules: RuleCollection) -> None:
        assert len(abc_rules.head()) == 6
        assert len(abc_rules.head(3)) == 3
        assert len(abc_rules.head(100)) == 12
        assert isinstance(abc_rules.head(), RuleCollection)

    def test_slice_returns_collection(self, abc_itemsets: ItemsetCollection) -> None:
        tail = abc_itemsets[3:]
        assert isinstance(tail, ItemsetCollection)
        assert tail.n_transactions == 5
        assert abc_itemsets[0].items == ("a",)

    def test_subset_lhs_rhs(self, abc_rules: RuleCollection) -> None:
        assert [str(r) for r in abc_rules.subset(lhs=["a", "b"])] == ["{a, b} => {c}"]
        assert len(abc_rules.subset(rhs="a")) == 5
        assert len(abc_rules.subset(items="a")) == 10

    def test_subset_size_bounds(self, abc_rules: RuleCollection) -> None:
        assert len(abc_rules.subset(min_size=3)) == 6
        assert len(abc_rules.subset(max_size=2)) == 6
        assert len(abc_rules.subset(size=4)) == 0

    def test_itemset_subset(self, abc_itemsets: ItemsetCollection) -> None:
        assert [e.items for e in abc_itemsets.subset(items=["b", "c"])] == [("b", "c"), ("a", "b", "c")]
        assert len(abc_itemsets.subset(min_size=2, max_size=2)) == 3

    def test_filter(self, abc_rules: RuleCollection) -> None:
        strong = abc_rules.filter(lambda r: r.confidence > 0.7)
        assert len(strong) == 6
        assert all(r.size == 2 for r in strong)

    def test_selection_keeps_sort_ties(self, abc_rules: RuleCollection) -> None:
        picked = abc_rules.subset(items="c").sort(by="lift")
        assert list(picked) == [r for r in abc_rules if "c" in r.items]


class TestFrames:
    def test_rule_frame(self, abc_rules: RuleCollection) -> None:
        df = abc_rules.to_frame()
        assert list(df.columns) == [
            "antecedents",
            "consequents",
            "support",
            "confidence",
            "lift",
            "coverage",
            "count",
            "size",
        ]
        assert len(df) == 12
        assert df.loc[0, "antecedents"] == ("a",)

    def test_itemset_frame(self, abc_itemsets: ItemsetCollection) -> None:
        df = abc_itemsets.to_frame()
        assert list(df.columns) == ["support", "itemsets", "count", "size"]
        assert df["count"].tolist() == [4, 4, 4, 3, 3, 3, 2]

    def test_empty_frame_has_columns(self, abc_rules: RuleCollection) -> None:
        df = abc_rules.subset(size=5).to_frame()
        assert df.empty
        assert "lift" in df.columns

    def test_describe(self, abc_rules: RuleCollection) -> None:
        desc = abc_rules.describe()
        assert list(desc.columns) == ["support", "confidence", "lift", "coverage", "count"]
        assert desc.loc["count", "lift"] == 12
        assert desc.loc["max", "confidence"] == pytest.approx(0.75)

    def test_size_distribution(self, abc_rules: RuleCollection) -> None:
        assert abc_rules.size_distribution().to_dict() == {2: 6, 3: 6}


class TestProtocol:
    def test_unhashable(self, abc_rules: RuleCollection) -> None:
        with pytest.raises(TypeError):
            hash(abc_rules)

    def test_equality_is_typed(
        self, abc_rules: RuleCollection, abc_itemsets: ItemsetCollection, abc_store: TransactionStore
    ) -> None:
        assert abc_rules != abc_itemsets
        assert abc_rules == apriori(abc_store, min_support=0.4, min_confidence=0.0)

    def test_repr(self, abc_itemsets: ItemsetCollection) -> None:
        assert repr(abc_itemsets) == "ItemsetCollection(n=7, n_transactions=5)"

    def test_rule_str_and_items(self, abc_rules: RuleCollection) -> None:
        rule = abc_rules.subset(lhs=["a", "c"])[0]
        assert str(rule) == "{a, c} => {b}"
        assert rule.items == ("a", "c", "b")
        assert rule.size == 3

    def test_itemset_membership(self, abc_itemsets: ItemsetCollection) -> None:
        last = abc_itemsets[-1]
        assert "b" in last
        assert "z" not in last

