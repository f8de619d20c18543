"""
basketrules — Getting Started
=============================

The simplest possible example: mine association rules from a handful of
baskets, then look at the frequent itemsets behind them.
"""

from basketrules import Apriori, eclat

# A small market-basket dataset (5 transactions, 5 items)
baskets = {
    "T1": ["bread", "butter", "milk"],
    "T2": ["bread", "milk", "eggs"],
    "T3": ["butter", "milk", "eggs", "cheese"],
    "T4": ["bread", "butter"],
    "T5": ["bread", "milk", "eggs"],
}

# ── 1. Association rules ────────────────────────────────────────────────────
model = Apriori(baskets, min_support=0.4, min_confidence=0.6)
rules = model.mine()

print(f"{len(rules)} rules (support ≥ 0.4, confidence ≥ 0.6), strongest lift first:")
print(rules.sort(by="lift").to_frame().to_string(index=False))
print()

# ── 2. The frequent itemsets of the same run ────────────────────────────────
print("Frequent itemsets:")
print(model.frequent_itemsets().sort(by="support").to_frame().to_string(index=False))
print()

# ── 3. Eclat: itemsets only, pairs and up ───────────────────────────────────
pairs = eclat(baskets, min_support=0.4, min_len=2)
print("Eclat itemsets with at least two items:")
for itemset in pairs:
    print(f"  {set(itemset.items)}  support={itemset.support:.2f}  count={itemset.count}")
