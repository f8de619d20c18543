"""pytest configuration and shared fixtures."""

from __future__ import annotations

import os
import sys

import pytest

# Ensure tests/ dir is on path so test_minerbase imports work
sys.path.insert(0, os.path.dirname(__file__))

from basketrules import TransactionStore  # noqa: E402


# ---------------------------------------------------------------------------
# Five-basket example: a, b, c each in 4 baskets, every pair in 3, all in 2
# ---------------------------------------------------------------------------

ABC_BASKETS = {
    "T1": ["a", "b", "c"],
    "T2": ["a", "b"],
    "T3": ["a", "c"],
    "T4": ["b", "c"],
    "T5": ["a", "b", "c"],
}


@pytest.fixture()
def abc_baskets() -> dict[str, list[str]]:
    return {k: list(v) for k, v in ABC_BASKETS.items()}


@pytest.fixture()
def abc_store() -> TransactionStore:
    return TransactionStore.from_baskets(ABC_BASKETS)


@pytest.fixture()
def retail_pairs() -> list[tuple[str, str]]:
    """Invoice / description pairs in the shape of a cleaned retail export."""
    return [
        ("536365", "white hanging heart t-light holder"),
        ("536365", "white metal lantern"),
        ("536365", "cream cupid hearts coat hanger"),
        ("536366", "hand warmer union jack"),
        ("536366", "hand warmer red polka dot"),
        ("536367", "white hanging heart t-light holder"),
        ("536367", "white metal lantern"),
        ("536367", "white metal lantern"),
        ("536368", "jam making set with jars"),
        ("536368", "white hanging heart t-light holder"),
        ("536369", "white metal lantern"),
        ("536369", "white hanging heart t-light holder"),
        ("536369", "hand warmer union jack"),
    ]
