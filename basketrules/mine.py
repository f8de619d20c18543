from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ._core import Counting
    from .results import ItemsetCollection, RuleCollection


def mine(
    data: Any,
    method: str = "apriori",
    min_support: float = 0.1,
    min_confidence: float = 0.8,
    min_len: int = 1,
    max_len: int | None = 10,
    counting: Counting | None = None,
    n_jobs: int = 1,
    timeout: float | None = None,
    verbose: int = 0,
) -> RuleCollection | ItemsetCollection:
    """Run the named algorithm: rules for ``"apriori"``, itemsets for ``"eclat"``.

    ``counting`` picks the support counting strategy; ``None`` keeps each
    miner's default (``"scan"`` for apriori, ``"tidset"`` for eclat).

    This module-level function relies on the Object-Oriented APIs.
    """
    if method not in ("apriori", "eclat"):
        raise ValueError(f"`method` must be 'apriori' or 'eclat'. Got: {method}")
    extra: dict[str, Any] = {} if counting is None else {"counting": counting}

    if method == "eclat":
        from .eclat import Eclat

        return Eclat(
            data,
            min_support=min_support,
            min_len=min_len,
            max_len=max_len,
            n_jobs=n_jobs,
            timeout=timeout,
            verbose=verbose,
            **extra,
        ).mine()

    from .apriori import Apriori

    return Apriori(
        data,
        min_support=min_support,
        min_confidence=min_confidence,
        min_len=min_len,
        max_len=max_len,
        n_jobs=n_jobs,
        timeout=timeout,
        verbose=verbose,
        **extra,
    ).mine()
