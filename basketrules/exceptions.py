"""Exception hierarchy raised by the mining pipeline.

Every error derives from :class:`MiningError` and from the built-in exception
callers would already be catching, so ``except ValueError`` keeps working for
bad input and bad parameters.
"""

from __future__ import annotations


class MiningError(Exception):
    """Base class for all basketrules errors."""


class InvalidInputError(MiningError, ValueError):
    """Transaction data is empty or malformed."""


class InvalidParameterError(MiningError, ValueError):
    """A threshold or size bound is out of range."""


class InternalConsistencyError(MiningError, RuntimeError):
    """A support lookup contradicted antimonotonicity.

    This signals a bug in the engine (or a hand-built itemset collection that
    is missing subsets); it is never recoverable by re-running.
    """


class MiningTimeoutError(MiningError, TimeoutError):
    """The run exceeded its deadline before completing."""
