from __future__ import annotations

import dataclasses
import math
import os
from dataclasses import dataclass
from typing import Any

from .exceptions import InvalidParameterError


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and not math.isnan(value)


@dataclass(frozen=True)
class MiningParameters:
    """Immutable configuration of one mining run.

    Defaults mirror arules' ``apriori()`` (support 0.1, confidence 0.8,
    minlen 1, maxlen 10).

    Parameters
    ----------
    min_support : float, default=0.1
        Minimum support in ``(0, 1]``. An itemset is frequent when
        ``count / n_transactions >= min_support``.
    min_confidence : float, default=0.8
        Minimum rule confidence in ``[0, 1]``. Only used by apriori.
    min_len : int, default=1
        Smallest itemset (or rule) size reported.
    max_len : int | None, default=10
        Largest itemset size mined. ``None`` means unbounded.
    timeout : float | None, default=None
        Wall-clock budget in seconds for the whole run.
    n_jobs : int, default=1
        Worker threads used for per-level support counting. ``-1`` uses
        ``os.cpu_count()``.
    """

    min_support: float = 0.1
    min_confidence: float = 0.8
    min_len: int = 1
    max_len: int | None = 10
    timeout: float | None = None
    n_jobs: int = 1

    def __post_init__(self) -> None:
        if not _is_number(self.min_support) or not 0.0 < self.min_support <= 1.0:
            raise InvalidParameterError(
                f"`min_support` must be a positive number within the interval `(0, 1]`. Got {self.min_support}."
            )
        if not _is_number(self.min_confidence) or not 0.0 <= self.min_confidence <= 1.0:
            raise InvalidParameterError(
                f"`min_confidence` must be a number within the interval `[0, 1]`. Got {self.min_confidence}."
            )
        if not _is_int(self.min_len) or self.min_len < 1:
            raise InvalidParameterError(f"`min_len` must be an integer >= 1. Got {self.min_len!r}.")
        if self.max_len is not None:
            if not _is_int(self.max_len) or self.max_len < 1:
                raise InvalidParameterError(f"`max_len` must be an integer >= 1 or None. Got {self.max_len!r}.")
            if self.min_len > self.max_len:
                raise InvalidParameterError(
                    f"`min_len` ({self.min_len}) must not be greater than `max_len` ({self.max_len})."
                )
        if self.timeout is not None and (not _is_number(self.timeout) or self.timeout <= 0):
            raise InvalidParameterError(f"`timeout` must be a positive number of seconds or None. Got {self.timeout!r}.")
        if not _is_int(self.n_jobs) or (self.n_jobs < 1 and self.n_jobs != -1):
            raise InvalidParameterError(f"`n_jobs` must be a positive integer or -1. Got {self.n_jobs!r}.")

    @property
    def workers(self) -> int:
        """Resolved number of counting threads."""
        if self.n_jobs == -1:
            return os.cpu_count() or 1
        return self.n_jobs

    def replace(self, **changes: Any) -> MiningParameters:
        """Return a validated copy with *changes* applied."""
        unknown = set(changes) - {f.name for f in dataclasses.fields(self)}
        if unknown:
            raise InvalidParameterError(f"Unknown mining parameter(s): {sorted(unknown)}")
        return dataclasses.replace(self, **changes)
