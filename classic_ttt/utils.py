"""Random source helpers shared by the bot engine and the arena."""
from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

import numpy as np


class RandomSource(Protocol):
    """The subset of ``numpy.random.Generator`` used by the bot engine."""

    def random(self) -> float: ...

    def choice(self, a: Sequence[int]) -> Any: ...


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    return np.random.default_rng(seed)


__all__ = ["RandomSource", "make_rng"]
