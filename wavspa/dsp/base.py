"""Interface shared by the transform engines driven by the pipeline."""

from __future__ import annotations

from typing import Any, Dict, Protocol

import numpy as np


class TransformEngine(Protocol):
    """One magnitude sequence of ``output_width`` values per fed block.

    ``prepare`` is called once with the opened sample source before the
    first block; ``feed`` is called once per block, followed by exactly one
    of ``power`` or ``amplitude``. Index 0 of the result is the lowest
    frequency.
    """

    output_width: int

    def prepare(self, source) -> None: ...

    def feed(self, block: np.ndarray) -> None: ...

    def power(self) -> np.ndarray: ...

    def amplitude(self) -> np.ndarray: ...

    def describe(self) -> Dict[str, Any]: ...
