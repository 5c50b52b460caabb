"""
Terminator domain that imposes nothing.
"""
import sys
from typing import Any, Dict, Optional, TextIO

import numpy as np

from ..core.base import Domain1D, DomainType


class Empty1D(Domain1D):
    """
    A terminator that does nothing. It occupies one point with no
    components, so it has zero width in the global unknown vector.
    """
    domain_type = DomainType.Empty

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self.resize(0, 1)

    def initialize(self) -> None:
        self._initialized = True

    def component_name(self, n: int) -> str:
        return "dummy"

    def eval(self, jg: int, x: np.ndarray, r: np.ndarray,
             diag: np.ndarray, rdt: float) -> None:
        pass

    def show_solution(self, x: np.ndarray, out: Optional[TextIO] = None):
        pass
