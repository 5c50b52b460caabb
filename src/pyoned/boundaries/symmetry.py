"""
Symmetry plane boundary.
"""
from typing import Any, Dict, Optional
import xml.etree.ElementTree as ET

import numpy as np

from ..core.base import DomainType
from ..flow.base import C_OFFSET_U, C_OFFSET_V, C_OFFSET_T, C_OFFSET_Y
from .base import Boundary1D


class Symmetry1D(Boundary1D):
    """
    A symmetry plane. The axial velocity u = 0, and all other transported
    components have zero axial gradients.
    """
    domain_type = DomainType.Symmetry

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self.resize(1, 1)

    def initialize(self) -> None:
        self._link()
        self.set_bounds(0, 0.0, 1.0e20)
        self._initialized = True

    def component_name(self, n: int) -> str:
        return 'temperature' if n == 0 else "<unknown>"

    def eval(self, jg: int, x: np.ndarray, r: np.ndarray,
             diag: np.ndarray, rdt: float) -> None:
        if self._skip(jg):
            return
        self.local(r)[0] = self.local(x)[0] - self._temp
        self.local(diag)[0] = 0

        for row in self._neighbor_rows(x, r, diag):
            row.r[C_OFFSET_U] = row.x[C_OFFSET_U]
            gradient_free = [C_OFFSET_V, C_OFFSET_T] + \
                list(range(C_OFFSET_Y, C_OFFSET_Y + row.flow.n_species))
            for n in gradient_free:
                row.r[n] = row.x[n] - row.x_inner[n]
            row.diag[C_OFFSET_U] = 0
            row.diag[gradient_free] = 0

    def restore(self, node: ET.Element, soln: Optional[np.ndarray]):
        super().restore(node, soln)
        if soln is not None:
            self._get_initial_soln(self.local(soln))
