"""
Outlet boundaries: zero-gradient outflow, optionally backed by a reservoir.
"""
import sys
import xml.etree.ElementTree as ET
from typing import Any, Dict, Optional, Sequence, TextIO, Union

import numpy as np

from ..core.base import DomainType, write_composition, read_composition
from ..flow.base import C_OFFSET_V, C_OFFSET_T, C_OFFSET_L, C_OFFSET_Y, C_OFFSET_U
from .base import Boundary1D, Capability, Composition, NeighborRow


class Outlet1D(Boundary1D):
    """
    An outlet. Every transported scalar has zero gradient at the boundary
    point and the pressure-curvature eigenvalue is zero.
    """
    domain_type = DomainType.Outlet

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
        # The local unknown is a placeholder held at the stored temperature
        self.local(r)[0] = self.local(x)[0] - self._temp
        self.local(diag)[0] = 0

        for row in self._neighbor_rows(x, r, diag):
            self._extrapolate(row)
            self._set_species(row)

    def _extrapolate(self, row: NeighborRow):
        for n in (C_OFFSET_V, C_OFFSET_T):
            row.r[n] = row.x[n] - row.x_inner[n]
            row.diag[n] = 0
        row.r[C_OFFSET_L] = row.x[C_OFFSET_L]
        row.diag[C_OFFSET_L] = 0

    def _set_species(self, row: NeighborRow):
        ys = slice(C_OFFSET_Y, C_OFFSET_Y + row.flow.n_species)
        row.r[ys] = row.x[ys] - row.x_inner[ys]
        row.diag[ys] = 0

    def restore(self, node: ET.Element, soln: Optional[np.ndarray]):
        super().restore(node, soln)
        if soln is not None:
            self._get_initial_soln(self.local(soln))


class OutletReservoir1D(Outlet1D):
    """
    An outlet connected to a reservoir of fixed composition.

    While the flow leaves the domain this behaves as ``Outlet1D``. When the
    axial velocity at the boundary points back into the flow, the species
    take the reservoir composition; the temperature still extrapolates.
    """
    domain_type = DomainType.OutletReservoir
    capabilities = Capability.COMPOSITION

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self._composition = Composition(self, "reservoir composition")
        self.flow = None

    def set_mole_fractions(self, X: Union[str, Sequence[float]]):
        if not isinstance(X, str) and self.flow is None:
            raise self._config_error(
                'set_mole_fractions',
                "mole fraction arrays need the species set of an attached flow domain")
        phase = self.flow.phase if self.flow is not None else None
        self._composition.declare_mole_fractions(X, phase)

    def mass_fraction(self, k: int) -> float:
        return self._composition[k]

    @property
    def mass_fractions(self) -> np.ndarray:
        return self._composition.mass_fractions

    def initialize(self) -> None:
        self._link()
        self.flow = self.flow_left if self.flow_left is not None else self.flow_right
        if self.flow is None:
            raise self._config_error('initialize', "no adjacent flow domain")
        self._composition.resolve(self.flow.phase, 'initialize')
        self.set_bounds(0, 0.0, 1.0e20)
        self._initialized = True

    def _set_species(self, row: NeighborRow):
        # sign is +1 when the flow lies to the right, so inflow from the
        # reservoir means u has the same sign
        if row.sign * row.x[C_OFFSET_U] > 0.0:
            ys = slice(C_OFFSET_Y, C_OFFSET_Y + row.flow.n_species)
            row.r[ys] = row.x[ys] - self._composition.mass_fractions
            row.diag[ys] = 0
        else:
            super()._set_species(row)

    def save(self, parent: ET.Element, soln: np.ndarray) -> ET.Element:
        node = super().save(parent, soln)
        if self._composition.resolved:
            write_composition(node, 'mass_fraction', self._composition.species_names,
                              self._composition.mass_fractions)
        return node

    def restore(self, node: ET.Element, soln: Optional[np.ndarray]):
        super().restore(node, soln)
        Y = read_composition(node, 'mass_fraction')
        if Y is not None:
            phase = self.flow.phase if self.flow is not None else None
            self._composition.declare_mass_fractions(Y, phase)

    def show_solution(self, x: np.ndarray, out: Optional[TextIO] = None):
        out = out or sys.stdout
        out.write(f"    Temperature: {self._temp:10.4g} K \n")
        if self._composition.resolved:
            out.write("    Reservoir Mass Fractions: \n")
            names = self._composition.species_names
            for name, yk in zip(names, self._composition.mass_fractions):
                if yk != 0.0:
                    out.write(f"        {name:>16s}  {yk:10.4g} \n")
        out.write("\n")
