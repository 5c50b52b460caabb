"""
Interface of the one-dimensional flow domains that boundaries attach to.

The flow discretization itself lives outside this package; boundaries only
rely on the members declared here.
"""
import xml.etree.ElementTree as ET
from abc import abstractmethod
from typing import Any, Dict, Optional

import numpy as np
import cantera as ct

from ..core.base import Domain1D, DomainType, write_composition, read_composition
from ..core.errors import ConfigurationError

# Component offsets at each grid point
C_OFFSET_U = 0  # axial velocity
C_OFFSET_V = 1  # spread rate
C_OFFSET_T = 2  # temperature
C_OFFSET_L = 3  # pressure curvature eigenvalue
C_OFFSET_Y = 4  # first species mass fraction


class FlowDomain(Domain1D):
    """
    Base class for flow domains.

    At its first and last points a flow domain writes placeholder residuals.
    Any boundary attached to that end overwrites the rows it governs during
    its own evaluation, which always follows the flow's in a container pass.
    """
    domain_type = DomainType.Flow

    def __init__(self, phase: ct.Solution, grid: np.ndarray,
                 config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self.phase = phase
        self.grid = np.asarray(grid, dtype=float)
        if len(self.grid) < 2:
            raise ConfigurationError(f"{type(self).__name__}.__init__",
                                     "a flow domain needs at least two grid points", self.label)
        self.n_species = phase.n_species
        self.pressure = self._config.get('pressure', ct.one_atm)
        self.fixed_mdot = self._config.get('fixed_mdot', True)
        self.resize(C_OFFSET_Y + self.n_species, len(self.grid))

    def initialize(self) -> None:
        self.set_bounds(C_OFFSET_T, 200.0, 1.0e9)
        for k in range(self.n_species):
            self.set_bounds(C_OFFSET_Y + k, -1.0e-7, 1.0e5)
        self._initialized = True

    def index(self, n: int, j: int) -> int:
        """Local offset of component ``n`` at point ``j``"""
        return j * self.n_components + n

    def value(self, x: np.ndarray, n: int, j: int) -> float:
        return x[self.index(n, j)]

    def mass_fractions(self, x: np.ndarray, j: int) -> np.ndarray:
        start = self.index(C_OFFSET_Y, j)
        return x[start:start + self.n_species]

    def component_name(self, n: int) -> str:
        names = ['velocity', 'spread_rate', 'T', 'lambda']
        if n < C_OFFSET_Y:
            return names[n]
        if n < self.n_components:
            return self.phase.species_name(n - C_OFFSET_Y)
        return "<unknown>"

    def set_gas(self, x: np.ndarray, j: int):
        """Set the phase to the state at local point ``j``"""
        self.phase.set_unnormalized_mass_fractions(np.array(self.mass_fractions(x, j)))
        self.phase.TP = self.value(x, C_OFFSET_T, j), self.pressure

    def density(self, x: np.ndarray, j: int) -> float:
        self.set_gas(x, j)
        return self.phase.density

    @abstractmethod
    def diffusive_flux(self, x: np.ndarray, j: int) -> np.ndarray:
        """
        Species diffusive mass fluxes [kg/m^2/s] in the +z direction at
        end point ``j``, evaluated from the local unknown window ``x``.
        """
        pass

    def save(self, parent: ET.Element, soln: np.ndarray) -> ET.Element:
        node = super().save(parent, soln)
        x = self.local(soln)
        grid = ET.SubElement(node, 'grid')
        grid.text = " ".join(repr(float(z)) for z in self.grid)
        names = [self.component_name(n) for n in range(self.n_components)]
        for j in range(self.n_points):
            write_composition(node, f"point {j}", names,
                              x[self.index(0, j):self.index(0, j + 1)])
        return node

    def restore(self, node: ET.Element, soln: np.ndarray):
        super().restore(node, soln)
        x = self.local(soln)
        n_saved = int(node.get('points'))
        if n_saved != self.n_points:
            raise ConfigurationError(f"{type(self).__name__}.restore",
                                     f"saved solution has {n_saved} points, "
                                     f"domain has {self.n_points}", self.label)
        for j in range(self.n_points):
            values = read_composition(node, f"point {j}") or {}
            for n in range(self.n_components):
                name = self.component_name(n)
                if name in values:
                    x[self.index(n, j)] = values[name]
