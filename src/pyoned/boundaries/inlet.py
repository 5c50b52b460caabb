"""
Inlet boundary: injects a specified mass flux and composition into a flow.
"""
import sys
import xml.etree.ElementTree as ET
from typing import Any, Dict, Optional, Sequence, TextIO, Union

import numpy as np

from ..core.base import DomainType, write_float, read_float, write_composition, read_composition
from ..flow.base import C_OFFSET_U, C_OFFSET_V, C_OFFSET_T, C_OFFSET_L, C_OFFSET_Y
from .base import Boundary1D, Capability, Composition, LEFT_INLET, RIGHT_INLET


class Inlet1D(Boundary1D):
    """
    An inlet.

    Owns two unknowns, the mass flux and the temperature, both held at their
    stored values. At the flow point it feeds, the inlet fixes the spread
    rate and temperature, imposes the mass flux, and replaces each species
    equation with the flux balance

        mdot * (Y_k - Yin_k) + s * j_k = 0

    where ``j_k`` is the diffusive flux at the boundary and ``s`` is the
    facing sign. A zero mass flux reduces this to zero net species flux.
    """
    domain_type = DomainType.Inlet
    capabilities = Capability.COMPOSITION | Capability.INJECTION
    requires_flow = True

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self._V0 = float(self._config.get('spread_rate', 0.0))
        self._composition = Composition(self, "inlet composition")
        self.ilr = LEFT_INLET
        self.flow = None
        self.n_species = 0
        self.resize(2, 1)

    @property
    def spread_rate(self) -> float:
        return self._V0

    @spread_rate.setter
    def spread_rate(self, V0: float):
        self._V0 = float(V0)

    def set_mole_fractions(self, X: Union[str, Sequence[float]]):
        """
        Set the injected composition.

        A string is stored and parsed once the neighboring flow is known. An
        array is converted immediately and so requires an attached flow.
        """
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
        # An inlet is always terminal: it feeds exactly one flow
        if self.flow_left is not None and self.flow_right is not None:
            raise self._config_error('initialize', "an inlet cannot have flows on both sides")
        if self.flow_left is not None:
            self.ilr = RIGHT_INLET
            self.flow = self.flow_left
        else:
            self.ilr = LEFT_INLET
            self.flow = self.flow_right
        self.n_species = self.flow.n_species
        self._composition.resolve(self.flow.phase, 'initialize')

        self.set_bounds(0, -1.0e5, 1.0e5)
        self.set_bounds(1, 200.0, 1.0e5)
        self._initialized = True

    def component_name(self, n: int) -> str:
        return {0: 'mdot', 1: 'temperature'}.get(n, "<unknown>")

    def eval(self, jg: int, x: np.ndarray, r: np.ndarray,
             diag: np.ndarray, rdt: float) -> None:
        if self._skip(jg):
            return
        if self.flow is None:
            raise self._config_error('eval', "inlet evaluated before initialize()")

        xl = self.local(x)
        rl = self.local(r)
        dl = self.local(diag)
        mdot_in, T_in = xl[0], xl[1]

        # Both local unknowns are algebraic holds
        rl[0] = mdot_in - self._mdot
        rl[1] = T_in - self._temp
        dl[:] = 0

        row, = self._neighbor_rows(x, r, diag)
        Yin = self._composition.mass_fractions

        row.r[C_OFFSET_V] = row.x[C_OFFSET_V] - self._V0
        row.r[C_OFFSET_T] = row.x[C_OFFSET_T] - T_in
        row.diag[C_OFFSET_V] = 0
        row.diag[C_OFFSET_T] = 0

        if row.flow.fixed_mdot:
            rho = row.flow.density(row.x_flow, row.j)
            row.r[C_OFFSET_U] = rho * row.x[C_OFFSET_U] - row.sign * mdot_in
            row.diag[C_OFFSET_U] = 0
        else:
            # Freely propagating flame: the flow sets the mass flux
            self._mdot = row.sign * row.flow.density(row.x_flow, row.j) * row.x[C_OFFSET_U]
            rl[0] = mdot_in - self._mdot
            row.r[C_OFFSET_L] = row.x[C_OFFSET_L]
            row.diag[C_OFFSET_L] = 0

        jk = row.flow.diffusive_flux(row.x_flow, row.j)
        Y = row.x[C_OFFSET_Y:C_OFFSET_Y + self.n_species]
        row.r[C_OFFSET_Y:C_OFFSET_Y + self.n_species] = mdot_in * (Y - Yin) + row.sign * jk
        row.diag[C_OFFSET_Y:C_OFFSET_Y + self.n_species] = 0

    def _get_initial_soln(self, x: np.ndarray):
        x[0] = self._mdot
        x[1] = self._temp

    def save(self, parent: ET.Element, soln: np.ndarray) -> ET.Element:
        node = super().save(parent, soln)
        write_float(node, 'spread_rate', self._V0, '1/s')
        if self._composition.resolved:
            write_composition(node, 'mass_fraction', self._composition.species_names,
                              self._composition.mass_fractions)
        return node

    def restore(self, node: ET.Element, soln: Optional[np.ndarray]):
        super().restore(node, soln)
        self._V0 = read_float(node, 'spread_rate', self._V0)
        Y = read_composition(node, 'mass_fraction')
        if Y is not None:
            phase = self.flow.phase if self.flow is not None else None
            self._composition.declare_mass_fractions(Y, phase)
        if soln is not None:
            self._get_initial_soln(self.local(soln))

    def show_solution(self, x: np.ndarray, out: Optional[TextIO] = None):
        out = out or sys.stdout
        out.write(f"    Mass Flux:   {self._mdot:10.4g} kg/m^2/s \n")
        out.write(f"    Temperature: {self._temp:10.4g} K \n")
        if self.flow is not None:
            out.write("    Mass Fractions: \n")
            names = self._composition.species_names
            for name, yk in zip(names, self._composition.mass_fractions):
                if yk != 0.0:
                    out.write(f"        {name:>16s}  {yk:10.4g} \n")
        out.write("\n")
