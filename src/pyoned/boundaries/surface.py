"""
Solid wall boundaries, with and without heterogeneous chemistry.
"""
import sys
import xml.etree.ElementTree as ET
from typing import Any, Callable, Dict, Optional, TextIO

import numpy as np
import cantera as ct

from ..core.base import DomainType, write_composition, read_composition
from ..flow.base import C_OFFSET_U, C_OFFSET_V, C_OFFSET_T, C_OFFSET_Y
from .base import Boundary1D, Capability, NeighborRow


def backward_euler(rdt: float, x: np.ndarray, x_prev: np.ndarray) -> np.ndarray:
    """Time-derivative term of a backward Euler step; zero when ``rdt`` is 0"""
    return rdt * (x - x_prev)


class Surface1D(Boundary1D):
    """
    A non-reacting surface. The axial velocity is zero (impermeable), as is
    the transverse velocity (no slip). The temperature is specified, and a
    zero flux condition is imposed for the species.
    """
    domain_type = DomainType.Surface
    requires_flow = True

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self.resize(1, 1)

    def initialize(self) -> None:
        self._link()
        self.set_bounds(0, 200.0, 1.0e5)
        self._initialized = True

    def component_name(self, n: int) -> str:
        return 'temperature' if n == 0 else "<unknown>"

    def eval(self, jg: int, x: np.ndarray, r: np.ndarray,
             diag: np.ndarray, rdt: float) -> None:
        if self._skip(jg):
            return
        xl = self.local(x)
        self.local(r)[0] = xl[0] - self._temp
        self.local(diag)[0] = 0

        for row in self._neighbor_rows(x, r, diag):
            self._wall_conditions(row, xl[0])
            ys = slice(C_OFFSET_Y, C_OFFSET_Y + row.flow.n_species)
            row.r[ys] = row.sign * row.flow.diffusive_flux(row.x_flow, row.j)
            row.diag[ys] = 0

    def _wall_conditions(self, row: NeighborRow, T_wall: float):
        """Impermeable, no-slip wall at temperature ``T_wall``"""
        row.r[C_OFFSET_U] = row.x[C_OFFSET_U]
        row.r[C_OFFSET_V] = row.x[C_OFFSET_V]
        row.r[C_OFFSET_T] = row.x[C_OFFSET_T] - T_wall
        row.diag[[C_OFFSET_U, C_OFFSET_V, C_OFFSET_T]] = 0

    def restore(self, node: ET.Element, soln: Optional[np.ndarray]):
        super().restore(node, soln)
        if soln is not None:
            self._get_initial_soln(self.local(soln))


class ReactingSurface1D(Surface1D):
    """
    A reacting surface.

    Owns the surface temperature and the coverages of the surface species
    governed by an interface kinetics object. With coverage equations
    enabled, the coverage residuals are the net surface production rates,
    less a time-derivative term from ``transient_policy`` during
    pseudo-transient steps, with the row of the largest coverage replaced by
    the site-conservation constraint. With them disabled, coverages are held
    at the values committed by the last ``finalize``.
    """
    domain_type = DomainType.ReactingSurface
    capabilities = Capability.COVERAGE

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self.kinetics = None
        self.n_surface_species = 0
        self.coverage_enabled = False
        self.transient_policy: Callable[[float, np.ndarray, np.ndarray], np.ndarray] = \
            backward_euler

        self._species_names = []
        self._fixed_cov = np.zeros(0)
        self._sizes = np.zeros(0)
        self._site_density = 1.0
        self._surf_index = np.zeros(0, dtype=int)
        self._gas_index = np.zeros(0, dtype=int)
        self._pending_cov: Optional[Dict[str, float]] = None

    def set_kinetics(self, kin):
        """
        Attach the interface kinetics object governing this surface.

        ``kin`` is a ``cantera.Interface`` (or an object with the same
        members) whose adjacent gas phase is the phase of the flow domain.
        """
        if kin is None:
            raise self._config_error('set_kinetics', "no kinetics evaluator given")
        self.kinetics = kin
        self.n_surface_species = kin.n_species
        self._species_names = list(kin.species_names)
        self._surf_index = np.array([self._kinetics_index(name)
                                     for name in self._species_names], dtype=int)
        self._sizes = np.array([kin.species(k).size
                                for k in range(self.n_surface_species)], dtype=float)
        self._site_density = kin.site_density
        self._fixed_cov = np.array(kin.coverages, dtype=float)
        if self._pending_cov is None:
            self.coverage_enabled = True
        else:
            # Coverages and the enabled flag come from a restored solution
            self._apply_coverages(self._pending_cov, 'set_kinetics')
            self._pending_cov = None
        self.resize(1 + self.n_surface_species, 1)

    def _kinetics_index(self, name: str) -> int:
        try:
            k = self.kinetics.kinetics_species_index(name)
        except (ct.CanteraError, ValueError):
            return -1
        return k if 0 <= k < self.kinetics.n_total_species else -1

    def enable_coverage_equations(self, docov: bool = True):
        self.coverage_enabled = bool(docov)

    @property
    def fixed_coverages(self) -> np.ndarray:
        return self._fixed_cov

    def initialize(self) -> None:
        if self.kinetics is None:
            raise self._config_error('initialize',
                                     "no kinetics evaluator attached; call set_kinetics() first")
        self._link()
        if self.flow_left is not None and self.flow_right is not None:
            raise self._config_error('initialize',
                                     "a reacting surface couples to a flow on one side only")
        flow = self.flow_left if self.flow_left is not None else self.flow_right
        self._gas_index = np.array([self._kinetics_index(name)
                                    for name in flow.phase.species_names], dtype=int)
        self.set_bounds(0, 200.0, 1.0e5)
        for k in range(self.n_surface_species):
            self.set_bounds(1 + k, -1.0e-5, 2.0)
        self._initialized = True

    def component_name(self, n: int) -> str:
        if n == 0:
            return 'temperature'
        if 0 < n <= self.n_surface_species:
            return self._species_names[n - 1]
        return "<unknown>"

    def _previous_coverages(self) -> np.ndarray:
        if self._slast is not None:
            return self._slast[1:]
        return self._fixed_cov

    def eval(self, jg: int, x: np.ndarray, r: np.ndarray,
             diag: np.ndarray, rdt: float) -> None:
        if self._skip(jg):
            return
        if self.kinetics is None:
            raise self._config_error('eval', "no kinetics evaluator attached")

        xl = self.local(x)
        rl = self.local(r)
        dl = self.local(diag)
        T_wall = xl[0]
        cov = xl[1:]

        rl[0] = T_wall - self._temp
        dl[0] = 0

        row, = self._neighbor_rows(x, r, diag)

        # Put the evaluators into the local state before asking for rates
        self.kinetics.TP = T_wall, row.flow.pressure
        self.kinetics.set_unnormalized_coverages(np.array(cov))
        row.flow.set_gas(row.x_flow, row.j)
        wdot = np.asarray(self.kinetics.net_production_rates)

        if self.coverage_enabled:
            rates = wdot[self._surf_index] * self._sizes / self._site_density
            rl[1:] = rates - self.transient_policy(rdt, cov, self._previous_coverages())
            dl[1:] = 1
            kmax = int(np.argmax(cov))
            rl[1 + kmax] = 1.0 - np.sum(cov)
            dl[1 + kmax] = 0
        else:
            rl[1:] = cov - self._fixed_cov
            dl[1:] = 0

        self._wall_conditions(row, T_wall)
        gas_rates = np.where(self._gas_index >= 0, wdot[self._gas_index], 0.0)
        ys = slice(C_OFFSET_Y, C_OFFSET_Y + row.flow.n_species)
        row.r[ys] = (row.sign * row.flow.diffusive_flux(row.x_flow, row.j)
                     - gas_rates * row.flow.phase.molecular_weights)
        row.diag[ys] = 0

    def _get_initial_soln(self, x: np.ndarray):
        if self.kinetics is None:
            raise self._config_error('get_initial_soln', "no kinetics evaluator attached")
        x[0] = self._temp
        x[1:] = self.kinetics.coverages

    def _finalize(self, x: np.ndarray):
        self._fixed_cov = np.array(x[1:1 + self.n_surface_species])

    def _apply_coverages(self, values: Dict[str, float], procedure: str):
        cov = np.zeros(self.n_surface_species)
        for name, theta in values.items():
            if name not in self._species_names:
                raise self._config_error(
                    procedure, f"surface species '{name}' is not in the kinetics evaluator")
            cov[self._species_names.index(name)] = theta
        self._fixed_cov = cov
        self.kinetics.set_unnormalized_coverages(cov)

    def save(self, parent: ET.Element, soln: np.ndarray) -> ET.Element:
        node = super().save(parent, soln)
        node.set('coverage_enabled', 'true' if self.coverage_enabled else 'false')
        write_composition(node, 'coverage', self._species_names, self.local(soln)[1:])
        return node

    def restore(self, node: ET.Element, soln: Optional[np.ndarray]):
        super().restore(node, None)
        cov = read_composition(node, 'coverage')
        if cov is not None:
            if self.kinetics is None:
                self._pending_cov = cov
            else:
                self._apply_coverages(cov, 'restore')
        if node.get('coverage_enabled') is not None:
            self.coverage_enabled = node.get('coverage_enabled') == 'true'
        if soln is None:
            return
        if self.kinetics is not None:
            self._get_initial_soln(self.local(soln))
        else:
            # Only the temperature slot exists until kinetics is attached
            self.local(soln)[0] = self._temp

    def show_solution(self, x: np.ndarray, out: Optional[TextIO] = None):
        out = out or sys.stdout
        out.write(f"    Temperature: {x[0]:10.4g} K \n")
        out.write("    Coverages: \n")
        for k, name in enumerate(self._species_names):
            out.write(f"    {name:>20s} {x[k + 1]:10.4g} \n")
        out.write("\n")
