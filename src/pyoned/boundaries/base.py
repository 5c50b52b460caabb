"""
Shared state and neighbor linkage for boundary domains.
"""
import sys
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from enum import Flag, auto
from typing import Any, Dict, List, Optional, Sequence, TextIO, Union

import numpy as np
import cantera as ct

from ..core.base import Domain1D, write_float, read_float
from ..core.errors import ConfigurationError, UnsupportedCapabilityError
from ..flow.base import FlowDomain

# Facing of a boundary relative to the flow it feeds
LEFT_INLET = 1    # flow lies to the right
RIGHT_INLET = -1  # flow lies to the left


class Capability(Flag):
    """Optional operations a boundary variant supports"""
    NONE = 0
    COMPOSITION = auto()  # set_mole_fractions / mass_fraction
    COVERAGE = auto()     # surface coverage unknowns
    INJECTION = auto()    # imposes a mass flux on the flow


class Composition:
    """
    Mass-fraction vector that can be declared before the species set is known.

    A declaration (mole-fraction string or array, or name-keyed mass
    fractions) is stored as given and only converted by ``resolve`` once a
    phase is available. Resolving twice against the same phase without a new
    declaration returns the cached vector. A declaration made with a phase
    at hand is converted first and replaces the current one only if valid.
    """
    def __init__(self, owner: "Boundary1D", title: str):
        self._owner = owner
        self.title = title
        self._declared: Optional[tuple] = None
        self._phase: Optional[ct.Solution] = None
        self._Y: Optional[np.ndarray] = None

    @property
    def resolved(self) -> bool:
        return self._Y is not None

    @property
    def declared(self) -> bool:
        return self._declared is not None

    def declare_mole_fractions(self, X: Union[str, Sequence[float]],
                               phase: Optional[ct.Solution] = None,
                               procedure: str = 'set_mole_fractions'):
        if not isinstance(X, str):
            X = np.array(X, dtype=float)
        self._declare(('mole', X), phase, procedure)

    def declare_mass_fractions(self, Y: Dict[str, float],
                               phase: Optional[ct.Solution] = None,
                               procedure: str = 'restore'):
        self._declare(('mass', dict(Y)), phase, procedure)

    def _declare(self, declared: tuple, phase: Optional[ct.Solution], procedure: str):
        if phase is None:
            self._declared = declared
            self._phase = None
            self._Y = None
            return
        Y = self._convert(declared, phase, procedure)
        self._declared = declared
        self._phase = phase
        self._Y = Y

    def resolve(self, phase: ct.Solution, procedure: str) -> np.ndarray:
        """Convert the declaration into mass fractions for ``phase``"""
        if self._Y is not None and phase is self._phase:
            return self._Y
        Y = self._convert(self._declared, phase, procedure)
        self._phase = phase
        self._Y = Y
        return Y

    def _convert(self, declared: Optional[tuple], phase: ct.Solution,
                 procedure: str) -> np.ndarray:
        Y = np.zeros(phase.n_species)
        if declared is None:
            Y[0] = 1.0
        elif declared[0] == 'mole':
            Y = self._from_mole_fractions(phase, declared[1], procedure)
        else:
            for name, yk in declared[1].items():
                if name not in phase.species_names:
                    raise self._owner._config_error(
                        procedure, f"species '{name}' in {self.title} is not in "
                                   f"phase '{phase.name}'")
                Y[phase.species_index(name)] = yk

        if np.any(Y < 0.0):
            raise self._owner._config_error(procedure,
                                            f"negative entries in {self.title}")
        return Y

    def _from_mole_fractions(self, phase: ct.Solution, X, procedure: str) -> np.ndarray:
        if not isinstance(X, str):
            if len(X) != phase.n_species:
                raise self._owner._config_error(
                    procedure, f"{self.title} array has {len(X)} entries, "
                               f"phase '{phase.name}' has {phase.n_species} species")
            if np.any(X < 0.0):
                raise self._owner._config_error(procedure,
                                                f"negative entries in {self.title}")
        try:
            phase.X = X
        except ct.CanteraError as err:
            raise self._owner._config_error(
                procedure, f"cannot set {self.title} from '{X}': {err}") from err
        return phase.Y.copy()

    @property
    def mass_fractions(self) -> np.ndarray:
        if self._Y is None:
            raise self._owner._config_error(
                "mass_fractions", f"{self.title} accessed before the boundary was "
                                  "attached to a flow domain")
        return self._Y

    @property
    def species_names(self) -> List[str]:
        if self._phase is None:
            return []
        return list(self._phase.species_names)

    def __getitem__(self, k: int) -> float:
        return self.mass_fractions[k]


@dataclass
class NeighborRow:
    """
    Window onto the flow point shared with a boundary.

    Unknown views are read-only. Residual and transient-flag views cover
    exactly the rows of the shared point.
    """
    flow: FlowDomain
    j: int                 # point index in the flow
    sign: int              # LEFT_INLET when the flow lies to the right
    x_flow: np.ndarray     # whole flow window, read-only
    x: np.ndarray          # unknowns at the shared point, read-only
    x_inner: np.ndarray    # unknowns at the adjacent interior point, read-only
    r: np.ndarray
    diag: np.ndarray


class Boundary1D(Domain1D):
    """
    Base class for boundaries between one-dimensional domains.

    Operations that only some variants model (composition, per-species mass
    fractions) raise ``UnsupportedCapabilityError`` here.
    """
    capabilities = Capability.NONE
    requires_flow = False

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self._temp = float(self._config.get('temperature', 300.0))
        self._mdot = float(self._config.get('mdot', 0.0))

        # Neighbor linkage, filled in by initialize()
        self.flow_left: Optional[FlowDomain] = None
        self.flow_right: Optional[FlowDomain] = None
        self.left_nsp = 0
        self.right_nsp = 0
        self.left_loc = 0
        self.right_loc = 0

    @property
    def temperature(self) -> float:
        """Temperature [K]"""
        return self._temp

    @temperature.setter
    def temperature(self, T: float):
        self._temp = float(T)

    @property
    def mdot(self) -> float:
        """Mass flow rate [kg/m^2/s]"""
        return self._mdot

    @mdot.setter
    def mdot(self, mdot: float):
        self._mdot = float(mdot)

    def supports(self, capability: Capability) -> bool:
        return bool(self.capabilities & capability)

    def set_mole_fractions(self, X: Union[str, Sequence[float]]):
        """Set the composition from a mole-fraction string or array"""
        raise self._unsupported('set_mole_fractions')

    def mass_fraction(self, k: int) -> float:
        """Mass fraction of species ``k``"""
        raise self._unsupported('mass_fraction')

    def _unsupported(self, method: str) -> UnsupportedCapabilityError:
        name = type(self).__name__
        return UnsupportedCapabilityError(
            f"{name}.{method}", f"{name} does not model composition", self.label)

    def _config_error(self, method: str, message: str) -> ConfigurationError:
        return ConfigurationError(f"{type(self).__name__}.{method}", message, self.label)

    def initialize(self) -> None:
        self._link()
        self._initialized = True

    def _link(self):
        """Record the adjacent flow domains"""
        if self.container is None:
            raise self._config_error('initialize', "boundary is not installed in a container")

        self.flow_left = self.flow_right = None
        self.left_nsp = self.right_nsp = 0

        left = self.left()
        if left is not None:
            if not isinstance(left, FlowDomain):
                raise self._config_error(
                    'initialize', f"boundaries can only be connected on the left to "
                                  f"flow domains, not '{left.domain_type.value}'")
            self.flow_left = left
            self.left_nsp = left.n_species
            self.left_loc = left.loc

        right = self.right()
        if right is not None:
            if not isinstance(right, FlowDomain):
                raise self._config_error(
                    'initialize', f"boundaries can only be connected on the right to "
                                  f"flow domains, not '{right.domain_type.value}'")
            self.flow_right = right
            self.right_nsp = right.n_species
            self.right_loc = right.loc

        if self.requires_flow and self.flow_left is None and self.flow_right is None:
            raise self._config_error('initialize', "no adjacent flow domain")

        if self.debug:
            print(f"{type(self).__name__}: linked left={self.flow_left is not None}, "
                  f"right={self.flow_right is not None}, loc={self.loc}")

    def _skip(self, jg: int) -> bool:
        """True if a point-local evaluation at ``jg`` cannot affect this boundary"""
        return jg != -1 and (jg + 2 < self.first_point or jg > self.last_point + 2)

    def _neighbor_rows(self, x: np.ndarray, r: np.ndarray,
                       diag: np.ndarray) -> List[NeighborRow]:
        rows = []
        for flow, sign in ((self.flow_left, RIGHT_INLET), (self.flow_right, LEFT_INLET)):
            if flow is None:
                continue
            nc = flow.n_components
            x_flow = flow.local(x).view()
            x_flow.flags.writeable = False
            if sign == LEFT_INLET:
                j, j_inner = 0, 1
            else:
                j, j_inner = flow.n_points - 1, flow.n_points - 2
            start = flow.loc + j * nc
            rows.append(NeighborRow(
                flow=flow, j=j, sign=sign, x_flow=x_flow,
                x=x_flow[j * nc:(j + 1) * nc],
                x_inner=x_flow[j_inner * nc:(j_inner + 1) * nc],
                r=r[start:start + nc],
                diag=diag[start:start + nc]))
        return rows

    def _get_initial_soln(self, x: np.ndarray):
        x[0] = self._temp

    def save(self, parent: ET.Element, soln: np.ndarray) -> ET.Element:
        node = super().save(parent, soln)
        write_float(node, 'temperature', self._temp, 'K')
        write_float(node, 'mdot', self._mdot, 'kg/m^2/s')
        return node

    def restore(self, node: ET.Element, soln: np.ndarray):
        super().restore(node, soln)
        self._temp = read_float(node, 'temperature')
        self._mdot = read_float(node, 'mdot', self._mdot)

    def show_solution(self, x: np.ndarray, out: Optional[TextIO] = None):
        out = out or sys.stdout
        out.write(f"    Temperature: {self._temp:10.4g} K \n")
        out.write("\n")
