"""
Bookkeeping base class for zero-dimensional stirred reactors.
"""
from typing import Any, List, Optional

import numpy as np
import cantera as ct

from ..core.errors import ConfigurationError, UnsupportedCapabilityError


class ReactorBase:
    """
    Base class for stirred reactors.

    Holds the reactor contents (a Cantera phase), the cached state
    ``[T, rho, Y_1 ... Y_K]`` and the inlets, outlets, walls and surfaces
    connected to it. Flow devices only need a ``mass_flow_rate`` attribute.
    Integration belongs to subclasses.
    """
    def __init__(self, name: str = "(none)"):
        self._name = name
        self._thermo: Optional[ct.Solution] = None
        self.n_species = 0
        self._vol = 1.0  # [m^3]
        self._enthalpy = 0.0  # [J/kg]
        self._int_energy = 0.0  # [J/kg]
        self._pressure = 0.0  # [Pa]
        self._state = np.zeros(0)
        self._inlets: List[Any] = []
        self._outlets: List[Any] = []
        self._walls: List[Any] = []
        self._lr: List[int] = []
        self._surfaces: List[Any] = []
        self._net = None

    def type(self) -> str:
        return "ReactorBase"

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, name: str):
        self._name = name

    def set_initial_volume(self, vol: float):
        self._vol = vol

    def set_thermo_mgr(self, thermo: ct.Solution):
        """Use ``thermo`` as the reactor contents; its state is copied in"""
        self._thermo = thermo
        self.n_species = thermo.n_species
        self.sync_state()

    def set_kinetics_mgr(self, kin):
        raise UnsupportedCapabilityError(f"{self.type()}.set_kinetics_mgr",
                                         "not implemented for this reactor type", self._name)

    def set_chemistry(self, cflag: bool = True):
        raise UnsupportedCapabilityError(f"{self.type()}.set_chemistry",
                                         "not implemented for this reactor type", self._name)

    def set_energy(self, eflag: int = 1):
        raise UnsupportedCapabilityError(f"{self.type()}.set_energy",
                                         "not implemented for this reactor type", self._name)

    def initialize(self, t0: float = 0.0):
        raise UnsupportedCapabilityError(f"{self.type()}.initialize",
                                         "not implemented for this reactor type", self._name)

    # Connections

    def add_inlet(self, inlet):
        self._inlets.append(inlet)

    def add_outlet(self, outlet):
        self._outlets.append(outlet)

    def inlet(self, n: int = 0):
        return self._inlets[n]

    def outlet(self, n: int = 0):
        return self._outlets[n]

    @property
    def n_inlets(self) -> int:
        return len(self._inlets)

    @property
    def n_outlets(self) -> int:
        return len(self._outlets)

    def add_wall(self, wall, lr: int):
        """``lr`` is 0 if this reactor is left of the wall, 1 if right"""
        if lr not in (0, 1):
            raise ConfigurationError(f"{self.type()}.add_wall",
                                     f"wall side must be 0 or 1, got {lr}", self._name)
        self._walls.append(wall)
        self._lr.append(lr)

    def wall(self, n: int):
        return self._walls[n]

    def wall_side(self, n: int) -> int:
        return self._lr[n]

    @property
    def n_walls(self) -> int:
        return len(self._walls)

    def add_surface(self, surf):
        self._surfaces.append(surf)

    def surface(self, n: int):
        return self._surfaces[n]

    @property
    def n_surfs(self) -> int:
        return len(self._surfaces)

    # State

    def contents(self) -> ct.Solution:
        if self._thermo is None:
            raise ConfigurationError(f"{self.type()}.contents",
                                     "reactor contents not defined", self._name)
        return self._thermo

    def restore_state(self):
        """Set the contents to the reactor's cached state"""
        thermo = self.contents()
        thermo.TDY = self._state[0], self._state[1], self._state[2:]

    def sync_state(self):
        """Cache the current state of the contents"""
        thermo = self.contents()
        self._state = np.concatenate([[thermo.T, thermo.density], thermo.Y])
        self._enthalpy = thermo.enthalpy_mass
        self._int_energy = thermo.int_energy_mass
        self._pressure = thermo.P

    def _check_state(self, procedure: str):
        if self._state.size == 0:
            raise ConfigurationError(f"{self.type()}.{procedure}",
                                     "reactor state empty and/or contents not defined",
                                     self._name)

    def residence_time(self) -> float:
        """Mass of the contents divided by the total outlet mass flow [s]"""
        mout = sum(outlet.mass_flow_rate for outlet in self._outlets)
        if mout <= 0.0:
            raise ConfigurationError(f"{self.type()}.residence_time",
                                     "no outflow from reactor", self._name)
        return self.mass / mout

    @property
    def volume(self) -> float:
        return self._vol

    @property
    def density(self) -> float:
        self._check_state('density')
        return self._state[1]

    @property
    def temperature(self) -> float:
        self._check_state('temperature')
        return self._state[0]

    @property
    def enthalpy_mass(self) -> float:
        return self._enthalpy

    @property
    def int_energy_mass(self) -> float:
        return self._int_energy

    @property
    def pressure(self) -> float:
        return self._pressure

    @property
    def mass(self) -> float:
        return self._vol * self.density

    @property
    def mass_fractions(self) -> np.ndarray:
        self._check_state('mass_fractions')
        return self._state[2:]

    def mass_fraction(self, k: int) -> float:
        self._check_state('mass_fraction')
        return self._state[k + 2]

    # Network

    def network(self):
        if self._net is None:
            raise ConfigurationError(f"{self.type()}.network",
                                     "reactor is not part of a network", self._name)
        return self._net

    def set_network(self, net):
        self._net = net
