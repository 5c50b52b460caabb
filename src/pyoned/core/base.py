"""
Base classes and interfaces for PyOneD components.
"""
import sys
import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Optional, TextIO

import numpy as np

from .errors import ConfigurationError


class OneDimComponent(ABC):
    """
    Base class for all PyOneD components providing common functionality
    and enforcing interface requirements.
    """
    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self._config = config or {}
        self._initialized = False

    @abstractmethod
    def initialize(self) -> None:
        """Initialize the component with current configuration."""
        self._initialized = True

    def is_initialized(self) -> bool:
        """Check if component has been initialized."""
        return self._initialized


class SolverComponent(OneDimComponent):
    """Base class for solver components."""
    @abstractmethod
    def solve(self) -> np.ndarray:
        """Drive the global residual to zero and return the solution."""
        pass


class DomainType(Enum):
    """Type tags written to and checked against saved solutions"""
    Flow = "flow"
    Inlet = "inlet"
    Outlet = "outlet"
    OutletReservoir = "outlet-reservoir"
    Symmetry = "symmetry-plane"
    Surface = "surface"
    ReactingSurface = "reacting-surface"
    Empty = "empty"


class Domain1D(OneDimComponent):
    """
    A contiguous region of the global unknown vector with its own residual
    equations.

    Unknowns are stored points-major: component ``n`` of local point ``j``
    lives at ``loc + j*n_components + n`` in the global vector.
    """
    domain_type: Optional[DomainType] = None

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self.id: str = self._config.get('id', '')
        self.debug: bool = bool(self._config.get('debug', False))

        # Set by the container
        self.container = None
        self.domain_index = -1
        self.loc = 0
        self.first_point = 0

        self.n_points = 0
        self.n_components = 0

        # Per-component bounds and tolerances
        self._lower = np.zeros(0)
        self._upper = np.zeros(0)
        self._rtol = np.zeros((2, 0))
        self._atol = np.zeros((2, 0))

        # Previous solution for pseudo-transient steps
        self._slast: Optional[np.ndarray] = None
        self._rdt = 0.0

    @property
    def size(self) -> int:
        return self.n_points * self.n_components

    @property
    def rdt(self) -> float:
        """Reciprocal of the current time step (0 in steady mode)"""
        return self._rdt

    @property
    def label(self) -> str:
        """Name used in error messages: the id, else the position in the sequence"""
        if self.id:
            return self.id
        return f"domain {self.domain_index}" if self.domain_index >= 0 else ""

    def resize(self, n_components: int, n_points: int):
        """Set the number of components and points, resetting bounds"""
        self.n_components = n_components
        self.n_points = n_points
        self._lower = np.full(n_components, -1.0e20)
        self._upper = np.full(n_components, 1.0e20)
        self._rtol = np.full((2, n_components), 1.0e-4)
        self._atol = np.array([np.full(n_components, 1.0e-9),
                               np.full(n_components, 1.0e-11)])
        self._slast = None
        if self.container is not None:
            self.container.resize()

    def install(self, container, index: int):
        """Attach to a container at position ``index``"""
        self.container = container
        self.domain_index = index

    def set_location(self, loc: int, first_point: int):
        self.loc = loc
        self.first_point = first_point

    @property
    def last_point(self) -> int:
        return self.first_point + self.n_points - 1

    def left(self) -> Optional["Domain1D"]:
        """Domain immediately to the left, if any"""
        if self.container is None or self.domain_index <= 0:
            return None
        return self.container.domain(self.domain_index - 1)

    def right(self) -> Optional["Domain1D"]:
        """Domain immediately to the right, if any"""
        if self.container is None or self.domain_index + 1 >= self.container.n_domains:
            return None
        return self.container.domain(self.domain_index + 1)

    def local(self, x: np.ndarray) -> np.ndarray:
        """This domain's window into a global vector"""
        return x[self.loc:self.loc + self.size]

    @abstractmethod
    def eval(self, jg: int, x: np.ndarray, r: np.ndarray,
             diag: np.ndarray, rdt: float) -> None:
        """
        Evaluate residual rows.

        Args:
            jg: Global point being perturbed, or -1 to evaluate everything
            x: Global unknown vector
            r: Global residual vector
            diag: Global transient flags (1 = has a time derivative)
            rdt: Reciprocal of the time step, 0 for a steady solve
        """
        pass

    def get_initial_soln(self, x: np.ndarray):
        """Write this domain's initial values into the global vector"""
        self._get_initial_soln(self.local(x))

    def _get_initial_soln(self, x: np.ndarray):
        x[:] = 0.0

    def finalize(self, x: np.ndarray):
        """Commit converged values from the global vector into owned state"""
        self._finalize(self.local(x))

    def _finalize(self, x: np.ndarray):
        pass

    def component_name(self, n: int) -> str:
        return f"component {n}"

    def component_index(self, name: str) -> int:
        for n in range(self.n_components):
            if self.component_name(n) == name:
                return n
        raise ConfigurationError(f"{type(self).__name__}.component_index",
                                 f"no component named '{name}'", self.label)

    # Bounds and tolerances

    def set_bounds(self, n: int, lower: float, upper: float):
        self._lower[n] = lower
        self._upper[n] = upper

    def lower_bound(self, n: int) -> float:
        return self._lower[n]

    def upper_bound(self, n: int) -> float:
        return self._upper[n]

    def set_tolerances(self, n: int, rtol: float, atol: float, transient: bool = False):
        """Set tolerances for component ``n`` (``n = -1`` sets all)"""
        i = 1 if transient else 0
        if n < 0:
            self._rtol[i, :] = rtol
            self._atol[i, :] = atol
        else:
            self._rtol[i, n] = rtol
            self._atol[i, n] = atol

    def rtol(self, n: int) -> float:
        return self._rtol[1 if self._rdt > 0.0 else 0, n]

    def atol(self, n: int) -> float:
        return self._atol[1 if self._rdt > 0.0 else 0, n]

    # Time integration

    def init_time_integration(self, dt: float, x: np.ndarray):
        """Store the previous solution and switch to transient mode"""
        self._rdt = 1.0 / dt
        self._slast = self.local(x).copy()

    def set_steady_mode(self):
        self._rdt = 0.0

    def prev_soln(self, n: int, j: int) -> float:
        if self._slast is None:
            raise ConfigurationError(f"{type(self).__name__}.prev_soln",
                                     "time integration was not initialized", self.label)
        return self._slast[j * self.n_components + n]

    # Persistence and reporting

    def save(self, parent: ET.Element, soln: np.ndarray) -> ET.Element:
        """Append a ``domain`` element describing this domain to ``parent``"""
        return ET.SubElement(parent, 'domain', {
            'id': self.id,
            'type': self.domain_type.value,
            'points': str(self.n_points),
            'components': str(self.n_components),
        })

    def restore(self, node: ET.Element, soln: np.ndarray):
        """Restore state from a ``domain`` element written by ``save``"""
        found = node.get('type')
        if found != self.domain_type.value:
            raise ConfigurationError(
                f"{type(self).__name__}.restore",
                f"expected domain of type '{self.domain_type.value}', got '{found}'",
                self.label)

    def show_solution(self, x: np.ndarray, out: Optional[TextIO] = None):
        """Write a table of this domain's solution"""
        out = out or sys.stdout
        for j in range(self.n_points):
            values = x[j * self.n_components:(j + 1) * self.n_components]
            row = "  ".join(f"{v:12.5g}" for v in values)
            out.write(f"  {j:4d}  {row}\n")

    def set_debug(self, debug: bool):
        """Enable/disable debug mode"""
        self.debug = debug


def write_float(parent: ET.Element, title: str, value: float,
                units: Optional[str] = None) -> ET.Element:
    """Scalar entry; ``repr`` keeps the value exact on restore"""
    attrs = {'title': title}
    if units:
        attrs['units'] = units
    node = ET.SubElement(parent, 'float', attrs)
    node.text = repr(float(value))
    return node


def read_float(node: ET.Element, title: str, default: Optional[float] = None) -> float:
    child = node.find(f"float[@title='{title}']")
    if child is None:
        if default is None:
            raise ConfigurationError("read_float", f"no entry titled '{title}'",
                                     node.get('id'))
        return default
    return float(child.text)


def write_composition(parent: ET.Element, title: str, names: List[str],
                      values: np.ndarray) -> ET.Element:
    """Vector entry keyed by species name"""
    node = ET.SubElement(parent, 'composition', {'title': title})
    for name, value in zip(names, values):
        entry = ET.SubElement(node, 'species', {'name': name})
        entry.text = repr(float(value))
    return node


def read_composition(node: ET.Element, title: str) -> Optional[Dict[str, float]]:
    child = node.find(f"composition[@title='{title}']")
    if child is None:
        return None
    return {entry.get('name'): float(entry.text) for entry in child.findall('species')}
