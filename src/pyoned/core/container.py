"""
Container holding an ordered sequence of domains that share one global
unknown vector.
"""
import sys
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Optional, Sequence, TextIO, Tuple, Union

import numpy as np

from .base import OneDimComponent, Domain1D, DomainType
from .errors import ConfigurationError


class OneDim(OneDimComponent):
    """
    Domain sequence and global layout.

    Domains tile the global vector in sequence order. Residuals are
    evaluated flow domains first and then every other domain, so that
    boundaries overwrite the end-point rows of the flows they are attached to.
    """
    def __init__(self, domains: Sequence[Domain1D], config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self.debug = bool(self._config.get('debug', False))
        if not domains:
            raise ConfigurationError("OneDim.__init__", "at least one domain is required")

        self._domains: List[Domain1D] = list(domains)
        self._starts: List[int] = []
        self.size = 0
        self.n_points = 0
        self.transient_mask = np.zeros(0, dtype=int)
        self._rdt = 0.0

        for i, d in enumerate(self._domains):
            if d.container is not None and d.container is not self:
                raise ConfigurationError("OneDim.__init__",
                                         "domain is already installed in another container",
                                         d.id)
            d.install(self, i)
        self.resize()

    @property
    def domains(self) -> List[Domain1D]:
        return list(self._domains)

    @property
    def n_domains(self) -> int:
        return len(self._domains)

    def domain(self, i: int) -> Domain1D:
        return self._domains[i]

    def start(self, i: int) -> int:
        """Global offset of the first unknown of domain ``i``"""
        return self._starts[i]

    @property
    def rdt(self) -> float:
        return self._rdt

    def resize(self):
        """Recompute offsets after a domain changed size"""
        loc = 0
        point = 0
        self._starts = []
        for d in self._domains:
            d.set_location(loc, point)
            self._starts.append(loc)
            loc += d.size
            point += d.n_points
        self.size = loc
        self.n_points = point
        self.transient_mask = np.zeros(self.size, dtype=int)

    def initialize(self) -> None:
        """Link every domain to its neighbors and fix the layout"""
        self.resize()
        sizes = [d.size for d in self._domains]
        for d in self._domains:
            d.initialize()
        self.resize()
        if [d.size for d in self._domains] != sizes:
            for d in self._domains:
                d.initialize()

        if self.debug:
            for i, d in enumerate(self._domains):
                print(f"OneDim: domain {i} ({d.domain_type.value}) start = {d.loc}, "
                      f"points = {d.n_points}, components = {d.n_components}")
            print(f"OneDim: {self.size} unknowns")
        self._initialized = True

    def locate(self, i: int) -> Tuple[Domain1D, int, int]:
        """Domain, component and local point of global unknown ``i``"""
        if not 0 <= i < self.size:
            raise IndexError(f"unknown {i} outside global vector of size {self.size}")
        for d in self._domains:
            if d.loc <= i < d.loc + d.size:
                j, n = divmod(i - d.loc, d.n_components)
                return d, n, j
        raise IndexError(f"unknown {i} is not owned by any domain")

    def component_name(self, i: int) -> str:
        d, n, j = self.locate(i)
        label = d.id or d.domain_type.value
        return f"{label}: {d.component_name(n)} at point {j}"

    def initial_guess(self) -> np.ndarray:
        x = np.zeros(self.size)
        for d in self._domains:
            d.get_initial_soln(x)
        return x

    def eval(self, jg: int, x: np.ndarray, r: np.ndarray,
             rdt: Optional[float] = None) -> None:
        """Evaluate the global residual into ``r``"""
        if not self._initialized:
            raise ConfigurationError("OneDim.eval",
                                     "initialize() must be called before evaluating residuals")
        if rdt is None:
            rdt = self._rdt
        diag = self.transient_mask
        diag[:] = 0
        bulk = [d for d in self._domains if d.domain_type == DomainType.Flow]
        connectors = [d for d in self._domains if d.domain_type != DomainType.Flow]
        for d in bulk + connectors:
            d.eval(jg, x, r, diag, rdt)

    def residual(self, x: np.ndarray, rdt: Optional[float] = None) -> np.ndarray:
        r = np.zeros(self.size)
        self.eval(-1, np.asarray(x, dtype=float), r, rdt)
        return r

    def finalize(self, x: np.ndarray):
        for d in self._domains:
            d.finalize(x)

    def init_time_integration(self, dt: float, x: np.ndarray):
        self._rdt = 1.0 / dt
        for d in self._domains:
            d.init_time_integration(dt, x)

    def set_steady_mode(self):
        self._rdt = 0.0
        for d in self._domains:
            d.set_steady_mode()

    def weighted_norm(self, x: np.ndarray, step: np.ndarray) -> float:
        """RMS of ``step`` scaled by the component tolerances"""
        total = 0.0
        for d in self._domains:
            if d.size == 0:
                continue
            xl = d.local(x).reshape(d.n_points, d.n_components)
            sl = d.local(step).reshape(d.n_points, d.n_components)
            for n in range(d.n_components):
                ewt = d.rtol(n) * np.mean(np.abs(xl[:, n])) + d.atol(n)
                total += np.sum((sl[:, n] / ewt) ** 2)
        return float(np.sqrt(total / max(self.size, 1)))

    def within_bounds(self, x: np.ndarray) -> bool:
        for d in self._domains:
            if d.size == 0:
                continue
            xl = d.local(x).reshape(d.n_points, d.n_components)
            for n in range(d.n_components):
                if np.any(xl[:, n] < d.lower_bound(n)) or np.any(xl[:, n] > d.upper_bound(n)):
                    if self.debug:
                        print(f"OneDim: {d.component_name(n)} out of bounds in domain {d.domain_index}")
                    return False
        return True

    # Persistence

    def save(self, x: np.ndarray, id: str = "solution", desc: str = "") -> ET.Element:
        root = ET.Element('oned_solution', {'id': id, 'description': desc,
                                            'domains': str(self.n_domains)})
        for d in self._domains:
            d.save(root, x)
        return root

    def write(self, filename: str, x: np.ndarray, id: str = "solution", desc: str = ""):
        tree = ET.ElementTree(self.save(x, id, desc))
        tree.write(filename, encoding='utf-8', xml_declaration=True)

    def restore(self, source: Union[str, ET.Element]) -> np.ndarray:
        """Read a saved solution; returns the global unknown vector"""
        root = ET.parse(source).getroot() if isinstance(source, str) else source
        nodes = root.findall('domain')
        if len(nodes) != self.n_domains:
            raise ConfigurationError("OneDim.restore",
                                     f"saved solution has {len(nodes)} domains, "
                                     f"container has {self.n_domains}")
        x = np.zeros(self.size)
        for d, node in zip(self._domains, nodes):
            d.restore(node, x)
        return x

    def show_solution(self, x: np.ndarray, out: Optional[TextIO] = None):
        out = out or sys.stdout
        for i, d in enumerate(self._domains):
            if d.domain_type == DomainType.Empty:
                continue
            label = f" ({d.id})" if d.id else ""
            out.write(f">>>>>>>>>>>>>>>> {d.domain_type.value} {i}{label} <<<<<<<<<<<<<<<<\n")
            d.show_solution(d.local(x), out)
