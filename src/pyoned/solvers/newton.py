"""
Reference driver that solves a domain sequence with scipy's root finders.
"""
from dataclasses import dataclass
from typing import Optional

import numpy as np
from scipy.optimize import root

from ..core.base import SolverComponent
from ..core.container import OneDim
from ..core.errors import ConvergenceError


@dataclass
class SolverConfig:
    """Configuration for the reference solver"""
    method: str = 'hybr'  # scipy.optimize.root method
    tol: float = 1e-12  # Root finder tolerance
    residual_tol: float = 1e-8  # Largest accepted residual entry
    max_evaluations: int = 0  # 0 keeps the scipy default
    check_bounds: bool = True  # Reject solutions outside component bounds
    n_steps: int = 10  # Pseudo-transient steps per time_step() call
    dt: float = 1e-5  # [s]


class SteadySolver(SolverComponent):
    """
    Steady and pseudo-transient solution of a ``OneDim`` container.
    """
    def __init__(self, sim: OneDim, config: Optional[SolverConfig] = None):
        super().__init__()
        self.sim = sim
        self.config = config or SolverConfig()
        self.x: Optional[np.ndarray] = None
        self.n_evaluations = 0
        self.debug = False

    def initialize(self, x0: Optional[np.ndarray] = None) -> None:
        """Initialize the container and set the starting iterate"""
        if not self.sim.is_initialized():
            self.sim.initialize()
        if x0 is None:
            self.x = self.sim.initial_guess()
        else:
            if len(x0) != self.sim.size:
                raise ValueError(f"Initial iterate has {len(x0)} entries, "
                                 f"expected {self.sim.size}")
            self.x = np.array(x0, dtype=float)
        self._initialized = True

    def set_debug(self, debug: bool):
        """Enable/disable debug mode"""
        self.debug = debug

    def _newton(self, rdt: float) -> np.ndarray:
        options = {}
        if self.config.max_evaluations and self.config.method == 'hybr':
            options['maxfev'] = self.config.max_evaluations

        sol = root(self.sim.residual, self.x, args=(rdt,),
                   method=self.config.method, tol=self.config.tol, options=options)
        self.n_evaluations += getattr(sol, 'nfev', 0)

        r = self.sim.residual(sol.x, rdt)
        rmax = float(np.max(np.abs(r))) if r.size else 0.0
        if rmax > self.config.residual_tol:
            i = int(np.argmax(np.abs(r)))
            raise ConvergenceError("SteadySolver.solve",
                                   f"largest residual {rmax:.3e} at "
                                   f"{self.sim.component_name(i)} ({sol.message})")
        if self.config.check_bounds and not self.sim.within_bounds(sol.x):
            raise ConvergenceError("SteadySolver.solve",
                                   "solution violates component bounds")
        if self.debug:
            print(f"Newton: converged, max|r| = {rmax:.3e}, evaluations = {self.n_evaluations}")
        return sol.x

    def solve(self) -> np.ndarray:
        """Steady solution (rdt = 0); converged values are finalized"""
        if not self.is_initialized():
            self.initialize()
        self.sim.set_steady_mode()
        self.x = self._newton(0.0)
        self.sim.finalize(self.x)
        return self.x

    def time_step(self, n_steps: Optional[int] = None, dt: Optional[float] = None) -> np.ndarray:
        """Take pseudo-transient steps, finalizing after each one"""
        if not self.is_initialized():
            self.initialize()
        n_steps = self.config.n_steps if n_steps is None else n_steps
        dt = self.config.dt if dt is None else dt

        for i in range(n_steps):
            self.sim.init_time_integration(dt, self.x)
            x_new = self._newton(self.sim.rdt)
            norm = self.sim.weighted_norm(x_new, x_new - self.x)
            self.x = x_new
            self.sim.finalize(self.x)
            if self.debug:
                print(f"Timestep {i}: dt = {dt:.3e}, step norm = {norm:.3e}")

        self.sim.set_steady_mode()
        return self.x

    def get_x(self) -> Optional[np.ndarray]:
        """Get current solution"""
        return self.x
