"""
PyTest configuration and fixtures
"""
from types import SimpleNamespace

import pytest
import numpy as np
import cantera as ct

from pyoned.flow.base import FlowDomain, C_OFFSET_T, C_OFFSET_L, C_OFFSET_Y


class LinearFlow(FlowDomain):
    """
    Flow domain whose interior equations make every component linear in the
    point index (the eigenvalue is zero). Density and diffusivity are
    constant, so attached boundaries see a linear algebraic system.
    """
    def __init__(self, phase, grid, rho=1.0, D=1e-5, config=None):
        super().__init__(phase, grid, config)
        self.rho = rho
        self.D = D

    def density(self, x, j):
        return self.rho

    def diffusive_flux(self, x, j):
        a, b = (0, 1) if j == 0 else (j - 1, j)
        h = self.grid[b] - self.grid[a]
        return -self.rho * self.D * (self.mass_fractions(x, b) - self.mass_fractions(x, a)) / h

    def eval(self, jg, x, r, diag, rdt):
        X = self.local(x).reshape(self.n_points, self.n_components)
        R = self.local(r).reshape(self.n_points, self.n_components)
        R[1:-1] = X[:-2] - 2.0 * X[1:-1] + X[2:]
        R[1:-1, C_OFFSET_L] = X[1:-1, C_OFFSET_L]
        # Placeholder end rows
        R[0] = X[0] - X[1]
        R[-1] = X[-1] - X[-2]

    def profile(self, x, name):
        """Values of a named component at every point of a global vector"""
        n = self.component_index(name)
        return self.local(x)[n::self.n_components]

    def _get_initial_soln(self, x):
        X = x.reshape(self.n_points, self.n_components)
        X[:] = 0.0
        X[:, C_OFFSET_T] = 300.0
        X[:, C_OFFSET_Y] = 1.0


class StubInterface:
    """
    Stand-in for ``cantera.Interface`` with prescribed surface production
    rates and zero gas-phase production rates.
    """
    def __init__(self, gas, species_names=('PT(S)', 'H(S)', 'O(S)'),
                 coverages=(0.5, 0.25, 0.25), rates=None):
        self.gas = gas
        self.species_names = list(species_names)
        self.n_species = len(self.species_names)
        self.n_total_species = gas.n_species + self.n_species
        self.site_density = 2.7e-9
        self.TP = (300.0, ct.one_atm)
        self._coverages = np.array(coverages, dtype=float)
        self._rates = np.zeros(self.n_species) if rates is None else np.array(rates, dtype=float)

    @property
    def coverages(self):
        return self._coverages.copy()

    @coverages.setter
    def coverages(self, cov):
        cov = np.array(cov, dtype=float)
        self._coverages = cov / cov.sum()

    def set_unnormalized_coverages(self, cov):
        self._coverages = np.array(cov, dtype=float)

    def species(self, k):
        return SimpleNamespace(size=1.0)

    def kinetics_species_index(self, name):
        if name in self.species_names:
            return self.gas.n_species + self.species_names.index(name)
        return self.gas.species_names.index(name)

    @property
    def net_production_rates(self):
        return np.concatenate([np.zeros(self.gas.n_species), self._rates])


@pytest.fixture
def gas():
    """Return a small Cantera Solution for testing."""
    return ct.Solution('h2o2.yaml')


@pytest.fixture
def grid():
    """Return a simple uniform grid for testing."""
    return np.linspace(0, 0.01, 5)


@pytest.fixture
def flow(gas, grid):
    return LinearFlow(gas, grid, config={'id': 'flow'})


@pytest.fixture
def stub_interface(gas):
    return StubInterface(gas)
