"""
Tests for outlet, reservoir outlet and capability errors
"""
import xml.etree.ElementTree as ET

import pytest
import numpy as np

from pyoned.core.container import OneDim
from pyoned.core.errors import ConfigurationError, UnsupportedCapabilityError
from pyoned.boundaries.base import Capability
from pyoned.boundaries.inlet import Inlet1D
from pyoned.boundaries.outlet import Outlet1D, OutletReservoir1D
from pyoned.boundaries.symmetry import Symmetry1D
from pyoned.boundaries.surface import Surface1D
from pyoned.flow.base import C_OFFSET_U, C_OFFSET_V, C_OFFSET_T, C_OFFSET_L, C_OFFSET_Y
from pyoned.solvers.newton import SteadySolver, SolverConfig
from conftest import LinearFlow


def last_point_rows(flow, r):
    start = flow.loc + flow.index(0, flow.n_points - 1)
    return r[start:start + flow.n_components]


def test_outlet_zero_gradient(gas, flow):
    outlet = Outlet1D()
    sim = OneDim([Inlet1D(), flow, outlet])
    sim.initialize()
    x = sim.initial_guess()
    X = flow.local(x).reshape(flow.n_points, flow.n_components)
    X[-1] = np.arange(flow.n_components) + 1.0
    X[-2] = 0.5 * X[-1]

    r = last_point_rows(flow, sim.residual(x))
    assert r[C_OFFSET_V] == X[-1, C_OFFSET_V] - X[-2, C_OFFSET_V]
    assert r[C_OFFSET_T] == X[-1, C_OFFSET_T] - X[-2, C_OFFSET_T]
    assert r[C_OFFSET_L] == X[-1, C_OFFSET_L]
    np.testing.assert_array_equal(r[C_OFFSET_Y:], X[-1, C_OFFSET_Y:] - X[-2, C_OFFSET_Y:])
    assert outlet.component_name(0) == 'temperature'


def test_outlet_solution_is_uniform(gas, flow):
    inlet = Inlet1D({'mdot': 0.1, 'temperature': 500.0})
    inlet.set_mole_fractions('O2:1, AR:3')
    sim = OneDim([inlet, flow, Outlet1D()])
    x = SteadySolver(sim).solve()

    X = flow.local(x).reshape(flow.n_points, flow.n_components)
    np.testing.assert_allclose(X[-1], X[-2], atol=1e-10)


def reservoir_setup(gas, grid, mdot):
    flow = LinearFlow(gas, grid)
    inlet = Inlet1D({'mdot': mdot})
    reservoir = OutletReservoir1D()
    reservoir.set_mole_fractions('O2:1')
    sim = OneDim([inlet, flow, reservoir])
    sim.initialize()
    x = sim.initial_guess()
    # Start every point at the velocity the inlet imposes
    flow.local(x)[C_OFFSET_U::flow.n_components] = mdot
    return sim, flow, reservoir, x


def test_reservoir_backflow_rows(gas, grid):
    sim, flow, reservoir, x = reservoir_setup(gas, grid, -0.1)
    r = last_point_rows(flow, sim.residual(x))
    Y_last = flow.mass_fractions(flow.local(x), flow.n_points - 1)
    np.testing.assert_array_equal(r[C_OFFSET_Y:], Y_last - reservoir.mass_fractions)


def test_reservoir_backflow_solution(gas, grid):
    sim, flow, reservoir, x = reservoir_setup(gas, grid, -0.1)
    solver = SteadySolver(sim, SolverConfig(check_bounds=False))
    solver.initialize(x)
    x = solver.solve()

    Y_last = flow.mass_fractions(flow.local(x), flow.n_points - 1)
    np.testing.assert_allclose(Y_last, reservoir.mass_fractions, atol=1e-10)
    np.testing.assert_allclose(flow.profile(x, 'velocity'), -0.1, rtol=1e-8)


def test_reservoir_outflow_is_zero_gradient(gas, grid):
    sim, flow, reservoir, x = reservoir_setup(gas, grid, 0.1)
    solver = SteadySolver(sim)
    solver.initialize(x)
    x = solver.solve()

    X = flow.local(x).reshape(flow.n_points, flow.n_components)
    np.testing.assert_allclose(X[-1, C_OFFSET_Y:], X[-2, C_OFFSET_Y:], atol=1e-10)
    # Inflow composition is the inlet default, not the reservoir
    assert X[-1, C_OFFSET_Y] == pytest.approx(1.0)


def test_reservoir_requires_flow():
    with pytest.raises(ConfigurationError, match="no adjacent flow domain"):
        OneDim([OutletReservoir1D()]).initialize()


def test_reservoir_save_restore(gas, grid):
    sim, flow, reservoir, x = reservoir_setup(gas, grid, 0.1)
    root = ET.fromstring(ET.tostring(sim.save(x)))

    reservoir2 = OutletReservoir1D()
    sim2 = OneDim([Inlet1D(), LinearFlow(gas, grid), reservoir2])
    sim2.restore(root)
    sim2.initialize()
    np.testing.assert_array_equal(reservoir2.mass_fractions, reservoir.mass_fractions)


@pytest.mark.parametrize("cls", [Outlet1D, Symmetry1D, Surface1D])
def test_composition_unsupported(cls):
    boundary = cls({'id': 'b'})
    assert not boundary.supports(Capability.COMPOSITION)
    with pytest.raises(UnsupportedCapabilityError, match=rf"{cls.__name__}.set_mole_fractions \[b\]"):
        boundary.set_mole_fractions('O2:1')
    with pytest.raises(NotImplementedError):
        boundary.mass_fraction(0)


def test_reservoir_supports_composition():
    reservoir = OutletReservoir1D()
    assert reservoir.supports(Capability.COMPOSITION)
    assert not reservoir.supports(Capability.INJECTION)


def test_reservoir_rejected_composition_keeps_previous(gas, grid):
    sim, flow, reservoir, x = reservoir_setup(gas, grid, 0.1)
    Y = reservoir.mass_fractions.copy()
    with pytest.raises(ConfigurationError, match="OutletReservoir1D.set_mole_fractions"):
        reservoir.set_mole_fractions('XX:1')
    np.testing.assert_array_equal(reservoir.mass_fractions, Y)


def left_reservoir_setup(gas, grid, mdot):
    flow = LinearFlow(gas, grid)
    reservoir = OutletReservoir1D()
    reservoir.set_mole_fractions('O2:1')
    sim = OneDim([reservoir, flow, Inlet1D({'mdot': mdot})])
    sim.initialize()
    x = sim.initial_guess()
    # The right-hand inlet pushes the flow in the -z direction for mdot > 0
    flow.local(x)[C_OFFSET_U::flow.n_components] = -mdot
    X = flow.local(x).reshape(flow.n_points, flow.n_components)
    X[1, C_OFFSET_Y + 1] = 0.2
    return sim, flow, reservoir, x


def test_left_reservoir_backflow_rows(gas, grid):
    sim, flow, reservoir, x = left_reservoir_setup(gas, grid, -0.1)
    r = sim.residual(x)[flow.loc:flow.loc + flow.n_components]
    Y_first = flow.mass_fractions(flow.local(x), 0)
    np.testing.assert_array_equal(r[C_OFFSET_Y:], Y_first - reservoir.mass_fractions)


def test_left_reservoir_outflow_rows(gas, grid):
    sim, flow, reservoir, x = left_reservoir_setup(gas, grid, 0.1)
    r = sim.residual(x)[flow.loc:flow.loc + flow.n_components]
    X = flow.local(x).reshape(flow.n_points, flow.n_components)
    np.testing.assert_array_equal(r[C_OFFSET_Y:], X[0, C_OFFSET_Y:] - X[1, C_OFFSET_Y:])
    assert r[C_OFFSET_Y + 1] == -0.2
