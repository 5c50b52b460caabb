"""
Tests for the stirred reactor base class
"""
from types import SimpleNamespace

import pytest
import numpy as np
import cantera as ct

from pyoned.core.errors import ConfigurationError, UnsupportedCapabilityError
from pyoned.reactors.base import ReactorBase


@pytest.fixture
def reactor(gas):
    gas.TPX = 800.0, ct.one_atm, 'H2:2, O2:1, AR:5'
    r = ReactorBase('r1')
    r.set_thermo_mgr(gas)
    r.set_initial_volume(0.5)
    return r


def test_contents_undefined():
    r = ReactorBase()
    assert r.name == "(none)"
    assert r.type() == "ReactorBase"
    with pytest.raises(ConfigurationError, match="ReactorBase.contents"):
        r.contents()
    with pytest.raises(ConfigurationError, match="state empty"):
        r.temperature


def test_sync_and_restore_state(reactor, gas):
    assert reactor.temperature == pytest.approx(800.0)
    assert reactor.density == pytest.approx(gas.density)
    assert reactor.pressure == pytest.approx(ct.one_atm)
    assert reactor.enthalpy_mass == pytest.approx(gas.enthalpy_mass)
    np.testing.assert_allclose(reactor.mass_fractions, gas.Y)
    assert reactor.mass_fraction(gas.species_index('AR')) == pytest.approx(
        gas.Y[gas.species_index('AR')])

    gas.TP = 1500.0, 2 * ct.one_atm
    assert reactor.temperature == pytest.approx(800.0)
    reactor.restore_state()
    assert gas.T == pytest.approx(800.0)
    assert gas.density == pytest.approx(reactor.density)


def test_mass_and_residence_time(reactor):
    assert reactor.volume == 0.5
    assert reactor.mass == pytest.approx(0.5 * reactor.density)

    with pytest.raises(ConfigurationError, match="no outflow"):
        reactor.residence_time()

    reactor.add_outlet(SimpleNamespace(mass_flow_rate=0.01))
    reactor.add_outlet(SimpleNamespace(mass_flow_rate=0.03))
    assert reactor.n_outlets == 2
    assert reactor.residence_time() == pytest.approx(reactor.mass / 0.04)


def test_connections(reactor):
    inlet = SimpleNamespace(mass_flow_rate=0.1)
    reactor.add_inlet(inlet)
    assert reactor.inlet(0) is inlet
    assert reactor.n_inlets == 1

    wall = object()
    reactor.add_wall(wall, 1)
    assert reactor.wall(0) is wall
    assert reactor.wall_side(0) == 1
    assert reactor.n_walls == 1
    with pytest.raises(ConfigurationError, match="wall side"):
        reactor.add_wall(wall, 2)

    surf = object()
    reactor.add_surface(surf)
    assert reactor.surface(0) is surf
    assert reactor.n_surfs == 1


def test_unsupported_operations(reactor):
    for method, args in [('set_kinetics_mgr', (None,)), ('set_chemistry', ()),
                         ('set_energy', (0,)), ('initialize', ())]:
        with pytest.raises(UnsupportedCapabilityError, match=f"ReactorBase.{method}"):
            getattr(reactor, method)(*args)


def test_network(reactor):
    with pytest.raises(ConfigurationError, match="network"):
        reactor.network()
    net = object()
    reactor.set_network(net)
    assert reactor.network() is net
