"""
Tests for base components
"""
import pytest
import numpy as np

from pyoned.core.base import OneDimComponent, Domain1D, DomainType
from pyoned.core.errors import ConfigurationError, OneDimError


class PointDomain(Domain1D):
    domain_type = DomainType.Empty

    def __init__(self, config=None):
        super().__init__(config)
        self.resize(3, 2)

    def initialize(self):
        self._initialized = True

    def eval(self, jg, x, r, diag, rdt):
        self.local(r)[:] = self.local(x)

    def component_name(self, n):
        return ['a', 'b', 'c'][n]


def test_component_requires_implementation():
    """Test that abstract components cannot be instantiated."""
    with pytest.raises(TypeError):
        OneDimComponent()
    with pytest.raises(TypeError):
        Domain1D()


def test_component_configuration():
    """Test component configuration handling."""
    config = {'id': 'test', 'debug': True}
    domain = PointDomain(config)
    assert domain._config == config
    assert domain.id == 'test'
    assert domain.debug
    assert not domain.is_initialized()


def test_resize_and_size():
    domain = PointDomain()
    assert domain.n_components == 3
    assert domain.n_points == 2
    assert domain.size == 6
    assert domain.last_point == 1


def test_bounds_and_tolerances():
    domain = PointDomain()
    domain.set_bounds(1, -2.0, 5.0)
    assert domain.lower_bound(1) == -2.0
    assert domain.upper_bound(1) == 5.0

    domain.set_tolerances(-1, 1e-6, 1e-12)
    domain.set_tolerances(2, 1e-3, 1e-5, transient=True)
    assert domain.rtol(0) == 1e-6
    assert domain.atol(2) == 1e-12

    # Transient tolerances apply once time integration starts
    domain.init_time_integration(1e-3, np.zeros(6))
    assert domain.rtol(2) == 1e-3
    assert domain.atol(2) == 1e-5
    domain.set_steady_mode()
    assert domain.rtol(2) == 1e-6


def test_previous_solution():
    domain = PointDomain()
    with pytest.raises(ConfigurationError):
        domain.prev_soln(0, 0)

    x = np.arange(6, dtype=float)
    domain.init_time_integration(0.5, x)
    assert domain.rdt == 2.0
    assert domain.prev_soln(1, 1) == 4.0
    x[4] = -1.0
    assert domain.prev_soln(1, 1) == 4.0


def test_component_index():
    domain = PointDomain({'id': 'pts'})
    assert domain.component_index('c') == 2
    with pytest.raises(ConfigurationError, match=r"PointDomain.component_index \[pts\]"):
        domain.component_index('missing')


def test_error_messages_identify_operation():
    err = ConfigurationError("Inlet1D.initialize", "no adjacent flow domain", "fuel")
    assert str(err) == "Inlet1D.initialize [fuel]: no adjacent flow domain"
    assert isinstance(err, OneDimError)
    assert isinstance(err, ValueError)
    assert err.procedure == "Inlet1D.initialize"
    assert err.domain_id == "fuel"
