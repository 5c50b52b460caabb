"""
PyOneD: boundary and coupling domains for one-dimensional reacting flow
"""
from importlib.metadata import version

__version__ = version("pyoned")

from .core.base import (
    OneDimComponent,
    SolverComponent,
    Domain1D,
    DomainType
)
from .core.errors import (
    OneDimError,
    UnsupportedCapabilityError,
    ConfigurationError,
    ConvergenceError
)
from .core.container import OneDim
from .flow.base import FlowDomain
from .boundaries.base import Boundary1D, Capability, LEFT_INLET, RIGHT_INLET
from .boundaries.inlet import Inlet1D
from .boundaries.outlet import Outlet1D, OutletReservoir1D
from .boundaries.symmetry import Symmetry1D
from .boundaries.surface import Surface1D, ReactingSurface1D, backward_euler
from .boundaries.empty import Empty1D
from .solvers.newton import SteadySolver, SolverConfig
from .reactors.base import ReactorBase
