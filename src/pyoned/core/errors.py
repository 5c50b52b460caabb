"""
Exceptions raised by PyOneD domains.
"""
from typing import Optional


class OneDimError(Exception):
    """
    Base class for errors raised by domains and their container.

    Args:
        procedure: Name of the failing operation, e.g. ``"Inlet1D.initialize"``
        message: Description of the failure
        domain_id: Optional id of the domain that raised
    """
    def __init__(self, procedure: str, message: str, domain_id: Optional[str] = None):
        self.procedure = procedure
        self.domain_id = domain_id
        where = f"{procedure} [{domain_id}]" if domain_id else procedure
        super().__init__(f"{where}: {message}")


class UnsupportedCapabilityError(OneDimError, NotImplementedError):
    """Operation called on a domain variant that does not model it."""
    pass


class ConfigurationError(OneDimError, ValueError):
    """Invalid linkage or specification detected before solving."""
    pass


class ConvergenceError(OneDimError, RuntimeError):
    """Raised by the reference solver when the residual is not driven to zero."""
    pass
