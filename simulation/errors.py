"""
Simulation Errors
"""


class InvalidInputError(ValueError):
    """Raised when a request breaks a bound or an allowed state transition."""
