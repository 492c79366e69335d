"""
Simulation Errors

Errors raised synchronously by engine operations. The HTTP layer maps
NotFoundError to 404 and InvalidArgumentError to 400.
"""


class SimulationError(ValueError):
    """Base class for errors surfaced to engine callers"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(SimulationError):
    """Referenced junction does not exist"""


class InvalidArgumentError(SimulationError):
    """Unknown approach, unknown mode, or malformed override duration"""
