"""
Exception hierarchy for the control-plane API.

Request-level failures (bad input, missing keys) are answered directly by
the routers with an empty-bodied status code. The exceptions here cover the
dependency layer: an unreachable store or bus, and aggregated reads that
exceed their configured bound.
"""


class ControlPlaneError(Exception):
    """Base class for all control-plane errors."""


class StoreUnavailableError(ControlPlaneError):
    """The key-value store could not be reached."""


class BusUnavailableError(ControlPlaneError):
    """The message bus could not be reached."""


class FanInTimeoutError(ControlPlaneError):
    """An aggregated group of store operations did not complete in time."""

    def __init__(self, expected: int, completed: int, timeout: float):
        self.expected = expected
        self.completed = completed
        self.timeout = timeout
        super().__init__(
            f"fan-in completed {completed}/{expected} operations within {timeout}s"
        )
