"""
Constants, enums, and static values.
"""

from enum import Enum

SHUTTING_DOWN_MESSAGE = "server is shutting down"
TIMEOUT_MESSAGE = "request aborted due to timeout"
MISSING_PARAMS_MESSAGE = "Missing email or key"


class QueueState(str, Enum):
    """Lifecycle of the rate-limited queue."""

    IDLE = "idle"
    PROCESSING = "processing"
    DRAINING = "draining"  # Admissions refused, admitted jobs still serviced
    STOPPED = "stopped"


class ShutdownState(str, Enum):
    """Lifecycle of the shutdown coordinator."""

    RUNNING = "running"
    DRAINING = "draining"
    STOPPED = "stopped"


class HealthStatus(str, Enum):
    """Values reported by the health endpoint."""

    HEALTHY = "healthy"
    SHUTTING_DOWN = "shutting_down"
