"""
Remote invocation of catalog tools, with labeled fallbacks.
"""

from rolecall.invoker.client import InvocationOutcome, RemoteInvoker, build_url
from rolecall.invoker.fallbacks import FallbackGenerator, SimulatedResponse, failure_reason
from rolecall.invoker.results import (
    InvocationResult,
    RemoteError,
    Success,
    TransportError,
    Unauthenticated,
    Unauthorized,
)

__all__ = [
    "FallbackGenerator",
    "InvocationOutcome",
    "InvocationResult",
    "RemoteError",
    "RemoteInvoker",
    "SimulatedResponse",
    "Success",
    "TransportError",
    "Unauthenticated",
    "Unauthorized",
    "build_url",
    "failure_reason",
]
