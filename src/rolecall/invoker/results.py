"""
Outcomes of a remote tool invocation.

Every call ends in exactly one of these values; failures are data, not
exceptions, so the caller picks live or simulated output by variant.
"""

from dataclasses import dataclass, field
from typing import Union

from rolecall.auth.models import Unauthenticated


@dataclass(frozen=True)
class Success:
    """2xx response; body is passed on verbatim."""

    body: str
    status_code: int = 200
    kind: str = field(default="success", init=False)
    ok: bool = field(default=True, init=False)


@dataclass(frozen=True)
class RemoteError:
    """The service answered with a non-2xx status other than 401."""

    status_code: int
    body: str = ""
    kind: str = field(default="remote_error", init=False)
    ok: bool = field(default=False, init=False)


@dataclass(frozen=True)
class TransportError:
    """The service could not be reached, or did not answer in time."""

    cause: str
    timed_out: bool = False
    kind: str = field(default="transport_error", init=False)
    ok: bool = field(default=False, init=False)


@dataclass(frozen=True)
class Unauthorized:
    """The service rejected the bearer token (HTTP 401)."""

    body: str = ""
    kind: str = field(default="unauthorized", init=False)
    ok: bool = field(default=False, init=False)


InvocationResult = Union[Success, RemoteError, TransportError, Unauthenticated, Unauthorized]


__all__ = [
    "InvocationResult",
    "RemoteError",
    "Success",
    "TransportError",
    "Unauthenticated",
    "Unauthorized",
]
