"""
Remote invoker: one HTTP call per tool invocation.

Builds the URL from the tool's fixed route, attaches the bearer token,
applies the tool's timeout and classifies the outcome. No retries are
made here; a caller that wants another attempt makes another call.
"""

import logging
from dataclasses import dataclass
from urllib.parse import quote

import httpx

from rolecall.auth.models import Credential
from rolecall.config.schema import RemoteServiceConfig
from rolecall.invoker.fallbacks import FallbackGenerator
from rolecall.invoker.results import (
    InvocationResult,
    RemoteError,
    Success,
    TransportError,
    Unauthenticated,
    Unauthorized,
)
from rolecall.tools.models import ToolDefinition

logger = logging.getLogger(__name__)


def build_url(base_url: str, tool: ToolDefinition, params: dict[str, str]) -> str:
    """
    Build the request URL for a tool call.

    Only the tool's declared parameters are sent, in declaration order;
    blank values are skipped and every value is percent-encoded.

    Args:
        base_url: Service root, e.g. http://localhost:5156
        tool: Tool being invoked.
        params: Parameter values.

    Returns:
        Absolute URL.
    """
    query = []
    for name in tool.parameter_names:
        value = params.get(name)
        if value is None or not str(value).strip():
            continue
        query.append(f"{quote(name, safe='')}={quote(str(value), safe='')}")

    url = base_url.rstrip("/") + tool.route
    if query:
        url += "?" + "&".join(query)
    return url


@dataclass(frozen=True)
class InvocationOutcome:
    """What the orchestrator gets back: the raw result and the text to show."""

    result: InvocationResult
    payload: str
    simulated: bool = False
    reason: str | None = None


class RemoteInvoker:
    """Calls tools on the directory service and classifies the responses."""

    def __init__(
        self,
        base_url: str = "http://localhost:5156",
        read_timeout: float = 30.0,
        simple_timeout: float = 10.0,
        verify_tls: bool = True,
        fallbacks: FallbackGenerator | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the invoker.

        Args:
            base_url: Root URL of the directory service.
            read_timeout: Timeout for read-heavy tools, in seconds.
            simple_timeout: Timeout for simple tools, in seconds.
            verify_tls: Verify server certificates.
            fallbacks: Generator for simulated responses.
            transport: Optional httpx transport (tests use MockTransport).
        """
        self.base_url = base_url
        self.read_timeout = read_timeout
        self.simple_timeout = simple_timeout
        self.verify_tls = verify_tls
        self.fallbacks = fallbacks or FallbackGenerator()
        self._transport = transport

    @classmethod
    def from_config(cls, config: RemoteServiceConfig, **kwargs) -> "RemoteInvoker":
        """Create an invoker from the remote service configuration."""
        return cls(
            base_url=config.base_url,
            read_timeout=config.read_timeout,
            simple_timeout=config.simple_timeout,
            verify_tls=config.verify_tls,
            **kwargs,
        )

    def timeout_for(self, tool: ToolDefinition) -> float:
        """Timeout in seconds for a tool."""
        return self.read_timeout if tool.timeout_class == "read" else self.simple_timeout

    async def invoke(
        self,
        tool: ToolDefinition,
        params: dict[str, str],
        credential: Credential,
    ) -> InvocationResult:
        """
        Issue exactly one GET for the tool.

        Args:
            tool: Tool to invoke.
            params: Parameter values (strings).
            credential: Bearer credential of the calling user.

        Returns:
            Success, Unauthorized, RemoteError or TransportError.
        """
        url = build_url(self.base_url, tool, params)
        timeout = self.timeout_for(tool)
        headers = {**credential.authorization_header(), "Accept": "application/json"}

        logger.info(f"Invoking {tool.name}: GET {url}")

        try:
            async with httpx.AsyncClient(
                transport=self._transport, verify=self.verify_tls
            ) as client:
                response = await client.get(url, headers=headers, timeout=timeout)
        except httpx.TimeoutException as e:
            logger.warning(f"{tool.name} timed out after {timeout}s")
            return TransportError(cause=f"Request timed out after {timeout} seconds: {e}", timed_out=True)
        except httpx.RequestError as e:
            logger.warning(f"{tool.name} transport failure: {e}")
            return TransportError(cause=f"Request failed: {e}")

        if response.is_success:
            logger.info(f"{tool.name} succeeded with {response.status_code}")
            return Success(body=response.text, status_code=response.status_code)

        if response.status_code == 401:
            logger.warning(f"{tool.name} rejected the bearer token (401)")
            return Unauthorized(body=response.text)

        logger.error(f"{tool.name} returned {response.status_code}: {response.text}")
        return RemoteError(status_code=response.status_code, body=response.text)

    async def invoke_or_fallback(
        self,
        tool: ToolDefinition,
        params: dict[str, str],
        credential: Credential | Unauthenticated,
    ) -> InvocationOutcome:
        """
        Invoke the tool, or serve its fallback when no live data is available.

        An Unauthenticated credential skips the network call entirely.

        Args:
            tool: Tool to invoke.
            params: Parameter values.
            credential: Result of credential acquisition.

        Returns:
            The live body on success, otherwise the simulated payload.
        """
        if isinstance(credential, Unauthenticated):
            logger.info(f"Skipping {tool.name} call: {credential.reason}")
            result: InvocationResult = credential
        else:
            result = await self.invoke(tool, params, credential)

        if isinstance(result, Success):
            return InvocationOutcome(result=result, payload=result.body)

        simulated = self.fallbacks.generate(tool, params, result)
        return InvocationOutcome(
            result=result,
            payload=simulated.body,
            simulated=True,
            reason=simulated.reason,
        )
