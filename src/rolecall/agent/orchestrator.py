"""
Turn orchestration.

One user turn runs, in order: resolve the intent, check required slots,
acquire a credential, invoke the tool (or its fallback), then complete
the reply over the conversation. Messages produced along the way are
staged and committed to the transcript together only when the turn
finishes, so a failed or timed-out turn leaves no partial history.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from rolecall.agent.conversation import ConversationTranscript
from rolecall.agent.prompts import (
    ERROR_REPLY,
    FORMAT_INSTRUCTION,
    SIMULATED_NOTICE,
    TOOL_CONTEXT_TEMPLATE,
)
from rolecall.agent.resolver import CompletionFn, IntentResolver
from rolecall.auth.models import AuthSession
from rolecall.auth.provider import CredentialProvider, build_credential_provider
from rolecall.config.schema import Config, ConversationConfig
from rolecall.invoker.client import InvocationOutcome, RemoteInvoker
from rolecall.invoker.results import Unauthorized
from rolecall.providers.models import Message
from rolecall.tools.catalog import ToolCatalog, get_tool_catalog

logger = logging.getLogger(__name__)


@dataclass
class ChatSession:
    """Everything that belongs to one conversation."""

    session_id: str
    transcript: ConversationTranscript
    auth: AuthSession
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


class SessionStore:
    """In-memory sessions keyed by id, created on first use."""

    def __init__(
        self,
        system_prompt: str,
        auth_factory: Callable[[str], AuthSession] | None = None,
    ):
        self.system_prompt = system_prompt
        self._auth_factory = auth_factory or (lambda session_id: AuthSession(user_id=session_id))
        self._sessions: dict[str, ChatSession] = {}

    def get(self, session_id: str) -> ChatSession:
        """Get a session, creating it if needed."""
        session = self._sessions.get(session_id)
        if session is None:
            session = ChatSession(
                session_id=session_id,
                transcript=ConversationTranscript(self.system_prompt),
                auth=self._auth_factory(session_id),
            )
            self._sessions[session_id] = session
            logger.debug(f"Created session {session_id}")
        return session

    def discard(self, session_id: str) -> bool:
        """Forget a session. Returns False if it did not exist."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.auth.sign_out()
        logger.debug(f"Discarded session {session_id}")
        return True

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)


def tool_context_text(tool_name: str, outcome: InvocationOutcome) -> str:
    """Context message describing a tool result for the completion service."""
    parts = [TOOL_CONTEXT_TEMPLATE.format(tool_name=tool_name, payload=outcome.payload)]
    if outcome.simulated:
        parts.append(SIMULATED_NOTICE.format(reason=outcome.reason))
    parts.append(FORMAT_INSTRUCTION)
    return "\n\n".join(parts)


class Orchestrator:
    """
    Runs conversation turns.

    Turns within one session are serialized by the session's lock;
    different sessions share no mutable state and run concurrently.
    """

    def __init__(
        self,
        catalog: ToolCatalog,
        resolver: IntentResolver,
        credentials: CredentialProvider,
        invoker: RemoteInvoker,
        complete: CompletionFn,
        config: ConversationConfig | None = None,
        sessions: SessionStore | None = None,
    ):
        self.catalog = catalog
        self.resolver = resolver
        self.credentials = credentials
        self.invoker = invoker
        self.config = config or ConversationConfig()
        self.sessions = sessions or SessionStore(self.config.system_prompt)
        self._complete = complete

    @classmethod
    def from_config(
        cls,
        config: Config,
        complete: CompletionFn | None = None,
        catalog: ToolCatalog | None = None,
        auth_factory: Callable[[str], AuthSession] | None = None,
    ) -> "Orchestrator":
        """
        Wire an orchestrator from configuration.

        Args:
            config: Loaded configuration.
            complete: Completion function; the provider manager if omitted.
            catalog: Tool catalog; the default catalog if omitted.
            auth_factory: Builds the AuthSession for a new session id.
        """
        from rolecall.providers.manager import ProviderManager

        catalog = catalog or get_tool_catalog()
        if complete is None:
            complete = ProviderManager(config.providers).complete_text

        return cls(
            catalog=catalog,
            resolver=IntentResolver(catalog, complete=complete, config=config.resolver),
            credentials=build_credential_provider(config.auth),
            invoker=RemoteInvoker.from_config(config.remote),
            complete=complete,
            config=config.conversation,
            sessions=SessionStore(config.conversation.system_prompt, auth_factory),
        )

    def session(self, session_id: str) -> ChatSession:
        return self.sessions.get(session_id)

    def reset(self, session_id: str) -> None:
        """Clear a session's conversation history."""
        self.session(session_id).transcript.reset()
        logger.info(f"Conversation reset for session {session_id}")

    def message_count(self, session_id: str) -> int:
        return self.session(session_id).transcript.message_count()

    def end_session(self, session_id: str) -> bool:
        """Drop a session with its history and tokens."""
        return self.sessions.discard(session_id)

    async def respond(self, session_id: str, utterance: str) -> str:
        """
        Handle one user turn and return the assistant reply.

        Never raises for internal failures: the turn is abandoned, the user
        message and an apology are recorded, and the apology is returned.
        """
        session = self.session(session_id)
        timeout = self.config.turn_timeout

        async with session.lock:
            try:
                return await asyncio.wait_for(self._run_turn(session, utterance), timeout=timeout)
            except asyncio.TimeoutError:
                logger.error(f"Turn in session {session_id} exceeded {timeout}s")
                error = f"the request timed out after {timeout:g} seconds"
            except Exception as e:
                logger.error(f"Turn in session {session_id} failed: {e}", exc_info=True)
                error = str(e) or type(e).__name__

            reply = ERROR_REPLY.format(error=error)
            session.transcript.extend([Message.user(utterance), Message.assistant(reply)])
            return reply

    async def _run_turn(self, session: ChatSession, utterance: str) -> str:
        transcript = session.transcript
        staged = [Message.user(utterance)]

        request = await self.resolver.resolve(utterance)
        if request is not None and not request.should_execute(self.resolver.threshold):
            request = None
        tool = self.catalog.get(request.tool_name) if request is not None else None
        if request is not None and tool is None:
            logger.warning(f"Resolved tool '{request.tool_name}' is not in the catalog")

        if request is not None and tool is not None:
            params = tool.with_defaults(request.parameters)
            missing = tool.missing_slots(params)
            if missing:
                logger.info(f"{tool.name} is missing {missing}, asking for clarification")
                reply = tool.clarification_for(params.get("action"))
                transcript.extend([*staged, Message.assistant(reply)])
                return reply

            credential = await self.credentials.acquire(session.auth)
            outcome = await self.invoker.invoke_or_fallback(tool, params, credential)
            if isinstance(outcome.result, Unauthorized):
                logger.warning(f"{tool.name} rejected the token of {session.auth.user_id}, dropping it")
                session.auth.invalidate()
            staged.append(Message.tool_context(tool_context_text(tool.name, outcome)))

        reply = await self._complete(
            transcript.to_completion_messages(staged),
            temperature=self.config.temperature,
        )
        transcript.extend([*staged, Message.assistant(reply)])
        return reply
