"""
Intent resolution and turn orchestration for Rolecall.
"""

from rolecall.agent.conversation import ConversationTranscript
from rolecall.agent.models import (
    ClassificationFailure,
    ClassifierResponse,
    ResolutionSource,
    ToolInvocationRequest,
)
from rolecall.agent.orchestrator import ChatSession, Orchestrator, SessionStore
from rolecall.agent.resolver import IntentResolver
from rolecall.agent.rules import RuleBasedResolver

__all__ = [
    "ChatSession",
    "ClassificationFailure",
    "ClassifierResponse",
    "ConversationTranscript",
    "IntentResolver",
    "Orchestrator",
    "ResolutionSource",
    "RuleBasedResolver",
    "SessionStore",
    "ToolInvocationRequest",
]
