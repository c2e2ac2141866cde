"""
Intent resolver.

Turns one user utterance into a tool invocation request, or None when the
turn is plain conversation. The LLM classifier is tried first; when it is
disabled, fails, or replies with something unusable, the keyword rules
decide instead.
"""

import json
import logging
import re
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import ValidationError

from rolecall.agent.models import (
    ClassificationFailure,
    ClassifierResponse,
    ResolutionSource,
    ToolInvocationRequest,
)
from rolecall.agent.prompts import build_classifier_prompt, classifier_user_message
from rolecall.agent.rules import RuleBasedResolver
from rolecall.config.schema import ResolverConfig
from rolecall.providers.models import Message
from rolecall.tools.catalog import ToolCatalog, translate_legacy_tool

logger = logging.getLogger(__name__)

CompletionFn = Callable[..., Awaitable[str]]

_FENCE_PATTERN = re.compile(r"```(?:json)?", re.IGNORECASE)


def extract_json_object(text: str) -> dict[str, Any]:
    """
    Pull the first JSON object out of a model reply.

    Markdown code fences are removed and everything outside the outermost
    braces is ignored.

    Raises:
        ClassificationFailure: If no JSON object can be decoded.
    """
    cleaned = _FENCE_PATTERN.sub("", text or "").strip()
    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start == -1 or end <= start:
        raise ClassificationFailure(f"No JSON object in classifier reply: {text!r}")

    try:
        data = json.loads(cleaned[start : end + 1])
    except json.JSONDecodeError as e:
        raise ClassificationFailure(f"Invalid JSON in classifier reply: {e}") from e

    if not isinstance(data, dict):
        raise ClassificationFailure("Classifier reply is not a JSON object")
    return data


class IntentResolver:
    """Resolves utterances to tool calls with an LLM classifier and keyword rules."""

    def __init__(
        self,
        catalog: ToolCatalog,
        complete: CompletionFn | None = None,
        config: ResolverConfig | None = None,
        rules: RuleBasedResolver | None = None,
    ):
        """
        Initialize the resolver.

        Args:
            catalog: Tools the classifier may choose from.
            complete: Async completion function `(messages, **kwargs) -> str`.
                Without one, only the keyword rules are used.
            config: Resolver settings (threshold, model, temperature).
            rules: Keyword resolver; the default rule groups if omitted.
        """
        self.catalog = catalog
        self.config = config or ResolverConfig()
        self.rules = rules or RuleBasedResolver()
        self._complete = complete
        self._prompt: str | None = None

    @property
    def threshold(self) -> float:
        return self.config.confidence_threshold

    @property
    def uses_llm(self) -> bool:
        return self.config.use_llm and self._complete is not None

    def classifier_prompt(self) -> str:
        """System prompt for the classifier, built once from the catalog."""
        if self._prompt is None:
            self._prompt = build_classifier_prompt(self.catalog.all())
        return self._prompt

    async def resolve(self, utterance: str) -> ToolInvocationRequest | None:
        """
        Resolve an utterance.

        Never raises. Returns None for empty input, for conversational
        turns, and for low-confidence classifications.
        """
        if not utterance or not utterance.strip():
            return None

        if not self.uses_llm:
            return self.rules.resolve(utterance)

        try:
            return await self.classify(utterance)
        except ClassificationFailure as e:
            logger.warning(f"Classifier reply unusable, using keyword rules: {e}")
        except Exception as e:
            logger.warning(f"Classifier call failed, using keyword rules: {e}")

        return self.rules.resolve(utterance)

    async def classify(self, utterance: str) -> ToolInvocationRequest | None:
        """
        Ask the LLM classifier for a decision.

        Returns:
            The request, or None when the classifier chose not to call a
            tool or was not confident enough.

        Raises:
            ClassificationFailure: If the reply is malformed or names an
                unknown tool.
        """
        messages = [
            Message.system(self.classifier_prompt()),
            Message.user(classifier_user_message(utterance)),
        ]
        reply = await self._complete(
            messages,
            model=self.config.model,
            temperature=self.config.temperature,
        )
        decision = self.parse_reply(reply)

        if not decision.should_call_tool or not decision.tool_name:
            logger.info("Classifier decided no tool is needed")
            return None

        tool_name, params = translate_legacy_tool(decision.tool_name, decision.parameters)
        if tool_name not in self.catalog:
            raise ClassificationFailure(f"Classifier chose unknown tool '{decision.tool_name}'")

        request = ToolInvocationRequest(
            tool_name=tool_name,
            parameters=params,
            confidence=decision.confidence,
            source=ResolutionSource.LLM,
        )

        if not request.should_execute(self.threshold):
            logger.info(
                f"Classifier confidence {request.confidence:.2f} for {tool_name} "
                f"is not above {self.threshold:.2f}, not calling a tool"
            )
            return None

        logger.info(f"Classifier selected {tool_name} ({request.confidence:.2f}) with {params}")
        return request

    @staticmethod
    def parse_reply(reply: str) -> ClassifierResponse:
        """
        Parse and validate a classifier reply.

        Raises:
            ClassificationFailure: On malformed JSON or schema violations.
        """
        data = extract_json_object(reply)
        try:
            return ClassifierResponse.model_validate(data)
        except ValidationError as e:
            raise ClassificationFailure(f"Classifier reply failed validation: {e}") from e
