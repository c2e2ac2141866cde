"""Conversation transcript for one chat session."""

from collections.abc import Iterable

from rolecall.providers.models import Message, MessageRole


class ConversationTranscript:
    """
    Ordered message history of a session.

    The system prompt always leads the sequence and survives a reset; it is
    not counted as a message. There is no size cap.
    """

    def __init__(self, system_prompt: str):
        self.system_prompt = system_prompt
        self._messages: list[Message] = []

    def append(self, role: MessageRole, text: str) -> Message:
        """Append one message and return it."""
        message = Message(role=role, content=text)
        self._messages.append(message)
        return message

    def extend(self, messages: Iterable[Message]) -> None:
        """Append a batch of staged messages in order."""
        self._messages.extend(messages)

    def reset(self) -> None:
        """Drop the history, leaving only the system prompt."""
        self._messages.clear()

    def message_count(self) -> int:
        return len(self._messages)

    def snapshot(self) -> list[Message]:
        """
        The message sequence handed to the completion service.

        Always starts with the system prompt, including right after a reset.
        The returned list is a copy; changing it does not touch the transcript.
        """
        return [Message.system(self.system_prompt), *self._messages]

    def to_completion_messages(self, staged: Iterable[Message] = ()) -> list[Message]:
        """
        Messages for a completion call.

        Args:
            staged: Not-yet-committed messages appended after the history.

        Returns:
            System prompt, then the history, then the staged messages.
        """
        return [*self.snapshot(), *staged]

    def __len__(self) -> int:
        return len(self._messages)
