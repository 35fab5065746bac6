from enum import Enum

from pydantic import BaseModel

from aidashboard.types.base import FROZEN_CONFIG


class MessageRole(str, Enum):
    """Message role."""

    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(BaseModel):
    """
    One line of a chat transcript.
    """

    sender: MessageRole
    content: str

    model_config = dict(FROZEN_CONFIG, use_enum_values=True)

    @classmethod
    def user(cls, content: str) -> "ChatMessage":
        return cls(sender=MessageRole.USER, content=content)

    @classmethod
    def assistant(cls, content: str) -> "ChatMessage":
        return cls(sender=MessageRole.ASSISTANT, content=content)
