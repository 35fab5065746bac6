import time
from typing import List, Optional, Sequence

from pydantic import BaseModel, Field

from aidashboard.types.base import CAMEL_CONFIG
from aidashboard.types.message import ChatMessage

DEFAULT_TITLE = "Chat with Assistant"


def now_ms() -> int:
    return int(time.time() * 1000)


class ChatSession(BaseModel):
    """
    A locally persisted chat, keyed by the remote thread it belongs to.

    Attributes:
        id (str): Stable key. The store always rewrites it to `thread_id`.
        title (str): Display title.
        thread_id (str): Remote thread the transcript belongs to.
        file_id (str): Uploaded file the chat runs are scoped to, if any.
        messages (list[ChatMessage]): Transcript in conversation order.
        created_at (int): Epoch millis, set on first persist only.
        updated_at (int): Epoch millis, set on every persist.
    """

    id: Optional[str] = None
    title: str = DEFAULT_TITLE
    thread_id: str
    file_id: str = ""
    messages: List[ChatMessage] = Field(default_factory=list)
    created_at: int = Field(default_factory=now_ms)
    updated_at: int = Field(default_factory=now_ms)

    model_config = CAMEL_CONFIG

    def with_messages(self, messages: Sequence[ChatMessage]) -> "ChatSession":
        return self.model_copy(update={"messages": list(messages)})
