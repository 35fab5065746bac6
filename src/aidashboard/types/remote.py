from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from aidashboard.types.base import FROZEN_CONFIG

ToolTag = Literal["code_interpreter", "file_search"]


class RunStatus(str, Enum):
    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    REQUIRES_ACTION = "requires_action"
    CANCELLING = "cancelling"
    CANCELLED = "cancelled"
    EXPIRED = "expired"
    INCOMPLETE = "incomplete"
    COMPLETED = "completed"
    FAILED = "failed"


class RunOutcome(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


class RemoteFile(BaseModel):
    """An uploaded file on the remote service."""

    id: str
    filename: Optional[str] = None
    purpose: str = "assistants"

    model_config = FROZEN_CONFIG


class RemoteThread(BaseModel):
    id: str

    model_config = FROZEN_CONFIG


class RemoteRun(BaseModel):
    id: str
    thread_id: str
    status: Optional[str] = None

    model_config = FROZEN_CONFIG


class Attachment(BaseModel):
    """
    A reference to an uploaded file included in a message,
    tagged for the tools that may read it.
    """

    file_id: str
    tools: List[ToolTag] = Field(default_factory=lambda: ["code_interpreter"])

    model_config = FROZEN_CONFIG

    @classmethod
    def code_interpreter(cls, file_id: str) -> "Attachment":
        return cls(file_id=file_id, tools=["code_interpreter"])

    def to_api(self) -> dict:
        return dict(file_id=self.file_id, tools=[dict(type=tool) for tool in self.tools])


class TextValue(BaseModel):
    value: str = ""

    model_config = FROZEN_CONFIG


class MessagePart(BaseModel):
    type: str
    text: Optional[TextValue] = None

    model_config = FROZEN_CONFIG


class ThreadMessage(BaseModel):
    """
    The part of a listed thread message we read back: its role and
    its text parts. Image and other parts are kept but have no text.
    """

    role: str
    content: List[MessagePart] = Field(default_factory=list)

    model_config = FROZEN_CONFIG

    @property
    def text(self) -> Optional[str]:
        for part in self.content:
            if part.type == "text" and part.text and part.text.value:
                return part.text.value
        return None
