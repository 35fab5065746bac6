from .message import ChatMessage, MessageRole
from .session import DEFAULT_TITLE, ChatSession, now_ms
from .remote import (
    Attachment,
    RemoteFile,
    RemoteRun,
    RemoteThread,
    RunOutcome,
    RunStatus,
    ThreadMessage,
    ToolTag,
)
from .results import (
    FAILURE_PREFIX,
    AnalysisResult,
    DashboardReport,
    PipelineStep,
)

__all__ = [
    "ChatMessage",
    "MessageRole",
    "ChatSession",
    "DEFAULT_TITLE",
    "now_ms",
    "Attachment",
    "RemoteFile",
    "RemoteRun",
    "RemoteThread",
    "RunOutcome",
    "RunStatus",
    "ThreadMessage",
    "ToolTag",
    "FAILURE_PREFIX",
    "AnalysisResult",
    "DashboardReport",
    "PipelineStep",
]
