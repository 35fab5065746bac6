import json
from typing import List, Optional

import httpx
import pytest
from polyfactory.pytest_plugin import register_fixture

from aidashboard.client import AssistantsClient
from aidashboard.settings import AssistantSettings
from aidashboard.storage import MemStore, SessionStore
from aidashboard.types import RemoteFile, RemoteRun, RemoteThread, RunOutcome

from .factories import ChatSessionFactory

register_fixture(ChatSessionFactory)


class FakeClock:
    def __init__(self, now: int = 1_000):
        self.now = now

    def __call__(self) -> int:
        return self.now


class RecordingSessionStore(SessionStore):
    """Session store that remembers every record it saved."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.saved = []

    async def upsert(self, session):
        stored = await super().upsert(session)
        self.saved.append(stored)
        return stored


class FakeAssistantsClient:
    """
    Stand-in for `AssistantsClient` with canned answers per operation.
    Set an answer to None (or `post_ok` to False) to make that step fail.
    """

    def __init__(
        self,
        settings: AssistantSettings,
        file_id: Optional[str] = "file-abc",
        thread_id: Optional[str] = "thread-1",
        post_ok: bool = True,
        run_id: Optional[str] = "run-1",
        outcome: RunOutcome = RunOutcome.COMPLETED,
        reply: Optional[str] = "3 bullet points...",
    ):
        self.settings = settings
        self.file_id = file_id
        self.thread_id = thread_id
        self.post_ok = post_ok
        self.run_id = run_id
        self.outcome = outcome
        self.reply = reply
        self.calls = []

    def called(self, name: str) -> List[dict]:
        return [kwargs for op, kwargs in self.calls if op == name]

    @property
    def operations(self) -> List[str]:
        return [op for op, _ in self.calls]

    async def upload_file(self, content, filename=None, purpose="assistants"):
        self.calls.append(("upload_file", dict(content=content, filename=filename)))
        if self.file_id is None:
            return None
        return RemoteFile(id=self.file_id, filename=filename, purpose=purpose)

    async def create_thread(self):
        self.calls.append(("create_thread", {}))
        if self.thread_id is None:
            return None
        return RemoteThread(id=self.thread_id)

    async def post_message(self, thread_id, text=None, attachments=(), image_file_ids=()):
        self.calls.append(
            (
                "post_message",
                dict(
                    thread_id=thread_id,
                    text=text,
                    attachments=list(attachments),
                    image_file_ids=list(image_file_ids),
                ),
            )
        )
        return self.post_ok

    async def start_run(self, thread_id, assistant_id, file_ids=()):
        self.calls.append(
            (
                "start_run",
                dict(thread_id=thread_id, assistant_id=assistant_id, file_ids=list(file_ids)),
            )
        )
        if self.run_id is None:
            return None
        return RemoteRun(id=self.run_id, thread_id=thread_id, status="queued")

    async def poll_run(self, thread_id, run_id, max_attempts, interval_ms):
        self.calls.append(
            (
                "poll_run",
                dict(
                    thread_id=thread_id,
                    run_id=run_id,
                    max_attempts=max_attempts,
                    interval_ms=interval_ms,
                ),
            )
        )
        return self.outcome

    async def fetch_latest_assistant_message(self, thread_id):
        self.calls.append(("fetch_latest_assistant_message", dict(thread_id=thread_id)))
        return self.reply


def text_message(role: str, value: str, message_id: str = "msg") -> dict:
    return {
        "id": message_id,
        "object": "thread.message",
        "created_at": 0,
        "thread_id": "thread-1",
        "role": role,
        "status": "completed",
        "content": [{"type": "text", "text": {"value": value, "annotations": []}}],
        "attachments": [],
        "metadata": {},
    }


class FakeAssistantsAPI:
    """
    Answers the remote endpoints for a real `AssistantsClient` through
    `httpx.MockTransport`. Operations listed in `fail` answer with a 500.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.fail = set()
        self.run_statuses = ["completed"]
        self.messages = [
            text_message("assistant", "3 bullet points...", "msg-2"),
            text_message("user", "analyze this", "msg-1"),
        ]

    def requests_for(self, operation: str) -> List[httpx.Request]:
        return [r for r in self.requests if self.operation(r) == operation]

    def bodies_for(self, operation: str) -> List[dict]:
        return [json.loads(r.content) for r in self.requests_for(operation)]

    @staticmethod
    def operation(request: httpx.Request) -> str:
        parts = request.url.path.strip("/").split("/")[1:]  # drop the /v1 prefix
        if parts == ["files"]:
            return "upload_file"
        if parts == ["threads"]:
            return "create_thread"
        if len(parts) == 3 and parts[2] == "messages":
            return "post_message" if request.method == "POST" else "list_messages"
        if len(parts) == 3 and parts[2] == "runs":
            return "start_run"
        if len(parts) == 4 and parts[2] == "runs":
            return "get_run"
        return "unknown"

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        operation = self.operation(request)
        if operation in self.fail:
            return httpx.Response(
                500, json={"error": {"message": "boom", "type": "server_error"}}
            )

        if operation == "upload_file":
            return httpx.Response(
                200,
                json={
                    "id": "file-abc",
                    "object": "file",
                    "bytes": len(request.content),
                    "created_at": 0,
                    "filename": "upload",
                    "purpose": "assistants",
                    "status": "processed",
                },
            )
        if operation == "create_thread":
            return httpx.Response(
                200,
                json={"id": "thread-1", "object": "thread", "created_at": 0, "metadata": {}},
            )
        if operation == "post_message":
            return httpx.Response(200, json=text_message("user", "sent", "msg-new"))
        if operation == "start_run":
            return httpx.Response(200, json=self._run("queued"))
        if operation == "get_run":
            status = self.run_statuses.pop(0) if len(self.run_statuses) > 1 else self.run_statuses[0]
            return httpx.Response(200, json=self._run(status))
        if operation == "list_messages":
            return httpx.Response(
                200,
                json={
                    "object": "list",
                    "data": self.messages,
                    "first_id": None,
                    "last_id": None,
                    "has_more": False,
                },
            )
        return httpx.Response(404, json={"error": {"message": "not found"}})

    @staticmethod
    def _run(status: str) -> dict:
        return {
            "id": "run-1",
            "object": "thread.run",
            "created_at": 0,
            "thread_id": "thread-1",
            "assistant_id": "asst-test",
            "status": status,
            "instructions": "",
            "model": "gpt-4o",
            "tools": [],
            "metadata": {},
            "parallel_tool_calls": True,
        }


@pytest.fixture
def settings():
    return AssistantSettings(
        _env_file=None,
        api_key="sk-test",
        base_url="https://api.test/v1",
        summary_assistant_id="asst-summary",
        insights_assistant_id="asst-insights",
        kpi_assistant_id="asst-kpi",
        chat_assistant_id="asst-chat",
        poll_interval_ms=0,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return RecordingSessionStore(MemStore(), clock=clock)


@pytest.fixture
def fake_client(settings):
    return FakeAssistantsClient(settings)


@pytest.fixture
def fake_api():
    return FakeAssistantsAPI()


@pytest.fixture
def api_client(settings, fake_api):
    transport = httpx.MockTransport(fake_api.handler)
    return AssistantsClient(settings, http_client=httpx.AsyncClient(transport=transport))
