"""
Client for the remote assistants service.

Every call is one round trip (except `poll_run`) and none of them raise for
remote failures: transport errors, error statuses and responses missing the
fields we need are logged and turned into `None`, `False` or
`RunOutcome.FAILED`, so the pipelines can decide per step what to report.
"""

import asyncio
import os
from typing import BinaryIO, Iterable, Optional, Sequence, Union

import httpx
from openai import APIError, AsyncOpenAI
from pydantic import ValidationError

from aidashboard.settings import AssistantSettings
from aidashboard.types import (
    Attachment,
    RemoteFile,
    RemoteRun,
    RemoteThread,
    RunOutcome,
    RunStatus,
    ThreadMessage,
)
from aidashboard.utilities.logging import get_logger, pretty_log

logger = get_logger("Client")

PLACEHOLDER_FILE_NAME = "upload.bin"
PROTOCOL_HEADERS = {"OpenAI-Beta": "assistants=v2"}

FileContent = Union[bytes, bytearray, BinaryIO]


def get_file_name(content: FileContent, filename: Optional[str] = None) -> str:
    """
    Name sent with an upload: the given name, else the file object's own
    name, else a placeholder. No extension is added or assumed.
    """
    name = filename or getattr(content, "name", None)
    # file objects from os.fdopen are named by their descriptor
    if isinstance(name, str) and name:
        return os.path.basename(name) or PLACEHOLDER_FILE_NAME
    return PLACEHOLDER_FILE_NAME


class AssistantsClient:
    """
    Thin async wrapper around the assistants endpoints of the remote API.

    Args:
        settings (AssistantSettings): credential, base url, timeouts.
        http_client (httpx.AsyncClient, optional): transport to use instead of
            the SDK default.
    """

    def __init__(
        self,
        settings: AssistantSettings,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings
        self._client = AsyncOpenAI(
            api_key=settings.api_key.get_secret_value(),
            base_url=settings.base_url,
            timeout=settings.request_timeout,
            max_retries=settings.max_retries,
            default_headers=PROTOCOL_HEADERS,
            http_client=http_client,
        )

    async def __aenter__(self) -> "AssistantsClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        return False

    async def close(self) -> None:
        await self._client.close()

    async def upload_file(
        self,
        content: FileContent,
        filename: Optional[str] = None,
        purpose: str = "assistants",
    ) -> Optional[RemoteFile]:
        """
        Upload bytes (or a binary file object) and return the remote file.
        """
        name = get_file_name(content, filename)
        data = bytes(content) if isinstance(content, (bytes, bytearray)) else content.read()
        logger.debug(f"Uploading file: {name} ({len(data)} bytes)")
        try:
            response = await self._client.files.create(file=(name, data), purpose=purpose)
        except APIError as e:
            logger.error(f"upload_file failed for {name}: {e}")
            return None

        file_id = getattr(response, "id", None)
        if not file_id:
            logger.error(f"upload_file: response for {name} has no id")
            return None
        return RemoteFile(id=file_id, filename=name, purpose=purpose)

    async def create_thread(self) -> Optional[RemoteThread]:
        try:
            response = await self._client.beta.threads.create()
        except APIError as e:
            logger.error(f"create_thread failed: {e}")
            return None

        thread_id = getattr(response, "id", None)
        if not thread_id:
            logger.error("create_thread: response has no id")
            return None
        return RemoteThread(id=thread_id)

    async def post_message(
        self,
        thread_id: str,
        text: Optional[str] = None,
        attachments: Sequence[Attachment] = (),
        image_file_ids: Iterable[str] = (),
    ) -> bool:
        """
        Add a user message to the thread.

        The message carries `text` and/or one image part per entry of
        `image_file_ids`; `attachments` reference uploaded files for tools.
        """
        content = []
        if text:
            content.append(dict(type="text", text=text))
        for file_id in image_file_ids:
            content.append(dict(type="image_file", image_file=dict(file_id=file_id)))
        if not content:
            raise ValueError("A message needs text or at least one image file.")

        file_attachments = {}
        if attachments:
            file_attachments = {"attachments": [a.to_api() for a in attachments]}

        try:
            await self._client.beta.threads.messages.create(
                thread_id,
                role="user",
                content=content,
                **file_attachments,
            )
        except APIError as e:
            logger.error(f"post_message failed on thread {thread_id}: {e}")
            return False
        return True

    async def start_run(
        self,
        thread_id: str,
        assistant_id: str,
        file_ids: Sequence[str] = (),
    ) -> Optional[RemoteRun]:
        """
        Start a run of `assistant_id` on the thread. With `file_ids` the
        code interpreter of the run is scoped to exactly those files.
        """
        tool_resources = {}
        if file_ids:
            tool_resources = {
                "tool_resources": {"code_interpreter": {"file_ids": list(file_ids)}}
            }
        pretty_log(
            thread_id=thread_id,
            assistant_id=assistant_id,
            title="Run request",
            **tool_resources,
        )

        try:
            response = await self._client.beta.threads.runs.create(
                thread_id,
                assistant_id=assistant_id,
                **tool_resources,
            )
        except APIError as e:
            logger.error(f"start_run failed on thread {thread_id}: {e}")
            return None

        run_id = getattr(response, "id", None)
        if not run_id:
            logger.error(f"start_run: response on thread {thread_id} has no id")
            return None
        return RemoteRun(
            id=run_id, thread_id=thread_id, status=getattr(response, "status", None)
        )

    async def get_run_status(self, thread_id: str, run_id: str) -> Optional[str]:
        try:
            response = await self._client.beta.threads.runs.retrieve(
                run_id, thread_id=thread_id
            )
        except APIError as e:
            logger.error(f"get_run_status failed for run {run_id}: {e}")
            return None

        status = getattr(response, "status", None)
        if not status:
            logger.error(f"get_run_status: response for run {run_id} has no status")
            return None
        return status

    async def poll_run(
        self,
        thread_id: str,
        run_id: str,
        max_attempts: int,
        interval_ms: int,
    ) -> RunOutcome:
        """
        Check the run status up to `max_attempts` times, `interval_ms` apart.

        Returns as soon as the run is completed or failed. A status check
        that fails counts as a failed run. Running out of attempts returns
        `RunOutcome.TIMED_OUT`.
        """
        for attempt in range(1, max_attempts + 1):
            status = await self.get_run_status(thread_id, run_id)
            if status is None:
                return RunOutcome.FAILED
            if status == RunStatus.COMPLETED.value:
                return RunOutcome.COMPLETED
            if status == RunStatus.FAILED.value:
                logger.warning(f"Run {run_id} failed")
                return RunOutcome.FAILED
            if attempt < max_attempts:
                await asyncio.sleep(interval_ms / 1000)

        logger.warning(f"Run {run_id} still pending after {max_attempts} checks")
        return RunOutcome.TIMED_OUT

    async def fetch_latest_assistant_message(self, thread_id: str) -> Optional[str]:
        """
        Text of the newest assistant message on the thread, or None.
        """
        try:
            response = await self._client.beta.threads.messages.list(
                thread_id, order="desc"
            )
        except APIError as e:
            logger.error(f"fetch_latest_assistant_message failed on {thread_id}: {e}")
            return None

        for message in getattr(response, "data", None) or []:
            try:
                parsed = ThreadMessage.model_validate(message.model_dump())
            except ValidationError as e:
                logger.warning(f"Skipping unreadable message on {thread_id}: {e}")
                continue
            if parsed.role == "assistant" and parsed.text:
                return parsed.text

        logger.warning(f"No assistant message found on thread {thread_id}")
        return None
