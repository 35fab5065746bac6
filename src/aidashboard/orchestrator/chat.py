from typing import List, Optional, Sequence

from aidashboard.client.assistants_api import AssistantsClient
from aidashboard.exceptions import ChatSessionError
from aidashboard.settings import AssistantSettings
from aidashboard.storage.session_store import SessionStore
from aidashboard.types import (
    DEFAULT_TITLE,
    FAILURE_PREFIX,
    AnalysisResult,
    ChatMessage,
    ChatSession,
    RunOutcome,
)
from aidashboard.utilities.async_utils import run_to_completion
from aidashboard.utilities.logging import get_logger
from aidashboard.utilities.prompts import render_chat_opener

logger = get_logger("Chat")

SEND_FAILED = f"{FAILURE_PREFIX} Failed to send message."
RUN_FAILED = f"{FAILURE_PREFIX} Run failed."
NO_RESPONSE = f"{FAILURE_PREFIX} No response from assistant."


class ChatService:
    """
    Multi-turn chat on an existing thread, with the transcript kept in the
    session store.

    A turn always ends with exactly one assistant message, either the reply
    or a failure placeholder, so stored transcripts never stop half way
    through a turn.
    """

    def __init__(
        self,
        client: AssistantsClient,
        store: SessionStore,
        settings: Optional[AssistantSettings] = None,
    ):
        self.client = client
        self.store = store
        self.settings = settings or client.settings

    async def open_session(
        self, thread_id: str, file_id: str = "", title: str = DEFAULT_TITLE
    ) -> ChatSession:
        """
        The stored session for the thread, or a new empty one.
        """
        existing = await self.store.get_by_id(thread_id)
        if existing is not None:
            return existing

        now = self.store.clock()
        return await self.store.upsert(
            ChatSession(
                id=thread_id,
                title=title,
                thread_id=thread_id,
                file_id=file_id or "",
                created_at=now,
                updated_at=now,
            )
        )

    async def start_from_analysis(
        self, result: AnalysisResult, title: str = DEFAULT_TITLE
    ) -> ChatSession:
        """
        Continue a finished analysis as a chat. A new session starts with
        the analysis text, followed by an invitation to ask more, as its
        first assistant message.
        """
        if not result.ok or not result.thread_id:
            raise ChatSessionError("Only a successful analysis can be continued in chat.")

        session = await self.open_session(result.thread_id, result.file_id or "", title)
        if not session.messages:
            session = await self.store.upsert(
                session.with_messages([ChatMessage.assistant(render_chat_opener(result.text))])
            )
        return session

    async def send_turn(
        self,
        thread_id: str,
        file_id: Optional[str],
        session_id: Optional[str],
        user_text: str,
        current_messages: Sequence[ChatMessage],
    ) -> List[ChatMessage]:
        """
        Send one user message and wait for the assistant.

        The user message is stored before anything is sent. Both saves and
        the remote part run on one task of their own: a caller that gives up
        waiting either cancels before the turn starts or leaves it to finish.

        Returns the transcript including the new user and assistant messages.
        """
        if not thread_id:
            raise ChatSessionError("No active thread to send the message to.")
        text = (user_text or "").strip()
        if not text:
            raise ChatSessionError("Cannot send an empty message.")

        return await run_to_completion(
            self._run_turn(thread_id, file_id, session_id, text, current_messages),
            name=f"chat-turn-{thread_id}",
        )

    async def _run_turn(
        self,
        thread_id: str,
        file_id: Optional[str],
        session_id: Optional[str],
        text: str,
        current_messages: Sequence[ChatMessage],
    ) -> List[ChatMessage]:
        existing = await self.store.get_by_id(thread_id)
        session = ChatSession(
            id=session_id or thread_id,
            title=existing.title if existing else DEFAULT_TITLE,
            thread_id=thread_id,
            file_id=file_id or "",
            messages=[*current_messages, ChatMessage.user(text)],
            created_at=existing.created_at if existing else self.store.clock(),
        )
        session = await self.store.upsert(session)

        reply = None
        try:
            reply = await self._ask(session.thread_id, session.file_id, text)
        finally:
            messages = [*session.messages, ChatMessage.assistant(reply or NO_RESPONSE)]
            await self.store.upsert(session.with_messages(messages))
        return messages

    async def _ask(self, thread_id: str, file_id: str, text: str) -> str:
        if not await self.client.post_message(thread_id, text=text):
            return SEND_FAILED

        run = await self.client.start_run(
            thread_id,
            self.settings.chat_assistant_id,
            file_ids=[file_id] if file_id else [],
        )
        if run is None:
            return RUN_FAILED

        outcome = await self.client.poll_run(
            thread_id,
            run.id,
            max_attempts=self.settings.chat_poll_attempts,
            interval_ms=self.settings.poll_interval_ms,
        )
        if outcome is RunOutcome.FAILED:
            return RUN_FAILED
        if outcome is RunOutcome.TIMED_OUT:
            logger.warning(f"No reply on thread {thread_id} within the polling budget")
            return NO_RESPONSE

        reply = await self.client.fetch_latest_assistant_message(thread_id)
        return reply or NO_RESPONSE
