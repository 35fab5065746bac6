import asyncio
from typing import Optional

from aidashboard.client.assistants_api import AssistantsClient, FileContent, get_file_name
from aidashboard.settings import AssistantSettings
from aidashboard.types import (
    AnalysisResult,
    Attachment,
    DashboardReport,
    PipelineStep,
    RunOutcome,
)
from aidashboard.utilities.logging import get_logger
from aidashboard.utilities.prompts import DASHBOARD_ANALYSIS_PROMPT

logger = get_logger("Analysis")


class AnalysisPipeline:
    """
    One-shot analysis of an uploaded image or spreadsheet.

    Each call uploads the content, opens a new thread, asks the assistant
    and waits for its answer. The first step that fails ends the call with
    that step's failure message.
    """

    def __init__(
        self,
        client: AssistantsClient,
        settings: Optional[AssistantSettings] = None,
    ):
        self.client = client
        self.settings = settings or client.settings

    async def analyze(
        self,
        content: FileContent,
        is_image: bool,
        assistant_id: str,
        filename: Optional[str] = None,
    ) -> AnalysisResult:
        file = await self.client.upload_file(content, filename)
        if file is None:
            return self._fail(PipelineStep.UPLOAD)

        thread = await self.client.create_thread()
        if thread is None:
            return self._fail(PipelineStep.THREAD, file_id=file.id)

        if is_image:
            sent = await self.client.post_message(thread.id, image_file_ids=[file.id])
        else:
            sent = await self.client.post_message(
                thread.id,
                text=DASHBOARD_ANALYSIS_PROMPT,
                attachments=[Attachment.code_interpreter(file.id)],
            )
        if not sent:
            return self._fail(PipelineStep.MESSAGE, thread.id, file.id)

        # images go in as message content, only spreadsheets go to the code interpreter
        run = await self.client.start_run(
            thread.id, assistant_id, file_ids=[] if is_image else [file.id]
        )
        if run is None:
            return self._fail(PipelineStep.RUN, thread.id, file.id)

        outcome = await self.client.poll_run(
            thread.id,
            run.id,
            max_attempts=self.settings.analysis_poll_attempts,
            interval_ms=self.settings.poll_interval_ms,
        )
        if outcome is not RunOutcome.COMPLETED:
            return self._fail(PipelineStep.POLL, thread.id, file.id)

        text = await self.client.fetch_latest_assistant_message(thread.id)
        if text is None:
            return self._fail(PipelineStep.FETCH, thread.id, file.id)

        logger.info(f"Analysis by {assistant_id} finished on thread {thread.id}")
        return AnalysisResult(text=text, thread_id=thread.id, file_id=file.id)

    async def analyze_dashboard(
        self,
        content: FileContent,
        is_image: bool,
        filename: Optional[str] = None,
    ) -> DashboardReport:
        """
        Run the summary and the insights assistants side by side.

        They do not share anything remote: each uploads the content and
        works on its own thread. The summary's thread is the one to chat on.
        """
        name = get_file_name(content, filename)
        data = bytes(content) if isinstance(content, (bytes, bytearray)) else content.read()
        summary, insights = await asyncio.gather(
            self.analyze(data, is_image, self.settings.summary_assistant_id, name),
            self.analyze(data, is_image, self.settings.insights_assistant_id, name),
        )
        return DashboardReport(summary=summary, insights=insights)

    def _fail(
        self,
        step: PipelineStep,
        thread_id: Optional[str] = None,
        file_id: Optional[str] = None,
    ) -> AnalysisResult:
        logger.warning(f"Analysis stopped at step '{step.value}'")
        return AnalysisResult.failure(step, thread_id=thread_id, file_id=file_id)
