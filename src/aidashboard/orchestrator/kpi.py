from typing import Optional

from aidashboard.client.assistants_api import AssistantsClient, FileContent
from aidashboard.settings import AssistantSettings
from aidashboard.types import FAILURE_PREFIX, Attachment, RunOutcome
from aidashboard.utilities.logging import get_logger
from aidashboard.utilities.prompts import render_kpi_prompt

logger = get_logger("KPIAnalyzer")

UPLOAD_FAILED = f"{FAILURE_PREFIX} File upload failed."
THREAD_FAILED = f"{FAILURE_PREFIX} Thread creation failed."
MESSAGE_FAILED = f"{FAILURE_PREFIX} Message send failed."
RUN_FAILED = f"{FAILURE_PREFIX} Run failed."
RUN_TIMED_OUT = f"{FAILURE_PREFIX} GPT Run failed or timed out."
FETCH_FAILED = f"{FAILURE_PREFIX} Failed to fetch GPT response."


class KPIAnalyzer:
    """
    KPI prediction for one department.

    The current KPI file is analysed together with the department's
    historical reference file (when one is known) and the assistant's
    report is returned as plain text. Failures come back as text too,
    prefixed with the failure glyph.
    """

    def __init__(
        self,
        client: AssistantsClient,
        settings: Optional[AssistantSettings] = None,
        assistant_id: Optional[str] = None,
    ):
        self.client = client
        self.settings = settings or client.settings
        self.assistant_id = assistant_id or self.settings.kpi_assistant_id

    def historical_file_for(self, department: str) -> Optional[str]:
        return self.settings.historical_files.get(department.strip().lower())

    async def analyze_kpi(
        self,
        department_name: str,
        content: FileContent,
        historical_file_id: Optional[str] = None,
        filename: Optional[str] = None,
    ) -> str:
        """
        Args:
            department_name (str): department the KPI file belongs to.
            content (bytes | BinaryIO): the current KPI file.
            historical_file_id (str, optional): reference file to compare with.
                Looked up by department when not given.
            filename (str, optional): name to upload the current file under.
        """
        historical_file_id = historical_file_id or self.historical_file_for(
            department_name
        )

        file = await self.client.upload_file(content, filename)
        if file is None:
            return UPLOAD_FAILED

        thread = await self.client.create_thread()
        if thread is None:
            return THREAD_FAILED

        file_ids = [file.id]
        if historical_file_id:
            file_ids.append(historical_file_id)
        else:
            logger.warning(f"No historical file for department {department_name!r}")

        sent = await self.client.post_message(
            thread.id,
            text=render_kpi_prompt(department_name),
            attachments=[Attachment.code_interpreter(file_id) for file_id in file_ids],
        )
        if not sent:
            return MESSAGE_FAILED

        run = await self.client.start_run(thread.id, self.assistant_id, file_ids=file_ids)
        if run is None:
            return RUN_FAILED

        outcome = await self.client.poll_run(
            thread.id,
            run.id,
            max_attempts=self.settings.analysis_poll_attempts,
            interval_ms=self.settings.poll_interval_ms,
        )
        if outcome is not RunOutcome.COMPLETED:
            return RUN_TIMED_OUT

        report = await self.client.fetch_latest_assistant_message(thread.id)
        if report is None:
            return FETCH_FAILED
        logger.info(f"KPI report ready for {department_name} on thread {thread.id}")
        return report
