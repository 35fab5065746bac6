from enum import Enum
from typing import Optional

from pydantic import BaseModel

from aidashboard.types.base import FROZEN_CONFIG

FAILURE_PREFIX = "❌"


class PipelineStep(str, Enum):
    """A step of the analysis pipeline, used to report where it stopped."""

    UPLOAD = "upload"
    THREAD = "thread"
    MESSAGE = "message"
    RUN = "run"
    POLL = "poll"
    FETCH = "fetch"

    @property
    def failure_message(self) -> str:
        return STEP_FAILURE_MESSAGES[self]


STEP_FAILURE_MESSAGES = {
    PipelineStep.UPLOAD: f"{FAILURE_PREFIX} File upload failed.",
    PipelineStep.THREAD: f"{FAILURE_PREFIX} Thread creation failed.",
    PipelineStep.MESSAGE: f"{FAILURE_PREFIX} Message send failed.",
    PipelineStep.RUN: f"{FAILURE_PREFIX} Assistant run failed.",
    PipelineStep.POLL: f"{FAILURE_PREFIX} Assistant run failed or timed out.",
    PipelineStep.FETCH: f"{FAILURE_PREFIX} Failed to fetch result.",
}


class AnalysisResult(BaseModel):
    """
    Outcome of a one-shot analysis.

    On success `text` is the assistant's answer and `thread_id`/`file_id`
    identify the remote conversation, so a chat can continue on it.
    On failure `text` is the failure message of `failed_step`; the ids
    are whatever the pipeline had produced before it stopped.
    """

    text: str
    thread_id: Optional[str] = None
    file_id: Optional[str] = None
    failed_step: Optional[PipelineStep] = None

    model_config = FROZEN_CONFIG

    @property
    def ok(self) -> bool:
        return self.failed_step is None

    @classmethod
    def failure(
        cls,
        step: PipelineStep,
        thread_id: Optional[str] = None,
        file_id: Optional[str] = None,
    ) -> "AnalysisResult":
        return cls(
            text=step.failure_message,
            thread_id=thread_id,
            file_id=file_id,
            failed_step=step,
        )


class DashboardReport(BaseModel):
    """Summary and insights produced for the same uploaded content."""

    summary: AnalysisResult
    insights: AnalysisResult

    model_config = FROZEN_CONFIG

    def as_text(self) -> str:
        return f"Summary:\n{self.summary.text}\n\nKey Insights:\n{self.insights.text}"
