import pytest

from aidashboard.orchestrator import KPIAnalyzer
from aidashboard.orchestrator.kpi import (
    FETCH_FAILED,
    MESSAGE_FAILED,
    RUN_FAILED,
    RUN_TIMED_OUT,
    THREAD_FAILED,
    UPLOAD_FAILED,
)
from aidashboard.types import Attachment, RunOutcome


def test_historical_file_lookup(fake_client):
    analyzer = KPIAnalyzer(fake_client)

    assert analyzer.historical_file_for("Sales") == "file-N5tC9anVXgmgq41jDcnCjq"
    assert analyzer.historical_file_for(" Customer Support ") == "file-UZttM4zsKqoVGiTNMPnW5J"
    assert analyzer.historical_file_for("legal") is None


@pytest.mark.asyncio
async def test_kpi_report_with_history(fake_client):
    fake_client.reply = "KPI: Revenue\nPrediction: Meet"

    report = await KPIAnalyzer(fake_client).analyze_kpi("Marketing", b"kpi,value\n", filename="kpi.csv")

    assert report == "KPI: Revenue\nPrediction: Meet"
    history = "file-TJYfXNfMKrPAttAKrUjmTk"
    (message,) = fake_client.called("post_message")
    assert "Marketing department" in message["text"]
    assert "Prediction: Meet | Not Meet" in message["text"]
    assert message["attachments"] == [
        Attachment.code_interpreter("file-abc"),
        Attachment.code_interpreter(history),
    ]
    (run,) = fake_client.called("start_run")
    assert run["assistant_id"] == "asst-kpi"
    assert run["file_ids"] == ["file-abc", history]


@pytest.mark.asyncio
async def test_explicit_historical_file(fake_client):
    await KPIAnalyzer(fake_client).analyze_kpi("sales", b"x", historical_file_id="file-hist")

    (run,) = fake_client.called("start_run")
    assert run["file_ids"] == ["file-abc", "file-hist"]


@pytest.mark.asyncio
async def test_kpi_without_history(fake_client):
    await KPIAnalyzer(fake_client).analyze_kpi("Legal", b"x")

    (message,) = fake_client.called("post_message")
    assert message["attachments"] == [Attachment.code_interpreter("file-abc")]
    (run,) = fake_client.called("start_run")
    assert run["file_ids"] == ["file-abc"]


@pytest.mark.parametrize(
    "failure, expected, calls",
    [
        (dict(file_id=None), UPLOAD_FAILED, 1),
        (dict(thread_id=None), THREAD_FAILED, 2),
        (dict(post_ok=False), MESSAGE_FAILED, 3),
        (dict(run_id=None), RUN_FAILED, 4),
        (dict(outcome=RunOutcome.FAILED), RUN_TIMED_OUT, 5),
        (dict(outcome=RunOutcome.TIMED_OUT), RUN_TIMED_OUT, 5),
        (dict(reply=None), FETCH_FAILED, 6),
    ],
)
@pytest.mark.asyncio
async def test_kpi_failures_are_text(fake_client, failure, expected, calls):
    for name, value in failure.items():
        setattr(fake_client, name, value)

    report = await KPIAnalyzer(fake_client).analyze_kpi("finance", b"x")

    assert report == expected
    assert report.startswith("❌")
    assert len(fake_client.calls) == calls
