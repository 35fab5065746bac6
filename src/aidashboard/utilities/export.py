import os
from datetime import datetime
from typing import Optional

import fsspec

from aidashboard.utilities.logging import get_logger

logger = get_logger("Export")


def report_file_name(prefix: str = "KPI_Prediction", now: Optional[datetime] = None) -> str:
    timestamp = (now or datetime.now()).strftime("%Y-%m-%d_%H-%M")
    return f"{prefix}_{timestamp}.txt"


def export_report(
    text: str,
    directory: str,
    prefix: str = "KPI_Prediction",
    fs: Optional[fsspec.AbstractFileSystem] = None,
    now: Optional[datetime] = None,
) -> str:
    """
    Write a report to `directory` as `<prefix>_<YYYY-MM-DD_HH-MM>.txt`.

    Returns the path written to.
    """
    fs = fs or fsspec.filesystem("file")
    directory = os.path.expanduser(directory)
    if not fs.exists(directory):
        fs.makedirs(directory, exist_ok=True)

    path = os.path.join(directory, report_file_name(prefix, now))
    with fs.open(path, "w", encoding="utf-8") as f:
        f.write(text)
    logger.info(f"Report saved to {path}")
    return path
