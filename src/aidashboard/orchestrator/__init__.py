from .analysis import AnalysisPipeline
from .chat import NO_RESPONSE, RUN_FAILED, SEND_FAILED, ChatService
from .kpi import KPIAnalyzer

__all__ = [
    "AnalysisPipeline",
    "ChatService",
    "KPIAnalyzer",
    "NO_RESPONSE",
    "RUN_FAILED",
    "SEND_FAILED",
]
