from .settings import AssistantSettings, StoreSettings
from .client import AssistantsClient
from .orchestrator import AnalysisPipeline, ChatService, KPIAnalyzer
from .storage import JsonFileStore, MemStore, SessionStore
from .types import AnalysisResult, ChatMessage, ChatSession, DashboardReport
from .utilities.export import export_report

__version__ = "0.1.0"

__all__ = [
    "AssistantSettings",
    "StoreSettings",
    "AssistantsClient",
    "AnalysisPipeline",
    "ChatService",
    "KPIAnalyzer",
    "JsonFileStore",
    "MemStore",
    "SessionStore",
    "AnalysisResult",
    "ChatMessage",
    "ChatSession",
    "DashboardReport",
    "export_report",
]
