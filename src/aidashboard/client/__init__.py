from .assistants_api import AssistantsClient, get_file_name

__all__ = ["AssistantsClient", "get_file_name"]
