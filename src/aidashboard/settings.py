from pathlib import Path
from typing import Any, Union

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

# department (lower-cased) -> precomputed historical reference file
HISTORICAL_FILES = {
    "marketing": "file-TJYfXNfMKrPAttAKrUjmTk",
    "sales": "file-N5tC9anVXgmgq41jDcnCjq",
    "tech": "file-NPaZXz5EuToA2Pw24C1Ms5",
    "product": "file-VRMzU8QMTasBxcyCPtDHZt",
    "finance": "file-E7MQvXTgk1bRy4SBcttuwx",
    "operations": "file-8KhZbBwixYyBcm5VpLBY8g",
    "customer support": "file-UZttM4zsKqoVGiTNMPnW5J",
}


class SecretSettings(BaseSettings):
    def __setattr__(self, name: str, value: Any) -> None:
        # wrap bare strings in SecretStr if the field is annotated with SecretStr
        field = type(self).model_fields.get(name)
        if field:
            annotation = field.annotation
            base_types = (
                getattr(annotation, "__args__", None)
                if getattr(annotation, "__origin__", None) is Union
                else (annotation,)
            )
            if SecretStr in base_types and not isinstance(value, SecretStr):  # type: ignore # noqa: E501
                value = SecretStr(value)
        super().__setattr__(name, value)


class AssistantSettings(SecretSettings):
    """
    Settings for the remote assistants service.

    Built explicitly by the embedding application and handed to
    `AssistantsClient`; nothing in the package reads a global instance.
    """

    api_key: SecretStr = SecretStr("")
    base_url: str = "https://api.openai.com/v1"
    request_timeout: float = 60.0
    max_retries: int = 0

    summary_assistant_id: str = "asst_lYMPOqnXe86rZ2oPqe6N3bx2"
    insights_assistant_id: str = "asst_LIuWUGUi5ClNpJMuEAbYQsRs"
    kpi_assistant_id: str = "asst_p0ajNzziydcju4E9O37JLWtt"
    chat_assistant_id: str = "asst_p0ajNzziydcju4E9O37JLWtt"

    analysis_poll_attempts: int = Field(default=20, ge=1)
    chat_poll_attempts: int = Field(default=15, ge=1)
    poll_interval_ms: int = Field(default=2000, ge=0)

    historical_files: dict[str, str] = Field(
        default_factory=lambda: dict(HISTORICAL_FILES)
    )

    model_config = SettingsConfigDict(
        env_prefix="AIDASHBOARD_", env_file=".env", extra="ignore"
    )


class StoreSettings(BaseSettings):
    """
    Settings for the local chat session store.
    """

    home_path: Path = Field(
        default="~/.aidashboard",
        description="Directory holding the chat store file.",
        validate_default=True,
    )
    file_name: str = "chat_store.json"
    sessions_key: str = "chat_sessions"

    model_config = SettingsConfigDict(
        env_prefix="AIDASHBOARD_STORE_", env_file=".env", extra="ignore"
    )

    @property
    def store_path(self) -> str:
        return str(self.home_path.expanduser() / self.file_name)
