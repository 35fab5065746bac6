import json
from dataclasses import asdict, is_dataclass
from datetime import date, datetime, time
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, SecretStr


class DefaultJsonEncoder(json.JSONEncoder):
    """Encoder for log payloads: models, ids, dates and secrets."""

    def default(self, obj):
        if isinstance(obj, BaseModel):
            return obj.model_dump(mode="json", by_alias=True)

        if isinstance(obj, SecretStr):
            return "**********"

        if isinstance(obj, Enum):
            return obj.value

        if isinstance(obj, UUID):
            return str(obj)

        if isinstance(obj, (datetime, date, time)):
            return obj.isoformat()

        if is_dataclass(obj) and not isinstance(obj, type):
            return asdict(obj)

        if isinstance(obj, (bytes, bytearray)):
            return f"<{len(obj)} bytes>"

        return str(obj)


def to_serializable(data):
    """
    Convert data to a json serializable structure.
    """
    return json.loads(json.dumps(data, cls=DefaultJsonEncoder))
