import humps
from pydantic import ConfigDict

# values handed back by the remote service or stored in a session are never
# mutated in place; a changed value is a copy
FROZEN_CONFIG = ConfigDict(frozen=True, extra="ignore")

CAMEL_CONFIG = ConfigDict(
    alias_generator=humps.camelize,
    populate_by_name=True,
    extra="ignore",
)
