"""
Base model classes for ATS Assist data models.

Provides common configuration shared across all boundary schemas.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    """Timezone-aware current time."""
    return datetime.now(timezone.utc)


class EmbeddedModel(BaseModel):
    """
    Base model for payload fragments exchanged with the backend.

    Use this for models that travel inside a larger request or response
    rather than being stored on their own.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=True,
    )


class CamelModel(EmbeddedModel):
    """
    Base model for payloads whose wire format uses camelCase keys.

    Python code uses snake_case attributes; ``model_dump(by_alias=True)``
    produces the shape the assistant endpoint expects.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=True,
        alias_generator=to_camel,
    )
