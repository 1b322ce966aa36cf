"""Shared configuration for DTOs exchanged with HTTP clients."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Model serialized with camelCase keys and accepting either case on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
