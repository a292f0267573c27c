from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    """Base schema with common configuration, camelCase on the wire"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class BaseRequestSchema(BaseModel):
    """
    Base for inbound request bodies.

    Unknown keys are ignored and field values are left loosely typed so the
    services can reject them with stable error codes instead of a generic 422.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
    )
