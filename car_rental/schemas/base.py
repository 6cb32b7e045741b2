from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """
    Base schema for request payloads.

    Fields are declared in snake_case; the storefront sends camelCase, so both
    spellings are accepted.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
