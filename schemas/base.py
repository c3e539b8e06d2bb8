# schemas/base.py
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Storefront documents use camelCase keys on the wire and in Mongo."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, use_enum_values=True)

    def to_doc(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
