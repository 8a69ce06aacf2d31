from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Schema(BaseModel):
    """Документы хранятся в camelCase (vegType, totalPrice), в Python поля snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    def to_document(self, **kwargs):
        return self.model_dump(mode="json", by_alias=True, **kwargs)
