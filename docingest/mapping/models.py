"""Field mapping models and the structured records produced from them."""

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, field_validator


class FieldDescriptor(BaseModel):
    """Where to find one field in the OCR text.

    ``index`` is a line offset, or a list of offsets whose lines are joined
    with single spaces. When ``split`` is set, the resolved value is split
    on single spaces and the token at ``part`` is kept.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    index: NonNegativeInt | list[NonNegativeInt]
    split: bool = False
    part: NonNegativeInt = 0

    @field_validator("index")
    @classmethod
    def _index_list_not_empty(cls, value: int | list[int]) -> int | list[int]:
        if isinstance(value, list) and not value:
            raise ValueError("index list must not be empty")
        return value


class FieldMappingModel(BaseModel):
    """Ordered list of field descriptors for one document type."""

    model_config = ConfigDict(frozen=True)

    fields: list[FieldDescriptor]


class FieldValue(BaseModel):
    """A mapped field and the text found for it."""

    field: str
    input: str


class StructuredRecord(BaseModel):
    """Mapped fields for one document, in model declaration order."""

    data: list[FieldValue]
