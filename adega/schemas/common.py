from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

# Largest value an Integer column holds on PostgreSQL
MAX_QUANTITY = 2**31 - 1


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        use_enum_values=True,
    )


class Message(CamelModel):
    message: str


def reject_null(value):
    """Partial updates may omit a field, but may not null a required column"""
    if value is None:
        raise ValueError("may not be null")
    return value
