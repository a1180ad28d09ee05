from typing import Any, Optional, Type

from pydantic import BaseModel, ConfigDict, AliasGenerator
from pydantic.alias_generators import to_camel


class CamelResponse(BaseModel):
    """Response model read from ORM objects and serialized with camelCase keys"""
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=AliasGenerator(serialization_alias=to_camel),
    )


class CamelRequest(BaseModel):
    """Request model accepting camelCase or snake_case keys"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MessageResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None


def serialize(schema: Type[BaseModel], obj: Any) -> dict:
    """ORM object -> JSON-ready dict through a response schema"""
    return schema.model_validate(obj).model_dump(by_alias=True, mode="json")


def serialize_many(schema: Type[BaseModel], objs) -> list:
    return [serialize(schema, obj) for obj in objs]
