"""Shared schema base and the success/error response envelopes."""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base for API schemas: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiResponse(CamelModel, Generic[T]):
    """Success envelope: {statusCode, data, message, success}."""

    status_code: int = Field(default=200, description="HTTP status of the response")
    data: T | None = Field(default=None, description="Response payload")
    message: str = Field(default="Success", description="Human-readable outcome")
    success: bool = Field(default=True)


class ErrorResponse(BaseModel):
    """Error envelope: {success: false, message}."""

    success: bool = False
    message: str
