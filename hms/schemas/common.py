# hms/schemas/common.py
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, ConfigDict, StringConstraints
from pydantic.alias_generators import to_camel

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

OptStr = Annotated[str, StringConstraints(strip_whitespace=True)] | None


class ApiModel(BaseModel):
    """
    Base for request/response bodies.

    Python side is snake_case; JSON side is camelCase. Requests may use either.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PageMeta(ApiModel):
    page: int
    limit: int
    total: int
    total_pages: int


class MessageResponse(ApiModel):
    message: str


class PersonRef(ApiModel):
    """Shallow projection of a user or patient inside another resource."""

    id: UUID
    first_name: str
    last_name: str


def reject_null(value):
    """
    For partial updates: a field may be omitted, but a column that is
    NOT NULL in storage cannot be cleared with an explicit null.
    """
    if value is None:
        raise ValueError("Field cannot be null")
    return value
