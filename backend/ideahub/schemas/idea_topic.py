import uuid
from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class IdeaTopicCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=500)
    tags: list[str] = Field(default_factory=list)


class IdeaTopicUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, min_length=1, max_length=500)
    tags: list[str] | None = None

    @field_validator("name", "description", "tags")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("Field may be omitted but not null")
        return value


class IdeaTopicResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    description: str
    tags: list[str]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
