import uuid
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

MIN_RATING = 0
MAX_RATING = 5


def _whole_number(value):
    # Lax int still coerces "3" and True; only real numbers are ratings.
    if isinstance(value, (bool, str)):
        raise ValueError("Rating must be a whole number")
    return value


class IdeaCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=1000)
    tags: list[str] = Field(default_factory=list)
    idea_topic_id: uuid.UUID


class IdeaUpdateRequest(BaseModel):
    """Partial update. Omitted fields are left alone; only ``feedback`` may be null."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, min_length=1, max_length=1000)
    tags: list[str] | None = None
    rating: int | None = Field(default=None, ge=MIN_RATING, le=MAX_RATING)
    feedback: str | None = Field(default=None, max_length=500)

    @field_validator("rating", mode="before")
    @classmethod
    def rating_is_number(cls, value):
        return _whole_number(value)

    @field_validator("name", "description", "tags", "rating")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("Field may be omitted but not null")
        return value


class IdeaFeedbackRequest(BaseModel):
    """A rating plus commentary; unlike a general update, both are required."""

    rating: int = Field(ge=1, le=MAX_RATING)
    feedback: str = Field(min_length=1, max_length=500)

    @field_validator("rating", mode="before")
    @classmethod
    def rating_is_number(cls, value):
        return _whole_number(value)


class IdeaResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    idea_topic_id: uuid.UUID
    name: str
    description: str
    tags: list[str]
    rating: int
    feedback: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
