import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ideahub.api.deps import get_current_user
from ideahub.core.exceptions import NotFoundError
from ideahub.database import get_db
from ideahub.models.user import User
from ideahub.schemas.idea import IdeaResponse
from ideahub.schemas.idea_topic import (
    IdeaTopicCreateRequest,
    IdeaTopicResponse,
    IdeaTopicUpdateRequest,
)
from ideahub.services.idea_topics import IdeaTopicsService
from ideahub.services.ideas import IdeasService

router = APIRouter(prefix="/idea-topics", tags=["Idea Topics"])


@router.get("", response_model=list[IdeaTopicResponse])
async def list_idea_topics(
    search: str | None = None,
    tags: list[str] | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """List the caller's topics. ``tags`` takes precedence over ``search``."""
    # ?tags= with no value arrives as [""]
    tags = [tag for tag in tags or [] if tag]
    if tags:
        return await IdeaTopicsService.search_by_tags(db, current_user.id, tags)
    return await IdeaTopicsService.find_all(db, current_user.id, search=search)


@router.post("", response_model=IdeaTopicResponse, status_code=201)
async def create_idea_topic(
    body: IdeaTopicCreateRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await IdeaTopicsService.create(db, current_user.id, body)


@router.get("/{topic_id}", response_model=IdeaTopicResponse)
async def get_idea_topic(
    topic_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    topic = await IdeaTopicsService.find_by_id(db, current_user.id, topic_id)
    if topic is None:
        raise NotFoundError("Idea topic not found")
    return topic


@router.put("/{topic_id}", response_model=IdeaTopicResponse)
async def update_idea_topic(
    topic_id: uuid.UUID,
    body: IdeaTopicUpdateRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Partially update a topic. Omitted fields keep their values."""
    return await IdeaTopicsService.update(db, current_user.id, topic_id, body)


@router.delete("/{topic_id}")
async def delete_idea_topic(
    topic_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await IdeaTopicsService.delete(db, current_user.id, topic_id)
    return {"message": "Idea topic deleted successfully"}


@router.get("/{topic_id}/ideas", response_model=list[IdeaResponse])
async def list_topic_ideas(
    topic_id: uuid.UUID,
    search: str | None = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """List the ideas filed under a topic."""
    return await IdeasService.find_by_topic_id(
        db, current_user.id, topic_id, search=search
    )
