import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ideahub.api.deps import get_current_user
from ideahub.core.exceptions import NotFoundError
from ideahub.database import get_db
from ideahub.models.user import User
from ideahub.schemas.idea import (
    IdeaCreateRequest,
    IdeaFeedbackRequest,
    IdeaResponse,
    IdeaUpdateRequest,
)
from ideahub.services.ideas import IdeasService

router = APIRouter(prefix="/ideas", tags=["Ideas"])


@router.get("", response_model=list[IdeaResponse])
async def list_ideas(
    search: str | None = None,
    tags: list[str] | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    # ?tags= with no value arrives as [""]
    tags = [tag for tag in tags or [] if tag]
    if tags:
        return await IdeasService.search_by_tags(db, current_user.id, tags)
    return await IdeasService.find_all(db, current_user.id, search=search)


@router.post("", response_model=IdeaResponse, status_code=201)
async def create_idea(
    body: IdeaCreateRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Create an idea under one of the caller's topics."""
    return await IdeasService.create(db, current_user.id, body)


@router.get("/{idea_id}", response_model=IdeaResponse)
async def get_idea(
    idea_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    idea = await IdeasService.find_by_id(db, current_user.id, idea_id)
    if idea is None:
        raise NotFoundError("Idea not found")
    return idea


@router.put("/{idea_id}", response_model=IdeaResponse)
async def update_idea(
    idea_id: uuid.UUID,
    body: IdeaUpdateRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await IdeasService.update(db, current_user.id, idea_id, body)


@router.delete("/{idea_id}")
async def delete_idea(
    idea_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await IdeasService.delete(db, current_user.id, idea_id)
    return {"message": "Idea deleted successfully"}


@router.post("/{idea_id}/feedback", response_model=IdeaResponse)
async def add_feedback(
    idea_id: uuid.UUID,
    body: IdeaFeedbackRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Rate an idea (1-5) and attach commentary."""
    return await IdeasService.add_feedback(db, current_user.id, idea_id, body)
