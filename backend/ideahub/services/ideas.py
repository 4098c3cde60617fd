import logging
import uuid

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ideahub.core.exceptions import NotFoundError
from ideahub.models.idea import Idea
from ideahub.schemas.idea import (
    IdeaCreateRequest,
    IdeaFeedbackRequest,
    IdeaUpdateRequest,
)
from ideahub.services.filters import (
    filter_by_tags,
    supports_tag_containment,
    tags_contain,
    text_search,
)
from ideahub.services.idea_topics import IdeaTopicsService

logger = logging.getLogger(__name__)


class IdeasService:
    @staticmethod
    async def create(
        db: AsyncSession, user_id: uuid.UUID, data: IdeaCreateRequest
    ) -> Idea:
        """Create an idea under one of the caller's topics."""
        topic = await IdeaTopicsService.find_by_id(db, user_id, data.idea_topic_id)
        if topic is None:
            raise NotFoundError("Idea topic not found")

        idea = Idea(
            user_id=user_id,
            idea_topic_id=topic.id,
            name=data.name,
            description=data.description,
            tags=list(data.tags),
            rating=0,
            feedback=None,
        )
        db.add(idea)
        await db.commit()
        await db.refresh(idea)
        logger.info("Created idea %s in topic %s", idea.id, topic.id)
        return idea

    @staticmethod
    async def _list(
        db: AsyncSession, conditions: list, search: str | None = None
    ) -> list[Idea]:
        search_condition = text_search(Idea, search)
        if search_condition is not None:
            conditions = [*conditions, search_condition]

        stmt = select(Idea).where(*conditions).order_by(Idea.created_at.desc())
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def find_all(
        db: AsyncSession, user_id: uuid.UUID, search: str | None = None
    ) -> list[Idea]:
        return await IdeasService._list(db, [Idea.user_id == user_id], search)

    @staticmethod
    async def find_by_topic_id(
        db: AsyncSession,
        user_id: uuid.UUID,
        topic_id: uuid.UUID,
        search: str | None = None,
    ) -> list[Idea]:
        return await IdeasService._list(
            db,
            [Idea.user_id == user_id, Idea.idea_topic_id == topic_id],
            search,
        )

    @staticmethod
    async def find_by_id(
        db: AsyncSession, user_id: uuid.UUID, idea_id: uuid.UUID
    ) -> Idea | None:
        result = await db.execute(
            select(Idea).where(Idea.id == idea_id, Idea.user_id == user_id)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def update(
        db: AsyncSession,
        user_id: uuid.UUID,
        idea_id: uuid.UUID,
        data: IdeaUpdateRequest,
    ) -> Idea:
        idea = await IdeasService.find_by_id(db, user_id, idea_id)
        if idea is None:
            raise NotFoundError("Idea not found")

        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(idea, field, value)

        await db.commit()
        await db.refresh(idea)
        logger.info("Updated idea %s", idea.id)
        return idea

    @staticmethod
    async def add_feedback(
        db: AsyncSession,
        user_id: uuid.UUID,
        idea_id: uuid.UUID,
        data: IdeaFeedbackRequest,
    ) -> Idea:
        """Record a rating and commentary on an idea, replacing any previous one."""
        idea = await IdeasService.find_by_id(db, user_id, idea_id)
        if idea is None:
            raise NotFoundError("Idea not found")

        idea.rating = data.rating
        idea.feedback = data.feedback

        await db.commit()
        await db.refresh(idea)
        logger.info("Feedback added to idea %s (rating=%d)", idea.id, idea.rating)
        return idea

    @staticmethod
    async def delete(
        db: AsyncSession, user_id: uuid.UUID, idea_id: uuid.UUID
    ) -> None:
        result = await db.execute(
            delete(Idea).where(Idea.id == idea_id, Idea.user_id == user_id)
        )
        await db.commit()
        if result.rowcount:
            logger.info("Deleted idea %s", idea_id)

    @staticmethod
    async def search_by_tags(
        db: AsyncSession, user_id: uuid.UUID, tags: list[str]
    ) -> list[Idea]:
        """Ideas whose tag list contains every tag in ``tags``."""
        native = supports_tag_containment(db)
        conditions = [Idea.user_id == user_id]
        if native:
            conditions.append(tags_contain(Idea, tags))

        ideas = await IdeasService._list(db, conditions)
        return ideas if native else filter_by_tags(ideas, tags)
