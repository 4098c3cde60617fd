import logging
import uuid

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ideahub.core.exceptions import ConflictError, NotFoundError
from ideahub.models.idea import Idea
from ideahub.models.idea_topic import IdeaTopic
from ideahub.schemas.idea_topic import IdeaTopicCreateRequest, IdeaTopicUpdateRequest
from ideahub.services.filters import (
    filter_by_tags,
    supports_tag_containment,
    tags_contain,
    text_search,
)

logger = logging.getLogger(__name__)


class IdeaTopicsService:
    """Topic queries. Every statement is scoped to the owning ``user_id``."""

    @staticmethod
    async def create(
        db: AsyncSession, user_id: uuid.UUID, data: IdeaTopicCreateRequest
    ) -> IdeaTopic:
        topic = IdeaTopic(
            user_id=user_id,
            name=data.name,
            description=data.description,
            tags=list(data.tags),
        )
        db.add(topic)
        await db.commit()
        await db.refresh(topic)
        logger.info("Created idea topic %s for user %s", topic.id, user_id)
        return topic

    @staticmethod
    async def find_all(
        db: AsyncSession, user_id: uuid.UUID, search: str | None = None
    ) -> list[IdeaTopic]:
        """List the caller's topics, newest first, optionally filtered by text."""
        conditions = [IdeaTopic.user_id == user_id]
        search_condition = text_search(IdeaTopic, search)
        if search_condition is not None:
            conditions.append(search_condition)

        stmt = (
            select(IdeaTopic)
            .where(*conditions)
            .order_by(IdeaTopic.created_at.desc())
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def find_by_id(
        db: AsyncSession, user_id: uuid.UUID, topic_id: uuid.UUID
    ) -> IdeaTopic | None:
        result = await db.execute(
            select(IdeaTopic).where(
                IdeaTopic.id == topic_id,
                IdeaTopic.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def update(
        db: AsyncSession,
        user_id: uuid.UUID,
        topic_id: uuid.UUID,
        data: IdeaTopicUpdateRequest,
    ) -> IdeaTopic:
        """Apply the fields present in ``data``; everything else is left alone."""
        topic = await IdeaTopicsService.find_by_id(db, user_id, topic_id)
        if topic is None:
            raise NotFoundError("Idea topic not found")

        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(topic, field, value)

        await db.commit()
        await db.refresh(topic)
        logger.info("Updated idea topic %s", topic.id)
        return topic

    @staticmethod
    async def delete(
        db: AsyncSession, user_id: uuid.UUID, topic_id: uuid.UUID
    ) -> None:
        """Delete a topic. Topics that still hold ideas are refused."""
        count_stmt = select(func.count(Idea.id)).where(
            Idea.idea_topic_id == topic_id,
            Idea.user_id == user_id,
        )
        remaining = (await db.execute(count_stmt)).scalar() or 0
        if remaining:
            raise ConflictError(
                f"Idea topic still has {remaining} idea(s); delete them first"
            )

        try:
            result = await db.execute(
                delete(IdeaTopic).where(
                    IdeaTopic.id == topic_id,
                    IdeaTopic.user_id == user_id,
                )
            )
            await db.commit()
        except IntegrityError:
            # An idea was attached after the count; the foreign key refuses.
            await db.rollback()
            raise ConflictError("Idea topic still has ideas; delete them first")
        if result.rowcount:
            logger.info("Deleted idea topic %s", topic_id)

    @staticmethod
    async def search_by_tags(
        db: AsyncSession, user_id: uuid.UUID, tags: list[str]
    ) -> list[IdeaTopic]:
        """Topics whose tag list contains every tag in ``tags``."""
        conditions = [IdeaTopic.user_id == user_id]
        native = supports_tag_containment(db)
        if native:
            conditions.append(tags_contain(IdeaTopic, tags))

        stmt = (
            select(IdeaTopic)
            .where(*conditions)
            .order_by(IdeaTopic.created_at.desc())
        )
        topics = list((await db.execute(stmt)).scalars().all())
        return topics if native else filter_by_tags(topics, tags)
