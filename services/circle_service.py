"""
Study circle service: discovery, membership and capacity.
"""
from typing import List, Optional

from sqlalchemy import select, update, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from core.config import settings
from core.exceptions import (
    AuthorizationException, CapacityExceededException, ConflictException,
    InvalidOperationException, ResourceNotFoundException
)
from core.logging import get_logger
from models.models import User, StudyCircle, StudyCircleMember, DifficultyLevelEnum
from schemas.circle import StudyCircleCreate, StudyCircleUpdate

logger = get_logger("circle_service")


def _circle_options():
    return (
        selectinload(StudyCircle.creator),
        selectinload(StudyCircle.memberships).selectinload(StudyCircleMember.user),
    )


class CircleService:
    """Service for study circle operations."""

    def __init__(self, db: Session):
        self.db = db

    def _get_circle(self, circle_id: int) -> StudyCircle:
        circle = self.db.execute(
            select(StudyCircle).options(*_circle_options()).where(StudyCircle.id == circle_id)
        ).scalar_one_or_none()
        if circle is None:
            raise ResourceNotFoundException("Study circle not found")
        return circle

    def _get_created_circle(self, circle_id: int, user: User) -> StudyCircle:
        circle = self._get_circle(circle_id)
        if circle.creator_id != user.id:
            logger.warning("Circle creator check failed", circle_id=circle_id, user_id=user.id)
            raise AuthorizationException("Not authorized to modify this circle")
        return circle

    def _get_membership(self, circle_id: int, user_id: int) -> Optional[StudyCircleMember]:
        return self.db.get(StudyCircleMember, (circle_id, user_id))

    def is_member(self, circle_id: int, user_id: int) -> bool:
        return self._get_membership(circle_id, user_id) is not None

    def list_circles(
        self,
        topic: Optional[str] = None,
        skill_level: Optional[DifficultyLevelEnum] = None,
        search: Optional[str] = None,
    ) -> List[StudyCircle]:
        """Active circles, newest first."""
        stmt = select(StudyCircle).options(*_circle_options()).where(StudyCircle.is_active.is_(True))

        if topic:
            stmt = stmt.where(StudyCircle.topic.ilike(f"%{topic}%"))
        if skill_level:
            stmt = stmt.where(StudyCircle.skill_level == skill_level)
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(or_(StudyCircle.name.ilike(pattern), StudyCircle.topic.ilike(pattern)))

        stmt = stmt.order_by(StudyCircle.created_at.desc(), StudyCircle.id.desc())
        return self.db.execute(stmt).scalars().all()

    def get_circle(self, circle_id: int) -> StudyCircle:
        return self._get_circle(circle_id)

    def create_circle(self, data: StudyCircleCreate, creator: User) -> StudyCircle:
        values = data.model_dump()
        values["max_members"] = values.get("max_members") or settings.default_max_members

        circle = StudyCircle(**values, creator_id=creator.id, member_count=1, is_active=True)
        circle.memberships.append(StudyCircleMember(user_id=creator.id))
        self.db.add(circle)
        self.db.commit()

        logger.info("Study circle created", circle_id=circle.id, creator_id=creator.id)
        return self._get_circle(circle.id)

    def join_circle(self, circle_id: int, user: User) -> StudyCircle:
        """
        Add `user` to the circle.

        The capacity check and the counter increment are a single conditional
        UPDATE; the membership primary key rejects a concurrent duplicate join.
        """
        circle = self.db.get(StudyCircle, circle_id)
        if circle is None:
            raise ResourceNotFoundException("Study circle not found")

        if self.is_member(circle_id, user.id):
            raise ConflictException("Already a member of this circle")

        result = self.db.execute(
            update(StudyCircle)
            .where(
                StudyCircle.id == circle.id,
                StudyCircle.member_count < StudyCircle.max_members,
            )
            .values(member_count=StudyCircle.member_count + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            self.db.rollback()
            logger.info("Join rejected, circle full", circle_id=circle_id, user_id=user.id)
            raise CapacityExceededException("Study circle is full")

        self.db.add(StudyCircleMember(circle_id=circle.id, user_id=user.id))
        try:
            self.db.commit()
        except IntegrityError:
            # The rollback also undoes the counter increment
            self.db.rollback()
            raise ConflictException("Already a member of this circle")

        logger.info("User joined study circle", circle_id=circle_id, user_id=user.id)
        return self._get_circle(circle_id)

    def leave_circle(self, circle_id: int, user: User) -> StudyCircle:
        circle = self._get_circle(circle_id)

        membership = self._get_membership(circle_id, user.id)
        if membership is None:
            raise InvalidOperationException("Not a member of this circle")
        if circle.creator_id == user.id:
            raise InvalidOperationException("Creator cannot leave the circle")

        self.db.delete(membership)
        self.db.execute(
            update(StudyCircle)
            .where(StudyCircle.id == circle.id, StudyCircle.member_count > 0)
            .values(member_count=StudyCircle.member_count - 1)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()

        logger.info("User left study circle", circle_id=circle_id, user_id=user.id)
        return self._get_circle(circle_id)

    def update_circle(self, circle_id: int, data: StudyCircleUpdate, user: User) -> StudyCircle:
        circle = self._get_created_circle(circle_id, user)

        updates = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
        new_max = updates.get("max_members")
        if new_max is not None and new_max < circle.member_count:
            raise InvalidOperationException(
                f"max_members cannot be lower than the current member count ({circle.member_count})"
            )

        for field, value in updates.items():
            setattr(circle, field, value)

        self.db.commit()
        logger.info("Study circle updated", circle_id=circle_id)
        return self._get_circle(circle_id)

    def delete_circle(self, circle_id: int, user: User) -> None:
        circle = self._get_created_circle(circle_id, user)
        self.db.delete(circle)
        self.db.commit()
        logger.info("Study circle deleted", circle_id=circle_id, creator_id=user.id)
